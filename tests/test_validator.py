"""Tests for record completion."""
from pitchdeck.rag.models import RECORD_FIELDS, SENTINEL
from pitchdeck.rag.validator import complete_fields, validate_record


def test_empty_map_is_all_sentinel():
    record = validate_record({})
    dumped = record.model_dump(by_alias=True)
    assert list(dumped) == list(RECORD_FIELDS)
    assert set(dumped.values()) == {SENTINEL}


def test_none_is_treated_as_empty():
    assert validate_record(None).company == SENTINEL


def test_present_values_are_kept_and_blank_ones_replaced():
    record, missing = complete_fields(
        {"company": "  Acme  ", "team": "", "traction": None, "fundingAsk": "$2M seed"}
    )
    assert record.company == "Acme"
    assert record.funding_ask == "$2M seed"
    assert record.team == SENTINEL
    assert record.traction == SENTINEL
    assert "team" in missing and "traction" in missing
    assert "company" not in missing


def test_non_string_values_are_stringified():
    record = validate_record(
        {
            "marketSize": 4000000000,
            "team": ["Ada (CEO)", "", "Linus (CTO)"],
            "useOfFunds": {"hiring": "60%"},
            "goToMarket": [],
        }
    )
    assert record.market_size == "4000000000"
    assert record.team == "Ada (CEO); Linus (CTO)"
    assert record.use_of_funds == '{"hiring": "60%"}'
    assert record.go_to_market == SENTINEL


def test_model_supplied_sentinel_counts_as_missing():
    record, missing = complete_fields({"businessModel": SENTINEL})
    assert record.business_model == SENTINEL
    assert "businessModel" in missing


def test_unknown_keys_are_ignored():
    record = validate_record({"company": "Acme", "aiStatus": "done"})
    assert "aiStatus" not in record.model_dump(by_alias=True)
