"""Completion of loose field maps into ExtractionRecords."""
import json
from typing import Any, List, Mapping, Optional, Tuple

from pitchdeck.rag.models import RECORD_FIELDS, SENTINEL, ExtractionRecord


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, (list, tuple)):
        return "; ".join(t for t in (_as_text(v) for v in value) if t)
    if isinstance(value, dict):
        return json.dumps(value, ensure_ascii=False) if value else ""
    return str(value).strip()


def complete_fields(fields: Optional[Mapping[str, Any]]) -> Tuple[ExtractionRecord, List[str]]:
    """Build a record and list which fields fell back to the sentinel."""
    fields = fields or {}
    values = {}
    missing = []
    for name in RECORD_FIELDS:
        text = _as_text(fields.get(name))
        if not text or text == SENTINEL:
            missing.append(name)
            text = SENTINEL
        values[name] = text
    return ExtractionRecord.model_validate(values), missing


def validate_record(fields: Optional[Mapping[str, Any]]) -> ExtractionRecord:
    """Every field present and non-empty; never raises for any mapping."""
    record, _ = complete_fields(fields)
    return record
