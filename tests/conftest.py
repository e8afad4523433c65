"""Shared fixtures: deterministic fake model capabilities and sample decks."""
import asyncio
import json
from typing import Callable, Dict, List, Optional

import pytest

from pitchdeck.errors import TransientCapabilityError
from pitchdeck.rag.models import RECORD_FIELDS

DIMENSION = 32


def letter_histogram(text: str, dimension: int = DIMENSION) -> List[float]:
    """Deterministic embedding: letter counts in the first 26 slots."""
    vector = [0.0] * dimension
    for ch in text.lower():
        if "a" <= ch <= "z":
            vector[ord(ch) - ord("a")] += 1.0
    return vector


class FakeEmbeddingCapability:
    """Embeds with letter histograms; fails for texts matching ``fail_when``."""

    def __init__(
        self,
        dimension: int = DIMENSION,
        fail_when: Optional[Callable[[str], bool]] = None,
        overrides: Optional[Dict[str, List[float]]] = None,
        delay: float = 0.0,
    ):
        self.dimension = dimension
        self.fail_when = fail_when or (lambda text: False)
        self.overrides = overrides or {}
        self.delay = delay
        self.calls: List[str] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def embed_content(self, text: str) -> List[float]:
        self.calls.append(text)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
            if self.fail_when(text):
                raise TransientCapabilityError("embedding backend timed out")
            if text in self.overrides:
                return self.overrides[text]
            return letter_histogram(text, self.dimension)
        finally:
            self.in_flight -= 1


class FakeGenerationCapability:
    """Replays scripted responses; exceptions in the script are raised."""

    chat_model = "fake-model"

    def __init__(self, script: list, delay: float = 0.0):
        self.script = list(script)
        self.delay = delay
        self.prompts: List[str] = []

    async def generate_content(self, prompt: str) -> dict:
        self.prompts.append(prompt)
        if self.delay:
            await asyncio.sleep(self.delay)
        item = self.script.pop(0) if len(self.script) > 1 else self.script[0]
        if isinstance(item, Exception):
            raise item
        return item


def gemini_response(text: str) -> dict:
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


def complete_fields_json() -> str:
    return json.dumps({name: f"{name} from deck" for name in RECORD_FIELDS})


def build_deck(segment_count: int = 10, segment_size: int = 500) -> str:
    """Normalized deck text whose segments line up with chunk boundaries.

    Segment 3 and 7 mention "zzz" so tests can target them.
    """
    topics = [
        "Acme company overview and mission",
        "market size TAM SAM SOM growth",
        "traction revenue customers growth",
        "zzz appendix legal disclaimer",
        "team founders experience",
        "funding ask seed round",
        "business model pricing revenue",
        "zzz contact details",
        "competitive landscape strategy",
        "go to market channels customers",
    ]
    segments = []
    for i in range(segment_count):
        unit = topics[i % len(topics)] + " "
        segment = (unit * (segment_size // len(unit) + 1))[: segment_size - 1] + "."
        segments.append(segment)
    return "".join(segments)


@pytest.fixture
def deck_text() -> str:
    return build_deck()


@pytest.fixture
def embedding_capability() -> FakeEmbeddingCapability:
    return FakeEmbeddingCapability()


@pytest.fixture
def failing_embedding_capability() -> FakeEmbeddingCapability:
    return FakeEmbeddingCapability(fail_when=lambda text: True)


@pytest.fixture
def good_generation() -> FakeGenerationCapability:
    return FakeGenerationCapability([gemini_response(complete_fields_json())])


@pytest.fixture
def down_generation() -> FakeGenerationCapability:
    return FakeGenerationCapability([TransientCapabilityError("503 backend unavailable")])
