"""Shared fixtures for the question engine tests."""
import asyncio
from typing import List, Optional

import pytest

from chatquiz.core.seeded_random import SeededRandom
from chatquiz.db.json_store import JsonMessageStore
from chatquiz.services.message_window import MessageWindowRepository
from chatquiz.services.metadata_service import compute_metadata
from chatquiz.services.variants.base import GenerationContext


def _message(id, timestamp, participant, text, platform="MESSENGER", **extra):
    return {
        "id": id,
        "timestamp": timestamp,
        "participant": participant,
        "platform": platform,
        "text": text,
        **extra,
    }


@pytest.fixture
def corpus():
    """Five alternating messages on one evening"""
    return {
        "participants": ["A", "B"],
        "messages": [
            _message(1, "2024-03-05T09:00:00Z", "A", "hi"),
            _message(2, "2024-03-05T09:01:00Z", "B", "hey"),
            _message(3, "2024-03-05T09:05:00Z", "A", "what's up"),
            _message(4, "2024-03-05T09:06:00Z", "B", "not much"),
            _message(5, "2024-03-05T10:00:00Z", "A", "bye"),
        ],
    }


@pytest.fixture
def rich_corpus():
    """Two platforms, reactions, media and several weeks of history"""
    return {
        "participants": ["Alex", "Sam"],
        "messages": [
            _message(1, "2024-03-01T20:00:00Z", "Alex", "are you coming tonight"),
            _message(2, "2024-03-01T20:03:00Z", "Sam", "only if you bring snacks",
                     reactions=[{"reaction": "😂", "participant": "Alex"}]),
            _message(3, "2024-03-04T08:15:00Z", "Alex", "", platform="INSTAGRAM",
                     medias=["media/reel_1.mp4"]),
            _message(4, "2024-03-04T08:40:00Z", "Sam", "this is so good", platform="INSTAGRAM",
                     reactions=[{"reaction": "❤️", "participant": "Alex"}]),
            _message(5, "2024-03-10T12:00:00Z", "Alex", "lunch this week?"),
            _message(6, "2024-03-10T14:30:00Z", "Sam", "thursday works for me"),
            _message(7, "2024-03-21T09:00:00Z", "Alex", "saw this and thought of you",
                     platform="INSTAGRAM"),
            _message(8, "2024-03-21T09:02:00Z", "Sam", "haha no way", platform="INSTAGRAM",
                     reactions=[{"reaction": "😂", "participant": "Alex"}]),
            _message(9, "2024-04-02T18:45:00Z", "Alex", "running late sorry"),
            _message(10, "2024-04-02T18:47:00Z", "Sam", "all good see you soon"),
        ],
    }


@pytest.fixture
def store(corpus):
    return JsonMessageStore.from_dict(corpus)


@pytest.fixture
def rich_store(rich_corpus):
    return JsonMessageStore.from_dict(rich_corpus)


def build_context(store, alternative_provider=None, display_timezone="UTC") -> GenerationContext:
    metadata = asyncio.run(compute_metadata(store))
    return GenerationContext(
        metadata=metadata,
        repository=MessageWindowRepository(store, metadata),
        alternative_provider=alternative_provider,
        display_timezone=display_timezone,
    )


@pytest.fixture
def context(store):
    return build_context(store)


@pytest.fixture
def rich_context(rich_store):
    return build_context(rich_store)


class ScriptedRandom(SeededRandom):
    """SeededRandom that replays scripted integer and boolean draws first"""

    def __init__(
        self,
        ints: Optional[List[int]] = None,
        booleans: Optional[List[bool]] = None,
        seed: str = "scripted",
    ) -> None:
        super().__init__(seed)
        self.ints = list(ints or [])
        self.booleans = list(booleans or [])

    def range_int(self, lo: int, hi: int) -> int:
        if self.ints:
            value = self.ints.pop(0)
            assert lo <= value < hi, f"scripted {value} outside [{lo}, {hi})"
            return value
        return super().range_int(lo, hi)

    def boolean(self) -> bool:
        if self.booleans:
            return self.booleans.pop(0)
        return super().boolean()


class FakeProvider:
    """Alternative provider returning canned responses in order"""

    def __init__(self, *responses: str) -> None:
        self.responses = list(responses)
        self.calls: List[tuple] = []

    async def generate(self, seed: int, prompt: str) -> str:
        self.calls.append((seed, prompt))
        if len(self.responses) > 1:
            return self.responses.pop(0)
        return self.responses[0]


class FailingProvider:
    def __init__(self, error: Exception) -> None:
        self.error = error
        self.calls = 0

    async def generate(self, seed: int, prompt: str) -> str:
        self.calls += 1
        raise self.error
