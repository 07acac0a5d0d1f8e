import asyncio

import pytest

from chatquiz.core.config import (
    ContinueVariantConfig,
    DurationVariantConfig,
    NextVariantConfig,
    PlatformVariantConfig,
    ReactVariantConfig,
    WhenVariantConfig,
    WhoVariantConfig,
)
from chatquiz.core.seeded_random import SeededRandom
from chatquiz.models.question import QuestionVariant
from chatquiz.services.llm_client import LLMAPIError
from chatquiz.services.retry import RetryGeneration
from chatquiz.services.variants.continuation import ContinueVariantGenerator
from chatquiz.services.variants.duration import DurationVariantGenerator
from chatquiz.services.variants.next_message import NextVariantGenerator
from chatquiz.services.variants.platform import PlatformVariantGenerator
from chatquiz.services.variants.react import ReactVariantGenerator
from chatquiz.services.variants.when import WhenVariantGenerator
from chatquiz.services.variants.who import WhoVariantGenerator

from conftest import FailingProvider, FakeProvider, ScriptedRandom, build_context


def _generate_until_success(generator, seed: str, attempts: int = 200):
    rng = SeededRandom(seed)
    for _ in range(attempts):
        try:
            return asyncio.run(generator.generate(rng))
        except RetryGeneration:
            continue
    raise AssertionError("no question generated")


# ==================== WHO ====================

def test_who_asks_for_sender_of_last_message(context) -> None:
    generator = WhoVariantGenerator(context, WhoVariantConfig(min_messages=3, max_messages=3, min_words=2))
    rng = ScriptedRandom(ints=[4, 3], booleans=[True])

    question = asyncio.run(generator.generate(rng))

    assert question.variant == QuestionVariant.WHO
    assert [m.content for m in question.messages] == ["hey", "what's up", "not much"]
    assert question.answer == "B"
    assert sorted(question.choices) == ["A", "B"]
    assert question.recipient is None


def test_who_retries_when_anchor_has_no_history(context) -> None:
    generator = WhoVariantGenerator(context, WhoVariantConfig(min_messages=5, max_messages=5, min_words=2))
    rng = ScriptedRandom(ints=[3, 5], booleans=[True])

    with pytest.raises(RetryGeneration):
        asyncio.run(generator.generate(rng))


def test_invalid_window_bounds_are_rejected(context) -> None:
    with pytest.raises(ValueError):
        WhoVariantGenerator(context, WhoVariantConfig(min_messages=1, max_messages=3))
    with pytest.raises(ValueError):
        WhoVariantGenerator(context, WhoVariantConfig(min_messages=4, max_messages=3))


# ==================== DURATION ====================

def test_duration_between_last_two_messages(context) -> None:
    config = DurationVariantConfig(min_messages=3, max_messages=3, buffer_messages=0)
    generator = DurationVariantGenerator(context, config)
    rng = ScriptedRandom(ints=[3, 3], booleans=[True], seed="duration")

    question = asyncio.run(generator.generate(rng))

    assert [m.content for m in question.messages] == ["what's up", "not much", "bye"]
    assert question.answer == "54 minutes"
    assert len(question.choices) == 2
    assert "54 minutes" in question.choices


def test_duration_skips_to_first_participant_change() -> None:
    from chatquiz.db.json_store import JsonMessageStore

    store = JsonMessageStore.from_dict({
        "participants": ["A", "B"],
        "messages": [
            {"id": 1, "timestamp": "2024-03-05T09:00:00Z", "participant": "A", "platform": "MESSENGER", "text": "one"},
            {"id": 2, "timestamp": "2024-03-05T09:01:00Z", "participant": "A", "platform": "MESSENGER", "text": "two"},
            {"id": 3, "timestamp": "2024-03-05T09:02:00Z", "participant": "A", "platform": "MESSENGER", "text": "three"},
            {"id": 4, "timestamp": "2024-03-05T12:02:00Z", "participant": "B", "platform": "MESSENGER", "text": "four"},
        ],
    })
    config = DurationVariantConfig(min_messages=2, max_messages=2, buffer_messages=2)
    generator = DurationVariantGenerator(build_context(store), config)
    rng = ScriptedRandom(ints=[1, 2], booleans=[True], seed="transition")

    question = asyncio.run(generator.generate(rng))

    assert [m.content for m in question.messages] == ["three", "four"]
    assert question.answer == "3 hours"


def test_duration_without_participant_change_retries() -> None:
    from chatquiz.db.json_store import JsonMessageStore

    store = JsonMessageStore.from_dict({
        "participants": ["A", "B"],
        "messages": [
            {"id": i, "timestamp": f"2024-03-05T09:0{i}:00Z", "participant": "A",
             "platform": "MESSENGER", "text": "same sender"}
            for i in range(1, 5)
        ],
    })
    config = DurationVariantConfig(min_messages=2, max_messages=2, buffer_messages=1)
    generator = DurationVariantGenerator(build_context(store), config)
    rng = ScriptedRandom(ints=[1, 2], booleans=[True])

    with pytest.raises(RetryGeneration):
        asyncio.run(generator.generate(rng))


def test_duration_alternative_differs_when_rendered(context) -> None:
    generator = DurationVariantGenerator(context, DurationVariantConfig())
    rng = SeededRandom("alternatives")

    for answer in [1000, 60000, 3240000, 86400000]:
        alternative = generator._get_alternative(rng, answer)
        assert generator.config.min_duration_ms <= alternative <= generator.config.max_duration_ms


def test_duration_alternative_gives_up_when_range_collapses(context) -> None:
    config = DurationVariantConfig(min_duration_ms=1000, max_duration_ms=1000, max_alternative_attempts=5)
    generator = DurationVariantGenerator(context, config)

    with pytest.raises(RetryGeneration):
        generator._get_alternative(SeededRandom("collapsed"), 1000)


def test_duration_rejects_invalid_bounds(context) -> None:
    with pytest.raises(ValueError):
        DurationVariantGenerator(context, DurationVariantConfig(min_duration_ms=0))
    with pytest.raises(ValueError):
        DurationVariantGenerator(context, DurationVariantConfig(min_scale_factor=0.5))


# ==================== PLATFORM ====================

def test_platform_unavailable_on_single_platform(context) -> None:
    generator = PlatformVariantGenerator(context, PlatformVariantConfig())

    assert generator.unavailable_reason() is not None


def test_platform_choices_are_rendered(rich_context) -> None:
    config = PlatformVariantConfig(min_messages=2, max_messages=3, min_words=1)
    generator = PlatformVariantGenerator(rich_context, config)

    question = _generate_until_success(generator, "platform")

    assert generator.unavailable_reason() is None
    assert sorted(question.choices) == ["Instagram", "Messenger"]
    assert question.answer in question.choices


# ==================== WHEN ====================

def test_when_unavailable_on_single_day(context) -> None:
    generator = WhenVariantGenerator(context, WhenVariantConfig())

    assert generator.unavailable_reason() is not None


def test_when_alternative_stays_in_corpus_range(rich_context) -> None:
    generator = WhenVariantGenerator(rich_context, WhenVariantConfig(min_messages=2, max_messages=4))
    metadata = rich_context.metadata

    for seed in ["a", "b", "c", "d", "e"]:
        question = _generate_until_success(generator, seed)
        assert len(set(question.choices)) == 2
        assert question.answer in question.choices

    rng = SeededRandom("range")
    for _ in range(50):
        alternative = generator._get_alternative(rng, metadata.min_timestamp)
        assert metadata.min_timestamp < alternative <= metadata.max_timestamp


def test_when_renders_in_display_timezone(rich_store) -> None:
    context = build_context(rich_store, display_timezone="Asia/Tokyo")
    generator = WhenVariantGenerator(context, WhenVariantConfig(min_messages=2, max_messages=2))
    rng = ScriptedRandom(ints=[9, 2], booleans=[True])

    question = asyncio.run(generator.generate(rng))

    # 2024-04-02T18:47Z is already April 3 in Tokyo
    assert question.answer == "April 3, 2024"


# ==================== REACT ====================

def test_react_uses_provider_alternative(rich_store) -> None:
    provider = FakeProvider("👍")
    generator = ReactVariantGenerator(
        build_context(rich_store, alternative_provider=provider),
        ReactVariantConfig(min_messages=2, max_messages=2)
    )
    rng = ScriptedRandom(ints=[4, 2], booleans=[False])

    question = asyncio.run(generator.generate(rng))

    assert question.answer == "❤️"
    assert sorted(question.choices) == sorted(["❤️", "👍"])
    assert question.messages[-1].reaction == "❤️"
    assert "<reactions>" in provider.calls[0][1]


def test_react_rejects_same_emoji_without_selector(rich_store) -> None:
    provider = FakeProvider("❤")
    generator = ReactVariantGenerator(
        build_context(rich_store, alternative_provider=provider),
        ReactVariantConfig(min_messages=2, max_messages=2)
    )
    rng = ScriptedRandom(ints=[4, 2], booleans=[False])

    with pytest.raises(RetryGeneration):
        asyncio.run(generator.generate(rng))


def test_react_rejects_text_alternative(rich_store) -> None:
    provider = FakeProvider("love it")
    generator = ReactVariantGenerator(
        build_context(rich_store, alternative_provider=provider),
        ReactVariantConfig(min_messages=2, max_messages=2)
    )
    rng = ScriptedRandom(ints=[4, 2], booleans=[False])

    with pytest.raises(RetryGeneration):
        asyncio.run(generator.generate(rng))


def test_react_unavailable_without_provider(rich_context) -> None:
    generator = ReactVariantGenerator(rich_context, ReactVariantConfig())

    assert generator.unavailable_reason() is not None


# ==================== CONTINUE / NEXT ====================

def test_continue_question_sets_recipient(store) -> None:
    provider = FakeProvider("nothing much hbu")
    generator = ContinueVariantGenerator(
        build_context(store, alternative_provider=provider),
        ContinueVariantConfig(min_messages=2, max_messages=2)
    )
    rng = ScriptedRandom(ints=[4, 2], booleans=[True])

    question = asyncio.run(generator.generate(rng))

    assert question.variant == QuestionVariant.CONTINUE
    assert question.answer == "not much"
    assert sorted(question.choices) == ["not much", "nothing much hbu"]
    assert question.recipient == "A"
    assert "B: not much" in provider.calls[0][1]


def test_continue_strips_wrapping_quotes(store) -> None:
    provider = FakeProvider('"nothing much hbu"')
    generator = ContinueVariantGenerator(
        build_context(store, alternative_provider=provider),
        ContinueVariantConfig(min_messages=2, max_messages=2)
    )
    rng = ScriptedRandom(ints=[4, 2], booleans=[True])

    question = asyncio.run(generator.generate(rng))

    assert "nothing much hbu" in question.choices


@pytest.mark.parametrize("response", ["not much", "B: nothing", "line one\nline two", "   "])
def test_continue_rejects_unusable_alternatives(store, response) -> None:
    generator = ContinueVariantGenerator(
        build_context(store, alternative_provider=FakeProvider(response)),
        ContinueVariantConfig(min_messages=2, max_messages=2)
    )
    rng = ScriptedRandom(ints=[4, 2], booleans=[True])

    with pytest.raises(RetryGeneration):
        asyncio.run(generator.generate(rng))


def test_provider_failure_is_not_retried(store) -> None:
    provider = FailingProvider(LLMAPIError("connection refused"))
    generator = ContinueVariantGenerator(
        build_context(store, alternative_provider=provider),
        ContinueVariantConfig(min_messages=2, max_messages=2)
    )
    rng = ScriptedRandom(ints=[4, 2], booleans=[True])

    with pytest.raises(LLMAPIError):
        asyncio.run(generator.generate(rng))
    assert provider.calls == 1


def test_next_accepts_single_word_messages(store) -> None:
    provider = FakeProvider("see ya")
    generator = NextVariantGenerator(
        build_context(store, alternative_provider=provider),
        NextVariantConfig(min_messages=2, max_messages=2)
    )
    rng = ScriptedRandom(ints=[5, 2], booleans=[True])

    question = asyncio.run(generator.generate(rng))

    assert question.variant == QuestionVariant.NEXT
    assert question.answer == "bye"
    assert question.recipient == "B"
    assert "same participant" in provider.calls[0][1]


def test_media_messages_show_first_uri(rich_context) -> None:
    generator = WhoVariantGenerator(rich_context, WhoVariantConfig(min_messages=3, max_messages=3, min_words=3))
    rng = ScriptedRandom(ints=[4, 3], booleans=[True])

    question = asyncio.run(generator.generate(rng))

    media = question.messages[1]
    assert media.isMedia is True
    assert media.content == "media/reel_1.mp4"
    assert question.messages[0].reaction == "😂"


def test_duration_is_floored_for_simultaneous_messages() -> None:
    from chatquiz.db.json_store import JsonMessageStore

    store = JsonMessageStore.from_dict({
        "participants": ["A", "B"],
        "messages": [
            {"id": 1, "timestamp": "2024-03-05T09:00:00Z", "participant": "A", "platform": "MESSENGER", "text": "ping"},
            {"id": 2, "timestamp": "2024-03-05T09:00:00Z", "participant": "B", "platform": "MESSENGER", "text": "pong"},
            {"id": 3, "timestamp": "2024-03-05T09:02:00Z", "participant": "A", "platform": "MESSENGER", "text": "again"},
        ],
    })
    config = DurationVariantConfig(min_messages=2, max_messages=2, buffer_messages=0)
    generator = DurationVariantGenerator(build_context(store), config)
    rng = ScriptedRandom(ints=[1, 2], booleans=[True], seed="floor")

    question = asyncio.run(generator.generate(rng))

    assert [m.content for m in question.messages] == ["ping", "pong"]
    assert question.answer == "1 second"
    assert len(set(question.choices)) == 2


def test_platform_retries_when_display_names_collide() -> None:
    from chatquiz.db.json_store import JsonMessageStore

    store = JsonMessageStore.from_dict({
        "participants": ["A", "B"],
        "messages": [
            {"id": 1, "timestamp": "2024-03-05T09:00:00Z", "participant": "A", "platform": "SMS", "text": "hello there"},
            {"id": 2, "timestamp": "2024-03-05T09:01:00Z", "participant": "B", "platform": "sms", "text": "hi back again"},
            {"id": 3, "timestamp": "2024-03-05T09:02:00Z", "participant": "A", "platform": "SMS", "text": "ok sounds good"},
        ],
    })
    config = PlatformVariantConfig(min_messages=2, max_messages=2, min_words=1)
    generator = PlatformVariantGenerator(build_context(store), config)
    rng = ScriptedRandom(ints=[0, 3, 2], booleans=[False])

    with pytest.raises(RetryGeneration):
        asyncio.run(generator.generate(rng))
