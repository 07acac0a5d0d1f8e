"""
Variant Generator Base
Shared contract and helpers for all question variant generators
"""
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional

from chatquiz.core.config import WindowConfig
from chatquiz.core.seeded_random import SeededRandom
from chatquiz.models.message import Message
from chatquiz.models.metadata import CorpusMetadata
from chatquiz.models.question import Question, QuestionMessage, QuestionVariant
from chatquiz.services.alternative_provider import AlternativeProvider
from chatquiz.services.message_window import MessageWindowRepository
from chatquiz.services.retry import RetryGeneration
from chatquiz.utils.alternative_parser import AlternativeParseError, parse_alternative

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GenerationContext:
    """Everything a generator needs, built once at startup"""
    metadata: CorpusMetadata
    repository: MessageWindowRepository
    alternative_provider: Optional[AlternativeProvider] = None
    display_timezone: str = "UTC"


def convert_message(message: Message) -> QuestionMessage:
    """Converts a stored message to the message shown with a question."""
    return QuestionMessage(
        content=message.text if message.text != "" else message.medias[0],
        date=message.timestamp,
        isMedia=len(message.medias) > 0,
        participant=message.participant,
        platform=message.platform,
        reaction=message.first_reaction or ""
    )


class VariantGenerator(ABC):
    """
    The interface that all variant generators conform to.

    generate() either returns a Question or raises RetryGeneration to ask
    the dispatcher for a new attempt. Any other exception is fatal for the
    request.
    """

    variant: QuestionVariant

    def __init__(self, context: GenerationContext, config: WindowConfig):
        if config.min_messages < 2 or config.max_messages < config.min_messages:
            raise ValueError(
                f"Invalid window bounds for {self.variant.value}: "
                f"{config.min_messages}-{config.max_messages}"
            )
        self.context = context
        self.config = config

    @property
    def metadata(self) -> CorpusMetadata:
        return self.context.metadata

    @property
    def repository(self) -> MessageWindowRepository:
        return self.context.repository

    def unavailable_reason(self) -> Optional[str]:
        """Why this variant can never succeed on the loaded corpus, if it can't"""
        return None

    def draw_window_size(self, rng: SeededRandom) -> int:
        return rng.range_int(self.config.min_messages, self.config.max_messages + 1)

    def build_question(
        self,
        answer: str,
        choices: List[str],
        window: List[Message],
        recipient: Optional[str] = None
    ) -> Question:
        return Question(
            variant=self.variant,
            answer=answer,
            choices=choices,
            messages=[convert_message(message) for message in window],
            recipient=recipient
        )

    @abstractmethod
    async def generate(self, rng: SeededRandom) -> Question:
        """Generates a question for the variant. May raise RetryGeneration."""
        ...


class ModelBackedVariantGenerator(VariantGenerator):
    """Variant whose alternative comes from the alternative provider"""

    def unavailable_reason(self) -> Optional[str]:
        if self.context.alternative_provider is None:
            return "no alternative provider configured"
        return None

    async def request_alternative(self, rng: SeededRandom, prompt: str) -> str:
        """
        Ask the provider for an alternative and clean it up

        Raises:
            RetryGeneration: If the response is empty after cleanup
        """
        provider = self.context.alternative_provider
        if provider is None:
            raise RuntimeError(f"{self.variant.value} variant requires an alternative provider")

        raw = await provider.generate(rng.model_seed(), prompt)
        try:
            return parse_alternative(raw)
        except AlternativeParseError as e:
            logger.debug(f"🔁 Unusable {self.variant.value} alternative: {e}")
            raise RetryGeneration(str(e))

    def other_participant(self, name: str) -> str:
        """The participant who is not name"""
        names = self.metadata.distinct_participant_names
        return names[1] if names[0] == name else names[0]
