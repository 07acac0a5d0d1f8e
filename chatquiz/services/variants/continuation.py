"""
Continue Variant
The player picks the real last message of the conversation over a generated one
"""
import logging
from typing import List

from chatquiz.core.config import ContinueVariantConfig
from chatquiz.core.seeded_random import SeededRandom
from chatquiz.models.message import Message, MessageFilter
from chatquiz.models.question import Question, QuestionVariant
from chatquiz.prompts.alternative_prompt import build_continue_prompt
from chatquiz.services.message_window import WindowMode
from chatquiz.services.retry import RetryGeneration
from chatquiz.services.variants.base import ModelBackedVariantGenerator
from chatquiz.utils.alternative_parser import AlternativeValidationError, validate_text_alternative

logger = logging.getLogger(__name__)


class ContinueVariantGenerator(ModelBackedVariantGenerator):
    variant = QuestionVariant.CONTINUE

    config: ContinueVariantConfig

    def build_prompt(self, window: List[Message]) -> str:
        return build_continue_prompt(window)

    async def generate(self, rng: SeededRandom) -> Question:
        """
        Get a random anchor with some text (ignoring short messages like
        links), then the messages before it. The model writes an alternative
        to the last message.
        """
        anchor = await self.repository.get_random_anchor(
            rng,
            MessageFilter(min_words=self.config.min_words)
        )
        window_size = self.draw_window_size(rng)
        window = await self.repository.get_window(anchor, WindowMode.ENDING_AT, window_size)

        last = window[-1]
        answer = last.text
        if not answer:
            raise RetryGeneration("Last message has no text")

        alternative = await self.request_alternative(rng, self.build_prompt(window))
        try:
            validate_text_alternative(
                alternative,
                answer,
                self.metadata.distinct_participant_names
            )
        except AlternativeValidationError as e:
            logger.debug(f"🔁 Rejected {self.variant.value} alternative: {e}")
            raise RetryGeneration(str(e))

        return self.build_question(
            answer,
            rng.shuffle([answer, alternative]),
            window,
            recipient=self.other_participant(last.participant)
        )
