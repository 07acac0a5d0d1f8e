"""
React Variant
The player guesses the reaction left on the last message in the conversation
"""
import logging

from chatquiz.core.config import ReactVariantConfig
from chatquiz.core.seeded_random import SeededRandom
from chatquiz.models.message import MessageFilter
from chatquiz.models.question import Question, QuestionVariant
from chatquiz.prompts.alternative_prompt import build_reaction_prompt
from chatquiz.services.message_window import WindowMode
from chatquiz.services.retry import RetryGeneration
from chatquiz.services.variants.base import ModelBackedVariantGenerator
from chatquiz.utils.alternative_parser import AlternativeValidationError, validate_reaction_alternative

logger = logging.getLogger(__name__)


class ReactVariantGenerator(ModelBackedVariantGenerator):
    variant = QuestionVariant.REACT

    config: ReactVariantConfig

    async def generate(self, rng: SeededRandom) -> Question:
        """
        Get a random anchor with a reaction, then the messages before it.
        The model picks a contextually plausible alternative emoji.
        """
        anchor = await self.repository.get_random_anchor(rng, MessageFilter(has_reactions=True))
        window_size = self.draw_window_size(rng)
        window = await self.repository.get_window(anchor, WindowMode.ENDING_AT, window_size)

        answer = window[-1].first_reaction
        if answer is None:
            raise RetryGeneration("Last message has no reaction")

        prompt = build_reaction_prompt(window, answer, self.metadata.distinct_reactions)
        alternative = await self.request_alternative(rng, prompt)
        try:
            validate_reaction_alternative(alternative, answer)
        except AlternativeValidationError as e:
            logger.debug(f"🔁 Rejected reaction alternative: {e}")
            raise RetryGeneration(str(e))

        return self.build_question(answer, rng.shuffle([answer, alternative]), window)
