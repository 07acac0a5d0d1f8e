"""
Who Variant
The player guesses who sent the last message in the conversation
"""
from chatquiz.core.config import WhoVariantConfig
from chatquiz.core.seeded_random import SeededRandom
from chatquiz.models.message import MessageFilter
from chatquiz.models.question import Question, QuestionVariant
from chatquiz.services.message_window import WindowMode
from chatquiz.services.retry import RetryGeneration
from chatquiz.services.variants.base import VariantGenerator


class WhoVariantGenerator(VariantGenerator):
    variant = QuestionVariant.WHO

    config: WhoVariantConfig

    async def generate(self, rng: SeededRandom) -> Question:
        """
        Get a random anchor with enough text that its sender could plausibly
        be guessed, then the messages before it.
        """
        anchor = await self.repository.get_random_anchor(
            rng,
            MessageFilter(min_words=self.config.min_words)
        )
        window_size = self.draw_window_size(rng)
        window = await self.repository.get_window(anchor, WindowMode.ENDING_AT, window_size)

        if window[-1].text != anchor.text:
            raise RetryGeneration("Window does not end with the anchor")

        choices = list(self.metadata.distinct_participant_names)
        return self.build_question(window[-1].participant, rng.shuffle(choices), window)
