"""
Platform Variant
The player guesses which platform the last message was sent from
"""
from typing import Optional

from chatquiz.core.config import PlatformVariantConfig
from chatquiz.core.seeded_random import SeededRandom
from chatquiz.models.message import MessageFilter
from chatquiz.models.question import Question, QuestionVariant
from chatquiz.services.message_window import WindowMode
from chatquiz.services.retry import RetryGeneration
from chatquiz.services.variants.base import VariantGenerator
from chatquiz.utils.rendering import render_platform


class PlatformVariantGenerator(VariantGenerator):
    variant = QuestionVariant.PLATFORM

    config: PlatformVariantConfig

    def unavailable_reason(self) -> Optional[str]:
        if len(self.metadata.distinct_platforms) < 2:
            return "fewer than two platforms imported"
        return None

    async def generate(self, rng: SeededRandom) -> Question:
        """
        Choose a platform first so every platform is equally likely, then a
        random anchor with some text from it, then the messages before it.
        """
        platform = rng.choice(self.metadata.distinct_platforms)
        anchor = await self.repository.get_random_anchor(
            rng,
            MessageFilter(platform=platform, min_words=self.config.min_words)
        )
        window_size = self.draw_window_size(rng)
        window = await self.repository.get_window(anchor, WindowMode.ENDING_AT, window_size)

        answer = window[-1].platform
        alternative = rng.choice(
            [p for p in self.metadata.distinct_platforms if p != answer]
        )

        choices = [render_platform(p) for p in rng.shuffle([answer, alternative])]
        if len(set(choices)) != 2:
            raise RetryGeneration("Platforms share a display name")

        return self.build_question(render_platform(answer), choices, window)
