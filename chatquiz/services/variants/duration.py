"""
Duration Variant
The player guesses the time between the last two messages in the conversation
"""
import logging
from datetime import timedelta

from chatquiz.core.config import DurationVariantConfig
from chatquiz.core.seeded_random import SeededRandom
from chatquiz.models.question import Question, QuestionVariant
from chatquiz.services.message_window import WindowMode
from chatquiz.services.retry import RetryGeneration
from chatquiz.services.variants.base import GenerationContext, VariantGenerator
from chatquiz.utils.duration import humanize_duration

logger = logging.getLogger(__name__)

ONE_MS = timedelta(milliseconds=1)


class DurationVariantGenerator(VariantGenerator):
    variant = QuestionVariant.DURATION

    config: DurationVariantConfig

    def __init__(self, context: GenerationContext, config: DurationVariantConfig):
        super().__init__(context, config)
        if config.min_duration_ms <= 0 or config.max_duration_ms < config.min_duration_ms:
            raise ValueError("Invalid duration bounds")
        if config.min_scale_factor < 1 or config.max_scale_factor < config.min_scale_factor:
            raise ValueError("Invalid scale factors")

    async def generate(self, rng: SeededRandom) -> Question:
        """
        Get a random slice of messages starting at a random anchor, then find
        the earliest fixed size window inside it whose last two messages
        change participants.
        """
        anchor = await self.repository.get_random_anchor(rng)
        window_size = self.draw_window_size(rng)
        expanded = await self.repository.get_window(
            anchor,
            WindowMode.STARTING_AT,
            window_size + self.config.buffer_messages
        )

        start = next(
            (
                offset for offset in range(len(expanded) - window_size + 1)
                if expanded[offset + window_size - 1].participant
                != expanded[offset + window_size - 2].participant
            ),
            None
        )
        if start is None:
            raise RetryGeneration("No participant change in the buffered window")
        window = expanded[start:start + window_size]

        gap_ms = (window[-1].timestamp - window[-2].timestamp) // ONE_MS
        answer = max(gap_ms, self.config.min_duration_ms)
        alternative = self._get_alternative(rng, answer)

        choices = [humanize_duration(d) for d in rng.shuffle([answer, alternative])]
        return self.build_question(humanize_duration(answer), choices, window)

    def _get_alternative(self, rng: SeededRandom, answer: float) -> float:
        """
        Returns an alternative some factor away from the answer, with a
        humanized representation distinct from the answer's.

        Raises:
            RetryGeneration: If no distinct alternative was found
        """
        cfg = self.config

        scale_down_max = min(cfg.max_scale_factor, answer / cfg.min_duration_ms)
        scale_down_min = min(cfg.min_scale_factor, scale_down_max)
        scale_up_max = min(cfg.max_scale_factor, cfg.max_duration_ms / answer)
        scale_up_min = min(cfg.min_scale_factor, scale_up_max)

        answer_string = humanize_duration(answer)
        for _ in range(cfg.max_alternative_attempts):
            if rng.boolean():
                alternative = answer / rng.uniform(scale_down_min, scale_down_max)
            else:
                alternative = answer * rng.uniform(scale_up_min, scale_up_max)
            alternative = min(max(alternative, cfg.min_duration_ms), cfg.max_duration_ms)

            if humanize_duration(alternative) != answer_string:
                return alternative

        logger.debug(f"🔁 No distinct duration alternative for {answer_string}")
        raise RetryGeneration("No distinct duration alternative")
