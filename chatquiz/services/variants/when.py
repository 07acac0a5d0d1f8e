"""
When Variant
The player guesses the date the last message was sent on
"""
import math
from datetime import datetime, timedelta
from typing import List, Optional

from chatquiz.core.config import WhenVariantConfig
from chatquiz.core.seeded_random import SeededRandom
from chatquiz.models.question import Question, QuestionVariant
from chatquiz.services.message_window import WindowMode
from chatquiz.services.retry import RetryGeneration
from chatquiz.services.variants.base import VariantGenerator
from chatquiz.utils.rendering import render_date

ONE_DAY = timedelta(days=1)


class WhenVariantGenerator(VariantGenerator):
    variant = QuestionVariant.WHEN

    config: WhenVariantConfig

    def unavailable_reason(self) -> Optional[str]:
        span = self.metadata.max_timestamp - self.metadata.min_timestamp
        if span < self.config.min_delta_days * ONE_DAY:
            return f"corpus spans less than {self.config.min_delta_days} day(s)"
        return None

    async def generate(self, rng: SeededRandom) -> Question:
        """
        Get a random anchor and the messages after it. There are no message
        restrictions for this variant.
        """
        anchor = await self.repository.get_random_anchor(rng)
        window_size = self.draw_window_size(rng)
        window = await self.repository.get_window(anchor, WindowMode.STARTING_AT, window_size)

        answer = window[-1].timestamp
        alternative = self._get_alternative(rng, answer)

        timezone = self.context.display_timezone
        answer_string = render_date(answer, timezone)
        choices = [render_date(d, timezone) for d in rng.shuffle([answer, alternative])]
        if len(set(choices)) != 2:
            raise RetryGeneration("Alternative falls on the same calendar date")

        return self.build_question(answer_string, choices, window)

    def _get_alternative(self, rng: SeededRandom, answer: datetime) -> datetime:
        """
        Returns the answer shifted by a whole number of days, staying within
        the range of all messages.

        Raises:
            RetryGeneration: If neither direction has room for the minimum shift
        """
        cfg = self.config
        room_before = math.floor((answer - self.metadata.min_timestamp) / ONE_DAY)
        room_after = math.floor((self.metadata.max_timestamp - answer) / ONE_DAY)

        directions: List[int] = []
        if min(cfg.max_delta_days, room_after) >= cfg.min_delta_days:
            directions.append(1)
        if min(cfg.max_delta_days, room_before) >= cfg.min_delta_days:
            directions.append(-1)
        if not directions:
            raise RetryGeneration("No room to shift the date")

        sign = directions[0] if len(directions) == 1 else (1 if rng.boolean() else -1)
        max_delta = min(cfg.max_delta_days, room_after if sign > 0 else room_before)
        delta = rng.range_int(cfg.min_delta_days, max_delta + 1)

        return answer + sign * delta * ONE_DAY
