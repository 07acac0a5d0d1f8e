"""
Next Variant
Like Continue, but any message with text can be the one to guess and the
alternative is written as the same sender
"""
from typing import List

from chatquiz.core.config import NextVariantConfig
from chatquiz.models.message import Message
from chatquiz.models.question import QuestionVariant
from chatquiz.prompts.alternative_prompt import build_next_prompt
from chatquiz.services.variants.continuation import ContinueVariantGenerator


class NextVariantGenerator(ContinueVariantGenerator):
    variant = QuestionVariant.NEXT

    config: NextVariantConfig

    def build_prompt(self, window: List[Message]) -> str:
        return build_next_prompt(window)
