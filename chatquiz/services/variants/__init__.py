"""
Question variant generators
"""
from typing import Dict, Type

from chatquiz.models.question import QuestionVariant
from chatquiz.services.variants.base import GenerationContext, VariantGenerator
from chatquiz.services.variants.continuation import ContinueVariantGenerator
from chatquiz.services.variants.duration import DurationVariantGenerator
from chatquiz.services.variants.next_message import NextVariantGenerator
from chatquiz.services.variants.platform import PlatformVariantGenerator
from chatquiz.services.variants.react import ReactVariantGenerator
from chatquiz.services.variants.when import WhenVariantGenerator
from chatquiz.services.variants.who import WhoVariantGenerator

VARIANT_GENERATORS: Dict[QuestionVariant, Type[VariantGenerator]] = {
    QuestionVariant.CONTINUE: ContinueVariantGenerator,
    QuestionVariant.DURATION: DurationVariantGenerator,
    QuestionVariant.NEXT: NextVariantGenerator,
    QuestionVariant.PLATFORM: PlatformVariantGenerator,
    QuestionVariant.REACT: ReactVariantGenerator,
    QuestionVariant.WHEN: WhenVariantGenerator,
    QuestionVariant.WHO: WhoVariantGenerator,
}

__all__ = [
    "VARIANT_GENERATORS",
    "GenerationContext",
    "VariantGenerator",
]
