"""
Question Generator Service
Picks a variant with the seeded stream and retries it until it yields a question
"""
import logging
from typing import Dict, List, Optional

from chatquiz.core.config import Settings
from chatquiz.core.seeded_random import SeededRandom
from chatquiz.db.message_store import MessageStore
from chatquiz.models.metadata import CorpusMetadata
from chatquiz.models.question import Question, QuestionVariant
from chatquiz.services.alternative_provider import build_alternative_provider
from chatquiz.services.message_window import MessageWindowRepository
from chatquiz.services.metadata_service import compute_metadata
from chatquiz.services.retry import RetryGeneration
from chatquiz.services.variants import VARIANT_GENERATORS, GenerationContext, VariantGenerator

logger = logging.getLogger(__name__)

# Settings attribute holding each variant's config
VARIANT_CONFIG_FIELDS = {
    QuestionVariant.CONTINUE: "continuation",
    QuestionVariant.DURATION: "duration",
    QuestionVariant.NEXT: "next",
    QuestionVariant.PLATFORM: "platform",
    QuestionVariant.REACT: "react",
    QuestionVariant.WHEN: "when",
    QuestionVariant.WHO: "who",
}


class QuestionGenerationError(Exception):
    """Base exception for question generation errors"""
    pass


class NoVariantsAvailableError(QuestionGenerationError):
    """Raised when no enabled variant can run on the loaded corpus"""
    pass


class GenerationExhaustedError(QuestionGenerationError):
    """Raised when a variant kept asking for retries past the attempt limit"""
    pass


class QuestionGenerator:
    """
    Dispatches question generation to a randomly chosen variant.

    The variant is drawn once per request from the sorted variant names.
    Retries keep consuming the same random stream, so the whole attempt
    sequence is a deterministic function of the seed.
    """

    def __init__(
        self,
        generators: Dict[QuestionVariant, VariantGenerator],
        metadata: CorpusMetadata,
        max_attempts: int = 1000,
        excluded: Optional[Dict[str, str]] = None
    ):
        if not generators:
            raise NoVariantsAvailableError("No question variants available")
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")

        self.generators = generators
        self.metadata = metadata
        self.variants: List[QuestionVariant] = sorted(generators, key=lambda v: v.value)
        self.max_attempts = max_attempts
        self.excluded = excluded or {}

    @classmethod
    def from_settings(cls, context: GenerationContext, settings: Settings) -> "QuestionGenerator":
        """
        Build generators for the enabled variants, leaving out the ones that
        can never succeed on the loaded corpus

        Raises:
            ValueError: If an enabled variant name is unknown
            NoVariantsAvailableError: If every enabled variant is unavailable
        """
        generators: Dict[QuestionVariant, VariantGenerator] = {}
        excluded: Dict[str, str] = {}

        for name in settings.enabled_variants:
            variant = QuestionVariant(name.lower())
            config = getattr(settings, VARIANT_CONFIG_FIELDS[variant])
            generator = VARIANT_GENERATORS[variant](context, config)

            reason = generator.unavailable_reason()
            if reason:
                logger.warning(f"⚠️ Variant '{variant.value}' disabled: {reason}")
                excluded[variant.value] = reason
                continue
            generators[variant] = generator

        logger.info(f"✓ Question variants enabled: {[v.value for v in sorted(generators, key=lambda v: v.value)]}")
        return cls(
            generators,
            context.metadata,
            max_attempts=settings.max_generation_attempts, excluded=excluded)

    async def generate_question(self, rng: SeededRandom) -> Question:
        """
        Generate a question from the random state, retrying the chosen
        variant until it produces a valid question.

        Raises:
            GenerationExhaustedError: If max_attempts retries were used up
            Exception: Any non-retry error from the variant, unchanged
        """
        variant = rng.choice(self.variants)
        generator = self.generators[variant]

        for attempt in range(1, self.max_attempts + 1):
            try:
                question = await generator.generate(rng)
            except RetryGeneration as e:
                logger.debug(f"🔁 {variant.value} attempt {attempt} retrying: {e}")
                continue

            logger.info(f"✅ Generated {variant.value} question after {attempt} attempt(s)")
            return question

        logger.error(f"❌ {variant.value} gave no question in {self.max_attempts} attempts")
        raise GenerationExhaustedError(
            f"Variant '{variant.value}' produced no question in {self.max_attempts} attempts"
        )


async def build_question_generator(store: MessageStore, settings: Settings) -> QuestionGenerator:
    """
    Compute corpus metadata and wire the generators. Called once from the
    application lifespan; any error here aborts startup.
    """
    # React is excluded when no provider is configured
    react_enabled = QuestionVariant.REACT.value in [v.lower() for v in settings.enabled_variants]
    require_reactions = react_enabled and bool(settings.llm_provider)
    metadata = await compute_metadata(store, require_reactions=require_reactions)

    context = GenerationContext(
        metadata=metadata,
        repository=MessageWindowRepository(store, metadata),
        alternative_provider=build_alternative_provider(
            settings.llm_provider,
            timeout=settings.llm_timeout_seconds,
            temperature=settings.llm_temperature
        ),
        display_timezone=settings.display_timezone
    )
    return QuestionGenerator.from_settings(context, settings)
