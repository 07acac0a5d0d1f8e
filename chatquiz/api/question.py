"""
Question API Routes
Seeded question generation over the imported conversation
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status

from chatquiz.core.config import settings
from chatquiz.core.seeded_random import SeededRandom
from chatquiz.models.metadata import CorpusMetadata
from chatquiz.models.question import (
    ErrorResponse,
    Question,
    SeedResponse,
    VariantsResponse
)
from chatquiz.services.llm_client import LLMClientError
from chatquiz.services.question_generator import (
    GenerationExhaustedError,
    QuestionGenerator
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")


# ============================================================================
# DEPENDENCY INJECTION
# ============================================================================

def get_question_generator(request: Request) -> QuestionGenerator:
    """Dependency to get the QuestionGenerator built during startup"""
    generator = getattr(request.app.state, "question_generator", None)
    if generator is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Question generator has not been initialized"
        )
    return generator


# ============================================================================
# ENDPOINTS
# ============================================================================

@router.get(
    "/question",
    response_model=Question,
    status_code=status.HTTP_200_OK,
    responses={
        200: {"description": "Successfully generated a question", "model": Question},
        502: {"description": "Alternative provider failed", "model": ErrorResponse},
        503: {"description": "No question could be generated", "model": ErrorResponse},
        500: {"description": "Internal server error", "model": ErrorResponse}
    },
    summary="Generate a question from a seed",
    description="""
    Generate a multiple-choice question about the imported conversation.

    The same seed always produces the same question for an unchanged corpus
    (and a deterministic alternative provider). An omitted or empty seed uses
    a non-reproducible seed.
    """
)
async def get_question(
    seed: Optional[str] = Query(None, description="Seed string for the random stream"),
    generator: QuestionGenerator = Depends(get_question_generator)
) -> Question:
    rng = SeededRandom(seed or None)

    try:
        logger.info(f"🎯 Question request - Seed: {seed or '<random>'}")
        return await generator.generate_question(rng)

    except GenerationExhaustedError as e:
        logger.error(f"❌ Generation exhausted: {e}")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=str(e)
        )

    except LLMClientError as e:
        logger.error(f"❌ Alternative provider failed: {e}")
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=f"Alternative provider failed: {str(e)}"
        )

    except Exception as e:
        logger.error(f"❌ Unexpected error: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="An unexpected error occurred while generating the question"
        )


@router.get(
    "/seed",
    response_model=SeedResponse,
    summary="Get a fresh random seed"
)
async def get_seed() -> SeedResponse:
    """Returns a new random lowercase seed for sharing reproducible questions"""
    return SeedResponse(seed=SeededRandom().string(settings.seed_length))


@router.get(
    "/metadata",
    response_model=CorpusMetadata,
    summary="Get the corpus metadata snapshot"
)
async def get_metadata(
    generator: QuestionGenerator = Depends(get_question_generator)
) -> CorpusMetadata:
    return generator.metadata


@router.get(
    "/variants",
    response_model=VariantsResponse,
    summary="List question variants in use"
)
async def get_variants(
    generator: QuestionGenerator = Depends(get_question_generator)
) -> VariantsResponse:
    return VariantsResponse(
        enabled=generator.variants,
        excluded=[f"{name}: {reason}" for name, reason in generator.excluded.items()]
    )
