"""
Alternative Provider
Injected capability producing plausible-but-wrong choices for text variants
"""
import logging
from typing import Optional, Protocol

from chatquiz.services.llm_client import generate_text, DEFAULT_TEMPERATURE, DEFAULT_TIMEOUT

logger = logging.getLogger(__name__)


class AlternativeProvider(Protocol):
    """
    Produces a raw alternative for a prompt. Provider failures propagate;
    the calling variant decides whether the returned content is usable.
    """

    async def generate(self, seed: int, prompt: str) -> str:
        ...


class LLMAlternativeProvider:
    """AlternativeProvider backed by the LLM client"""

    def __init__(
        self,
        provider: str,
        timeout: float = DEFAULT_TIMEOUT,
        temperature: float = DEFAULT_TEMPERATURE
    ):
        self.provider = provider
        self.timeout = timeout
        self.temperature = temperature

    async def generate(self, seed: int, prompt: str) -> str:
        logger.debug(f"Requesting alternative from {self.provider} (seed={seed})")
        return await generate_text(
            prompt,
            provider=self.provider,
            seed=seed,
            temperature=self.temperature,
            timeout=self.timeout
        )


def build_alternative_provider(
    provider: Optional[str],
    timeout: float,
    temperature: float
) -> Optional[LLMAlternativeProvider]:
    """Returns None when no provider is configured"""
    if not provider:
        logger.warning("⚠️ No LLM provider configured, model-backed variants are disabled")
        return None

    logger.info(f"✓ Alternative provider: {provider} (timeout: {timeout}s)")
    return LLMAlternativeProvider(provider, timeout=timeout, temperature=temperature)
