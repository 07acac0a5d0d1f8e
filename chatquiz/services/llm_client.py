"""
LLM Client
Unified interface for generating text via OpenAI, Anthropic, Grok (xAI) and local Ollama APIs
"""
import os
import asyncio
import logging
from typing import Optional
from enum import Enum

import httpx

logger = logging.getLogger(__name__)


class LLMProvider(str, Enum):
    OPENAI = "openai"
    ANTHROPIC = "anthropic"
    GROK = "grok"
    OLLAMA = "ollama"


class LLMClientError(Exception):
    """Base exception for LLM client errors"""
    pass


class LLMTimeoutError(LLMClientError):
    """Raised when LLM request times out"""
    pass


class LLMAPIError(LLMClientError):
    """Raised when LLM API returns an error"""
    pass


# API Endpoints
OPENAI_API_URL = "https://api.openai.com/v1/chat/completions"
ANTHROPIC_API_URL = "https://api.anthropic.com/v1/messages"
GROK_API_URL = "https://api.x.ai/v1/chat/completions"
OLLAMA_API_URL = os.getenv("OLLAMA_API_URL", "http://localhost:11434/v1/chat/completions")

# Configuration
DEFAULT_TIMEOUT = 60.0  # seconds
DEFAULT_TEMPERATURE = 0.8
MAX_RETRIES = 3
INITIAL_BACKOFF = 1.0  # seconds
MAX_TOKENS = 256

# Model defaults
OPENAI_MODEL = os.getenv("OPENAI_MODEL", "gpt-4o")
ANTHROPIC_MODEL = os.getenv("ANTHROPIC_MODEL", "claude-sonnet-4-20250514")
GROK_MODEL = os.getenv("GROK_MODEL", "grok-3-mini-beta")
OLLAMA_MODEL = os.getenv("OLLAMA_MODEL", "llama3.1:8b")

SYSTEM_MESSAGE = (
    "You are a helpful assistant in a game about texting. "
    "You are tasked with generating choices."
)


async def _retry_with_backoff(
    coro_func,
    max_retries: int = MAX_RETRIES,
    initial_backoff: float = INITIAL_BACKOFF
):
    """
    Execute coroutine with exponential backoff retry

    Args:
        coro_func: Async function to call (no arguments)
        max_retries: Maximum number of retry attempts
        initial_backoff: Initial backoff delay in seconds

    Returns:
        Result from successful coroutine execution

    Raises:
        Last exception if all retries exhausted
    """
    last_exception = None
    backoff = initial_backoff

    for attempt in range(max_retries + 1):
        try:
            return await coro_func()
        except (httpx.TimeoutException, httpx.HTTPStatusError) as e:
            last_exception = e

            if attempt == max_retries:
                break

            # Don't retry on client errors (4xx) except rate limits (429)
            if isinstance(e, httpx.HTTPStatusError):
                if 400 <= e.response.status_code < 500 and e.response.status_code != 429:
                    raise

            logger.warning(
                f"⚠️ Attempt {attempt + 1}/{max_retries + 1} failed: {e}. "
                f"Retrying in {backoff:.1f}s..."
            )

            await asyncio.sleep(backoff)
            backoff *= 2  # Exponential backoff

    raise last_exception


def _response_text(data: dict, path: tuple, provider_name: str) -> str:
    """
    Extract the generated text from a provider response body

    Raises:
        LLMAPIError: If the body has no text at the expected path
    """
    value = data
    try:
        for key in path:
            value = value[key]
    except (KeyError, IndexError, TypeError):
        raise LLMAPIError(f"{provider_name} response has no content")

    if not isinstance(value, str):
        raise LLMAPIError(f"{provider_name} response content is {type(value).__name__}, not text")
    return value


async def _call_openai_compatible(
    prompt: str,
    api_url: str,
    api_key: Optional[str],
    model: str,
    provider_name: str,
    seed: Optional[int] = None,
    temperature: float = DEFAULT_TEMPERATURE,
    timeout: float = DEFAULT_TIMEOUT
) -> str:
    """
    Call OpenAI-compatible Chat Completions API
    Works with OpenAI, Grok, Ollama and other compatible APIs

    Args:
        prompt: The prompt to send
        api_url: API endpoint URL
        api_key: API key for authentication (None for local servers)
        model: Model identifier
        provider_name: Name for logging
        seed: Sampling seed for reproducible output
        temperature: Sampling temperature
        timeout: Request timeout in seconds

    Returns:
        Raw response content string
    """
    headers = {"Content-Type": "application/json"}
    if api_key:
        headers["Authorization"] = f"Bearer {api_key}"

    payload = {
        "model": model,
        "messages": [
            {"role": "system", "content": SYSTEM_MESSAGE},
            {"role": "user", "content": prompt}
        ],
        "temperature": temperature,
        "max_tokens": MAX_TOKENS
    }
    if seed is not None:
        payload["seed"] = seed

    async def make_request():
        async with httpx.AsyncClient(timeout=timeout) as client:
            response = await client.post(api_url, headers=headers, json=payload)
            response.raise_for_status()
            return response.json()

    try:
        data = await _retry_with_backoff(make_request)
        content = _response_text(data, ("choices", 0, "message", "content"), provider_name)
        logger.info(f"✅ {provider_name} response received ({len(content)} chars)")
        return content

    except httpx.TimeoutException as e:
        logger.error(f"❌ {provider_name} request timed out after {timeout}s")
        raise LLMTimeoutError(f"{provider_name} request timed out: {e}")

    except httpx.HTTPStatusError as e:
        logger.error(f"❌ {provider_name} API error: {e.response.status_code}")
        raise LLMAPIError(f"{provider_name} API error: {e.response.text}")

    except httpx.RequestError as e:
        logger.error(f"❌ {provider_name} request failed: {e}")
        raise LLMAPIError(f"{provider_name} request failed: {e}")


async def _call_openai(prompt: str, seed: Optional[int], temperature: float, timeout: float) -> str:
    """Call OpenAI API"""
    api_key = os.getenv("OPENAI_API_KEY")
    if not api_key:
        raise LLMClientError("OPENAI_API_KEY environment variable not set")

    return await _call_openai_compatible(
        prompt=prompt,
        api_url=OPENAI_API_URL,
        api_key=api_key,
        model=OPENAI_MODEL,
        provider_name="OpenAI",
        seed=seed,
        temperature=temperature,
        timeout=timeout
    )


async def _call_grok(prompt: str, seed: Optional[int], temperature: float, timeout: float) -> str:
    """Call Grok (xAI) API - OpenAI compatible"""
    api_key = os.getenv("GROK_API_KEY") or os.getenv("XAI_API_KEY")
    if not api_key:
        raise LLMClientError("GROK_API_KEY or XAI_API_KEY environment variable not set")

    return await _call_openai_compatible(
        prompt=prompt,
        api_url=GROK_API_URL,
        api_key=api_key,
        model=GROK_MODEL,
        provider_name="Grok",
        seed=seed,
        temperature=temperature,
        timeout=timeout
    )


async def _call_ollama(prompt: str, seed: Optional[int], temperature: float, timeout: float) -> str:
    """Call a local Ollama server through its OpenAI-compatible endpoint"""
    return await _call_openai_compatible(
        prompt=prompt,
        api_url=OLLAMA_API_URL,
        api_key=None,
        model=OLLAMA_MODEL,
        provider_name="Ollama",
        seed=seed,
        temperature=temperature,
        timeout=timeout
    )


async def _call_anthropic(prompt: str, temperature: float, timeout: float) -> str:
    """Call Anthropic Messages API (no sampling seed support)"""
    api_key = os.getenv("ANTHROPIC_API_KEY")
    if not api_key:
        raise LLMClientError("ANTHROPIC_API_KEY environment variable not set")

    headers = {
        "x-api-key": api_key,
        "Content-Type": "application/json",
        "anthropic-version": "2023-06-01"
    }

    payload = {
        "model": ANTHROPIC_MODEL,
        "max_tokens": MAX_TOKENS,
        "temperature": temperature,
        "system": SYSTEM_MESSAGE,
        "messages": [
            {"role": "user", "content": prompt}
        ]
    }

    async def make_request():
        async with httpx.AsyncClient(timeout=timeout) as client:
            response = await client.post(ANTHROPIC_API_URL, headers=headers, json=payload)
            response.raise_for_status()
            return response.json()

    try:
        data = await _retry_with_backoff(make_request)
        content = _response_text(data, ("content", 0, "text"), "Anthropic")
        logger.info(f"✅ Anthropic response received ({len(content)} chars)")
        return content

    except httpx.TimeoutException as e:
        logger.error(f"❌ Anthropic request timed out after {timeout}s")
        raise LLMTimeoutError(f"Anthropic request timed out: {e}")

    except httpx.HTTPStatusError as e:
        logger.error(f"❌ Anthropic API error: {e.response.status_code}")
        raise LLMAPIError(f"Anthropic API error: {e.response.text}")

    except httpx.RequestError as e:
        logger.error(f"❌ Anthropic request failed: {e}")
        raise LLMAPIError(f"Anthropic request failed: {e}")


async def generate_text(
    prompt: str,
    provider: str = "ollama",
    seed: Optional[int] = None,
    temperature: float = DEFAULT_TEMPERATURE,
    timeout: Optional[float] = None
) -> str:
    """
    Generate text using specified LLM provider

    Args:
        prompt: The generation prompt
        provider: LLM provider - "openai", "anthropic", "grok" or "ollama" (default)
        seed: Optional sampling seed (ignored by Anthropic)
        temperature: Sampling temperature
        timeout: Optional custom timeout (uses DEFAULT_TIMEOUT if not specified)

    Returns:
        Raw string output from the LLM (no parsing)

    Raises:
        LLMClientError: If API key is missing
        LLMTimeoutError: If request times out after retries
        LLMAPIError: If API returns an error
        ValueError: If invalid provider specified

    Example:
        response = await generate_text(prompt, provider="ollama", seed=42)
    """
    timeout = timeout or DEFAULT_TIMEOUT
    provider = provider.lower()

    logger.info(f"🤖 Generating text via {provider} (timeout: {timeout}s)")

    if provider == LLMProvider.OPENAI:
        return await _call_openai(prompt, seed, temperature, timeout)

    elif provider == LLMProvider.ANTHROPIC:
        return await _call_anthropic(prompt, temperature, timeout)

    elif provider == LLMProvider.GROK:
        return await _call_grok(prompt, seed, temperature, timeout)

    elif provider == LLMProvider.OLLAMA:
        return await _call_ollama(prompt, seed, temperature, timeout)

    else:
        raise ValueError(
            f"Invalid provider: {provider}. "
            f"Supported providers: {[p.value for p in LLMProvider]}"
        )


def health_check(provider: str = "ollama") -> dict:
    """
    Check if LLM provider is configured

    Args:
        provider: LLM provider to check

    Returns:
        Health status dictionary
    """
    provider = provider.lower()

    if provider == LLMProvider.OPENAI:
        configured = bool(os.getenv("OPENAI_API_KEY"))
        model = OPENAI_MODEL
    elif provider == LLMProvider.ANTHROPIC:
        configured = bool(os.getenv("ANTHROPIC_API_KEY"))
        model = ANTHROPIC_MODEL
    elif provider == LLMProvider.GROK:
        configured = bool(os.getenv("GROK_API_KEY") or os.getenv("XAI_API_KEY"))
        model = GROK_MODEL
    elif provider == LLMProvider.OLLAMA:
        configured = True
        model = OLLAMA_MODEL
    else:
        return {"provider": provider, "status": "error", "message": "Invalid provider"}

    return {
        "provider": provider,
        "configured": configured,
        "model": model,
        "status": "ready" if configured else "not_configured"
    }
