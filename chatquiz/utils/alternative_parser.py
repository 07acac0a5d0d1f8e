"""
Alternative Parser
Cleans and validates model-generated alternatives for quiz choices
"""
import json
import re
import logging
from typing import Iterable

import emoji

logger = logging.getLogger(__name__)


class AlternativeParseError(Exception):
    """Base exception for alternative parsing errors"""
    pass


class EmptyAlternativeError(AlternativeParseError):
    """Raised when the model returned nothing usable"""
    pass


class AlternativeValidationError(AlternativeParseError):
    """Raised when an alternative violates the choice constraints"""
    pass


# Emoji presentation selectors carry no glyph of their own
VARIATION_SELECTORS = {"\ufe0e", "\ufe0f"}


def _strip_markdown(text: str) -> str:
    """
    Remove markdown code block formatting

    Args:
        text: Raw text possibly containing markdown

    Returns:
        Text with markdown code blocks removed
    """
    pattern = r"```(?:json|text)?\s*([\s\S]*?)\s*```"
    match = re.search(pattern, text)
    if match:
        return match.group(1).strip()

    text = re.sub(r"```", "", text)
    return text.strip()


def _unwrap_json(text: str) -> str:
    """
    Unwrap a JSON string or array of strings, returning the text unchanged
    when it is not JSON
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        return text

    if isinstance(data, str):
        return data
    if isinstance(data, list) and data and isinstance(data[0], str):
        return data[0]
    return text


def parse_alternative(raw_response: str) -> str:
    """
    Parse a single alternative from a model response

    Args:
        raw_response: Raw string response from the model

    Returns:
        Cleaned alternative text

    Raises:
        EmptyAlternativeError: If nothing is left after cleanup
    """
    if not raw_response or not raw_response.strip():
        raise EmptyAlternativeError("Empty response received")

    text = _strip_markdown(raw_response.strip())
    text = _unwrap_json(text).strip()

    # Strip one layer of matching quotes
    if len(text) >= 2 and text[0] == text[-1] and text[0] in {'"', "'"}:
        text = text[1:-1].strip()

    if not text:
        raise EmptyAlternativeError("Response was empty after cleanup")

    logger.debug(f"Parsed alternative ({len(text)} chars)")
    return text


def strip_variation_selectors(text: str) -> str:
    return "".join(c for c in text if c not in VARIATION_SELECTORS)


def is_single_emoji(text: str) -> bool:
    """
    True if the text is exactly one emoji glyph, including skin tone,
    flag and ZWJ sequences, with or without a presentation selector
    """
    if not text:
        return False
    glyph = strip_variation_selectors(text)
    return any(emoji.is_emoji(candidate) for candidate in (text, glyph, glyph + "\ufe0f"))


def validate_reaction_alternative(alternative: str, answer: str) -> str:
    """
    Validate a reaction alternative

    Raises:
        AlternativeValidationError: If it is not a single emoji distinct from the answer
    """
    if not is_single_emoji(alternative):
        raise AlternativeValidationError(f"Not a single emoji: {alternative!r}")
    if strip_variation_selectors(alternative) == strip_variation_selectors(answer):
        raise AlternativeValidationError("Alternative equals the answer")
    return alternative


def validate_text_alternative(
    alternative: str,
    answer: str,
    participant_names: Iterable[str]
) -> str:
    """
    Validate a message text alternative

    Raises:
        AlternativeValidationError: If it spans several lines, carries a
            participant name prefix, or equals the answer
    """
    if "\n" in alternative or "\r" in alternative:
        raise AlternativeValidationError("Alternative spans multiple lines")

    for name in participant_names:
        if alternative.startswith(f"{name}:"):
            raise AlternativeValidationError(f"Alternative is prefixed with '{name}:'")

    if alternative.strip() == answer.strip():
        raise AlternativeValidationError("Alternative equals the answer")
    return alternative
