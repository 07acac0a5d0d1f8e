"""
Application configuration settings
FILE: chatquiz/core/config.py
"""
from typing import List, Literal, Optional

from pydantic import BaseModel
from pydantic_settings import BaseSettings


class WindowConfig(BaseModel):
    """Window size bounds shared by every variant"""
    min_messages: int = 3
    max_messages: int = 10


class DurationVariantConfig(WindowConfig):
    """
    Config for the duration variant.

    buffer_messages are fetched on top of the window so a participant
    transition is more likely to be found. The scale factors apply to both
    scaling up and scaling down.
    """
    buffer_messages: int = 10
    min_duration_ms: int = 1000
    max_duration_ms: int = 7 * 24 * 3600 * 1000
    min_scale_factor: float = 1.0
    max_scale_factor: float = 100.0
    max_alternative_attempts: int = 100


class PlatformVariantConfig(WindowConfig):
    # Short anchors are usually links
    min_words: int = 2


class WhoVariantConfig(WindowConfig):
    min_words: int = 3


class ReactVariantConfig(WindowConfig):
    pass


class ContinueVariantConfig(WindowConfig):
    min_words: int = 2


class NextVariantConfig(WindowConfig):
    min_words: int = 1


class WhenVariantConfig(WindowConfig):
    min_delta_days: int = 1
    max_delta_days: int = 365


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # Message store
    store_backend: Literal["mongo", "json"] = "mongo"
    mongodb_url: str = "mongodb://localhost:27017"
    database_name: str = "chat_quiz"
    messages_collection: str = "messages"
    participants_collection: str = "participants"
    corpus_file: str = "corpus.json"

    # Alternative generation (None disables model-backed variants)
    llm_provider: Optional[Literal["openai", "anthropic", "grok", "ollama"]] = None
    llm_timeout_seconds: float = 60.0
    llm_temperature: float = 0.8

    # Question generation
    enabled_variants: List[str] = [
        "continue", "duration", "next", "platform", "react", "when", "who"
    ]
    max_generation_attempts: int = 1000
    seed_length: int = 16
    display_timezone: str = "UTC"

    duration: DurationVariantConfig = DurationVariantConfig()
    platform: PlatformVariantConfig = PlatformVariantConfig()
    who: WhoVariantConfig = WhoVariantConfig()
    react: ReactVariantConfig = ReactVariantConfig()
    continuation: ContinueVariantConfig = ContinueVariantConfig()
    next: NextVariantConfig = NextVariantConfig()
    when: WhenVariantConfig = WhenVariantConfig()

    # API
    cors_origins: List[str] = [
        "http://localhost:5173",
        "http://localhost:3000",
    ]

    class Config:
        env_file = ".env"
        env_nested_delimiter = "__"
        case_sensitive = False  # This allows case-insensitive matching
        extra = "ignore"


settings = Settings()
