"""Application Configuration

pydantic-settings based settings for the decision layer
"""

from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Decision layer settings"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # === App ===
    APP_NAME: str = "Query Decision Layer"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    ENVIRONMENT: str = "development"  # development, staging, production

    # === LLM ===
    OPENAI_API_KEY: Optional[str] = None
    ANTHROPIC_API_KEY: Optional[str] = None
    DEFAULT_LLM_PROVIDER: str = "openai"  # openai, anthropic
    DEFAULT_LLM_MODEL: str = "gpt-4o"
    FAST_LLM_MODEL: str = "gpt-4o-mini"
    ANTHROPIC_LLM_MODEL: str = "claude-3-5-sonnet-20241022"

    # === Timeouts (seconds) ===
    LLM_TIMEOUT_SEC: float = 15.0
    MEETING_REFERENCE_TIMEOUT_SEC: float = 5.0
    CLASSIFICATION_TIMEOUT_SEC: float = 30.0

    # === Intent Routing Policy ===
    INTERPRETATION_CONFIDENCE_THRESHOLD: float = 0.6
    LOW_CONFIDENCE_THRESHOLD: float = 0.88
    KNOWN_CONTACTS: list[str] = [
        "tyler wiggins",
        "tyler",
        "randy hentschke",
        "randy",
        "robert colongo",
        "robert",
        "will sovern",
        "eric conn",
        "john smith",
    ]

    # === Follow-up ===
    FOLLOW_UP_CONFIDENCE: float = 0.85
    FOLLOW_UP_MIN_THREAD_MESSAGES: int = 2

    # === Coverage Qualification ===
    COVERAGE_LIMITED_MAX_MEETINGS: int = 2
    COVERAGE_LIMITED_MAX_COMPANIES: int = 1
    COVERAGE_NOTE_MAX_MEETINGS: int = 5
    COVERAGE_NOTE_MAX_COMPANIES: int = 2

    # === Entity Cache ===
    ENTITY_CACHE_TTL_SEC: float = 300.0  # 5 minutes

    # === Aggregate Scope ===
    AGGREGATE_TIME_RANGE_MEETING_LIMIT: int = 100

    # === Logging ===
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "json"  # json, text


# Singleton
settings = Settings()
