"""LLM Configuration"""

from dataclasses import dataclass, field
from typing import Literal

from backend.app.core.config import settings


@dataclass
class LLMConfig:
    """LLM settings for one pipeline stage"""

    # Provider
    provider: Literal["openai", "anthropic"] = "openai"

    # Model
    model: str = field(default_factory=lambda: settings.DEFAULT_LLM_MODEL)
    anthropic_model: str = field(default_factory=lambda: settings.ANTHROPIC_LLM_MODEL)

    # Generation params
    temperature: float = 0.3
    max_tokens: int = 1024

    # Per-call budget, enforced with asyncio.wait_for
    timeout_sec: float = field(default_factory=lambda: settings.LLM_TIMEOUT_SEC)


# Stage names
MEETING_REFERENCE = "meeting_reference"
INTERPRETATION = "interpretation"
VALIDATION = "validation"
CONTRACT_SELECTION = "contract_selection"
SCOPE_CHECK = "scope_check"


# Per-stage defaults; all classification stages use the fast model
STAGE_CONFIGS: dict[str, LLMConfig] = {
    MEETING_REFERENCE: LLMConfig(
        provider=settings.DEFAULT_LLM_PROVIDER,  # type: ignore[arg-type]
        model=settings.FAST_LLM_MODEL,
        temperature=0.0,
        max_tokens=5,
        timeout_sec=settings.MEETING_REFERENCE_TIMEOUT_SEC,
    ),
    INTERPRETATION: LLMConfig(
        provider=settings.DEFAULT_LLM_PROVIDER,  # type: ignore[arg-type]
        model=settings.FAST_LLM_MODEL,
        temperature=0.3,
        max_tokens=1024,
    ),
    VALIDATION: LLMConfig(
        provider=settings.DEFAULT_LLM_PROVIDER,  # type: ignore[arg-type]
        model=settings.FAST_LLM_MODEL,
        temperature=0.0,
        max_tokens=300,
    ),
    CONTRACT_SELECTION: LLMConfig(
        provider=settings.DEFAULT_LLM_PROVIDER,  # type: ignore[arg-type]
        model=settings.FAST_LLM_MODEL,
        temperature=0.0,
        max_tokens=200,
    ),
    SCOPE_CHECK: LLMConfig(
        provider=settings.DEFAULT_LLM_PROVIDER,  # type: ignore[arg-type]
        model=settings.FAST_LLM_MODEL,
        temperature=0.0,
        max_tokens=200,
    ),
}
