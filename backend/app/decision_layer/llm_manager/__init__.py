"""LLM Manager - async LLM client, per-stage config and yaml prompts"""

# Config first (client uses STAGE_CONFIGS)
from .config import (
    CONTRACT_SELECTION,
    INTERPRETATION,
    MEETING_REFERENCE,
    SCOPE_CHECK,
    STAGE_CONFIGS,
    VALIDATION,
    LLMConfig,
)

from .client import LLMClient, coerce_flag, coerce_text, get_llm_client, parse_json_object

from .prompts import get_system_prompt, load_prompt_config

__all__ = [
    # Config
    "LLMConfig",
    "STAGE_CONFIGS",
    "MEETING_REFERENCE",
    "INTERPRETATION",
    "VALIDATION",
    "CONTRACT_SELECTION",
    "SCOPE_CHECK",
    # Client
    "LLMClient",
    "get_llm_client",
    "parse_json_object",
    "coerce_text",
    "coerce_flag",
    # Prompts
    "load_prompt_config",
    "get_system_prompt",
]
