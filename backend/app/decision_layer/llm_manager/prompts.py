"""Prompt Loader

System prompts live in yaml files next to this module, one file per stage.
Each file has a ``system`` key; templated prompts use str.format fields.
"""

from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml

from backend.app.core.errors import DecisionLayerError, ErrorCode

PROMPT_DIR = Path(__file__).parent / "prompts"


@lru_cache(maxsize=None)
def load_prompt_config(name: str) -> dict[str, Any]:
    """Load a prompt yaml file by stage name"""
    path = PROMPT_DIR / f"{name}.yaml"
    if not path.exists():
        raise DecisionLayerError(
            ErrorCode.PROMPT_NOT_FOUND,
            f"Prompt file not found: {path.name}",
            stage="prompts",
        )
    with open(path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def get_system_prompt(name: str, **fields: Any) -> str:
    """Return the (optionally formatted) system prompt of a stage"""
    template = load_prompt_config(name).get("system", "")
    if fields:
        return template.format(**fields)
    return template.strip()
