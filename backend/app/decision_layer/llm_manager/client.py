"""LLM Client

Provider-agnostic async LLM client. Every call is bounded by the stage's
``timeout_sec``; provider failures surface as ``LLMError`` subclasses so that
callers can degrade with a single ``except``.
"""

import asyncio
import json
from typing import Any, Optional, Sequence

from openai import AsyncOpenAI
from anthropic import AsyncAnthropic

from backend.app.core.config import settings
from backend.app.core.errors import (
    DecisionLayerError,
    ErrorCode,
    LLMError,
    LLMResponseError,
    LLMTimeoutError,
)
from backend.app.core.logging import get_logger
from backend.app.decision_layer.llm_manager.config import STAGE_CONFIGS, LLMConfig

logger = get_logger(__name__)


class LLMClient:
    """LLM client"""

    def __init__(self, config: Optional[LLMConfig] = None):
        self.config = config or LLMConfig()
        self._openai: Optional[AsyncOpenAI] = None
        self._anthropic: Optional[AsyncAnthropic] = None

    @property
    def openai(self) -> AsyncOpenAI:
        if self._openai is None:
            self._openai = AsyncOpenAI(api_key=settings.OPENAI_API_KEY)
        return self._openai

    @property
    def anthropic(self) -> AsyncAnthropic:
        if self._anthropic is None:
            self._anthropic = AsyncAnthropic(api_key=settings.ANTHROPIC_API_KEY)
        return self._anthropic

    async def generate(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        response_format: Optional[dict[str, Any]] = None,
        history: Optional[Sequence[dict[str, str]]] = None,
        **kwargs: Any,
    ) -> str:
        """Generate text

        Args:
            prompt: user prompt (the current message)
            system_prompt: system prompt
            response_format: provider response format (OpenAI only)
            history: prior turns as {"role": "user"|"assistant", "content": ...}
            **kwargs: overrides (provider, model, temperature, max_tokens, timeout_sec)

        Returns:
            Generated text

        Raises:
            LLMTimeoutError: the call exceeded its budget
            LLMError: provider failure
        """
        config = self.config
        provider = kwargs.pop("provider", config.provider)
        timeout_sec = kwargs.pop("timeout_sec", config.timeout_sec)

        logger.debug(
            "LLM generate",
            provider=provider,
            model=kwargs.get("model", config.model),
            prompt_length=len(prompt),
            history_length=len(history or ()),
        )

        if provider == "openai":
            call = self._generate_openai(
                prompt, system_prompt, response_format, history, **kwargs
            )
        elif provider == "anthropic":
            call = self._generate_anthropic(prompt, system_prompt, history, **kwargs)
        else:
            raise DecisionLayerError(
                ErrorCode.LLM_UNKNOWN_PROVIDER,
                f"Unknown provider: {provider}",
                stage="llm_client",
            )

        try:
            return await asyncio.wait_for(call, timeout=timeout_sec)
        except asyncio.TimeoutError as e:
            raise LLMTimeoutError(timeout_sec, stage="llm_client") from e
        except DecisionLayerError:
            raise
        except Exception as e:
            raise LLMError(f"{provider} call failed: {e}", stage="llm_client") from e

    def _build_messages(
        self,
        prompt: str,
        history: Optional[Sequence[dict[str, str]]],
    ) -> list[dict[str, str]]:
        messages = [
            {"role": turn["role"], "content": turn["content"]}
            for turn in (history or ())
        ]
        messages.append({"role": "user", "content": prompt})
        return messages

    async def _generate_openai(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        response_format: Optional[dict[str, Any]] = None,
        history: Optional[Sequence[dict[str, str]]] = None,
        **kwargs: Any,
    ) -> str:
        """OpenAI chat completion"""
        messages = []

        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})

        messages.extend(self._build_messages(prompt, history))

        params: dict[str, Any] = {
            "model": kwargs.get("model", self.config.model),
            "messages": messages,
            "temperature": kwargs.get("temperature", self.config.temperature),
            "max_tokens": kwargs.get("max_tokens", self.config.max_tokens),
        }

        if response_format:
            params["response_format"] = response_format

        response = await self.openai.chat.completions.create(**params)

        return response.choices[0].message.content or ""

    async def _generate_anthropic(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        history: Optional[Sequence[dict[str, str]]] = None,
        **kwargs: Any,
    ) -> str:
        """Anthropic messages call"""
        params: dict[str, Any] = {
            "model": kwargs.get("model", self.config.anthropic_model),
            "max_tokens": kwargs.get("max_tokens", self.config.max_tokens),
            "temperature": kwargs.get("temperature", self.config.temperature),
            "messages": self._build_messages(prompt, history),
        }

        if system_prompt:
            params["system"] = system_prompt

        response = await self.anthropic.messages.create(**params)

        return response.content[0].text if response.content else ""

    async def generate_json(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        history: Optional[Sequence[dict[str, str]]] = None,
        **kwargs: Any,
    ) -> dict[str, Any]:
        """Generate a JSON object

        Args:
            prompt: user prompt
            system_prompt: system prompt
            history: prior turns
            **kwargs: overrides passed to generate()

        Returns:
            Parsed JSON object

        Raises:
            LLMResponseError: empty, non-JSON or non-object response
        """
        json_prompt = prompt + "\n\nRespond with valid JSON only."

        provider = kwargs.get("provider", self.config.provider)
        response_format = {"type": "json_object"} if provider == "openai" else None

        result = await self.generate(
            json_prompt,
            system_prompt=system_prompt,
            response_format=response_format,
            history=history,
            **kwargs,
        )

        return parse_json_object(result)


def parse_json_object(raw: str) -> dict[str, Any]:
    """Parse an LLM response into a JSON object, tolerating ``` fences"""
    text = raw or ""
    if "```json" in text:
        text = text.split("```json")[1].split("```")[0]
    elif "```" in text:
        text = text.split("```")[1].split("```")[0]

    text = text.strip()
    if not text:
        raise LLMResponseError("Empty LLM response", stage="llm_client")

    try:
        parsed = json.loads(text)
    except json.JSONDecodeError as e:
        logger.error("Failed to parse JSON response", error=str(e), response=text[:200])
        raise LLMResponseError(f"Invalid JSON response: {e}", stage="llm_client") from e

    if not isinstance(parsed, dict):
        raise LLMResponseError(
            f"Expected a JSON object, got {type(parsed).__name__}",
            stage="llm_client",
        )
    return parsed


# Stage client factory
def get_llm_client(stage: str) -> LLMClient:
    """Return an LLM client configured for a pipeline stage"""
    config = STAGE_CONFIGS.get(stage, LLMConfig())
    return LLMClient(config)


# Field coercion for parsed LLM objects
def coerce_text(value: Any, default: Optional[str] = None) -> Optional[str]:
    """Non-blank string, else ``default``"""
    if isinstance(value, str) and value.strip():
        return value
    return default


def coerce_flag(value: Any, default: bool) -> bool:
    """JSON boolean or "true"/"false" string, else ``default``"""
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in ("true", "false"):
        return value.strip().lower() == "true"
    return default
