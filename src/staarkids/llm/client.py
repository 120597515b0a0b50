"""LLM client for authentic-pattern question generation.

Provides a thin interface over OpenAI-compatible chat endpoints.
Only the authentic STAAR generator talks to an LLM; every other
generator is template based.

Supported providers:
- openai: OpenAI API
- perplexity: Perplexity API (OpenAI-compatible endpoint)
- lmstudio: Local LM Studio server
"""

from __future__ import annotations

import json
import re
import time
from dataclasses import dataclass, field
from typing import Any, Literal

import structlog
from openai import OpenAI

from staarkids.config.app_config import LLMSettings, load_app_config

logger = structlog.get_logger(__name__)

# =============================================================================
# CONSTANTS
# =============================================================================

Provider = Literal["openai", "perplexity", "lmstudio"]

PROVIDER_DEFAULTS: dict[str, dict[str, Any]] = {
    "openai": {
        "base_url": "https://api.openai.com/v1",
        "supports_json_object": True,
    },
    "perplexity": {
        "base_url": "https://api.perplexity.ai",
        "supports_json_object": False,
    },
    "lmstudio": {
        "base_url": "http://localhost:1234/v1",
        "supports_json_object": False,
    },
}

# Some models wrap their reply in reasoning tags
SANITIZE_PATTERNS = [
    re.compile(r"<think>.*?</think>", re.DOTALL | re.IGNORECASE),
    re.compile(r"<reasoning>.*?</reasoning>", re.DOTALL | re.IGNORECASE),
]


def _sanitize_for_json(text: str) -> str:
    """Remove thinking/reasoning tags before JSON parsing."""
    result = text
    for pattern in SANITIZE_PATTERNS:
        result = pattern.sub("", result)
    return result.strip()


# =============================================================================
# DATA CLASSES
# =============================================================================


@dataclass
class LLMConfig:
    """Configuration for LLM client."""

    provider: str = "openai"
    base_url: str = "https://api.openai.com/v1"
    model: str = "gpt-4o-mini"
    temperature: float = 0.6
    max_tokens: int = 1000
    timeout: int = 60
    api_key: str | None = None

    @classmethod
    def from_settings(cls, settings: LLMSettings | None = None) -> LLMConfig:
        """Build client configuration from the application config."""
        if settings is None:
            settings = load_app_config().llm

        defaults = PROVIDER_DEFAULTS.get(settings.provider, {})
        return cls(
            provider=settings.provider,
            base_url=settings.base_url or defaults.get("base_url", ""),
            model=settings.model,
            temperature=settings.temperature,
            max_tokens=settings.max_tokens,
            api_key=settings.get_api_key(),
        )


@dataclass
class Message:
    """A chat message."""

    role: Literal["system", "user", "assistant"]
    content: str

    def to_dict(self) -> dict[str, str]:
        """Convert to dictionary for API call."""
        return {"role": self.role, "content": self.content}


@dataclass
class LLMResponse:
    """Response from LLM."""

    content: str
    model: str
    provider: str
    usage: dict[str, int] = field(default_factory=dict)
    latency_ms: int = 0


class LLMError(Exception):
    """Error during LLM interaction."""

    pass


class LLMConnectionError(LLMError):
    """Error connecting to LLM server."""

    pass


class LLMResponseError(LLMError):
    """Error in LLM response."""

    pass


# =============================================================================
# LLM CLIENT
# =============================================================================


class LLMClient:
    """Unified client for OpenAI-compatible chat endpoints."""

    def __init__(self, config: LLMConfig | None = None):
        if config is None:
            config = LLMConfig.from_settings()

        self.config = config
        self._client = OpenAI(
            base_url=self.config.base_url,
            api_key=self.config.api_key or "not-needed",
            timeout=self.config.timeout,
        )

        logger.info(
            "llm_client_initialized",
            provider=self.config.provider,
            model=self.config.model,
        )

    def _supports_json_object(self) -> bool:
        caps = PROVIDER_DEFAULTS.get(self.config.provider, {})
        return bool(caps.get("supports_json_object", False))

    def chat(
        self,
        messages: list[Message],
        temperature: float | None = None,
        max_tokens: int | None = None,
        json_mode: bool = False,
    ) -> LLMResponse:
        """Send chat completion request.

        Raises:
            LLMConnectionError: If cannot connect to server
            LLMResponseError: If response is empty
        """
        request_kwargs: dict[str, Any] = {
            "model": self.config.model,
            "messages": [m.to_dict() for m in messages],
            "temperature": self.config.temperature if temperature is None else temperature,
            "max_tokens": self.config.max_tokens if max_tokens is None else max_tokens,
        }
        if json_mode and self._supports_json_object():
            request_kwargs["response_format"] = {"type": "json_object"}

        start_time = time.time()
        try:
            response = self._client.chat.completions.create(**request_kwargs)
        except Exception as e:
            error_msg = str(e)
            if "Connection" in error_msg or "connect" in error_msg.lower():
                raise LLMConnectionError(
                    f"Could not connect to {self.config.provider} at {self.config.base_url}: {e}"
                ) from e
            raise LLMError(f"LLM call failed: {e}") from e

        latency_ms = int((time.time() - start_time) * 1000)

        if not response.choices:
            raise LLMResponseError("Empty response from LLM")

        usage = {}
        if response.usage:
            usage = {
                "prompt_tokens": response.usage.prompt_tokens,
                "completion_tokens": response.usage.completion_tokens,
                "total_tokens": response.usage.total_tokens,
            }

        logger.debug(
            "llm_response",
            provider=self.config.provider,
            model=response.model,
            tokens=usage.get("total_tokens", 0),
            latency_ms=latency_ms,
        )

        return LLMResponse(
            content=response.choices[0].message.content or "",
            model=response.model,
            provider=self.config.provider,
            usage=usage,
            latency_ms=latency_ms,
        )

    def _try_parse_json(self, content: str) -> dict[str, Any] | None:
        """Try to parse JSON from content.

        Tries a direct parse, then a ```json fenced block, then the
        outermost {...} span.
        """
        content = _sanitize_for_json(content)

        try:
            return json.loads(content)
        except json.JSONDecodeError:
            pass

        fenced = re.search(r"```(?:json)?\s*([\s\S]*?)```", content)
        if fenced:
            try:
                return json.loads(fenced.group(1).strip())
            except json.JSONDecodeError:
                pass

        start = content.find("{")
        end = content.rfind("}") + 1
        if start >= 0 and end > start:
            try:
                return json.loads(content[start:end])
            except json.JSONDecodeError:
                pass

        return None

    def simple_json(
        self,
        system_prompt: str,
        user_message: str,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> dict[str, Any]:
        """Single-turn chat expecting a JSON object back.

        Raises:
            LLMResponseError: If the reply is not valid JSON
        """
        messages = [
            Message(role="system", content=system_prompt),
            Message(role="user", content=user_message),
        ]
        response = self.chat(
            messages=messages,
            temperature=temperature,
            max_tokens=max_tokens,
            json_mode=True,
        )

        parsed = self._try_parse_json(response.content)
        if parsed is None:
            raise LLMResponseError(
                f"Could not obtain valid JSON: {response.content[:200]}..."
            )
        return parsed

    def is_available(self) -> bool:
        """Check if LLM server is available."""
        try:
            self._client.models.list()
            return True
        except Exception:
            return False


def get_configured_client() -> LLMClient | None:
    """Return an LLM client when the config enables one, else None."""
    settings = load_app_config().llm
    if not settings.enabled:
        return None
    if settings.api_key_env and not settings.get_api_key():
        logger.info("llm_disabled_missing_key", api_key_env=settings.api_key_env)
        return None
    return LLMClient(LLMConfig.from_settings(settings))
