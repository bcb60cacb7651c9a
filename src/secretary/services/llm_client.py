"""Provider-agnostic async LLM client with fallback and usage tracking."""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

import httpx

logger = logging.getLogger(__name__)


class LLMProvider(str, Enum):
    """Supported LLM providers."""

    GEMINI = "gemini"
    OPENAI = "openai"
    ANTHROPIC = "anthropic"


@dataclass
class ChatTurn:
    """One prior message in a conversation. ``role`` is "user" or "model"."""

    role: str
    text: str


@dataclass
class LLMResponse:
    """Standardized response from any LLM provider."""

    text: str
    provider: LLMProvider
    model: str
    tokens_input: int = 0
    tokens_output: int = 0
    latency_ms: int = 0
    cost_usd: float = 0.0
    raw_response: dict[str, Any] = field(default_factory=dict)

    @property
    def total_tokens(self) -> int:
        return self.tokens_input + self.tokens_output


@dataclass
class LLMUsageStats:
    """Usage statistics for a provider."""

    total_requests: int = 0
    total_tokens_input: int = 0
    total_tokens_output: int = 0
    total_cost_usd: float = 0.0
    total_latency_ms: int = 0
    errors: int = 0
    last_request_at: datetime | None = None

    @property
    def avg_latency_ms(self) -> float:
        if self.total_requests == 0:
            return 0.0
        return self.total_latency_ms / self.total_requests


# Cost per 1M tokens (input/output)
PROVIDER_COSTS: dict[str, tuple[float, float]] = {
    "gemini-1.5-flash": (0.075, 0.30),
    "gemini-2.0-flash": (0.10, 0.40),
    "gemini-2.5-flash": (0.15, 0.60),
    "gpt-4o": (2.50, 10.00),
    "gpt-4o-mini": (0.15, 0.60),
    "claude-3-5-haiku-20241022": (0.80, 4.00),
    "claude-sonnet-4-5-20250514": (3.00, 15.00),
}


def estimate_cost(model: str, tokens_input: int, tokens_output: int) -> float:
    """Estimate cost in USD for a request."""
    if model not in PROVIDER_COSTS:
        return (tokens_input * 1.0 + tokens_output * 3.0) / 1_000_000
    input_cost, output_cost = PROVIDER_COSTS[model]
    return (tokens_input * input_cost + tokens_output * output_cost) / 1_000_000


class BaseLLMProvider(ABC):
    """Abstract base class for LLM providers."""

    provider: LLMProvider
    default_model: str

    def __init__(
        self,
        api_key: str,
        model: str | None = None,
        client: httpx.AsyncClient | None = None,
        timeout: float = 30.0,
    ) -> None:
        self.api_key = api_key
        self.model = model or self.default_model
        self.timeout = timeout
        if client is None:
            self._client = httpx.AsyncClient(timeout=timeout)
            self._owns_client = True
        else:
            self._client = client
            self._owns_client = False

    async def close(self) -> None:
        """Close the HTTP client if we own it."""
        if self._owns_client:
            await self._client.aclose()

    @abstractmethod
    async def complete(
        self,
        prompt: str,
        *,
        history: list[ChatTurn] | None = None,
        system_prompt: str | None = None,
        temperature: float = 0.7,
        max_tokens: int = 1024,
    ) -> LLMResponse:
        """Send a completion request and return standardized response."""
        ...

    def _estimate_tokens(self, text: str) -> int:
        """Rough token estimate (4 chars per token)."""
        return max(1, len(text) // 4)

    def _response(
        self, text: str, prompt: str, usage: tuple[int | None, int | None], start: float, data: dict
    ) -> LLMResponse:
        tokens_input = usage[0] if usage[0] is not None else self._estimate_tokens(prompt)
        tokens_output = usage[1] if usage[1] is not None else self._estimate_tokens(text)
        return LLMResponse(
            text=text,
            provider=self.provider,
            model=self.model,
            tokens_input=tokens_input,
            tokens_output=tokens_output,
            latency_ms=int((time.time() - start) * 1000),
            cost_usd=estimate_cost(self.model, tokens_input, tokens_output),
            raw_response=data,
        )


class GeminiProvider(BaseLLMProvider):
    """Google Gemini API provider."""

    provider = LLMProvider.GEMINI
    default_model = "gemini-1.5-flash"

    async def complete(
        self,
        prompt: str,
        *,
        history: list[ChatTurn] | None = None,
        system_prompt: str | None = None,
        temperature: float = 0.7,
        max_tokens: int = 1024,
    ) -> LLMResponse:
        start_time = time.time()
        endpoint = (
            f"https://generativelanguage.googleapis.com/v1beta/models/{self.model}:generateContent"
        )

        contents = []
        if system_prompt:
            contents.append({"role": "user", "parts": [{"text": system_prompt}]})
            contents.append(
                {"role": "model", "parts": [{"text": "Understood. Following instructions."}]}
            )
        for turn in history or []:
            contents.append({"role": turn.role, "parts": [{"text": turn.text}]})
        contents.append({"role": "user", "parts": [{"text": prompt}]})

        response = await self._client.post(
            endpoint,
            params={"key": self.api_key},
            json={
                "contents": contents,
                "generationConfig": {"temperature": temperature, "maxOutputTokens": max_tokens},
            },
        )
        response.raise_for_status()
        data = response.json()

        text = ""
        candidates = data.get("candidates", [])
        if candidates:
            for part in candidates[0].get("content", {}).get("parts", []):
                if "text" in part:
                    text = part["text"]
                    break

        usage = data.get("usageMetadata", {})
        return self._response(
            text,
            prompt,
            (usage.get("promptTokenCount"), usage.get("candidatesTokenCount")),
            start_time,
            data,
        )


class OpenAIProvider(BaseLLMProvider):
    """OpenAI chat completions provider."""

    provider = LLMProvider.OPENAI
    default_model = "gpt-4o-mini"

    async def complete(
        self,
        prompt: str,
        *,
        history: list[ChatTurn] | None = None,
        system_prompt: str | None = None,
        temperature: float = 0.7,
        max_tokens: int = 1024,
    ) -> LLMResponse:
        start_time = time.time()

        messages = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        for turn in history or []:
            messages.append({"role": _openai_role(turn.role), "content": turn.text})
        messages.append({"role": "user", "content": prompt})

        response = await self._client.post(
            "https://api.openai.com/v1/chat/completions",
            headers={"Authorization": f"Bearer {self.api_key}"},
            json={
                "model": self.model,
                "messages": messages,
                "temperature": temperature,
                "max_tokens": max_tokens,
            },
        )
        response.raise_for_status()
        data = response.json()

        text = ""
        choices = data.get("choices", [])
        if choices:
            text = choices[0].get("message", {}).get("content", "")

        usage = data.get("usage", {})
        return self._response(
            text,
            prompt,
            (usage.get("prompt_tokens"), usage.get("completion_tokens")),
            start_time,
            data,
        )


class AnthropicProvider(BaseLLMProvider):
    """Anthropic Claude messages provider."""

    provider = LLMProvider.ANTHROPIC
    default_model = "claude-3-5-haiku-20241022"

    async def complete(
        self,
        prompt: str,
        *,
        history: list[ChatTurn] | None = None,
        system_prompt: str | None = None,
        temperature: float = 0.7,
        max_tokens: int = 1024,
    ) -> LLMResponse:
        start_time = time.time()

        messages = [
            {"role": _openai_role(turn.role), "content": turn.text} for turn in history or []
        ]
        messages.append({"role": "user", "content": prompt})

        request_body: dict[str, Any] = {
            "model": self.model,
            "messages": messages,
            "max_tokens": max_tokens,
            "temperature": temperature,
        }
        if system_prompt:
            request_body["system"] = system_prompt

        response = await self._client.post(
            "https://api.anthropic.com/v1/messages",
            headers={
                "x-api-key": self.api_key,
                "anthropic-version": "2023-06-01",
                "content-type": "application/json",
            },
            json=request_body,
        )
        response.raise_for_status()
        data = response.json()

        text = ""
        for block in data.get("content", []):
            if block.get("type") == "text":
                text = block.get("text", "")
                break

        usage = data.get("usage", {})
        return self._response(
            text,
            prompt,
            (usage.get("input_tokens"), usage.get("output_tokens")),
            start_time,
            data,
        )


def _openai_role(role: str) -> str:
    return "assistant" if role == "model" else role


PRIORITY_ORDER = [LLMProvider.GEMINI, LLMProvider.OPENAI, LLMProvider.ANTHROPIC]


class LLMClient:
    """Provider-agnostic LLM client with fallback and usage stats."""

    def __init__(
        self,
        *,
        gemini_api_key: str = "",
        gemini_model: str | None = None,
        openai_api_key: str = "",
        anthropic_api_key: str = "",
        primary_provider: LLMProvider | None = None,
        timeout: float = 30.0,
        providers: dict[LLMProvider, BaseLLMProvider] | None = None,
    ) -> None:
        self._stats: dict[LLMProvider, LLMUsageStats] = defaultdict(LLMUsageStats)
        self._providers: dict[LLMProvider, BaseLLMProvider] = dict(providers or {})

        if gemini_api_key:
            self._providers[LLMProvider.GEMINI] = GeminiProvider(
                api_key=gemini_api_key, model=gemini_model, timeout=timeout
            )
        if openai_api_key:
            self._providers[LLMProvider.OPENAI] = OpenAIProvider(
                api_key=openai_api_key, timeout=timeout
            )
        if anthropic_api_key:
            self._providers[LLMProvider.ANTHROPIC] = AnthropicProvider(
                api_key=anthropic_api_key, timeout=timeout
            )

        self._primary: LLMProvider | None = None
        if primary_provider and primary_provider in self._providers:
            self._primary = primary_provider
        else:
            for p in PRIORITY_ORDER:
                if p in self._providers:
                    self._primary = p
                    break

    @property
    def available_providers(self) -> list[LLMProvider]:
        return list(self._providers.keys())

    @property
    def primary_provider(self) -> LLMProvider | None:
        return self._primary

    @property
    def is_available(self) -> bool:
        return len(self._providers) > 0

    def _get_provider_order(self) -> list[LLMProvider]:
        fallbacks = [p for p in PRIORITY_ORDER if p in self._providers and p != self._primary]
        if self._primary is None:
            return fallbacks
        return [self._primary] + fallbacks

    async def complete(
        self,
        prompt: str,
        *,
        history: list[ChatTurn] | None = None,
        system_prompt: str | None = None,
        temperature: float = 0.7,
        max_tokens: int = 1024,
    ) -> LLMResponse:
        """Send completion request with automatic fallback.

        Args:
            prompt: The new user message
            history: Prior turns, oldest first
            system_prompt: Optional system instructions
            temperature: Sampling temperature (0-1)
            max_tokens: Maximum response tokens

        Returns:
            LLMResponse with text and metadata

        Raises:
            RuntimeError: If no providers are configured or all fail
        """
        if not self.is_available:
            raise RuntimeError("No LLM providers configured")

        errors: list[tuple[LLMProvider, Exception]] = []

        for p in self._get_provider_order():
            try:
                response = await self._providers[p].complete(
                    prompt,
                    history=history,
                    system_prompt=system_prompt,
                    temperature=temperature,
                    max_tokens=max_tokens,
                )
            except Exception as e:
                logger.warning("Provider %s failed: %s", p.value, e)
                errors.append((p, e))
                self._stats[p].errors += 1
                continue

            stats = self._stats[p]
            stats.total_requests += 1
            stats.total_tokens_input += response.tokens_input
            stats.total_tokens_output += response.tokens_output
            stats.total_cost_usd += response.cost_usd
            stats.total_latency_ms += response.latency_ms
            stats.last_request_at = datetime.now()
            return response

        error_summary = "; ".join(f"{p.value}: {e}" for p, e in errors)
        raise RuntimeError(f"All LLM providers failed: {error_summary}")

    def get_stats(self, provider: LLMProvider | None = None) -> dict[str, Any]:
        if provider:
            s = self._stats[provider]
            return {
                "provider": provider.value,
                "requests": s.total_requests,
                "tokens_input": s.total_tokens_input,
                "tokens_output": s.total_tokens_output,
                "cost_usd": round(s.total_cost_usd, 4),
                "avg_latency_ms": round(s.avg_latency_ms, 1),
                "errors": s.errors,
            }

        return {"providers": {p.value: self.get_stats(p) for p in self._providers}}

    async def close(self) -> None:
        for provider in self._providers.values():
            await provider.close()


_client: LLMClient | None = None


def get_llm_client() -> LLMClient:
    """Get or create the singleton LLM client from settings."""
    global _client
    if _client is None:
        from secretary.config import settings

        _client = LLMClient(
            gemini_api_key=settings.gemini_api_key,
            gemini_model=settings.gemini_model,
            openai_api_key=settings.openai_api_key,
            anthropic_api_key=settings.anthropic_api_key,
            timeout=settings.llm_timeout,
        )
    return _client


def is_llm_available() -> bool:
    return get_llm_client().is_available
