"""Provider-agnostic LLM client: send a prompt, get text or a validated model back."""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from solscout.config import LLMProvider, Settings
from solscout.errors import ConfigError, LLMCallError, LLMResponseParseError, TransportError
from solscout.services.http_client import HttpClient

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)

ANTHROPIC_VERSION = "2023-06-01"


def extract_json(text: str) -> str:
    """Locate the JSON payload inside free-form model text.

    Tried in order: a ```json fence, any fence whose body starts with
    ``{`` or ``[``, the span from the first ``{`` to the last ``}``, and
    finally the text unchanged.
    """
    start = text.find("```json")
    if start != -1:
        rest = text[start + len("```json") :]
        end = rest.find("```")
        if end != -1:
            return rest[:end].strip()

    start = text.find("```")
    if start != -1:
        rest = text[start + 3 :]
        end = rest.find("```")
        if end != -1:
            inner = rest[:end].strip()
            if inner.startswith(("{", "[")):
                return inner

    start = text.find("{")
    end = text.rfind("}")
    if start != -1 and end > start:
        return text[start : end + 1]
    return text


class LLMClient(ABC):
    """Common interface for every text-completion backend."""

    provider: LLMProvider

    def __init__(
        self,
        http: HttpClient,
        *,
        api_key: str,
        model: str,
        base_url: str,
        max_tokens: int = 8192,
        owns_http: bool = False,
    ) -> None:
        self._http = http
        self._owns_http = owns_http
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.max_tokens = max_tokens

    @abstractmethod
    async def complete(self, system_prompt: str, user_message: str) -> str:
        """Send one request and return the model's raw reply text."""

    async def complete_as(self, system_prompt: str, user_message: str, schema: type[T]) -> T:
        """Complete, extract the JSON payload and validate it against ``schema``."""
        text = await self.complete(system_prompt, user_message)
        payload = extract_json(text)
        try:
            return schema.model_validate_json(payload)
        except ValidationError as exc:
            raise LLMResponseParseError(
                f"Could not parse {schema.__name__} from LLM reply: {exc}", text
            ) from exc

    async def _post(self, url: str, payload: dict[str, Any], headers: dict[str, str]) -> dict:
        logger.info("LLM request to %s provider=%s model=%s", url, self.provider.value, self.model)
        try:
            raw = await self._http.post_json_raw(url, json.dumps(payload), headers)
        except TransportError as exc:
            logger.warning("LLM API error: %s", exc)
            raise LLMCallError(str(exc)) from exc
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise LLMCallError(f"Unreadable LLM API response: {exc}") from exc
        if not isinstance(data, dict):
            raise LLMCallError("LLM API response is not a JSON object")
        logger.info("LLM response provider=%s usage=%s", self.provider.value, data.get("usage", {}))
        return data

    async def close(self) -> None:
        if self._owns_http:
            await self._http.close()


class AnthropicClient(LLMClient):
    """Anthropic Messages API."""

    provider = LLMProvider.ANTHROPIC

    async def complete(self, system_prompt: str, user_message: str) -> str:
        payload = {
            "model": self.model,
            "max_tokens": self.max_tokens,
            "system": system_prompt,
            "messages": [{"role": "user", "content": user_message}],
        }
        headers = {"x-api-key": self.api_key, "anthropic-version": ANTHROPIC_VERSION}
        data = await self._post(f"{self.base_url}/v1/messages", payload, headers)

        blocks = data.get("content")
        if not isinstance(blocks, list):
            raise LLMCallError("Anthropic response missing content blocks")
        texts = [
            block["text"]
            for block in blocks
            if isinstance(block, dict) and isinstance(block.get("text"), str)
        ]
        return "\n".join(texts)


class OpenAICompatibleClient(LLMClient):
    """Chat-completions API as served by OpenAI and OpenRouter."""

    def __init__(self, http: HttpClient, *, provider: LLMProvider = LLMProvider.OPENAI, **kwargs: Any) -> None:
        super().__init__(http, **kwargs)
        self.provider = provider

    async def complete(self, system_prompt: str, user_message: str) -> str:
        payload = {
            "model": self.model,
            "max_tokens": self.max_tokens,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_message},
            ],
        }
        headers = {"Authorization": f"Bearer {self.api_key}"}
        data = await self._post(f"{self.base_url}/chat/completions", payload, headers)
        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as exc:
            raise LLMCallError(f"Chat completion response missing message content: {exc}") from exc
        return content or ""


def build_llm_client(settings: Settings, http: HttpClient | None = None) -> LLMClient:
    """Pick the concrete client for the configured provider."""
    api_key = settings.effective_api_key
    if not api_key:
        raise ConfigError(
            f"No API key configured for LLM provider '{settings.llm_provider.value}'. "
            "Set LLM_API_KEY or the provider's own key variable."
        )
    owns_http = http is None
    if http is None:
        http = HttpClient(user_agent=settings.user_agent, timeout=settings.llm_timeout)

    common = {
        "api_key": api_key,
        "model": settings.effective_model,
        "base_url": settings.effective_base_url,
        "max_tokens": settings.llm_max_tokens,
        "owns_http": owns_http,
    }
    if settings.llm_provider is LLMProvider.ANTHROPIC:
        return AnthropicClient(http, **common)
    return OpenAICompatibleClient(http, provider=settings.llm_provider, **common)
