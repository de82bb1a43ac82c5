"""Tests for the LLM gateway: JSON extraction, provider requests, error mapping."""

import json

import httpx
import pytest
from pydantic import BaseModel
from solscout.config import LLMProvider, Settings
from solscout.errors import ConfigError, LLMCallError, LLMResponseParseError
from solscout.services.http_client import HttpClient
from solscout.services.llm_client import (
    AnthropicClient,
    LLMClient,
    OpenAICompatibleClient,
    build_llm_client,
    extract_json,
)


class Payload(BaseModel):
    a: int


class ScriptedClient(LLMClient):
    provider = LLMProvider.ANTHROPIC

    def __init__(self, reply: str):
        super().__init__(None, api_key="k", model="m", base_url="http://llm.test")
        self.reply = reply

    async def complete(self, system_prompt, user_message):
        return self.reply


# ---------- extract_json ----------


def test_extract_json_from_tagged_fence():
    assert extract_json('Result:\n```json\n{"a":1}\n```\n') == '{"a":1}'


def test_extract_json_from_surrounding_prose():
    assert extract_json('Sure, here: {"a":1} thanks') == '{"a":1}'


def test_extract_json_plain_object_unchanged():
    assert extract_json('{"a":1}') == '{"a":1}'


def test_extract_json_untagged_fence_with_array():
    assert extract_json("Here:\n```\n[1, 2]\n```") == "[1, 2]"


def test_extract_json_untagged_fence_with_prose_falls_back_to_braces():
    text = 'Note:\n```\nnot json\n```\nThen {"a": 2} end'
    assert extract_json(text) == '{"a": 2}'


def test_extract_json_spans_first_to_last_brace():
    text = 'x {"a": {"b": 1}} y'
    assert extract_json(text) == '{"a": {"b": 1}}'


def test_extract_json_without_braces_returns_text():
    assert extract_json("no json here") == "no json here"


def test_extract_json_reversed_braces_returns_text():
    assert extract_json("} then {") == "} then {"


# ---------- complete_as ----------


@pytest.mark.asyncio
async def test_complete_as_validates_schema():
    client = ScriptedClient('Sure!\n```json\n{"a": 5}\n```')
    result = await client.complete_as("sys", "user", Payload)
    assert result == Payload(a=5)


@pytest.mark.asyncio
async def test_complete_as_parse_error_keeps_raw_text():
    client = ScriptedClient("I could not find any narratives.")
    with pytest.raises(LLMResponseParseError) as exc_info:
        await client.complete_as("sys", "user", Payload)
    assert exc_info.value.raw_text == "I could not find any narratives."


@pytest.mark.asyncio
async def test_complete_as_schema_mismatch_is_parse_error():
    client = ScriptedClient('{"b": 1}')
    with pytest.raises(LLMResponseParseError):
        await client.complete_as("sys", "user", Payload)


# ---------- providers ----------


def _http(handler) -> HttpClient:
    return HttpClient(transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_anthropic_request_shape_and_text_join():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["headers"] = request.headers
        seen["body"] = json.loads(request.content)
        return httpx.Response(
            200,
            json={
                "content": [
                    {"type": "text", "text": "first"},
                    {"type": "tool_use", "id": "x"},
                    {"type": "text", "text": "second"},
                ],
                "usage": {"input_tokens": 3},
            },
        )

    http = _http(handler)
    client = AnthropicClient(
        http, api_key="secret", model="claude-test", base_url="https://api.anthropic.com/", max_tokens=100
    )
    text = await client.complete("system prompt", "hello")
    await http.close()

    assert text == "first\nsecond"
    assert seen["url"] == "https://api.anthropic.com/v1/messages"
    assert seen["headers"]["x-api-key"] == "secret"
    assert seen["headers"]["anthropic-version"] == "2023-06-01"
    assert seen["body"] == {
        "model": "claude-test",
        "max_tokens": 100,
        "system": "system prompt",
        "messages": [{"role": "user", "content": "hello"}],
    }


@pytest.mark.asyncio
async def test_openai_compatible_request_shape():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["auth"] = request.headers["authorization"]
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"choices": [{"message": {"content": '{"a": 1}'}}]})

    http = _http(handler)
    client = OpenAICompatibleClient(
        http,
        provider=LLMProvider.OPENROUTER,
        api_key="or-key",
        model="some/model",
        base_url="https://openrouter.ai/api/v1",
    )
    result = await client.complete_as("sys", "usr", Payload)
    await http.close()

    assert result.a == 1
    assert seen["url"] == "https://openrouter.ai/api/v1/chat/completions"
    assert seen["auth"] == "Bearer or-key"
    assert seen["body"]["messages"] == [
        {"role": "system", "content": "sys"},
        {"role": "user", "content": "usr"},
    ]


@pytest.mark.asyncio
async def test_api_error_becomes_llm_call_error_with_provider_message():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(429, json={"error": {"message": "rate limited"}})

    http = _http(handler)
    client = AnthropicClient(http, api_key="k", model="m", base_url="https://api.anthropic.com")
    with pytest.raises(LLMCallError, match="rate limited"):
        await client.complete("s", "u")
    await http.close()


@pytest.mark.asyncio
async def test_malformed_chat_envelope_is_llm_call_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"choices": []})

    http = _http(handler)
    client = OpenAICompatibleClient(http, api_key="k", model="m", base_url="https://api.openai.com/v1")
    with pytest.raises(LLMCallError):
        await client.complete("s", "u")
    await http.close()


# ---------- build_llm_client ----------


def _settings(**kwargs) -> Settings:
    return Settings.model_validate(kwargs)


@pytest.mark.asyncio
async def test_build_llm_client_selects_anthropic():
    client = build_llm_client(_settings(LLM_PROVIDER="anthropic", ANTHROPIC_API_KEY="a-key"))
    assert isinstance(client, AnthropicClient)
    assert client.api_key == "a-key"
    assert client.base_url == "https://api.anthropic.com"
    await client.close()


@pytest.mark.asyncio
async def test_build_llm_client_selects_openrouter_with_explicit_key_and_model():
    client = build_llm_client(
        _settings(LLM_PROVIDER="openrouter", LLM_API_KEY="explicit", LLM_MODEL="x/y")
    )
    assert isinstance(client, OpenAICompatibleClient)
    assert client.provider is LLMProvider.OPENROUTER
    assert client.api_key == "explicit"
    assert client.model == "x/y"
    await client.close()


def test_build_llm_client_without_key_is_config_error():
    settings = _settings(
        LLM_PROVIDER="openai", LLM_API_KEY="", OPENAI_API_KEY="", ANTHROPIC_API_KEY="k"
    )
    with pytest.raises(ConfigError):
        build_llm_client(settings)
