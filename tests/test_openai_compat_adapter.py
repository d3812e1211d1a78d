"""Tests for the OpenAI-compatible adapters: request shape, extraction, errors."""

import json

import httpx
import pytest
import respx

from vajra.adapters.openai_compat import (
    DeepSeekAdapter,
    GroqAdapter,
    MistralAdapter,
    OpenAIAdapter,
    OpenRouterAdapter,
    QwenAdapter,
)
from vajra.errors import BackendError, CredentialMissingError

OPENAI_URL = "https://api.openai.com/v1/chat/completions"


@pytest.fixture
def adapter(keyed_config):
    return OpenAIAdapter(keyed_config)


# ─────────────────────────────────────────────────────────────────────
# Protocol compliance
# ─────────────────────────────────────────────────────────────────────


class TestProtocolCompliance:
    def test_configured_with_key(self, adapter):
        assert adapter.is_configured() is True

    def test_not_configured_without_key(self, base_config):
        assert OpenAIAdapter(base_config).is_configured() is False

    def test_default_model_is_first_supported(self, adapter):
        assert adapter.default_model == adapter.supported_models[0]

    @pytest.mark.parametrize("adapter_cls", [
        OpenAIAdapter, GroqAdapter, DeepSeekAdapter,
        MistralAdapter, QwenAdapter, OpenRouterAdapter,
    ])
    def test_every_variant_has_identity(self, adapter_cls, base_config):
        instance = adapter_cls(base_config)
        assert instance.backend_id
        assert instance.display_name
        assert instance.endpoint_url.startswith("https://")
        assert instance.requires_credential is True

    @pytest.mark.asyncio
    async def test_missing_key_fails_before_network(self, base_config):
        with respx.mock(assert_all_called=False) as router:
            route = router.post(OPENAI_URL)
            with pytest.raises(CredentialMissingError, match="OpenAI API key not configured"):
                await OpenAIAdapter(base_config).send("hi")
            assert not route.called


# ─────────────────────────────────────────────────────────────────────
# Request / response
# ─────────────────────────────────────────────────────────────────────


class TestSend:
    @pytest.mark.asyncio
    @respx.mock
    async def test_returns_first_choice_text(self, adapter, mock_chat_completion):
        respx.post(OPENAI_URL).mock(
            return_value=httpx.Response(200, json=mock_chat_completion)
        )

        text = await adapter.send("Write add()", "gpt-4o-mini")

        assert text.startswith("def add")

    @pytest.mark.asyncio
    @respx.mock
    async def test_sends_single_turn_with_defaults(self, adapter, mock_chat_completion):
        captured = {}

        def capture(request):
            captured["body"] = json.loads(request.content)
            captured["auth"] = request.headers["Authorization"]
            return httpx.Response(200, json=mock_chat_completion)

        respx.post(OPENAI_URL).mock(side_effect=capture)

        await adapter.send("Hello")

        body = captured["body"]
        assert body["model"] == "gpt-4o"
        assert body["messages"] == [{"role": "user", "content": "Hello"}]
        assert body["temperature"] == 0.7
        assert body["max_tokens"] == 2048
        assert captured["auth"] == "Bearer test-openai-key"

    @pytest.mark.asyncio
    @respx.mock
    async def test_overrides_temperature_and_max_tokens(self, adapter, mock_chat_completion):
        route = respx.post(OPENAI_URL).mock(
            return_value=httpx.Response(200, json=mock_chat_completion)
        )

        await adapter.send("Hello", temperature=0.0, max_tokens=64)

        body = json.loads(route.calls.last.request.content)
        assert body["temperature"] == 0.0
        assert body["max_tokens"] == 64

    @pytest.mark.asyncio
    @respx.mock
    async def test_groq_uses_its_own_endpoint(self, keyed_config, mock_chat_completion):
        route = respx.post("https://api.groq.com/openai/v1/chat/completions").mock(
            return_value=httpx.Response(200, json=mock_chat_completion)
        )

        await GroqAdapter(keyed_config).send("Hello")

        assert route.called
        assert route.calls.last.request.headers["Authorization"] == "Bearer test-groq-key"

    @pytest.mark.asyncio
    @respx.mock
    async def test_openrouter_adds_title_header(self, keyed_config, mock_chat_completion):
        route = respx.post("https://openrouter.ai/api/v1/chat/completions").mock(
            return_value=httpx.Response(200, json=mock_chat_completion)
        )

        await OpenRouterAdapter(keyed_config).send("Hello")

        assert route.calls.last.request.headers["X-Title"] == "Vajra"


# ─────────────────────────────────────────────────────────────────────
# Error handling
# ─────────────────────────────────────────────────────────────────────


class TestErrorHandling:
    @pytest.mark.asyncio
    @respx.mock
    async def test_error_envelope_message(self, adapter):
        respx.post(OPENAI_URL).mock(
            return_value=httpx.Response(
                401, json={"error": {"message": "Incorrect API key provided"}}
            )
        )

        with pytest.raises(BackendError, match="Incorrect API key provided") as exc_info:
            await adapter.send("Hello")

        assert exc_info.value.backend_id == "openai"
        assert exc_info.value.status_code == 401

    @pytest.mark.asyncio
    @respx.mock
    async def test_non_json_error_body(self, adapter):
        respx.post(OPENAI_URL).mock(
            return_value=httpx.Response(502, text="Bad Gateway")
        )

        with pytest.raises(BackendError, match="HTTP 502: Bad Gateway"):
            await adapter.send("Hello")

    @pytest.mark.asyncio
    @respx.mock
    async def test_transport_error_text(self, adapter):
        respx.post(OPENAI_URL).mock(side_effect=httpx.ConnectError("Connection refused"))

        with pytest.raises(BackendError, match="Connection refused"):
            await adapter.send("Hello")

    @pytest.mark.asyncio
    @respx.mock
    async def test_timeout(self, adapter):
        respx.post(OPENAI_URL).mock(side_effect=httpx.ReadTimeout("read timed out"))

        with pytest.raises(BackendError, match="timed out"):
            await adapter.send("Hello")

    @pytest.mark.asyncio
    @respx.mock
    async def test_malformed_body(self, adapter):
        respx.post(OPENAI_URL).mock(
            return_value=httpx.Response(200, json={"choices": []})
        )

        with pytest.raises(BackendError, match="Malformed response"):
            await adapter.send("Hello")

    @pytest.mark.asyncio
    @respx.mock
    async def test_no_retry_on_failure(self, adapter):
        route = respx.post(OPENAI_URL).mock(
            return_value=httpx.Response(503, json={"error": "overloaded"})
        )

        with pytest.raises(BackendError, match="overloaded"):
            await adapter.send("Hello")

        assert route.call_count == 1
