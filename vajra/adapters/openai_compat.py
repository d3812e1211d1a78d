"""
OpenAI-compatible chat-completion adapters.

OpenAI, Groq, DeepSeek, Mistral, Qwen (DashScope compatible mode) and
OpenRouter all accept the same message-array request and answer with a
choice-array-of-message envelope. Only the URL, model list and a few
headers differ.
"""

import logging

from vajra.adapters._http import post_json
from vajra.adapters.base import HostedAdapter
from vajra.adapters.schema import GenerationRequest
from vajra.errors import BackendError

logger = logging.getLogger(__name__)


def extract_choice_text(backend_id: str, data: dict) -> str:
    """Pull choices[0].message.content out of a chat-completion response."""
    try:
        content = data["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError) as e:
        raise BackendError(
            backend_id, f"Malformed response from {backend_id}: missing choices"
        ) from e
    if not isinstance(content, str):
        raise BackendError(
            backend_id, f"Malformed response from {backend_id}: no text content"
        )
    return content


class OpenAICompatibleAdapter(HostedAdapter):
    """Hosted backend speaking the OpenAI chat-completions schema."""

    endpoint_url: str = ""

    def headers(self, api_key: str) -> dict:
        return {
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        }

    def payload(self, request: GenerationRequest) -> dict:
        return {
            "model": request.model_id,
            "messages": [{"role": "user", "content": request.prompt}],
            "temperature": request.temperature,
            "max_tokens": request.max_tokens,
        }

    async def _complete(self, request: GenerationRequest, api_key: str) -> str:
        logger.debug("%s: POST %s model=%s", self.backend_id, self.endpoint_url, request.model_id)
        data = await post_json(
            self.backend_id,
            self.endpoint_url,
            self.payload(request),
            timeout_seconds=request.timeout_seconds,
            headers=self.headers(api_key),
        )
        return extract_choice_text(self.backend_id, data)


class OpenAIAdapter(OpenAICompatibleAdapter):
    backend_id = "openai"
    display_name = "OpenAI"
    endpoint_url = "https://api.openai.com/v1/chat/completions"
    supported_models = (
        "gpt-4o",
        "gpt-4o-mini",
        "gpt-4-turbo",
        "gpt-3.5-turbo",
    )


class GroqAdapter(OpenAICompatibleAdapter):
    backend_id = "groq"
    display_name = "Groq"
    endpoint_url = "https://api.groq.com/openai/v1/chat/completions"
    supported_models = (
        "llama-3.1-8b-instant",
        "llama-3.1-70b-versatile",
        "llama-3.1-405b-reasoning",
        "mixtral-8x7b-32768",
        "gemma2-9b-it",
    )


class DeepSeekAdapter(OpenAICompatibleAdapter):
    backend_id = "deepseek"
    display_name = "DeepSeek"
    endpoint_url = "https://api.deepseek.com/chat/completions"
    supported_models = (
        "deepseek-coder",
        "deepseek-chat",
        "deepseek-reasoner",
    )


class MistralAdapter(OpenAICompatibleAdapter):
    backend_id = "mistral"
    display_name = "Mistral"
    endpoint_url = "https://api.mistral.ai/v1/chat/completions"
    supported_models = (
        "codestral-latest",
        "mistral-large-latest",
        "mistral-small-latest",
    )


class QwenAdapter(OpenAICompatibleAdapter):
    backend_id = "qwen"
    display_name = "Qwen/Alibaba Cloud"
    endpoint_url = "https://dashscope-intl.aliyuncs.com/compatible-mode/v1/chat/completions"
    supported_models = (
        "qwen2.5-coder-7b-instruct",
        "qwen2.5-coder-32b-instruct",
        "qwen-max",
        "qwen-plus",
    )


class OpenRouterAdapter(OpenAICompatibleAdapter):
    backend_id = "openrouter"
    display_name = "OpenRouter"
    endpoint_url = "https://openrouter.ai/api/v1/chat/completions"
    supported_models = (
        "anthropic/claude-3.5-sonnet",
        "openai/gpt-4o",
        "qwen/qwen-2.5-coder-32b-instruct",
        "meta-llama/llama-3.1-70b-instruct",
    )

    def headers(self, api_key: str) -> dict:
        headers = super().headers(api_key)
        headers["X-Title"] = "Vajra"
        return headers
