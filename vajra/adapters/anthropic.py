"""
AnthropicAdapter - Messages API implementation of BackendAdapter.

The response carries a content-array-of-block; the first text block is the
completion.
"""

import logging

from vajra.adapters._http import post_json
from vajra.adapters.base import HostedAdapter
from vajra.adapters.schema import GenerationRequest
from vajra.errors import BackendError

logger = logging.getLogger(__name__)

ANTHROPIC_MESSAGES_URL = "https://api.anthropic.com/v1/messages"
ANTHROPIC_VERSION = "2023-06-01"


class AnthropicAdapter(HostedAdapter):
    backend_id = "anthropic"
    display_name = "Anthropic"
    supported_models = (
        "claude-3-5-sonnet-20241022",
        "claude-3-5-haiku-20241022",
        "claude-3-opus-20240229",
    )

    async def _complete(self, request: GenerationRequest, api_key: str) -> str:
        payload = {
            "model": request.model_id,
            "max_tokens": request.max_tokens,
            "temperature": request.temperature,
            "messages": [{"role": "user", "content": request.prompt}],
        }
        headers = {
            "x-api-key": api_key,
            "anthropic-version": ANTHROPIC_VERSION,
            "Content-Type": "application/json",
        }
        data = await post_json(
            self.backend_id,
            ANTHROPIC_MESSAGES_URL,
            payload,
            timeout_seconds=request.timeout_seconds,
            headers=headers,
        )

        blocks = data.get("content") if isinstance(data, dict) else None
        if isinstance(blocks, list):
            for block in blocks:
                if isinstance(block, dict) and block.get("type") == "text":
                    return block.get("text", "")
        raise BackendError(
            self.backend_id, "Malformed response from anthropic: no text block"
        )
