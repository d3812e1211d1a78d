"""
GeminiAdapter - Google Generative Language API implementation.

Request is a contents/parts array; the answer lives in
candidates[0].content.parts[*].text.
"""

import logging

from vajra.adapters._http import post_json
from vajra.adapters.base import HostedAdapter
from vajra.adapters.schema import GenerationRequest
from vajra.errors import BackendError

logger = logging.getLogger(__name__)

GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta/models"


class GeminiAdapter(HostedAdapter):
    backend_id = "gemini"
    display_name = "Google Gemini"
    supported_models = (
        "gemini-1.5-pro",
        "gemini-1.5-flash",
        "gemini-2.0-flash",
    )

    async def _complete(self, request: GenerationRequest, api_key: str) -> str:
        url = f"{GEMINI_BASE_URL}/{request.model_id}:generateContent"
        payload = {
            "contents": [{"role": "user", "parts": [{"text": request.prompt}]}],
            "generationConfig": {
                "temperature": request.temperature,
                "maxOutputTokens": request.max_tokens,
            },
        }
        headers = {
            "x-goog-api-key": api_key,
            "Content-Type": "application/json",
        }
        data = await post_json(
            self.backend_id,
            url,
            payload,
            timeout_seconds=request.timeout_seconds,
            headers=headers,
        )

        try:
            parts = data["candidates"][0]["content"]["parts"]
        except (KeyError, IndexError, TypeError) as e:
            raise BackendError(
                self.backend_id, "Malformed response from gemini: missing candidates"
            ) from e

        texts = [p["text"] for p in parts if isinstance(p, dict) and "text" in p]
        if not texts:
            raise BackendError(
                self.backend_id, "Malformed response from gemini: no text parts"
            )
        return "".join(texts)
