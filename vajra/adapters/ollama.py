"""
OllamaAdapter - self-hosted backend implementation of BackendAdapter.

Talks to an Ollama server's /api/generate endpoint with stream disabled.
is_configured() is always True: the server may start after we do, so
reachability is only discovered when a send fails.
"""

import logging
from typing import Optional

from vajra.adapters._http import post_json
from vajra.adapters.schema import GenerationRequest
from vajra.config import VajraConfig
from vajra.errors import BackendError

logger = logging.getLogger(__name__)

OLLAMA_BACKEND_ID = "ollama"


class OllamaAdapter:
    """Ollama implementation of the BackendAdapter protocol."""

    backend_id = OLLAMA_BACKEND_ID
    display_name = "Ollama"
    requires_credential = False
    supported_models = (
        "qwen2.5-coder:7b",
        "qwen2.5-coder:1.5b",
        "qwen2.5-coder:14b",
        "qwen2.5-coder:32b",
        "deepseek-coder-v2:16b",
        "deepseek-coder:6.7b",
        "codellama:7b",
        "codellama:13b",
        "starcoder2:7b",
        "llama3.2:3b",
        "llama2:latest",
    )

    def __init__(self, config: VajraConfig):
        self._config = config

    @property
    def endpoint(self) -> str:
        return self._config.ollama_endpoint.rstrip("/")

    @property
    def default_model(self) -> str:
        return self.supported_models[0]

    def is_configured(self) -> bool:
        return True

    async def send(
        self,
        prompt: str,
        model: Optional[str] = None,
        *,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> str:
        request = GenerationRequest(
            backend_id=self.backend_id,
            model_id=model or self.default_model,
            prompt=prompt,
            temperature=self._config.temperature if temperature is None else temperature,
            max_tokens=self._config.max_tokens if max_tokens is None else max_tokens,
            timeout_seconds=self._config.request_timeout_seconds,
        )
        payload = {
            "model": request.model_id,
            "prompt": request.prompt,
            "stream": False,
            "options": {
                "temperature": request.temperature,
                "num_predict": request.max_tokens,
            },
        }
        logger.debug("ollama: generate model=%s at %s", request.model_id, self.endpoint)
        data = await post_json(
            self.backend_id,
            f"{self.endpoint}/api/generate",
            payload,
            timeout_seconds=request.timeout_seconds,
        )

        text = data.get("response") if isinstance(data, dict) else None
        if not isinstance(text, str):
            raise BackendError(
                self.backend_id, "Malformed response from ollama: missing 'response'"
            )
        return text

    def __repr__(self) -> str:
        return f"OllamaAdapter(endpoint={self.endpoint!r})"
