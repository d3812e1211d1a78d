"""
HuggingFace Inference API adapter.

Uses huggingface_hub.AsyncInferenceClient text generation, which returns
the generated text as a flat string.

Key differences from the chat adapters:
- No message array: the prompt goes in as raw text
- Token from HF_TOKEN (Spaces-compatible)
- A fresh client per call, so a changed token is picked up immediately
"""

import logging

from huggingface_hub import AsyncInferenceClient
from huggingface_hub.errors import HfHubHTTPError, InferenceTimeoutError

from vajra.adapters.base import HostedAdapter
from vajra.adapters.schema import GenerationRequest
from vajra.errors import BackendError

logger = logging.getLogger(__name__)


class HuggingFaceAdapter(HostedAdapter):
    backend_id = "huggingface"
    display_name = "HuggingFace"
    supported_models = (
        "Qwen/Qwen2.5-Coder-32B-Instruct",
        "bigcode/starcoder2-15b",
        "mistralai/Mistral-7B-Instruct-v0.3",
        "meta-llama/Llama-3.2-3B-Instruct",
    )

    async def _complete(self, request: GenerationRequest, api_key: str) -> str:
        client = AsyncInferenceClient(token=api_key, timeout=request.timeout_seconds)

        # text_generation rejects a zero temperature
        kwargs = {
            "model": request.model_id,
            "max_new_tokens": request.max_tokens,
        }
        if request.temperature > 0:
            kwargs["temperature"] = request.temperature

        try:
            result = await client.text_generation(request.prompt, **kwargs)
        except InferenceTimeoutError as e:
            raise BackendError(
                self.backend_id, f"HuggingFace timeout for {request.model_id}: {e}"
            ) from e
        except HfHubHTTPError as e:
            status = getattr(getattr(e, "response", None), "status_code", None)
            raise BackendError(self.backend_id, str(e), status_code=status) from e
        except Exception as e:
            # Transport errors surface from whichever HTTP client huggingface_hub uses
            raise BackendError(self.backend_id, str(e) or type(e).__name__) from e

        if not isinstance(result, str):
            raise BackendError(
                self.backend_id, "Malformed response from huggingface: no generated text"
            )
        return result
