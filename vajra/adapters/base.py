"""
BackendAdapter Protocol - defines the contract for text-generation backends.

This is the WHAT (interface), not the HOW (implementation).
HostedAdapter carries the credential handling shared by every hosted API;
OllamaAdapter implements the contract directly.
"""

from typing import Optional, Protocol, runtime_checkable

from vajra.adapters.schema import GenerationRequest
from vajra.config import VajraConfig
from vajra.errors import CredentialMissingError


@runtime_checkable
class BackendAdapter(Protocol):
    """
    Contract for text-generation backends.

    Implementations must provide:
    - Identity (backend_id, display_name, supported_models)
    - Readiness check (is_configured)
    - Single-turn generation (send)
    """

    backend_id: str
    display_name: str
    supported_models: tuple[str, ...]
    requires_credential: bool

    @property
    def default_model(self) -> str:
        ...

    def is_configured(self) -> bool:
        """
        True iff the backend can be called without a setup step.

        Credential-bearing backends: a non-empty credential is present.
        Self-hosted backend: always True (reachability is checked at send).
        """
        ...

    async def send(
        self,
        prompt: str,
        model: Optional[str] = None,
        *,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> str:
        """
        Send one prompt and return the best-ranked completion text.

        Raises:
            BackendError on transport error, non-2xx, or malformed body.
            No retries are performed here.
        """
        ...


class HostedAdapter:
    """
    Base for credential-bearing hosted backends.

    Subclasses set the class attributes and implement _complete(), which
    receives a fully-populated GenerationRequest and the credential.
    """

    backend_id: str = ""
    display_name: str = ""
    supported_models: tuple[str, ...] = ()
    requires_credential: bool = True

    def __init__(self, config: VajraConfig):
        self._config = config

    @property
    def default_model(self) -> str:
        return self.supported_models[0]

    def is_configured(self) -> bool:
        return self._config.get_credential(self.backend_id) is not None

    def build_request(
        self,
        prompt: str,
        model: Optional[str] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> GenerationRequest:
        return GenerationRequest(
            backend_id=self.backend_id,
            model_id=model or self.default_model,
            prompt=prompt,
            temperature=self._config.temperature if temperature is None else temperature,
            max_tokens=self._config.max_tokens if max_tokens is None else max_tokens,
            timeout_seconds=self._config.request_timeout_seconds,
        )

    async def send(
        self,
        prompt: str,
        model: Optional[str] = None,
        *,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> str:
        api_key = self._config.get_credential(self.backend_id)
        if api_key is None:
            raise CredentialMissingError(self.backend_id, self.display_name)

        request = self.build_request(prompt, model, temperature, max_tokens)
        return await self._complete(request, api_key)

    async def _complete(self, request: GenerationRequest, api_key: str) -> str:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}(backend_id={self.backend_id!r})"
