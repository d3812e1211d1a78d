"""
Exception types shared across vajra.

Adapters raise BackendError with the backend's own message. The failure
classifier is the only place that turns these into a FailureKind.
"""

from typing import Optional


class VajraError(Exception):
    """Base class for vajra errors."""
    pass


class BackendError(VajraError):
    """A backend call failed (transport, non-2xx, or malformed body)."""

    def __init__(
        self,
        backend_id: str,
        message: str,
        status_code: Optional[int] = None,
    ):
        super().__init__(message)
        self.backend_id = backend_id
        self.message = message
        self.status_code = status_code

    def __str__(self) -> str:
        return self.message


class CredentialMissingError(BackendError):
    """Raised before any network call when a backend has no credential."""

    def __init__(self, backend_id: str, display_name: Optional[str] = None):
        name = display_name or backend_id
        super().__init__(backend_id, f"{name} API key not configured")


class NoModelAvailable(VajraError):
    """The self-hosted backend has no installed models to resolve against."""

    def __init__(self, requested_model: Optional[str] = None):
        self.requested_model = requested_model
        super().__init__(
            "No Ollama models installed. Please install a model first."
        )


class UnknownBackendError(VajraError, ValueError):
    """Lookup of a backend id that was never registered."""

    def __init__(self, backend_id: str, known: list[str]):
        self.backend_id = backend_id
        super().__init__(
            f"Unknown backend '{backend_id}'. Registered: {', '.join(known)}"
        )
