"""
Failure classifier - maps raw errors onto a small taxonomy with a remedy.

Best-effort string matching on purpose: backend error payloads are not a
stable contract, so there are no structured codes to rely on. The
classifier only selects a remedy; the caller renders and performs it.
"""

import logging
from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel

from vajra.adapters.ollama import OLLAMA_BACKEND_ID
from vajra.errors import BackendError, CredentialMissingError, NoModelAvailable
from vajra.resolver import OLLAMA_INSTALL_URL, RECOMMENDED_MODEL, pull_command

logger = logging.getLogger(__name__)


class FailureKind(str, Enum):
    CREDENTIAL_MISSING = "credential_missing"
    CREDENTIAL_REJECTED = "credential_rejected"
    SERVER_UNREACHABLE = "server_unreachable"
    MODEL_NOT_FOUND = "model_not_found"
    NO_MODEL_AVAILABLE = "no_model_available"
    UNCLASSIFIED = "unclassified"


class RemedyAction(str, Enum):
    OPEN_URL = "open_url"
    RUN_COMMAND = "run_command"
    PROMPT_CREDENTIAL = "prompt_credential"
    NONE = "none"


class Remedy(BaseModel):
    action: RemedyAction
    label: str
    target: Optional[str] = None  # URL, shell command, or backend id


class ClassifiedFailure(BaseModel):
    kind: FailureKind
    message: str
    remedy: Remedy
    backend_id: Optional[str] = None


UNREACHABLE_PATTERNS = (
    "econnrefused",
    "connection refused",
    "all connection attempts failed",
    "not running",
    "failed to establish a new connection",
    "name or service not known",
)
MODEL_NOT_FOUND_PATTERNS = ("not found", "does not exist")
CREDENTIAL_REJECTED_PATTERNS = (
    "invalid api key",
    "incorrect api key",
    "invalid x-api-key",
    "api key not valid",
    "unauthorized",
    "authentication",
)
CREDENTIAL_REJECTED_STATUS = (401, 403)

SERVER_UNREACHABLE_MESSAGE = "Ollama server not running. Please start Ollama first."


def _remedy_for(
    kind: FailureKind,
    backend_id: Optional[str],
    model_id: Optional[str],
) -> Remedy:
    self_hosted = backend_id == OLLAMA_BACKEND_ID
    if kind == FailureKind.SERVER_UNREACHABLE:
        if self_hosted:
            return Remedy(action=RemedyAction.OPEN_URL, label="Download Ollama", target=OLLAMA_INSTALL_URL)
        return Remedy(action=RemedyAction.NONE, label="Check your network connection")
    if kind == FailureKind.MODEL_NOT_FOUND:
        if not self_hosted:
            return Remedy(
                action=RemedyAction.NONE,
                label="Choose another model from the backend's supported list",
                target=backend_id,
            )
        return Remedy(
            action=RemedyAction.RUN_COMMAND,
            label="Install model",
            target=pull_command(model_id or RECOMMENDED_MODEL),
        )
    if kind == FailureKind.NO_MODEL_AVAILABLE:
        return Remedy(
            action=RemedyAction.RUN_COMMAND,
            label="Install recommended model",
            target=pull_command(RECOMMENDED_MODEL),
        )
    if kind in (FailureKind.CREDENTIAL_MISSING, FailureKind.CREDENTIAL_REJECTED):
        return Remedy(action=RemedyAction.PROMPT_CREDENTIAL, label="Enter API key", target=backend_id)
    return Remedy(action=RemedyAction.NONE, label="")


def _kind_from_text(text: str) -> FailureKind:
    lowered = text.lower()
    if any(p in lowered for p in UNREACHABLE_PATTERNS):
        return FailureKind.SERVER_UNREACHABLE
    if any(p in lowered for p in CREDENTIAL_REJECTED_PATTERNS):
        return FailureKind.CREDENTIAL_REJECTED
    if any(p in lowered for p in MODEL_NOT_FOUND_PATTERNS):
        return FailureKind.MODEL_NOT_FOUND
    return FailureKind.UNCLASSIFIED


def classify(
    raw_error: Union[BaseException, str],
    backend_id: Optional[str] = None,
    model_id: Optional[str] = None,
) -> ClassifiedFailure:
    """
    Classify a raw error or message.

    Args:
        raw_error: Exception raised by an adapter/resolver, or its message
        backend_id: Backend the error came from (taken from BackendError if absent)
        model_id: Model that was being used, for the install remedy
    """
    message = str(raw_error)

    if isinstance(raw_error, BackendError):
        backend_id = backend_id or raw_error.backend_id

    if isinstance(raw_error, CredentialMissingError):
        kind = FailureKind.CREDENTIAL_MISSING
    elif isinstance(raw_error, NoModelAvailable):
        kind = FailureKind.NO_MODEL_AVAILABLE
    elif isinstance(raw_error, BackendError) and raw_error.status_code in CREDENTIAL_REJECTED_STATUS:
        kind = FailureKind.CREDENTIAL_REJECTED
    else:
        kind = _kind_from_text(message)

    if kind == FailureKind.SERVER_UNREACHABLE and backend_id == OLLAMA_BACKEND_ID:
        message = SERVER_UNREACHABLE_MESSAGE

    failure = ClassifiedFailure(
        kind=kind,
        message=message,
        remedy=_remedy_for(kind, backend_id, model_id),
        backend_id=backend_id,
    )
    logger.warning("%s failure from %s: %s", kind.value, backend_id or "unknown", message)
    return failure
