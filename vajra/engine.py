"""
Send pipeline - the probe -> resolve -> send -> classify sequence.

This is the uniform (backend_id, prompt, model_id) -> text contract the
chat layer calls. Nothing here retries unless the caller opts in through
send_with_retry(), and no user notification happens here: substitutions
and failures come back as data on SendOutcome.

Usage:
    registry = build_registry(config)
    outcome = await send_prompt(registry, config, "Explain this code")
    if outcome.ok:
        print(outcome.text)
    else:
        print(outcome.failure.message, outcome.failure.remedy.target)
"""

import logging
from typing import Optional

from pydantic import BaseModel
from tenacity import (
    AsyncRetrying,
    RetryError,
    before_sleep_log,
    retry_if_result,
    stop_after_attempt,
    wait_exponential,
)

from vajra.adapters.ollama import OLLAMA_BACKEND_ID
from vajra.adapters.schema import ConversationTurn
from vajra.classifier import ClassifiedFailure, FailureKind, classify
from vajra.config import VajraConfig
from vajra.errors import BackendError, CredentialMissingError, NoModelAvailable
from vajra.probe import InventoryProbe
from vajra.registry import BackendRegistry
from vajra.resolver import ResolutionOutcome, resolve

logger = logging.getLogger(__name__)


class SendOutcome(BaseModel):
    """Either completion text or a classified failure, never both."""
    backend_id: str
    model_id: str
    text: Optional[str] = None
    resolution: Optional[ResolutionOutcome] = None
    failure: Optional[ClassifiedFailure] = None

    @property
    def ok(self) -> bool:
        return self.failure is None

    def to_turn(self) -> ConversationTurn:
        """Assistant turn for the chat layer's history."""
        if self.ok:
            text = self.text or ""
        else:
            text = f"Error: {self.failure.message}"
        return ConversationTurn(
            role="assistant",
            text=text,
            backend_id=self.backend_id,
            model_id=self.model_id,
        )


def build_contextual_prompt(
    message: str,
    selected_text: Optional[str] = None,
    language: Optional[str] = None,
) -> str:
    """Flatten selected editor code into a single prompt string."""
    if not selected_text:
        return message
    lang = language or ""
    label = f"{lang} code" if lang else "code"
    return (
        f"Here's my {label}:\n```{lang}\n{selected_text}\n```\n\n"
        f"Question: {message}"
    )


async def send_prompt(
    registry: BackendRegistry,
    config: VajraConfig,
    prompt: str,
    backend_id: Optional[str] = None,
    model_id: Optional[str] = None,
    probe: Optional[InventoryProbe] = None,
) -> SendOutcome:
    """
    Send one prompt through the chosen backend.

    Args:
        registry: Registered adapters
        config: Supplies the default backend/model when not given
        prompt: Already-flattened prompt text
        backend_id: Backend to use (default: config.default_backend)
        model_id: Model to request (default: config.default_model for the
            default backend, otherwise the adapter's own default)
        probe: Inventory probe for the self-hosted backend (built from
            config when omitted)

    Raises:
        UnknownBackendError: If backend_id is not registered
    """
    backend_id = backend_id or config.default_backend
    adapter = registry.require(backend_id)

    if model_id is None:
        if backend_id == config.default_backend:
            model_id = config.default_model
        else:
            model_id = adapter.default_model

    if not adapter.is_configured():
        error = CredentialMissingError(backend_id, adapter.display_name)
        return SendOutcome(
            backend_id=backend_id,
            model_id=model_id,
            failure=classify(error, backend_id=backend_id, model_id=model_id),
        )

    resolution = None
    if backend_id == OLLAMA_BACKEND_ID:
        probe = probe or InventoryProbe.from_config(config)
        snapshot = await probe.snapshot()
        try:
            resolution = resolve(model_id, snapshot)
        except NoModelAvailable as e:
            return SendOutcome(
                backend_id=backend_id,
                model_id=model_id,
                failure=classify(e, backend_id=backend_id, model_id=model_id),
            )
        model_id = resolution.resolved_model

    try:
        text = await adapter.send(prompt, model_id)
    except BackendError as e:
        return SendOutcome(
            backend_id=backend_id,
            model_id=model_id,
            resolution=resolution,
            failure=classify(e, backend_id=backend_id, model_id=model_id),
        )

    return SendOutcome(
        backend_id=backend_id,
        model_id=model_id,
        text=text,
        resolution=resolution,
    )


def _is_retryable(outcome: SendOutcome) -> bool:
    return (
        outcome.failure is not None
        and outcome.failure.kind == FailureKind.SERVER_UNREACHABLE
    )


async def send_with_retry(
    registry: BackendRegistry,
    config: VajraConfig,
    prompt: str,
    backend_id: Optional[str] = None,
    model_id: Optional[str] = None,
    probe: Optional[InventoryProbe] = None,
    attempts: Optional[int] = None,
) -> SendOutcome:
    """
    Caller-side retry around send_prompt for an unreachable server.

    Only SERVER_UNREACHABLE outcomes are retried (e.g. Ollama still
    starting up); every other failure is returned on the first attempt.
    """
    attempts = attempts or config.retry_attempts
    retrying = AsyncRetrying(
        stop=stop_after_attempt(attempts),
        wait=wait_exponential(multiplier=2, min=config.retry_min_wait, max=config.retry_max_wait),
        retry=retry_if_result(_is_retryable),
        before_sleep=before_sleep_log(logger, logging.INFO),
        reraise=True,
    )
    try:
        return await retrying(
            send_prompt, registry, config, prompt, backend_id, model_id, probe
        )
    except RetryError as e:
        return e.last_attempt.result()
