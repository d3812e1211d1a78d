"""Shared HTTP plumbing for the hosted adapters."""

import logging
from typing import Optional

import httpx

from vajra.errors import BackendError

logger = logging.getLogger(__name__)


def extract_error_message(response: httpx.Response) -> str:
    """Extract a user-friendly error message from a backend error response."""
    try:
        data = response.json()
    except ValueError:
        return f"HTTP {response.status_code}: {response.text[:200]}"

    # Some backends wrap the envelope in a single-element list
    if isinstance(data, list) and data and isinstance(data[0], dict):
        data = data[0]

    if isinstance(data, dict):
        error = data.get("error")
        if isinstance(error, dict):
            message = error.get("message", "")
            if message:
                return message
        elif isinstance(error, str) and error:
            return error
        for key in ("message", "detail"):
            value = data.get(key)
            if isinstance(value, str) and value:
                return value
    return f"HTTP {response.status_code}: {response.text[:200]}"


async def post_json(
    backend_id: str,
    url: str,
    payload: dict,
    timeout_seconds: float,
    headers: Optional[dict] = None,
) -> dict:
    """
    POST a JSON body and return the decoded JSON response.

    Every failure becomes a BackendError: transport errors carry the raw
    transport text, non-2xx responses carry the backend's own message,
    non-JSON bodies are reported as malformed.
    """
    try:
        async with httpx.AsyncClient(timeout=timeout_seconds) as client:
            response = await client.post(url, json=payload, headers=headers)
    except httpx.TimeoutException as e:
        raise BackendError(backend_id, f"Request timed out: {e}") from e
    except httpx.HTTPError as e:
        raise BackendError(backend_id, str(e) or type(e).__name__) from e

    if response.status_code >= 400:
        message = extract_error_message(response)
        logger.debug("%s returned %s: %s", backend_id, response.status_code, message)
        raise BackendError(backend_id, message, status_code=response.status_code)

    try:
        return response.json()
    except ValueError as e:
        raise BackendError(
            backend_id,
            f"Malformed response from {backend_id}: {response.text[:200]}",
            status_code=response.status_code,
        ) from e
