"""
Liveness & inventory probe for the self-hosted (Ollama) backend.

Every query is read-only and bounded by a short timeout. A connection
failure, timeout, non-2xx status or unreadable body all yield an empty
result: at this layer "server unreachable" and "no models" look the same.
The send path is where the difference gets classified.
"""

import asyncio
import logging
import re
from datetime import datetime
from typing import Optional

import httpx
from pydantic import BaseModel, ConfigDict

from vajra.adapters._http import extract_error_message
from vajra.config import DEFAULT_PROBE_TIMEOUT_SECONDS
from vajra.errors import BackendError

logger = logging.getLogger(__name__)

_FRACTION_RE = re.compile(r"\.(\d+)")


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse an Ollama RFC 3339 timestamp (nanosecond precision, 'Z' suffix)."""
    if not isinstance(value, str) or not value:
        return None
    text = _FRACTION_RE.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), value.strip())
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return None


def _parse_size(value) -> int:
    """Byte count from an inventory entry; anything unreadable counts as 0."""
    if isinstance(value, bool):
        return 0
    try:
        return max(int(value or 0), 0)
    except (TypeError, ValueError, OverflowError):
        return 0


# ─────────────────────────────────────────────────────────────────────
# DATA MODELS
# ─────────────────────────────────────────────────────────────────────

class InstalledModel(BaseModel):
    """One entry of /api/tags."""
    model_config = ConfigDict(frozen=True)

    name: str
    size: int = 0
    modified_at: Optional[datetime] = None


class ResidentModel(BaseModel):
    """One entry of /api/ps: a model currently loaded in memory."""
    model_config = ConfigDict(frozen=True)

    name: str
    size: int = 0
    expires_at: Optional[datetime] = None


class ModelInventorySnapshot(BaseModel):
    """
    Point-in-time view of the self-hosted backend's models.

    Created fresh for every resolution and never mutated. installed_models
    keeps server order (deduplicated) so "first available" is well defined.
    """
    model_config = ConfigDict(frozen=True)

    installed_models: tuple[str, ...] = ()
    resident_models: tuple[ResidentModel, ...] = ()

    @classmethod
    def of(cls, installed, resident=()) -> "ModelInventorySnapshot":
        """Build a snapshot from any iterable of names, dropping duplicates."""
        return cls(
            installed_models=tuple(dict.fromkeys(installed)),
            resident_models=tuple(resident),
        )

    @property
    def is_empty(self) -> bool:
        return not self.installed_models

    def is_installed(self, model_id: str) -> bool:
        return model_id in self.installed_models

    def is_resident(self, model_id: str) -> bool:
        return any(m.name == model_id for m in self.resident_models)


# ─────────────────────────────────────────────────────────────────────
# PROBE
# ─────────────────────────────────────────────────────────────────────

class InventoryProbe:
    """Queries an Ollama server for installed and resident models."""

    def __init__(
        self,
        endpoint: str,
        timeout_seconds: float = DEFAULT_PROBE_TIMEOUT_SECONDS,
    ):
        self.endpoint = endpoint.rstrip("/")
        self.timeout_seconds = timeout_seconds

    @classmethod
    def from_config(cls, config) -> "InventoryProbe":
        return cls(config.ollama_endpoint, config.probe_timeout_seconds)

    async def _get_models(self, path: str) -> list[dict]:
        """GET {endpoint}{path} and return its `models` array, or [] on any failure."""
        url = f"{self.endpoint}{path}"
        try:
            async with httpx.AsyncClient(timeout=self.timeout_seconds) as client:
                response = await client.get(url)
                response.raise_for_status()
                data = response.json()
        except httpx.TimeoutException:
            logger.debug("Probe %s timed out after %.1fs", url, self.timeout_seconds)
            return []
        except (httpx.HTTPError, ValueError) as e:
            logger.debug("Probe %s failed: %s", url, e)
            return []

        models = data.get("models") if isinstance(data, dict) else None
        if not isinstance(models, list):
            return []
        return [
            m for m in models
            if isinstance(m, dict) and isinstance(m.get("name"), str) and m["name"].strip()
        ]

    async def list_installed_details(self) -> list[InstalledModel]:
        entries = await self._get_models("/api/tags")
        return [
            InstalledModel(
                name=m["name"],
                size=_parse_size(m.get("size")),
                modified_at=parse_timestamp(m.get("modified_at")),
            )
            for m in entries
        ]

    async def list_installed(self) -> set[str]:
        return {m.name for m in await self.list_installed_details()}

    async def list_resident(self) -> set[ResidentModel]:
        entries = await self._get_models("/api/ps")
        return {
            ResidentModel(
                name=m["name"],
                size=_parse_size(m.get("size")),
                expires_at=parse_timestamp(m.get("expires_at")),
            )
            for m in entries
        }

    async def snapshot(self) -> ModelInventorySnapshot:
        """Query both endpoints concurrently and freeze the result."""
        installed, resident = await asyncio.gather(
            self.list_installed_details(),
            self.list_resident(),
        )
        snapshot = ModelInventorySnapshot.of(
            (m.name for m in installed),
            sorted(resident, key=lambda m: m.name),
        )
        logger.debug(
            "Inventory at %s: %d installed, %d resident",
            self.endpoint, len(snapshot.installed_models), len(snapshot.resident_models),
        )
        return snapshot

    async def model_info(self, model_id: str) -> dict:
        """
        Fetch details for one model via /api/show.

        Unlike the liveness queries this is an explicit user request, so
        failures raise instead of returning empty.

        Raises:
            BackendError: On transport error or non-2xx response
        """
        try:
            async with httpx.AsyncClient(timeout=self.timeout_seconds) as client:
                response = await client.post(
                    f"{self.endpoint}/api/show", json={"name": model_id}
                )
        except httpx.HTTPError as e:
            raise BackendError("ollama", str(e) or type(e).__name__) from e

        if response.status_code >= 400:
            raise BackendError(
                "ollama", extract_error_message(response), status_code=response.status_code
            )

        try:
            data = response.json()
        except ValueError as e:
            raise BackendError("ollama", f"Malformed response from ollama: {e}") from e
        return {
            "name": model_id,
            "modelfile": data.get("modelfile", ""),
            "parameters": data.get("parameters", ""),
            "template": data.get("template", ""),
            "details": data.get("details", {}),
            "model_info": data.get("model_info", {}),
        }
