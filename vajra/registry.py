"""
Backend registry - the explicit id -> adapter mapping built at startup.

Usage:
    registry = build_registry(config)
    adapter = registry.get("ollama")
    for adapter in registry.list_configured():
        print(adapter.display_name)

Registration order is the display order surfaced to callers.
"""

from typing import Optional, TYPE_CHECKING

from vajra.errors import UnknownBackendError

if TYPE_CHECKING:
    from vajra.adapters.base import BackendAdapter
    from vajra.config import VajraConfig


class BackendRegistry:
    """Holds every adapter, indexed by backend id, in insertion order."""

    def __init__(self):
        self._adapters: dict[str, "BackendAdapter"] = {}

    def register(self, adapter: "BackendAdapter") -> None:
        """
        Register an adapter under its backend_id.

        Raises:
            ValueError: If the id is already registered
        """
        if adapter.backend_id in self._adapters:
            raise ValueError(f"Backend '{adapter.backend_id}' already registered")
        self._adapters[adapter.backend_id] = adapter

    def get(self, backend_id: str) -> Optional["BackendAdapter"]:
        """Return the adapter for an id, or None when not registered."""
        return self._adapters.get(backend_id)

    def require(self, backend_id: str) -> "BackendAdapter":
        """
        Return the adapter for an id.

        Raises:
            UnknownBackendError: If the id is not registered
        """
        adapter = self._adapters.get(backend_id)
        if adapter is None:
            raise UnknownBackendError(backend_id, self.ids())
        return adapter

    def ids(self) -> list[str]:
        return list(self._adapters)

    def list_all(self) -> list["BackendAdapter"]:
        return list(self._adapters.values())

    def list_configured(self) -> list["BackendAdapter"]:
        return [a for a in self._adapters.values() if a.is_configured()]

    def __contains__(self, backend_id: str) -> bool:
        return backend_id in self._adapters

    def __len__(self) -> int:
        return len(self._adapters)


def build_registry(config: "VajraConfig") -> BackendRegistry:
    """
    Register every compiled-in backend against one config value.

    Rebuild the registry after changing a credential; adapters never read
    configuration from anywhere else.
    """
    from vajra.adapters import ADAPTER_CLASSES

    registry = BackendRegistry()
    for adapter_cls in ADAPTER_CLASSES:
        registry.register(adapter_cls(config))
    return registry
