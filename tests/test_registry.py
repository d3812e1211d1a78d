"""Tests for BackendRegistry and build_registry."""

import pytest

from vajra.adapters import ADAPTER_CLASSES, BackendAdapter, OllamaAdapter
from vajra.errors import UnknownBackendError
from vajra.registry import BackendRegistry, build_registry


EXPECTED_ORDER = [
    "ollama", "openai", "anthropic", "gemini", "groq",
    "deepseek", "mistral", "qwen", "openrouter", "huggingface",
]


class TestBuildRegistry:
    def test_registration_order(self, base_config):
        assert build_registry(base_config).ids() == EXPECTED_ORDER

    def test_every_adapter_satisfies_protocol(self, base_config):
        for adapter in build_registry(base_config).list_all():
            assert isinstance(adapter, BackendAdapter)
            assert adapter.default_model in adapter.supported_models

    def test_only_ollama_configured_without_keys(self, base_config):
        configured = build_registry(base_config).list_configured()
        assert [a.backend_id for a in configured] == ["ollama"]

    def test_all_configured_with_keys(self, keyed_config):
        registry = build_registry(keyed_config)
        assert [a.backend_id for a in registry.list_configured()] == EXPECTED_ORDER

    def test_blank_key_is_not_configured(self, base_config):
        config = base_config.with_credential("openai", "   ")
        assert not build_registry(config).get("openai").is_configured()

    def test_rebuild_picks_up_new_credential(self, base_config):
        assert not build_registry(base_config).get("groq").is_configured()
        updated = base_config.with_credential("groq", "gsk-new")
        assert build_registry(updated).get("groq").is_configured()

    def test_len_and_contains(self, base_config):
        registry = build_registry(base_config)
        assert len(registry) == len(ADAPTER_CLASSES)
        assert "mistral" in registry
        assert "together" not in registry


class TestLookup:
    def test_get_unknown_returns_none(self, base_config):
        assert build_registry(base_config).get("nope") is None

    def test_require_unknown_raises(self, base_config):
        with pytest.raises(UnknownBackendError, match="Unknown backend 'nope'"):
            build_registry(base_config).require("nope")

    def test_unknown_backend_is_value_error(self, base_config):
        with pytest.raises(ValueError):
            build_registry(base_config).require("nope")

    def test_duplicate_registration_rejected(self, base_config):
        registry = BackendRegistry()
        registry.register(OllamaAdapter(base_config))
        with pytest.raises(ValueError, match="already registered"):
            registry.register(OllamaAdapter(base_config))
