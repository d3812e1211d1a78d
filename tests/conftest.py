"""Shared test fixtures for vajra tests."""

import pytest

from vajra.config import VajraConfig
from vajra.probe import ModelInventorySnapshot


# ─────────────────────────────────────────────────────────────────────
# MOCK DATA
# ─────────────────────────────────────────────────────────────────────

OLLAMA_URL = "http://ollama.test:11434"

MOCK_TAGS_RESPONSE = {
    "models": [
        {
            "name": "llama2:latest",
            "size": 3826793677,
            "modified_at": "2024-05-01T10:00:00.123456789-07:00",
        },
        {
            "name": "qwen2.5-coder:7b",
            "size": 4683087332,
            "modified_at": "2024-10-12T08:30:00Z",
        },
    ]
}

MOCK_PS_RESPONSE = {
    "models": [
        {
            "name": "qwen2.5-coder:7b",
            "size": 5137025024,
            "expires_at": "2024-10-12T09:00:00.5Z",
        }
    ]
}

MOCK_CHAT_COMPLETION = {
    "id": "chatcmpl-123",
    "object": "chat.completion",
    "choices": [
        {
            "index": 0,
            "message": {"role": "assistant", "content": "def add(a, b):\n    return a + b"},
            "finish_reason": "stop",
        }
    ],
}


# ─────────────────────────────────────────────────────────────────────
# TEST DOUBLES
# ─────────────────────────────────────────────────────────────────────

class StubProbe:
    """Probe double returning a fixed snapshot and counting calls."""

    def __init__(self, installed=(), resident=()):
        self.endpoint = OLLAMA_URL
        self._snapshot = ModelInventorySnapshot.of(installed, resident)
        self.calls = 0

    async def snapshot(self):
        self.calls += 1
        return self._snapshot

    async def list_installed(self):
        return set(self._snapshot.installed_models)

    async def list_installed_details(self):
        from vajra.probe import InstalledModel
        return [InstalledModel(name=n, size=1024) for n in self._snapshot.installed_models]

    async def list_resident(self):
        return set(self._snapshot.resident_models)


# ─────────────────────────────────────────────────────────────────────
# FIXTURES
# ─────────────────────────────────────────────────────────────────────

@pytest.fixture
def base_config():
    """Config with no credentials and a test Ollama endpoint."""
    return VajraConfig(ollama_endpoint=OLLAMA_URL, request_timeout_seconds=5.0)


@pytest.fixture
def keyed_config(base_config):
    """Config with a credential for every hosted backend."""
    credentials = {
        backend_id: f"test-{backend_id}-key"
        for backend_id in (
            "openai", "anthropic", "gemini", "groq", "deepseek",
            "mistral", "qwen", "openrouter", "huggingface",
        )
    }
    return base_config.model_copy(update={"credentials": credentials})


@pytest.fixture
def mock_tags_response():
    return MOCK_TAGS_RESPONSE.copy()


@pytest.fixture
def mock_ps_response():
    return MOCK_PS_RESPONSE.copy()


@pytest.fixture
def mock_chat_completion():
    return MOCK_CHAT_COMPLETION.copy()


@pytest.fixture
def clean_env(monkeypatch):
    """Remove every variable vajra reads from the environment."""
    from vajra.config import CREDENTIAL_ENV_VARS

    for var in list(CREDENTIAL_ENV_VARS.values()) + [
        "OLLAMA_ENDPOINT", "VAJRA_DEFAULT_BACKEND", "VAJRA_DEFAULT_MODEL",
        "VAJRA_TEMPERATURE", "VAJRA_MAX_TOKENS", "VAJRA_RETRY_ATTEMPTS",
        "VAJRA_RETRY_MIN_WAIT", "VAJRA_RETRY_MAX_WAIT",
    ]:
        monkeypatch.delenv(var, raising=False)
    return monkeypatch


@pytest.fixture
def make_probe():
    """Factory for StubProbe: make_probe(installed=[...], resident=[...])."""
    return StubProbe
