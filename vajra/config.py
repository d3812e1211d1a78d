"""
Configuration constants and the VajraConfig model.

Components never read ambient state: entry points build a VajraConfig
(from the environment and an optional YAML file) and pass it in.
"""

import logging
import os
from pathlib import Path
from typing import Optional, Union

import yaml
from dotenv import set_key
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)


# ─────────────────────────────────────────────────────────────────────
# DEFAULTS
# ─────────────────────────────────────────────────────────────────────

DEFAULT_OLLAMA_ENDPOINT: str = "http://localhost:11434"
DEFAULT_BACKEND: str = "ollama"
DEFAULT_MODEL: str = "qwen2.5-coder:7b"

DEFAULT_TEMPERATURE: float = 0.7
DEFAULT_MAX_TOKENS: int = 2048
DEFAULT_PROBE_TIMEOUT_SECONDS: float = 5.0
DEFAULT_REQUEST_TIMEOUT_SECONDS: float = 120.0

DEFAULT_ENV_FILE: str = ".env"


# ─────────────────────────────────────────────────────────────────────
# CREDENTIAL ENVIRONMENT VARIABLES
# ─────────────────────────────────────────────────────────────────────

# backend id -> env var holding its credential
CREDENTIAL_ENV_VARS: dict[str, str] = {
    "openai": "OPENAI_API_KEY",
    "anthropic": "ANTHROPIC_API_KEY",
    "gemini": "GEMINI_API_KEY",
    "groq": "GROQ_API_KEY",
    "deepseek": "DEEPSEEK_API_KEY",
    "mistral": "MISTRAL_API_KEY",
    "qwen": "DASHSCOPE_API_KEY",
    "openrouter": "OPENROUTER_API_KEY",
    "huggingface": "HF_TOKEN",
}


def credential_env_var(backend_id: str) -> str:
    """Env var name for a backend's credential (falls back to <ID>_API_KEY)."""
    return CREDENTIAL_ENV_VARS.get(backend_id, f"{backend_id.upper()}_API_KEY")


# ─────────────────────────────────────────────────────────────────────
# DATA MODEL
# ─────────────────────────────────────────────────────────────────────

class VajraConfig(BaseModel):
    """Explicit configuration value handed to every component."""
    credentials: dict[str, str] = Field(default_factory=dict)
    ollama_endpoint: str = DEFAULT_OLLAMA_ENDPOINT
    default_backend: str = DEFAULT_BACKEND
    default_model: str = DEFAULT_MODEL
    temperature: float = DEFAULT_TEMPERATURE
    max_tokens: int = DEFAULT_MAX_TOKENS
    probe_timeout_seconds: float = DEFAULT_PROBE_TIMEOUT_SECONDS
    request_timeout_seconds: float = DEFAULT_REQUEST_TIMEOUT_SECONDS
    retry_attempts: int = 3
    retry_min_wait: int = 4
    retry_max_wait: int = 30

    def get_credential(self, backend_id: str) -> Optional[str]:
        """Return the non-empty credential for a backend, or None."""
        value = self.credentials.get(backend_id)
        if value and value.strip():
            return value.strip()
        return None

    def with_credential(self, backend_id: str, key: str) -> "VajraConfig":
        """Return a copy of this config with one credential replaced."""
        credentials = dict(self.credentials)
        credentials[backend_id] = key
        return self.model_copy(update={"credentials": credentials})

    def with_defaults(self, backend_id: str, model_id: str) -> "VajraConfig":
        """Return a copy with a new default backend/model pair."""
        return self.model_copy(
            update={"default_backend": backend_id, "default_model": model_id}
        )


# ─────────────────────────────────────────────────────────────────────
# ENVIRONMENT LOADING
# ─────────────────────────────────────────────────────────────────────

def _env_int(name: str, default: int) -> int:
    try:
        return int(os.environ.get(name, str(default)))
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    try:
        return float(os.environ.get(name, str(default)))
    except ValueError:
        return default


def load_credentials_from_env() -> dict[str, str]:
    """
    Collect credentials from environment variables.

    Empty or whitespace-only values are skipped, so an exported-but-blank
    variable reads as "not configured".
    """
    credentials = {}
    for backend_id, var in CREDENTIAL_ENV_VARS.items():
        value = os.environ.get(var)
        if value and value.strip():
            credentials[backend_id] = value.strip()
    return credentials


def load_config() -> VajraConfig:
    """
    Build a VajraConfig from environment variables.

    Call load_dotenv() first if .env support is wanted; this function
    only reads os.environ.
    """
    return VajraConfig(
        credentials=load_credentials_from_env(),
        ollama_endpoint=os.environ.get("OLLAMA_ENDPOINT", DEFAULT_OLLAMA_ENDPOINT).rstrip("/"),
        default_backend=os.environ.get("VAJRA_DEFAULT_BACKEND", DEFAULT_BACKEND),
        default_model=os.environ.get("VAJRA_DEFAULT_MODEL", DEFAULT_MODEL),
        temperature=_env_float("VAJRA_TEMPERATURE", DEFAULT_TEMPERATURE),
        max_tokens=_env_int("VAJRA_MAX_TOKENS", DEFAULT_MAX_TOKENS),
        retry_attempts=_env_int("VAJRA_RETRY_ATTEMPTS", 3),
        retry_min_wait=_env_int("VAJRA_RETRY_MIN_WAIT", 4),
        retry_max_wait=_env_int("VAJRA_RETRY_MAX_WAIT", 30),
    )


def load_config_file(
    path: Union[str, Path],
    base: Optional[VajraConfig] = None,
) -> VajraConfig:
    """
    Overlay settings from a YAML file onto a base config.

    The file is a mapping of VajraConfig field names. A `credentials`
    mapping is merged key-by-key rather than replaced.

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the file is not a YAML mapping
    """
    base = base or VajraConfig()
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise ValueError(f"Config file {path} must contain a mapping")

    merged = base.model_dump()
    file_credentials = data.pop("credentials", None) or {}
    merged.update(data)
    merged["credentials"] = {**base.credentials, **file_credentials}
    return VajraConfig.model_validate(merged)


# ─────────────────────────────────────────────────────────────────────
# PERSISTENCE
# ─────────────────────────────────────────────────────────────────────

def save_credential(
    backend_id: str,
    key: str,
    env_path: Union[str, Path] = DEFAULT_ENV_FILE,
) -> str:
    """
    Persist a credential to a .env file. Returns the variable name written.

    This and save_defaults are the only places vajra writes configuration.
    """
    var = credential_env_var(backend_id)
    Path(env_path).touch(exist_ok=True)
    set_key(str(env_path), var, key)
    logger.info("Stored credential for %s in %s", backend_id, env_path)
    return var


def save_defaults(
    backend_id: str,
    model_id: str,
    env_path: Union[str, Path] = DEFAULT_ENV_FILE,
) -> None:
    """Persist the default backend/model pair to a .env file."""
    Path(env_path).touch(exist_ok=True)
    set_key(str(env_path), "VAJRA_DEFAULT_BACKEND", backend_id)
    set_key(str(env_path), "VAJRA_DEFAULT_MODEL", model_id)
