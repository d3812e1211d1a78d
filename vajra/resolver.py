"""
Model resolver - turns a requested model name into one that is installed.

Pure functions over a ModelInventorySnapshot: no I/O, no notifications.
Callers decide how to tell the user about a substitution.
"""

import logging
from typing import Optional, Sequence

from pydantic import BaseModel, ConfigDict

from vajra.errors import NoModelAvailable
from vajra.probe import ModelInventorySnapshot

logger = logging.getLogger(__name__)

# Known-good coding models, best first
CODING_PRIORITY: tuple[str, ...] = (
    "qwen2.5-coder:7b",
    "qwen2.5-coder:1.5b",
    "deepseek-coder-v2:16b",
    "deepseek-coder:6.7b",
    "codellama:7b",
    "codellama:13b",
    "starcoder2:7b",
)

RECOMMENDED_MODEL = CODING_PRIORITY[0]
OLLAMA_INSTALL_URL = "https://ollama.com/download"
OLLAMA_INSTALL_COMMAND = "curl -fsSL https://ollama.com/install.sh | sh"


def pull_command(model_id: str) -> str:
    return f"ollama pull {model_id}"


class ResolutionOutcome(BaseModel):
    """Result of resolving a requested model against a snapshot."""
    model_config = ConfigDict(frozen=True)

    resolved_model: str
    requested_model: str
    was_substituted: bool

    @property
    def notice(self) -> Optional[str]:
        """User-facing substitution message, or None when nothing changed."""
        if not self.was_substituted:
            return None
        return (
            f"Using '{self.resolved_model}' instead of '{self.requested_model}'. "
            f"To install: {pull_command(self.requested_model)}"
        )


def smart_default_model(
    snapshot: ModelInventorySnapshot,
    priority: Sequence[str] = CODING_PRIORITY,
) -> str:
    """
    Best installed model when the request matches nothing.

    Walks the priority list, then falls back to the first installed model.

    Raises:
        NoModelAvailable: If nothing is installed
    """
    if snapshot.is_empty:
        raise NoModelAvailable()
    for candidate in priority:
        if snapshot.is_installed(candidate):
            return candidate
    return snapshot.installed_models[0]


def resolve(
    requested_model: str,
    snapshot: ModelInventorySnapshot,
    priority: Sequence[str] = CODING_PRIORITY,
) -> ResolutionOutcome:
    """
    Resolve a requested model to an installed one.

    1. Exact match: returned unchanged.
    2. Otherwise the first priority-list model that is installed.
    3. Otherwise the first installed model (availability beats preference).

    The resolved model is always a member of snapshot.installed_models.

    Raises:
        NoModelAvailable: Only when snapshot.installed_models is empty
    """
    if snapshot.is_empty:
        raise NoModelAvailable(requested_model)

    if snapshot.is_installed(requested_model):
        return ResolutionOutcome(
            resolved_model=requested_model,
            requested_model=requested_model,
            was_substituted=False,
        )

    resolved = smart_default_model(snapshot, priority)
    logger.info("Substituting '%s' for unavailable '%s'", resolved, requested_model)
    return ResolutionOutcome(
        resolved_model=resolved,
        requested_model=requested_model,
        was_substituted=True,
    )


# ─────────────────────────────────────────────────────────────────────
# SUGGESTIONS
# ─────────────────────────────────────────────────────────────────────

class ModelSuggestion(BaseModel):
    recommended: str
    suggestion: str


class AvailabilityCheck(BaseModel):
    available: bool
    suggestion: Optional[str] = None
    pull_command: Optional[str] = None


def suggest_model(requested_model: str) -> ModelSuggestion:
    """Map a stale or unknown model name to an installable recommendation."""
    name = requested_model.lower()

    if "qwen3-coder" in name:
        return ModelSuggestion(
            recommended="qwen2.5-coder:7b",
            suggestion="Qwen3-Coder is not available in Ollama yet. Try Qwen2.5-Coder (88.4% MBPP)",
        )
    if "deepseek-r1" in name:
        return ModelSuggestion(
            recommended="deepseek-coder-v2:16b",
            suggestion="DeepSeek-R1 is not available in Ollama yet. Try DeepSeek-Coder-V2",
        )
    if "codellama" in name and "70b" in name:
        return ModelSuggestion(
            recommended="codellama:34b",
            suggestion="CodeLlama 70B is very large. Try CodeLlama 34B for better performance",
        )
    if "starcoder" in name and "2" not in name:
        return ModelSuggestion(
            recommended="starcoder2:7b",
            suggestion="StarCoder v1 is outdated. Try StarCoder2",
        )
    if "code" in name:
        return ModelSuggestion(
            recommended="qwen2.5-coder:7b",
            suggestion="For coding tasks, Qwen2.5-Coder 7B offers the best performance (88.4% MBPP)",
        )
    if "small" in name or "light" in name:
        return ModelSuggestion(
            recommended="qwen2.5-coder:1.5b",
            suggestion="For lightweight coding: Qwen2.5-Coder 1.5B",
        )
    if "large" in name or "32b" in name:
        return ModelSuggestion(
            recommended="qwen2.5-coder:32b",
            suggestion="For maximum coding performance: Qwen2.5-Coder 32B (requires 32GB+ RAM)",
        )
    return ModelSuggestion(
        recommended=RECOMMENDED_MODEL,
        suggestion="Best general coding model: Qwen2.5-Coder 7B (88.4% MBPP, efficient)",
    )


def _matches(installed: str, requested: str) -> bool:
    # "llama2" matches "llama2:latest"
    return installed == requested or installed.startswith(f"{requested}:")


def check_availability(
    requested_model: str,
    snapshot: ModelInventorySnapshot,
) -> AvailabilityCheck:
    """Report whether a model is installed, with an install hint if not."""
    if snapshot.is_empty:
        return AvailabilityCheck(
            available=False,
            suggestion=f"Install Ollama first: {OLLAMA_INSTALL_URL}",
            pull_command=OLLAMA_INSTALL_COMMAND,
        )

    if any(_matches(m, requested_model) for m in snapshot.installed_models):
        return AvailabilityCheck(available=True)

    hint = suggest_model(requested_model)
    return AvailabilityCheck(
        available=False,
        suggestion=hint.suggestion,
        pull_command=pull_command(hint.recommended),
    )
