"""
Opt-in migration of the default backend/model to the self-hosted backend.

Nothing here runs on its own. A caller asks for a plan, shows it, and only
applies it on explicit confirmation; current config values are never used
to guess whether the user "already customized" anything.
"""

import logging
from typing import Optional

from pydantic import BaseModel

from vajra.adapters.ollama import OLLAMA_BACKEND_ID
from vajra.config import VajraConfig
from vajra.probe import ModelInventorySnapshot
from vajra.resolver import smart_default_model

logger = logging.getLogger(__name__)


class MigrationPlan(BaseModel):
    backend_id: str
    model_id: str
    previous_backend_id: str
    previous_model_id: str
    reason: str

    @property
    def changes_anything(self) -> bool:
        return (self.backend_id, self.model_id) != (
            self.previous_backend_id,
            self.previous_model_id,
        )


def plan_default_migration(
    config: VajraConfig,
    snapshot: ModelInventorySnapshot,
) -> Optional[MigrationPlan]:
    """Propose switching defaults to Ollama, or None if it has no models."""
    if snapshot.is_empty:
        return None

    if (
        config.default_backend == OLLAMA_BACKEND_ID
        and snapshot.is_installed(config.default_model)
    ):
        model_id = config.default_model
        reason = f"Ollama default '{model_id}' is installed"
    else:
        model_id = smart_default_model(snapshot)
        reason = (
            f"Ollama has {len(snapshot.installed_models)} installed model(s); "
            f"best available is '{model_id}'"
        )

    return MigrationPlan(
        backend_id=OLLAMA_BACKEND_ID,
        model_id=model_id,
        previous_backend_id=config.default_backend,
        previous_model_id=config.default_model,
        reason=reason,
    )


def apply_default_migration(config: VajraConfig, plan: MigrationPlan) -> VajraConfig:
    """Return a new config with the plan's defaults; the input is untouched."""
    logger.info(
        "Migrating defaults %s/%s -> %s/%s",
        plan.previous_backend_id, plan.previous_model_id, plan.backend_id, plan.model_id,
    )
    return config.with_defaults(plan.backend_id, plan.model_id)
