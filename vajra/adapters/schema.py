from typing import Literal, Optional

from pydantic import BaseModel


class GenerationRequest(BaseModel):
    """
    Standardized single-turn request handed to every adapter.
    The caller flattens any context into `prompt` before sending; adapters
    never see conversation history.
    """
    backend_id: str
    model_id: str
    prompt: str
    temperature: float = 0.7
    max_tokens: int = 2048
    timeout_seconds: float = 120.0


class ConversationTurn(BaseModel):
    """One chat turn as the surrounding chat layer stores it."""
    role: Literal["user", "assistant"]
    text: str
    backend_id: Optional[str] = None
    model_id: Optional[str] = None
