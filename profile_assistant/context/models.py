"""Pydantic models for conversation context."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field


class Turn(BaseModel):
    """A single message in a conversation."""

    role: Literal["user", "assistant"]
    content: str


class SessionSummary(BaseModel):
    """Observability view of one chat session."""

    session_id: str = Field(..., serialization_alias="sessionId")
    message_count: int = Field(..., serialization_alias="messageCount")
    last_activity: datetime = Field(..., serialization_alias="lastActivity")
