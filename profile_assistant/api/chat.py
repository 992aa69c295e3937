"""Chat assistant API endpoints."""

from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field

from profile_assistant.context.context_window import ContextWindow, get_context_window
from profile_assistant.core.config import get_settings
from profile_assistant.core.exceptions import InvalidInput
from profile_assistant.core.llm import CompletionClient, get_completion_client
from profile_assistant.core.rate_limiter import limit_chat, limit_data_read
from profile_assistant.core.relevance_search import search
from profile_assistant.core.schemas_profile import PROFILE_SCHEMA_VERSION
from profile_assistant.db.profile_store import ProfileStore, get_profile_store
from profile_assistant.services.chat_orchestrator import DEFAULT_SESSION_ID, ChatOrchestrator

router = APIRouter(prefix="/chat")


class ChatRequest(BaseModel):
    """Request to chat with the AI assistant."""

    model_config = ConfigDict(populate_by_name=True)

    message: str | None = None
    session_id: str | None = Field(default=DEFAULT_SESSION_ID, alias="sessionId")
    include_personal_context: bool = Field(default=True, alias="includePersonalContext")


class ContextRequest(BaseModel):
    """Request to read or clear a session's context window."""

    model_config = ConfigDict(populate_by_name=True)

    session_id: str = Field(default=DEFAULT_SESSION_ID, alias="sessionId")
    action: str = "get"


class PreviewRequest(BaseModel):
    """Request to preview which profile data a message would pull in."""

    message: str | None = None


def get_chat_orchestrator(
    store: ProfileStore = Depends(get_profile_store),
    context_window: ContextWindow = Depends(get_context_window),
    llm: CompletionClient | None = Depends(get_completion_client),
) -> ChatOrchestrator:
    return ChatOrchestrator(
        profile_store=store,
        context_window=context_window,
        llm=llm,
        history_turns=get_settings().PROMPT_HISTORY_TURNS,
    )


@router.post("", dependencies=[Depends(limit_chat)])
def chat_with_assistant(
    request: ChatRequest,
    orchestrator: ChatOrchestrator = Depends(get_chat_orchestrator),
) -> dict[str, Any]:
    """
    Chat with the AI assistant about the stored profile.

    Returns the reply plus whether personal data was used, how many prior
    turns were in context, and whether demo mode answered.
    """
    result = orchestrator.handle(
        request.message,
        session_id=request.session_id,
        include_personal_context=request.include_personal_context,
    )
    return result.to_dict()


@router.post("/context", dependencies=[Depends(limit_data_read)])
def manage_context(
    request: ContextRequest,
    context_window: ContextWindow = Depends(get_context_window),
) -> dict[str, Any]:
    """Get or clear the context window for a session."""
    if request.action == "clear":
        context_window.clear(request.session_id)
        return {
            "success": True,
            "sessionId": request.session_id,
            "message": "Chat context cleared",
        }
    if request.action != "get":
        raise InvalidInput(f"Unknown action '{request.action}'. Use 'get' or 'clear'.")

    turns = context_window.get(request.session_id)
    return {
        "success": True,
        "sessionId": request.session_id,
        "context": [turn.model_dump() for turn in turns],
        "length": len(turns),
        "message": "Chat context retrieved",
    }


@router.get("/sessions", dependencies=[Depends(limit_data_read)])
def list_sessions(context_window: ContextWindow = Depends(get_context_window)) -> dict[str, Any]:
    """List active chat sessions."""
    sessions = [
        s.model_dump(mode="json", by_alias=True) for s in context_window.list_sessions()
    ]
    return {
        "success": True,
        "sessions": sessions,
        "totalSessions": len(sessions),
        "message": "Active sessions retrieved",
    }


@router.post("/preview", dependencies=[Depends(limit_data_read)])
def preview_personal_context(
    request: PreviewRequest,
    store: ProfileStore = Depends(get_profile_store),
) -> dict[str, Any]:
    """Preview which personal data would be used for a message."""
    if not request.message or not request.message.strip():
        raise InvalidInput("Message is required for preview")

    relevant = search(request.message, store.read())
    return {
        "success": True,
        "query": request.message,
        "relevantData": relevant,
        "dataFound": bool(relevant),
        "sections": list(relevant),
        "message": "Preview data retrieved successfully",
    }


@router.get("/health")
def chat_health(
    context_window: ContextWindow = Depends(get_context_window),
    llm: CompletionClient | None = Depends(get_completion_client),
) -> dict[str, Any]:
    """Health check for the chat API."""
    return {
        "success": True,
        "service": "chat-api",
        "status": "healthy",
        "modelConfigured": llm is not None,
        "activeSessions": len(context_window),
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": PROFILE_SCHEMA_VERSION,
    }
