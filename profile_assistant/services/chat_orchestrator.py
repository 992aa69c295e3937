"""Request-level coordinator for profile-aware chat.

One chat turn:
1. Validate the message (and short-circuit into demo mode if no model)
2. Select relevant profile data (failures degrade to "no context")
3. Fetch recent turns for the session
4. Compose the prompt and call the model
5. Record the exchange in the session's context window
"""

import logging
from dataclasses import dataclass
from typing import Any

from profile_assistant.context.context_window import ContextWindow
from profile_assistant.context.prompt_composer import DEFAULT_HISTORY_TURNS, compose
from profile_assistant.core.exceptions import InvalidInput
from profile_assistant.core.llm import CompletionClient
from profile_assistant.core.logging import get_logger, log_with_context
from profile_assistant.core.relevance_search import search
from profile_assistant.db.profile_store import ProfileStore

logger = get_logger(__name__)

DEFAULT_SESSION_ID = "default"

DEMO_RESPONSE_TEMPLATE = """Hello! I'm your personalized AI assistant. You said: "{message}".

To enable full AI capabilities with personalized responses, please:
1. Get an API key from the Anthropic Console (https://console.anthropic.com/)
2. Add ANTHROPIC_API_KEY=your_api_key_here to your .env file
3. Optionally add PERSONAL_DATA_API_KEY=your_secure_key for data protection
4. Restart the server

You can still use the personal data management API to add your information!"""


@dataclass
class ChatResult:
    """Outcome of one chat turn."""

    response: str
    session_id: str
    personal_data_used: bool
    context_length: int
    is_demo: bool

    def to_dict(self) -> dict[str, Any]:
        return {
            "response": self.response,
            "sessionId": self.session_id,
            "personalDataUsed": self.personal_data_used,
            "contextLength": self.context_length,
            "isDemo": self.is_demo,
        }


class ChatOrchestrator:
    """Coordinates relevance search, context window, prompt composer and model."""

    def __init__(
        self,
        profile_store: ProfileStore,
        context_window: ContextWindow,
        llm: CompletionClient | None,
        history_turns: int = DEFAULT_HISTORY_TURNS,
    ):
        self.profile_store = profile_store
        self.context_window = context_window
        self.llm = llm
        self.history_turns = history_turns

    @property
    def is_demo(self) -> bool:
        return self.llm is None

    def find_relevant_data(self, message: str) -> dict[str, Any]:
        """Relevance search over the stored profile; any failure means no context."""
        try:
            return search(message, self.profile_store.read())
        except Exception as e:
            logger.warning(f"Could not retrieve personal context: {e}")
            return {}

    def handle(
        self,
        message: str | None,
        session_id: str | None = DEFAULT_SESSION_ID,
        include_personal_context: bool = True,
    ) -> ChatResult:
        """
        Answer one chat message.

        Args:
            message: The user's message (required, non-empty)
            session_id: Conversation identifier (defaults to "default")
            include_personal_context: Whether to inject profile data

        Returns:
            ChatResult

        Raises:
            InvalidInput: If message is missing or empty
            AuthenticationFailure, RateLimited, UpstreamFailure: From the model
        """
        if not isinstance(message, str) or not message.strip():
            raise InvalidInput("Message is required")
        session_id = session_id or DEFAULT_SESSION_ID

        if self.is_demo:
            log_with_context(logger, logging.INFO, "Chat answered in demo mode", session_id=session_id)
            return ChatResult(
                response=DEMO_RESPONSE_TEMPLATE.format(message=message),
                session_id=session_id,
                personal_data_used=False,
                context_length=0,
                is_demo=True,
            )

        relevant_data: dict[str, Any] = {}
        if include_personal_context:
            relevant_data = self.find_relevant_data(message)

        history = self.context_window.get(session_id)
        prompt = compose(message, relevant_data, history, history_turns=self.history_turns)

        reply = self.llm.complete(prompt)

        self.context_window.append(session_id, message, reply)

        log_with_context(
            logger,
            logging.INFO,
            "Chat answered",
            session_id=session_id,
            sections=",".join(relevant_data) or "none",
            context_length=len(history),
        )

        return ChatResult(
            response=reply,
            session_id=session_id,
            personal_data_used=bool(relevant_data),
            context_length=len(history),
            is_demo=False,
        )
