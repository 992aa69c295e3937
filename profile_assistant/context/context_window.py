"""In-memory, per-session conversation context with a fixed turn cap."""

import threading
import time
from datetime import datetime, timezone
from functools import lru_cache

from profile_assistant.context.models import SessionSummary, Turn
from profile_assistant.core.config import get_settings

DEFAULT_MAX_TURNS = 10


class ContextWindow:
    """
    Recent-turn history keyed by session id.

    - created lazily on the first appended exchange
    - capped at ``max_turns``; oldest turns are dropped first
    - no expiry: sessions live until cleared or the process exits
    - thread-safe: each append/clear is one critical section
    """

    def __init__(self, max_turns: int = DEFAULT_MAX_TURNS):
        if max_turns < 2:
            raise ValueError("max_turns must hold at least one exchange")
        self.max_turns = max_turns
        self._lock = threading.Lock()
        # session_id -> {"turns": tuple[Turn, ...], "last_activity": float}
        self._items: dict[str, dict[str, object]] = {}

    def get(self, session_id: str) -> list[Turn]:
        """Return a copy of the session's turns (empty if unknown)."""
        with self._lock:
            item = self._items.get(session_id)
            return list(item["turns"]) if item else []  # type: ignore[arg-type]

    def append(self, session_id: str, user_message: str, assistant_reply: str) -> None:
        """
        Append user+assistant messages as one exchange and prune to cap.
        """
        exchange = (
            Turn(role="user", content=user_message),
            Turn(role="assistant", content=assistant_reply),
        )
        with self._lock:
            item = self._items.get(session_id)
            turns = tuple(item["turns"]) if item else ()  # type: ignore[arg-type]
            turns = (turns + exchange)[-self.max_turns:]
            # Replace wholesale; snapshots handed out by get() stay untouched
            self._items[session_id] = {"turns": turns, "last_activity": time.time()}

    def clear(self, session_id: str) -> None:
        """Remove all turns for a session. Unknown sessions are ignored."""
        with self._lock:
            self._items.pop(session_id, None)

    def list_sessions(self) -> list[SessionSummary]:
        with self._lock:
            snapshot = [
                (sid, len(item["turns"]), float(item["last_activity"]))  # type: ignore[arg-type]
                for sid, item in self._items.items()
            ]
        return [
            SessionSummary(
                session_id=sid,
                message_count=count,
                last_activity=datetime.fromtimestamp(ts, tz=timezone.utc),
            )
            for sid, count, ts in snapshot
        ]

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)


@lru_cache(maxsize=1)
def get_context_window() -> ContextWindow:
    """Get the process-wide context window (cached singleton)."""
    return ContextWindow(max_turns=get_settings().CONTEXT_MAX_TURNS)
