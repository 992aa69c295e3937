"""Conversation context for the profile-aware chat assistant.

This module provides:
- Bounded per-session conversation history
- Prompt composition from relevant profile data and recent turns
"""

from profile_assistant.context.models import SessionSummary, Turn

__all__ = [
    # Models
    "SessionSummary",
    "Turn",
]
