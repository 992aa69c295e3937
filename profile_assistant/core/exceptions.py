"""Error taxonomy shared by the store, the chat pipeline and the HTTP layer.

Each error carries a stable ``kind`` and the HTTP status the boundary maps it
to, so callers can tell "fix your input" from "fix your credentials" from
"retry later" without parsing messages.
"""

from typing import Any


class ProfileAssistantError(Exception):
    """Base class for all domain errors."""

    kind = "internal_failure"
    status_code = 500

    def __init__(self, message: str, details: Any = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self, include_details: bool = True) -> dict[str, Any]:
        body: dict[str, Any] = {"error": self.kind, "message": self.message}
        if include_details and self.details is not None:
            body["details"] = self.details
        return body


class InvalidInput(ProfileAssistantError):
    """Missing or malformed request field."""

    kind = "invalid_input"
    status_code = 400


class ValidationFailure(ProfileAssistantError):
    """Profile data violates the schema."""

    kind = "validation_failure"
    status_code = 400

    def __init__(self, message: str, issues: list[dict[str, Any]] | None = None):
        super().__init__(message, details=issues or [])
        self.issues = issues or []

    @property
    def field(self) -> str | None:
        """Path of the first offending field."""
        return self.issues[0]["path"] if self.issues else None


class NotFound(ProfileAssistantError):
    kind = "not_found"
    status_code = 404


class AuthenticationFailure(ProfileAssistantError):
    """The language model rejected our credential."""

    kind = "authentication_failure"
    status_code = 401


class RateLimited(ProfileAssistantError):
    """The language model refused the call for quota or rate reasons."""

    kind = "rate_limited"
    status_code = 429


class UpstreamFailure(ProfileAssistantError):
    kind = "upstream_failure"
    status_code = 502


class UpstreamTimeout(UpstreamFailure):
    kind = "upstream_timeout"
    status_code = 504


class InternalFailure(ProfileAssistantError):
    """Persistence I/O error or unexpected exception."""

    kind = "internal_failure"
    status_code = 500
