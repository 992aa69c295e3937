"""Shared-secret API key check for the personal data routes."""

import hmac
from typing import Optional

from fastapi import Header, HTTPException, Query, status

from profile_assistant.core.config import get_settings
from profile_assistant.core.logging import get_logger

logger = get_logger(__name__)

_open_access_warned = False


def require_api_key(
    x_api_key: Optional[str] = Header(None, alias="X-API-Key"),
    api_key: Optional[str] = Query(None, alias="apiKey"),
) -> None:
    """
    Validate the API key from the X-API-Key header or apiKey query parameter.

    If PERSONAL_DATA_API_KEY is not configured, access is open (development).

    Raises:
        HTTPException: 401 if the key is missing or wrong
    """
    global _open_access_warned

    expected = get_settings().PERSONAL_DATA_API_KEY
    if not expected:
        if not _open_access_warned:
            logger.warning("No PERSONAL_DATA_API_KEY set. Personal data routes are open.")
            _open_access_warned = True
        return

    provided = x_api_key or api_key
    if not provided:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="API key required. Provide it via X-API-Key header or apiKey query parameter.",
        )

    if not hmac.compare_digest(provided.encode(), expected.encode()):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid API key.",
        )
