"""Personal data API endpoints."""

from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, Body, Depends
from pydantic import BaseModel

from profile_assistant.core.auth import require_api_key
from profile_assistant.core.exceptions import InvalidInput, NotFound, ValidationFailure
from profile_assistant.core.profile_validation import validate_profile
from profile_assistant.core.rate_limiter import limit_data_read, limit_data_write
from profile_assistant.core.relevance_search import search
from profile_assistant.core.schemas_profile import PROFILE_SCHEMA_VERSION, build_schema_info
from profile_assistant.db.profile_store import ProfileStore, get_profile_store

router = APIRouter(prefix="/personal-data")

READ_DEPS = [Depends(require_api_key), Depends(limit_data_read)]
WRITE_DEPS = [Depends(require_api_key), Depends(limit_data_write)]


class SearchRequest(BaseModel):
    """Request to preview relevance search over the profile."""

    query: str | None = None


@router.get("", dependencies=READ_DEPS)
def get_personal_data(store: ProfileStore = Depends(get_profile_store)) -> dict[str, Any]:
    """Get the whole profile document."""
    return {
        "success": True,
        "data": store.read(),
        "message": "Personal data retrieved successfully",
    }


@router.put("", dependencies=WRITE_DEPS)
def put_personal_data(
    body: Any = Body(...),
    store: ProfileStore = Depends(get_profile_store),
) -> dict[str, Any]:
    """Validate and replace the whole profile document."""
    data = store.write(body)
    return {
        "success": True,
        "data": data,
        "message": "Personal data updated successfully",
    }


@router.get("/health")
def personal_data_health() -> dict[str, Any]:
    """Health check for the personal data API."""
    return {
        "success": True,
        "service": "personal-data-api",
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": PROFILE_SCHEMA_VERSION,
    }


@router.get("/schema/info", dependencies=READ_DEPS)
def schema_info() -> dict[str, Any]:
    """Describe sections, fields and enums (for frontend forms)."""
    return {
        "success": True,
        "data": build_schema_info(),
        "message": "Schema information retrieved successfully",
    }


@router.post("/search", dependencies=READ_DEPS)
def search_personal_data(
    request: SearchRequest,
    store: ProfileStore = Depends(get_profile_store),
) -> dict[str, Any]:
    """Return the profile subset relevant to a query (what chat would use)."""
    if not request.query or not request.query.strip():
        raise InvalidInput("Search query is required")

    relevant = search(request.query, store.read())
    return {
        "success": True,
        "data": relevant,
        "query": request.query,
        "sections": list(relevant),
        "dataFound": bool(relevant),
        "message": "Relevant data retrieved successfully",
    }


@router.post("/validate", dependencies=READ_DEPS)
def validate_personal_data(body: Any = Body(...)) -> dict[str, Any]:
    """Validate a profile document without storing it."""
    result = validate_profile(body)
    if not result.ok:
        raise ValidationFailure(
            "Data validation failed", [issue.to_dict() for issue in result.issues]
        )
    return {
        "success": True,
        "data": result.value,
        "message": "Data validation passed",
    }


@router.get("/{section}", dependencies=READ_DEPS)
def get_section(section: str, store: ProfileStore = Depends(get_profile_store)) -> dict[str, Any]:
    """Get one top-level section of the profile."""
    value = store.read_section(section)
    if value is None:
        raise NotFound(f"Section '{section}' not found")
    return {
        "success": True,
        "data": value,
        "section": section,
        "message": f"Section '{section}' retrieved successfully",
    }


@router.put("/{section}", dependencies=WRITE_DEPS)
def put_section(
    section: str,
    body: Any = Body(...),
    store: ProfileStore = Depends(get_profile_store),
) -> dict[str, Any]:
    """Validate and replace one top-level section of the profile."""
    value = store.write_section(section, body)
    return {
        "success": True,
        "data": value,
        "section": section,
        "message": f"Section '{section}' updated successfully",
    }
