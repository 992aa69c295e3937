"""API router for /api endpoints."""

from fastapi import APIRouter

from profile_assistant.api import chat, profile

router = APIRouter()

# Personal data management (API key protected)
router.include_router(profile.router, tags=["personal-data"])

# Profile-aware chat
router.include_router(chat.router, tags=["chat"])
