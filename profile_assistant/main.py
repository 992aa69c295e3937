"""FastAPI application entry point."""

from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from profile_assistant.api import router as api_router
from profile_assistant.core.config import get_settings
from profile_assistant.core.exceptions import InternalFailure, InvalidInput, ProfileAssistantError
from profile_assistant.core.logging import get_logger
from profile_assistant.core.middleware import RequestLoggingMiddleware, SecurityHeadersMiddleware
from profile_assistant.core.schemas_profile import PROFILE_SCHEMA_VERSION
from profile_assistant.db.profile_store import get_profile_store

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    store = get_profile_store()
    logger.info(
        f"Profile assistant starting: env={settings.PROFILE_ASSISTANT_ENV}, "
        f"data={store.path}, model_configured={settings.model_configured}"
    )
    if not settings.model_configured:
        logger.warning("ANTHROPIC_API_KEY not set. Chat will answer in demo mode.")
    yield


def create_app() -> FastAPI:
    settings = get_settings()

    app = FastAPI(
        title="Profile Assistant",
        description="Personal profile store with a profile-aware chat assistant",
        version=PROFILE_SCHEMA_VERSION,
        lifespan=lifespan,
    )

    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(ProfileAssistantError)
    async def handle_domain_error(request: Request, exc: ProfileAssistantError) -> JSONResponse:
        if isinstance(exc, InternalFailure) and not get_settings().is_dev:
            body = {"error": exc.kind, "message": "Something went wrong"}
        else:
            body = exc.to_dict()
        return JSONResponse(status_code=exc.status_code, content=body)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        details = [
            {
                "path": ".".join(str(p) for p in err.get("loc", ())),
                "message": err.get("msg", ""),
                "type": err.get("type", ""),
            }
            for err in exc.errors()
        ]
        message = "Invalid request"
        if details:
            message = f"Invalid request: {details[0]['path']}: {details[0]['message']}"
        error = InvalidInput(message, details)
        return JSONResponse(status_code=error.status_code, content=error.to_dict())

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
        logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
        message = str(exc) if get_settings().is_dev else "Something went wrong"
        return JSONResponse(
            status_code=500,
            content={"error": InternalFailure.kind, "message": message},
        )

    @app.get("/health")
    async def health_check() -> JSONResponse:
        """Health check endpoint."""
        return JSONResponse(content={"status": "ok"}, status_code=200)

    @app.get("/api/health")
    async def api_health() -> dict:
        """Detailed health check."""
        settings = get_settings()
        return {
            "status": "healthy",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "version": PROFILE_SCHEMA_VERSION,
            "environment": settings.PROFILE_ASSISTANT_ENV,
            "modelConfigured": settings.model_configured,
        }

    # Include API router
    app.include_router(api_router, prefix="/api")

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
