from __future__ import annotations

from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from playlist_api.api.routes.audio import router as audio_router
from playlist_api.api.routes.auth import router as auth_router
from playlist_api.api.routes.playlists import router as playlists_router
from playlist_api.api.routes.search import router as search_router
from playlist_api.core.config import Settings, get_settings
from playlist_api.core.errors import ApiError, MissingFields
from playlist_api.core.logging import configure_logging, get_logger
from playlist_api.core.sessions import RevokedSessions
from playlist_api.middleware.observability import ObservabilityMiddleware
from playlist_api.services.search import YouTubeClient
from playlist_api.store.factory import build_stores

logger = get_logger("app")

# Define OpenAPI tags for grouping
openapi_tags = [
    {"name": "Health", "description": "Service health and readiness."},
    {"name": "Auth", "description": "Registration, login and session."},
    {"name": "Playlists", "description": "Playlist and video item management."},
    {"name": "Audio", "description": "Uploaded audio files inside playlists."},
    {"name": "Search", "description": "Video catalog search."},
]


async def _api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.warning("Request failed", extra={"path": request.url.path, "error": exc.code})
    return JSONResponse(status_code=exc.status_code, content={"error": exc.code})


async def _validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(status_code=MissingFields.status_code, content={"error": MissingFields.code})


# PUBLIC_INTERFACE
def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the application: stores, search client, middleware, routes and static uploads."""
    settings = settings or get_settings()
    configure_logging(settings)

    app = FastAPI(
        title="Playlist API",
        description="Playlists of catalog videos and uploaded audio, with ratings.",
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        openapi_tags=openapi_tags,
    )

    app.state.settings = settings
    app.state.user_store, app.state.playlist_store = build_stores(settings)
    app.state.search_client = YouTubeClient.from_settings(settings)
    app.state.revoked_sessions = RevokedSessions()

    app.add_exception_handler(ApiError, _api_error_handler)
    app.add_exception_handler(RequestValidationError, _validation_error_handler)

    # Apply CORS policy from configuration
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS if settings.CORS_ORIGINS else ["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    if settings.REQUEST_LOGGING_ENABLED:
        app.add_middleware(ObservabilityMiddleware)

    @app.get(
        "/",
        summary="Health Check",
        description="Health check endpoint for liveness probes.\n\nReturns a simple JSON indicating the service is healthy.",
        tags=["Health"],
        responses={200: {"description": "Service is healthy"}},
    )
    def health_check():
        """Root health endpoint."""
        return {"message": "Healthy"}

    prefix = settings.API_PREFIX.rstrip("/")
    app.include_router(auth_router, prefix=prefix)
    app.include_router(playlists_router, prefix=prefix)
    app.include_router(audio_router, prefix=prefix)
    app.include_router(search_router, prefix=prefix)

    settings.UPLOADS_DIR.mkdir(parents=True, exist_ok=True)
    app.mount(settings.UPLOADS_URL_PATH.rstrip("/"), StaticFiles(directory=settings.UPLOADS_DIR), name="uploads")

    logger.info(
        "Application ready",
        extra={"storage": settings.STORAGE_BACKEND, "search": "youtube" if settings.YOUTUBE_API_KEY else "demo"},
    )
    return app


def main() -> None:
    import uvicorn

    settings = get_settings()
    uvicorn.run(create_app(settings), host=settings.API_HOST, port=settings.API_PORT)


if __name__ == "__main__":
    main()
