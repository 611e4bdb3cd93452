"""FastAPI application factory."""

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from db.config import settings
from utils import const


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application instance.
    """
    app = FastAPI(
        title=settings.addon_name,
        description=settings.description,
        version=settings.version,
    )

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def add_cors_header(request: Request, call_next):
        response = await call_next(request)
        response.headers.update(const.CORS_HEADERS)
        return response

    _register_routers(app)

    return app


def _register_routers(app: FastAPI) -> None:
    """Register all API routers.

    Args:
        app: FastAPI application instance.
    """
    # Import routers here to avoid circular imports
    from api.routers.stremio import get_router as get_stremio_router
    from streaming_providers.routes import router as streaming_provider_router

    # Stremio addon routes (manifest, stream)
    app.include_router(get_stremio_router())
    # Playback resolution of proxied stream URLs
    app.include_router(streaming_provider_router)
