"""Stremio addon routes package.

Import the router via get_router() to avoid circular imports.
"""

from fastapi import APIRouter

_router = None


def get_router() -> APIRouter:
    """Create and return the combined stremio router.

    Uses lazy imports to avoid circular dependencies.
    """
    global _router
    if _router is not None:
        return _router

    from .manifest import router as manifest_router
    from .stream import router as stream_router

    combined = APIRouter()
    combined.include_router(manifest_router)
    combined.include_router(stream_router)
    _router = combined
    return _router


__all__ = ["get_router"]
