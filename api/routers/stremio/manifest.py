"""Stremio manifest route."""

from fastapi import APIRouter, Response

from db.config import settings
from utils import const

router = APIRouter()


def generate_manifest() -> dict:
    return {
        "id": "community.debridfusion",
        "version": settings.version,
        "name": settings.addon_name,
        "description": settings.description,
        "resources": ["stream"],
        "types": ["movie", "series"],
        "idPrefixes": ["tt"],
        "catalogs": [],
        "behaviorHints": {"configurable": True, "configurationRequired": False},
    }


@router.get("/manifest.json", tags=["manifest"])
@router.get("/{user_config}/manifest.json", tags=["manifest"])
async def get_manifest(response: Response):
    """Get the Stremio addon manifest."""
    response.headers.update(const.NO_CACHE_HEADERS)
    return generate_manifest()
