"""Stremio stream routes."""

import logging
from typing import Literal

from fastapi import APIRouter, HTTPException, Response
from pydantic import ValidationError

from api.services import stream as stream_service
from db import schemas
from db.schemas import ContentIdentifier
from streaming_providers.exceptions import MetadataError, UnsupportedProviderError
from utils import const
from utils.network import decode_user_config

router = APIRouter()


@router.get(
    "/{user_config}/stream/{catalog_type}/{video_id}.json",
    response_model=schemas.Streams,
    response_model_exclude_none=True,
    tags=["stream"],
)
async def get_streams(
    user_config: str,
    catalog_type: Literal["movie", "series"],
    video_id: str,
    response: Response,
):
    """Get streams for a movie or a series episode (``tt0903747:1:5``)."""
    try:
        config = decode_user_config(user_config)
        content = ContentIdentifier.from_video_id(catalog_type, video_id)
    except (ValueError, ValidationError) as error:
        raise HTTPException(status_code=400, detail=f"Invalid request: {error}")

    try:
        streams = await stream_service.get_streams(config, content)
    except UnsupportedProviderError as error:
        raise HTTPException(status_code=400, detail=error.message)
    except MetadataError as error:
        logging.error("Metadata lookup failed for %s: %s", video_id, error.message)
        raise HTTPException(status_code=502, detail="Metadata lookup failed.")

    response.headers.update(const.CACHE_HEADERS if streams else const.NO_CACHE_HEADERS)
    return {"streams": streams}
