import logging

from fastapi import APIRouter, HTTPException, Request, Response
from fastapi.responses import RedirectResponse

from streaming_providers import resolver
from utils import const
from utils.network import get_user_public_ip

router = APIRouter()


@router.head(
    "/resolve/{provider}/{api_key}/{host_reference:path}",
    tags=["streaming_provider"],
)
@router.get(
    "/resolve/{provider}/{api_key}/{host_reference:path}",
    tags=["streaming_provider"],
)
async def resolve_endpoint(
    request: Request,
    response: Response,
    provider: str,
    api_key: str,
    host_reference: str,
    item_id: str | None = None,
):
    response.headers.update(const.NO_CACHE_HEADERS)
    user_ip = get_user_public_ip(request)

    video_url = await resolver.resolve_url(
        provider, api_key, item_id, host_reference, user_ip
    )
    if not video_url:
        logging.info("No playable URL for %s reference %s", provider, host_reference)
        raise HTTPException(
            status_code=404,
            detail="Unable to resolve the stream, try another one.",
            headers=const.NO_CACHE_HEADERS,
        )

    return RedirectResponse(url=video_url, headers=response.headers, status_code=302)
