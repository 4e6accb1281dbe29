from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request, Response

from homelab.errors import InvalidInput, NotFound
from homelab.ingestion.favicon import FaviconResolver

router = APIRouter(prefix="/favicon", tags=["favicon"])

CACHE_CONTROL = "public, max-age=86400"


def get_favicon_resolver(request: Request) -> FaviconResolver:
    return request.app.state.favicon_resolver


@router.get("/{domain}")
async def get_favicon(
    domain: str,
    resolver: FaviconResolver = Depends(get_favicon_resolver),
):
    try:
        asset = await resolver.resolve(domain)
    except InvalidInput:
        raise HTTPException(status_code=400, detail="Invalid domain")
    except NotFound:
        raise HTTPException(status_code=404, detail="No favicon found")

    return Response(
        content=asset.content,
        media_type=asset.content_type,
        headers={"Cache-Control": CACHE_CONTROL},
    )
