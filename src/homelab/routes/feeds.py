from __future__ import annotations

import logging
import uuid

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel, Field, field_validator
from sqlalchemy.exc import IntegrityError

from homelab.auth import get_current_user_id
from homelab.database import async_session
from homelab.errors import UpstreamUnavailable
from homelab.ingestion.rss import FeedEntryFetcher
from homelab.services.feed_store import FeedStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/feeds", tags=["feeds"])


class FeedCreateRequest(BaseModel):
    id: str = Field(min_length=1)
    title: str = Field(min_length=1)
    url: str = Field(min_length=1)

    @field_validator("url")
    @classmethod
    def url_must_be_http(cls, value: str) -> str:
        if not value.startswith(("http://", "https://")):
            raise ValueError("Feed URL must be http or https")
        return value


class FeedResponse(BaseModel):
    id: str
    title: str
    url: str

    model_config = {"from_attributes": True}


class FeedEntryResponse(BaseModel):
    title: str
    link: str
    published: str
    summary: str | None = None

    model_config = {"from_attributes": True}


def get_feed_fetcher(request: Request) -> FeedEntryFetcher:
    return request.app.state.feed_fetcher


@router.get("/", response_model=list[FeedResponse])
async def list_feeds(user_id: uuid.UUID = Depends(get_current_user_id)):
    async with async_session() as db:
        store = FeedStore(db)
        feeds = await store.list_for_user(user_id)
        return [FeedResponse.model_validate(f) for f in feeds]


@router.post("/", status_code=201, response_model=FeedResponse)
async def create_feed(
    body: FeedCreateRequest,
    user_id: uuid.UUID = Depends(get_current_user_id),
):
    async with async_session() as db:
        store = FeedStore(db)
        try:
            feed = await store.create(user_id, body.id, body.title, body.url)
            await db.commit()
        except IntegrityError:
            await db.rollback()
            raise HTTPException(status_code=409, detail="Feed already exists")
        return FeedResponse.model_validate(feed)


@router.delete("/{feed_id}")
async def delete_feed(
    feed_id: str,
    user_id: uuid.UUID = Depends(get_current_user_id),
):
    async with async_session() as db:
        store = FeedStore(db)
        await store.delete(feed_id, user_id)
        await db.commit()
    return {"ok": True}


@router.get(
    "/{feed_id}/entries",
    response_model=list[FeedEntryResponse],
    response_model_exclude_none=True,
)
async def get_feed_entries(
    feed_id: str,
    user_id: uuid.UUID = Depends(get_current_user_id),
    fetcher: FeedEntryFetcher = Depends(get_feed_fetcher),
):
    async with async_session() as db:
        store = FeedStore(db)
        feed = await store.get_owned(feed_id, user_id)

    try:
        entries = await fetcher.get_entries(feed.id, feed.url)
    except UpstreamUnavailable:
        raise HTTPException(status_code=502, detail="Failed to fetch feed")
    except Exception:
        logger.exception("Unexpected error loading entries for feed %s", feed_id)
        raise HTTPException(status_code=500, detail="Server error")

    return [FeedEntryResponse.model_validate(e) for e in entries]
