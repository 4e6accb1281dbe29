from __future__ import annotations

import logging
import uuid

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel, Field
from sqlalchemy.exc import IntegrityError

from homelab.auth import get_current_user_id
from homelab.database import async_session
from homelab.errors import UpstreamUnavailable
from homelab.ingestion.reddit import CommunityPostFetcher
from homelab.services.subreddit_store import SubredditStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/subreddits", tags=["subreddits"])


class SubredditCreateRequest(BaseModel):
    id: str = Field(min_length=1)
    name: str = Field(min_length=1)


class SubredditResponse(BaseModel):
    id: str
    name: str

    model_config = {"from_attributes": True}


class CommunityPostResponse(BaseModel):
    id: str
    title: str
    url: str
    permalink: str
    score: int
    num_comments: int = Field(serialization_alias="numComments")
    author: str
    created_utc: int = Field(serialization_alias="createdUtc")
    thumbnail: str | None
    selftext: str | None

    model_config = {"from_attributes": True}


def get_community_fetcher(request: Request) -> CommunityPostFetcher:
    return request.app.state.community_fetcher


@router.get("/", response_model=list[SubredditResponse])
async def list_subreddits(user_id: uuid.UUID = Depends(get_current_user_id)):
    async with async_session() as db:
        store = SubredditStore(db)
        subreddits = await store.list_for_user(user_id)
        return [SubredditResponse.model_validate(s) for s in subreddits]


@router.post("/", status_code=201, response_model=SubredditResponse)
async def create_subreddit(
    body: SubredditCreateRequest,
    user_id: uuid.UUID = Depends(get_current_user_id),
):
    async with async_session() as db:
        store = SubredditStore(db)
        try:
            subreddit = await store.create(user_id, body.id, body.name)
            await db.commit()
        except IntegrityError:
            await db.rollback()
            raise HTTPException(status_code=409, detail="Subreddit already exists")
        return SubredditResponse.model_validate(subreddit)


@router.delete("/{subreddit_id}")
async def delete_subreddit(
    subreddit_id: str,
    user_id: uuid.UUID = Depends(get_current_user_id),
):
    async with async_session() as db:
        store = SubredditStore(db)
        await store.delete(subreddit_id, user_id)
        await db.commit()
    return {"ok": True}


@router.get("/{subreddit_id}/posts", response_model=list[CommunityPostResponse])
async def get_subreddit_posts(
    subreddit_id: str,
    user_id: uuid.UUID = Depends(get_current_user_id),
    fetcher: CommunityPostFetcher = Depends(get_community_fetcher),
):
    async with async_session() as db:
        store = SubredditStore(db)
        subreddit = await store.get_owned(subreddit_id, user_id)

    # keyed by name: two follow entries for the same subreddit share one cache slot
    try:
        posts = await fetcher.get_posts(subreddit.name)
    except UpstreamUnavailable:
        raise HTTPException(status_code=502, detail="Failed to fetch subreddit")
    except Exception:
        logger.exception("Unexpected error loading posts for subreddit %s", subreddit_id)
        raise HTTPException(status_code=500, detail="Server error")

    return [CommunityPostResponse.model_validate(p) for p in posts]
