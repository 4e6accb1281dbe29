from __future__ import annotations

import uuid

from fastapi import HTTPException
from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from homelab.ingestion.reddit import clean_subreddit_name
from homelab.models import Subreddit


class SubredditStore:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_for_user(self, user_id: uuid.UUID) -> list[Subreddit]:
        stmt = (
            select(Subreddit)
            .where(Subreddit.user_id == user_id)
            .order_by(Subreddit.sort_order)
        )
        return list((await self.db.scalars(stmt)).all())

    async def create(self, user_id: uuid.UUID, subreddit_id: str, name: str) -> Subreddit:
        name = clean_subreddit_name(name)
        if not name:
            raise HTTPException(status_code=422, detail="Subreddit name is required")

        next_order = await self.db.scalar(
            select(func.coalesce(func.max(Subreddit.sort_order), -1) + 1).where(
                Subreddit.user_id == user_id
            )
        )
        subreddit = Subreddit(id=subreddit_id, user_id=user_id, name=name, sort_order=next_order)
        self.db.add(subreddit)
        await self.db.flush()
        return subreddit

    async def get_owned(self, subreddit_id: str, user_id: uuid.UUID) -> Subreddit:
        subreddit = await self.db.get(Subreddit, subreddit_id)
        if not subreddit or subreddit.user_id != user_id:
            raise HTTPException(status_code=404, detail="Subreddit not found")
        return subreddit

    async def delete(self, subreddit_id: str, user_id: uuid.UUID) -> None:
        await self.db.execute(
            delete(Subreddit).where(Subreddit.id == subreddit_id, Subreddit.user_id == user_id)
        )
        await self.db.flush()
