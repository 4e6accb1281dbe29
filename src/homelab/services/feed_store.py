from __future__ import annotations

import uuid

from fastapi import HTTPException
from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from homelab.models import RssFeed


class FeedStore:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_for_user(self, user_id: uuid.UUID) -> list[RssFeed]:
        stmt = (
            select(RssFeed)
            .where(RssFeed.user_id == user_id)
            .order_by(RssFeed.sort_order)
        )
        return list((await self.db.scalars(stmt)).all())

    async def create(self, user_id: uuid.UUID, feed_id: str, title: str, url: str) -> RssFeed:
        next_order = await self.db.scalar(
            select(func.coalesce(func.max(RssFeed.sort_order), -1) + 1).where(
                RssFeed.user_id == user_id
            )
        )
        feed = RssFeed(id=feed_id, user_id=user_id, title=title, url=url, sort_order=next_order)
        self.db.add(feed)
        await self.db.flush()
        return feed

    async def get_owned(self, feed_id: str, user_id: uuid.UUID) -> RssFeed:
        feed = await self.db.get(RssFeed, feed_id)
        if not feed or feed.user_id != user_id:
            raise HTTPException(status_code=404, detail="Feed not found")
        return feed

    async def delete(self, feed_id: str, user_id: uuid.UUID) -> None:
        await self.db.execute(
            delete(RssFeed).where(RssFeed.id == feed_id, RssFeed.user_id == user_id)
        )
        await self.db.flush()
