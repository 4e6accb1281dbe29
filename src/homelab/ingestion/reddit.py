from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import partial
from urllib.parse import quote

from homelab.config import settings
from homelab.errors import ParseFailure, UpstreamUnavailable
from homelab.services.cache import COMMUNITY_POSTS_TTL, TTLCache
from homelab.services.fetcher import BoundedFetcher
from homelab.services.inflight import InflightRequests

logger = logging.getLogger(__name__)

PAGE_SIZE = 20
SELFTEXT_LIMIT = 200


@dataclass(frozen=True)
class CommunityPost:
    id: str
    title: str
    url: str
    permalink: str
    score: int
    num_comments: int
    author: str
    created_utc: int
    thumbnail: str | None = None
    selftext: str | None = None


def clean_subreddit_name(name: str) -> str:
    name = name.strip().lstrip("/")
    if name.startswith("r/"):
        name = name[2:]
    return name.strip("/").strip()


class CommunityPostFetcher:
    def __init__(
        self,
        fetcher: BoundedFetcher,
        base_url: str | None = None,
        cache: TTLCache[list[CommunityPost]] | None = None,
        inflight: InflightRequests | None = None,
    ):
        self.fetcher = fetcher
        self.base_url = (base_url or settings.reddit_base_url).rstrip("/")
        if cache is None:
            cache = TTLCache(COMMUNITY_POSTS_TTL, max_entries=settings.cache_max_entries)
        self.cache = cache
        self.inflight = inflight if inflight is not None else InflightRequests()

    def build_listing_url(self, name: str) -> str:
        return f"{self.base_url}/r/{quote(name, safe='')}/hot.json?limit={PAGE_SIZE}"

    def normalize_post(self, data: dict) -> CommunityPost:
        thumbnail = data.get("thumbnail")
        # reddit uses sentinels like "self", "default" or "nsfw" for missing thumbnails
        if not (isinstance(thumbnail, str) and thumbnail.startswith(("http://", "https://"))):
            thumbnail = None

        selftext = data.get("selftext")
        if isinstance(selftext, str):
            selftext = selftext[:SELFTEXT_LIMIT]
        else:
            selftext = None

        return CommunityPost(
            id=str(data["id"]),
            title=data["title"],
            url=data.get("url") or "",
            permalink=f"{self.base_url}{data.get('permalink', '')}",
            score=int(data.get("score") or 0),
            num_comments=int(data.get("num_comments") or 0),
            author=data.get("author") or "",
            created_utc=int(data.get("created_utc") or 0),
            thumbnail=thumbnail,
            selftext=selftext,
        )

    async def get_posts(self, name: str) -> list[CommunityPost]:
        cached = self.cache.get(name)
        if cached is not None:
            return cached

        return await self.inflight.run(name, partial(self._refresh, name))

    async def _refresh(self, name: str) -> list[CommunityPost]:
        url = self.build_listing_url(name)
        logger.info("Refreshing r/%s from %s", name, url)
        try:
            response = await self.fetcher.get(url)
            try:
                children = response.json()["data"]["children"]
                posts = [self.normalize_post(child["data"]) for child in children[:PAGE_SIZE]]
            except (ValueError, KeyError, TypeError) as exc:
                raise ParseFailure(f"Unexpected listing payload for r/{name}") from exc
        except UpstreamUnavailable as exc:
            logger.warning("r/%s unavailable: %s", name, exc)
            raise

        self.cache.put(name, posts)
        return posts
