from __future__ import annotations

import asyncio
import io
import logging
from dataclasses import dataclass
from functools import partial

import feedparser
from bs4 import BeautifulSoup

from homelab.config import settings
from homelab.errors import ParseFailure, UpstreamUnavailable
from homelab.services.cache import FEED_ENTRIES_TTL, TTLCache
from homelab.services.fetcher import BoundedFetcher
from homelab.services.inflight import InflightRequests

logger = logging.getLogger(__name__)

MAX_ENTRIES = 30
SUMMARY_LIMIT = 300
UNTITLED = "Untitled"


@dataclass(frozen=True)
class FeedEntry:
    title: str
    link: str
    published: str
    summary: str | None = None


def _strip_html(html: str) -> str:
    return BeautifulSoup(html, "lxml").get_text(separator=" ", strip=True)


def parse_entry(entry) -> FeedEntry:
    title = getattr(entry, "title", "") or UNTITLED
    # feedparser resolves Atom <link href> and RSS <link>text</link> alike
    link = getattr(entry, "link", "") or ""
    published = getattr(entry, "published", "") or getattr(entry, "updated", "") or ""

    summary = None
    raw_summary = getattr(entry, "summary", None)
    if raw_summary is not None:
        summary = _strip_html(raw_summary)[:SUMMARY_LIMIT]

    return FeedEntry(title=title, link=link, published=published, summary=summary)


def parse_feed(content: bytes) -> list[FeedEntry]:
    """Parse an RSS or Atom document into at most ``MAX_ENTRIES`` entries."""
    # a file object keeps feedparser from treating the body as a URL or path
    feed = feedparser.parse(io.BytesIO(content))
    if feed.bozo and not feed.entries:
        raise ParseFailure(f"Unreadable feed document: {feed.get('bozo_exception')}")

    return [parse_entry(entry) for entry in feed.entries[:MAX_ENTRIES]]


class FeedEntryFetcher:
    def __init__(
        self,
        fetcher: BoundedFetcher,
        cache: TTLCache[tuple[str, list[FeedEntry]]] | None = None,
        inflight: InflightRequests | None = None,
    ):
        self.fetcher = fetcher
        if cache is None:
            cache = TTLCache(FEED_ENTRIES_TTL, max_entries=settings.cache_max_entries)
        self.cache = cache
        self.inflight = inflight if inflight is not None else InflightRequests()

    async def get_entries(self, feed_id: str, url: str) -> list[FeedEntry]:
        # entries remember their source URL so a re-used feed id never serves another feed
        cached = self.cache.get(feed_id)
        if cached is not None and cached[0] == url:
            return cached[1]

        return await self.inflight.run(f"{feed_id} {url}", partial(self._refresh, feed_id, url))

    async def _refresh(self, feed_id: str, url: str) -> list[FeedEntry]:
        logger.info("Refreshing feed %s from %s", feed_id, url)
        try:
            response = await self.fetcher.get(url)
            loop = asyncio.get_event_loop()
            entries = await loop.run_in_executor(None, parse_feed, response.content)
        except UpstreamUnavailable as exc:
            logger.warning("Feed %s unavailable: %s", feed_id, exc)
            raise

        self.cache.put(feed_id, (url, entries))
        return entries
