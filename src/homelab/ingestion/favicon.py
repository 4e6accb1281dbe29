from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from functools import partial

from homelab.config import settings
from homelab.errors import InvalidInput, NotFound, UpstreamUnavailable
from homelab.services.cache import FAVICON_TTL, TTLCache
from homelab.services.fetcher import BoundedFetcher, FetchResponse
from homelab.services.inflight import InflightRequests

logger = logging.getLogger(__name__)

DOMAIN_PATTERN = re.compile(r"[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}")
AGGREGATOR_URL = "https://icons.duckduckgo.com/ip3/{domain}.ico"
# anything smaller is a 1x1 placeholder or an error page served as image/*
MIN_ICON_BYTES = 100


@dataclass(frozen=True)
class FaviconAsset:
    content: bytes
    content_type: str


def is_valid_domain(domain: str) -> bool:
    return DOMAIN_PATTERN.fullmatch(domain) is not None


def candidate_urls(domain: str) -> list[str]:
    """Icon locations for ``domain``, best quality first."""
    return [
        f"https://{domain}/apple-touch-icon.png",
        f"https://{domain}/apple-touch-icon-precomposed.png",
        f"https://{domain}/favicon-32x32.png",
        f"https://{domain}/favicon.png",
        AGGREGATOR_URL.format(domain=domain),
        f"https://{domain}/favicon.ico",
    ]


def is_icon_response(response: FetchResponse) -> bool:
    return (
        response.content_type.startswith("image/")
        and len(response.content) >= MIN_ICON_BYTES
    )


class FaviconResolver:
    def __init__(
        self,
        fetcher: BoundedFetcher,
        cache: TTLCache[FaviconAsset] | None = None,
        inflight: InflightRequests | None = None,
    ):
        self.fetcher = fetcher
        if cache is None:
            cache = TTLCache(FAVICON_TTL, max_entries=settings.cache_max_entries)
        self.cache = cache
        self.inflight = inflight if inflight is not None else InflightRequests()

    async def resolve(self, domain: str) -> FaviconAsset:
        if not is_valid_domain(domain):
            raise InvalidInput(f"Invalid domain: {domain!r}")

        cached = self.cache.get(domain)
        if cached is not None:
            return cached

        return await self.inflight.run(domain, partial(self._walk_candidates, domain))

    async def _walk_candidates(self, domain: str) -> FaviconAsset:
        for url in candidate_urls(domain):
            try:
                response = await self.fetcher.get(url)
            except UpstreamUnavailable as exc:
                logger.debug("Favicon candidate %s failed: %s", url, exc)
                continue

            if not is_icon_response(response):
                logger.debug(
                    "Favicon candidate %s rejected (%s, %d bytes)",
                    url,
                    response.content_type or "no content-type",
                    len(response.content),
                )
                continue

            asset = FaviconAsset(content=response.content, content_type=response.content_type)
            self.cache.put(domain, asset)
            return asset

        # not cached: the next request walks the whole chain again
        logger.info("No favicon found for %s", domain)
        raise NotFound(f"No favicon found for {domain}")
