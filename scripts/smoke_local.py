"""Live smoke test for the fetch-and-cache layer.

Hits real upstreams (favicon hosts, an RSS feed and reddit) through the same
fetcher objects the API uses. No database or server needed.

Usage:
    uv run python scripts/smoke_local.py
"""

import asyncio
import sys
import time
import traceback

from homelab.app import create_app

DOMAIN = "github.com"
FEED_ID = "smoke-hn"
FEED_URL = "https://hnrss.org/frontpage?count=5"
SUBREDDIT = "selfhosted"


def step(n: int, title: str) -> None:
    print(f"\n{'='*60}")
    print(f"  Step {n}: {title}")
    print(f"{'='*60}")


async def timed(label: str, coro):
    started = time.monotonic()
    result = await coro
    print(f"  {label}: {(time.monotonic() - started) * 1000:.0f} ms")
    return result


async def main():
    app = create_app()
    resolver = app.state.favicon_resolver
    feeds = app.state.feed_fetcher
    posts = app.state.community_fetcher
    failed = False

    try:
        step(1, f"Resolve favicon for {DOMAIN} (live network)")
        asset = await timed("cold", resolver.resolve(DOMAIN))
        print(f"  {asset.content_type}, {len(asset.content)} bytes")
        cached = await timed("cached", resolver.resolve(DOMAIN))
        assert cached is asset, "Second resolve should be served from cache"

        step(2, f"Fetch feed entries from {FEED_URL}")
        entries = await timed("cold", feeds.get_entries(FEED_ID, FEED_URL))
        assert entries, "Feed returned no entries"
        for e in entries:
            print(f"    - {e.title[:70]}")
        await timed("cached", feeds.get_entries(FEED_ID, FEED_URL))

        step(3, f"Fetch hot posts from r/{SUBREDDIT}")
        hot = await timed("cold", posts.get_posts(SUBREDDIT))
        assert len(hot) <= 20, "Listing exceeds page size"
        for p in hot[:5]:
            print(f"    [{p.score:>5}] {p.title[:60]}")
        await timed("cached", posts.get_posts(SUBREDDIT))

        print(f"\n{'='*60}")
        print("  SMOKE TEST PASSED")
        print(f"{'='*60}\n")

    except Exception:
        failed = True
        traceback.print_exc()
        print(f"\n{'='*60}")
        print("  SMOKE TEST FAILED")
        print(f"{'='*60}\n")

    sys.exit(1 if failed else 0)


if __name__ == "__main__":
    asyncio.run(main())
