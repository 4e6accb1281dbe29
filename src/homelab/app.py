from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from homelab.config import settings
from homelab.database import init_models
from homelab.ingestion.favicon import FaviconResolver
from homelab.ingestion.reddit import CommunityPostFetcher
from homelab.ingestion.rss import FeedEntryFetcher
from homelab.routes.favicon import router as favicon_router
from homelab.routes.feeds import router as feeds_router
from homelab.routes.subreddits import router as subreddits_router
from homelab.services.fetcher import BoundedFetcher


@asynccontextmanager
async def lifespan(app: FastAPI):
    await init_models()
    yield


def create_app() -> FastAPI:
    app = FastAPI(title="Homelab Dashboard API", version="0.1.0", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # one fetcher and cache per resource kind, living as long as the app
    upstream = BoundedFetcher(settings.upstream_timeout, settings.user_agent)
    app.state.favicon_resolver = FaviconResolver(
        BoundedFetcher(settings.favicon_timeout, settings.favicon_user_agent)
    )
    app.state.feed_fetcher = FeedEntryFetcher(upstream)
    app.state.community_fetcher = CommunityPostFetcher(upstream)

    app.include_router(favicon_router)
    app.include_router(feeds_router)
    app.include_router(subreddits_router)

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    return app


app = create_app()
