"""FastAPI application factory."""

from __future__ import annotations

from fastapi import FastAPI

from ytcomments.api.routes.download import router as download_router
from ytcomments.api.routes.health import router as health_router
from ytcomments.api.routes.scraper import router as scraper_router
from ytcomments.config.settings import Settings, get_settings
from ytcomments.youtube.client import YouTubeClient


def create_app(
    settings: Settings | None = None,
    client: YouTubeClient | None = None,
) -> FastAPI:
    """
    Build and return a fully wired FastAPI application.

    One ``YouTubeClient`` is shared by all requests; it only holds an HTTP
    session, every run keeps its own counters and position.
    """
    settings = settings or get_settings()

    app = FastAPI(
        title="YouTube Comment Scraper API",
        version="0.1.0",
        description="Search YouTube videos and harvest their comments as events or CSV",
    )

    # Shared state, accessible via request.app.state in routes
    app.state.settings = settings
    app.state.youtube_client = client or YouTubeClient(settings=settings.youtube)

    app.include_router(health_router)
    app.include_router(scraper_router)
    app.include_router(download_router)

    return app
