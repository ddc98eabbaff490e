"""Resumable search -> video -> comments scraping runs."""

from ytcomments.scraper.errors import NoCommentsFound, ScrapeError
from ytcomments.scraper.models import (
    CommentRecord,
    MetadataConfig,
    ResumeState,
    RunStats,
    ScrapeResult,
    SearchSession,
    VideoMetadata,
)
from ytcomments.scraper.orchestrator import CommentScraper

__all__ = [
    "CommentRecord",
    "CommentScraper",
    "MetadataConfig",
    "NoCommentsFound",
    "ResumeState",
    "RunStats",
    "ScrapeError",
    "ScrapeResult",
    "SearchSession",
    "VideoMetadata",
]
