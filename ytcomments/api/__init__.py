"""HTTP API: streamed scraping runs, CSV downloads and a liveness probe."""

from ytcomments.api.app import create_app

__all__ = [
    "create_app",
]
