"""
Central configuration for the YouTube comment harvester.

All tunables live here. Nothing is hardcoded in module code.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from functools import lru_cache


def _project_root() -> Path:
    """Walk up from this file to find the project root (where pyproject.toml lives)."""
    current = Path(__file__).resolve().parent
    while current != current.parent:
        if (current / "pyproject.toml").exists():
            return current
        current = current.parent
    # Fallback: two levels up from config/settings.py
    return Path(__file__).resolve().parent.parent.parent


@dataclass(frozen=True)
class YouTubeSettings:
    """Settings for the InnerTube client."""

    # Origin of the private JSON API
    base_url: str = "https://www.youtube.com"

    # Path prefix of the InnerTube endpoints (search, next, ...)
    api_path: str = "/youtubei/v1"

    # Client identity sent in every request context
    client_name: str = "WEB"
    client_version: str = "2.20250101.00.00"

    # Interface language and content location
    hl: str = "id"
    gl: str = "ID"

    # User-Agent string sent with every request
    user_agent: str = (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
        "AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/131.0.0.0 Safari/537.36"
    )

    # Request timeout (seconds)
    request_timeout: int = 15

    # Maximum retries per request before giving up
    max_retries: int = 2

    # Backoff base for retries (seconds). Actual wait = base * 2^attempt
    backoff_base: float = 0.5

    # Maximum backoff wait (seconds)
    max_backoff: float = 4.0


@dataclass(frozen=True)
class ScraperSettings:
    """Settings for the search -> video -> comments traversal."""

    # Comments accumulated before a batch is emitted
    comment_batch_size: int = 5

    # Maximum comment continuation pages followed for a single video
    max_comment_pages: int = 50

    # Wall-clock budget for a streamed run (seconds)
    stream_time_budget: float = 9.0

    # Wall-clock budget for a buffered download run (seconds)
    download_time_budget: float = 29.5

    # Comment ordering requested from the platform
    comment_sort: str = "NEWEST_FIRST"

    # Leading character stripped from author handles ("" disables stripping)
    author_marker: str = "@"


@dataclass(frozen=True)
class ApiSettings:
    """Request defaults and validation limits for the HTTP API."""

    default_query: str = "berita terkini"
    default_max_videos: int = 20
    default_max_video_comments: int = 100
    default_max_comments: int = 500
    default_upload_date: str = "week"
    default_sort_by: str = "view_count"

    # Upper bounds accepted from clients
    max_videos_limit: int = 200
    max_video_comments_limit: int = 5000
    max_comments_limit: int = 20000
    max_query_length: int = 200


@dataclass(frozen=True)
class LoggingSettings:
    """Log level, rotating file and third-party logger levels."""

    # Level name applied to the "ytcomments" logger and its handlers
    level: str = "INFO"

    # File written under Settings.logs_dir
    log_file: str = "ytcomments.log"

    # Rotation: bytes per file and files kept
    max_bytes: int = 10 * 1024 * 1024
    backup_count: int = 5

    # Libraries held at WARNING (urllib3 reports every retry)
    quiet_loggers: tuple[str, ...] = ("urllib3",)


@dataclass
class Settings:
    """
    Top-level settings container. Aggregates all subsystem settings.

    Usage:
        settings = get_settings()
        print(settings.youtube.hl)
        print(settings.scraper.stream_time_budget)
        print(settings.logging.level)
    """

    project_root: Path = field(default_factory=_project_root)
    youtube: YouTubeSettings = field(default_factory=YouTubeSettings)
    scraper: ScraperSettings = field(default_factory=ScraperSettings)
    api: ApiSettings = field(default_factory=ApiSettings)
    logging: LoggingSettings = field(default_factory=LoggingSettings)

    @property
    def data_dir(self) -> Path:
        """Root directory for runtime data (exports, logs)."""
        return self.project_root / "data"

    @property
    def exports_dir(self) -> Path:
        """Default directory for CSV files written by the CLI."""
        return self.data_dir / "exports"

    @property
    def logs_dir(self) -> Path:
        """Root directory for log files."""
        return self.data_dir / "logs"

    def ensure_dirs(self) -> None:
        """Create all required data directories if they don't exist."""
        self.exports_dir.mkdir(parents=True, exist_ok=True)
        self.logs_dir.mkdir(parents=True, exist_ok=True)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Returns the singleton Settings instance.

    Call this instead of constructing Settings() directly so the entire
    application shares one config object.
    """
    settings = Settings()
    settings.ensure_dirs()
    return settings
