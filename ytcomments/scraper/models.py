"""
Data models for scraping runs.

These are plain dataclasses. Request-level models (SearchSession,
MetadataConfig, ResumeState) are frozen for the duration of a run;
records are created by the extractor and never mutated afterwards.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Optional

from ytcomments.export.fields import DEFAULT_FIELDS, resolve_columns
from ytcomments.youtube.models import Continuation


def _drop_none(values: dict[str, Any]) -> dict[str, Any]:
    return {key: value for key, value in values.items() if value is not None}


# ---------------------------------------------------------------------------
# Run inputs
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SearchSession:
    """Query and traversal bounds of a run."""

    query: str

    # "hour", "today", "week", "month", "year" or "all"
    upload_date: str = "week"

    # "relevance", "rating", "upload_date" or "view_count"
    sort_by: str = "view_count"

    # Videos processed across resumed runs before traversal stops
    max_videos: int = 20

    # Comments taken from a single video within one run
    max_video_comments: int = 100

    # Comments collected by one run
    max_total_comments: int = 500


@dataclass(frozen=True)
class MetadataConfig:
    """Caller's field selection and column order."""

    selected_fields: tuple[str, ...] = DEFAULT_FIELDS
    column_order: tuple[str, ...] = DEFAULT_FIELDS

    @property
    def columns(self) -> list[str]:
        """Effective output columns, never empty."""
        return resolve_columns(self.column_order, self.selected_fields)


@dataclass(frozen=True)
class ResumeState:
    """
    Position at which a suspended run stopped.

    Handed to the client at suspension and sent back verbatim with the next
    request; the server keeps no copy.
    """

    # Videos processed so far (also the approximate search position)
    last_video_index: int = 0

    # Video whose comments were cut short, if any
    last_video_id: Optional[str] = None

    # Comment continuation pages already followed for last_video_id
    comment_page_count: int = 0

    # Entries already consumed on the comment page where reading stopped
    comment_offset: int = 0

    # Handle of the comment page where reading stopped
    comment_continuation: Optional[Continuation] = None

    # Handle of the next search results page
    search_continuation: Optional[Continuation] = None

    @property
    def has_pending_video(self) -> bool:
        """True when last_video_id still has unread comments."""
        return bool(self.last_video_id) and (
            self.comment_page_count > 0
            or self.comment_offset > 0
            or self.comment_continuation is not None
        )


# ---------------------------------------------------------------------------
# Extracted records
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class VideoMetadata:
    """Metadata of one accepted video, derived from its search node."""

    id: str
    title: str
    channel: str
    channel_id: Optional[str] = None
    description: Optional[str] = None
    view_count: Optional[int] = None
    duration: Optional[int] = None
    upload_date: Optional[str] = None
    is_live: Optional[bool] = None
    is_upcoming: Optional[bool] = None
    keywords: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return _drop_none(asdict(self))


@dataclass(frozen=True)
class CommentRecord:
    """
    One exported row: a comment plus a copy of its video's metadata.

    ``label`` is always 0 here; it is a placeholder column for downstream
    labelling workflows.
    """

    # Video metadata (denormalized)
    id: str
    title: str
    channel: str

    # Comment
    author: str
    comment: str
    label: int = 0

    channel_id: Optional[str] = None
    description: Optional[str] = None
    view_count: Optional[int] = None
    duration: Optional[int] = None
    upload_date: Optional[str] = None
    is_live: Optional[bool] = None
    is_upcoming: Optional[bool] = None
    keywords: Optional[str] = None

    comment_id: Optional[str] = None
    published_time: Optional[str] = None
    like_count: Optional[str] = None
    reply_count: Optional[str] = None
    is_liked: Optional[bool] = None
    is_hearted: Optional[bool] = None

    def to_dict(self) -> dict[str, Any]:
        return _drop_none(asdict(self))


# ---------------------------------------------------------------------------
# Run outputs
# ---------------------------------------------------------------------------


@dataclass
class RunStats:
    """Counters of a run, finalized at completion or timeout."""

    videos_processed: int = 0
    comments_found: int = 0
    elapsed_seconds: float = 0.0
    timed_out: bool = False


@dataclass
class ScrapeResult:
    """Outcome of a buffered run."""

    records: list[CommentRecord] = field(default_factory=list)
    videos_scraped: int = 0
    stats: RunStats = field(default_factory=RunStats)
