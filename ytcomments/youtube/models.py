"""
Data models for responses of the video platform.

Plain dataclasses produced by the parser and consumed by the scraper.
They mirror the platform's node kinds closely enough for validity checks
but carry no platform JSON themselves.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Union


@dataclass(frozen=True)
class Continuation:
    """
    Opaque handle for the next page of a paginated platform response.

    Only ever built from a token found in a platform response and sent
    back verbatim to the endpoint it belongs to.
    """

    # InnerTube endpoint name the token must be posted to, e.g. "search" or "next"
    endpoint: str

    # Continuation token exactly as the platform returned it
    token: str


# ---------------------------------------------------------------------------
# Search results
# ---------------------------------------------------------------------------


@dataclass
class VideoNode:
    """A video-like entry of a search results page."""

    # Renderer kind, e.g. "videoRenderer", "reelItemRenderer"
    kind: str

    id: str = ""
    title: str = ""

    # Channel display name and channel id
    author: str = ""
    author_id: Optional[str] = None

    description: Optional[str] = None

    # Either an int or the platform's text, e.g. "1.234 x ditonton"
    view_count: Union[int, str, None] = None

    # Length in seconds, or the raw text when it could not be parsed
    duration: Union[int, str, None] = None

    # Relative publish text, e.g. "2 days ago"
    published: Optional[str] = None

    is_live: Optional[bool] = None
    is_upcoming: Optional[bool] = None
    keywords: Union[list[str], str, None] = None


@dataclass
class SearchPage:
    """One page of search results."""

    videos: list[VideoNode] = field(default_factory=list)

    # Handle for the following page, None on the last page
    continuation: Optional[Continuation] = None

    # Handle that produced this page, None for the first page of a search
    source: Optional[Continuation] = None

    @property
    def has_continuation(self) -> bool:
        return self.continuation is not None


# ---------------------------------------------------------------------------
# Comments
# ---------------------------------------------------------------------------


@dataclass
class CommentNode:
    """A top-level comment as delivered by the platform."""

    comment_id: Optional[str] = None

    # Display handle including its leading marker, e.g. "@someone"
    author_name: Optional[str] = None

    content: Optional[str] = None
    published_time: Optional[str] = None

    # Counts are kept as the platform's short text, e.g. "1,2 rb"
    like_count: Optional[str] = None
    reply_count: Optional[str] = None

    is_liked: Optional[bool] = None
    is_hearted: Optional[bool] = None


@dataclass
class CommentPage:
    """One page of comments for a single video."""

    video_id: str
    comments: list[CommentNode] = field(default_factory=list)
    continuation: Optional[Continuation] = None

    # Handle that re-fetches this exact page, when the platform gave one
    source: Optional[Continuation] = None

    @property
    def has_continuation(self) -> bool:
        return self.continuation is not None
