"""Query parameters shared by the scraping routes."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

from fastapi import HTTPException, Query

from ytcomments.config.settings import ApiSettings
from ytcomments.export.fields import parse_field_list
from ytcomments.scraper.models import MetadataConfig, ResumeState, SearchSession
from ytcomments.youtube.client import SORT_ORDERS, UPLOAD_DATE_FILTERS
from ytcomments.youtube.continuation import decode_continuation

_API = ApiSettings()

_UPLOAD_DATE_PATTERN = "^(" + "|".join(UPLOAD_DATE_FILTERS) + ")$"
_SORT_BY_PATTERN = "^(" + "|".join(SORT_ORDERS) + ")$"


@dataclass(frozen=True)
class ScrapeParams:
    """Validated scrape request: what to search and which columns to emit."""

    session: SearchSession

    # None when the caller selected no fields and no column order
    metadata: Optional[MetadataConfig] = None

    def columns(self, default: Sequence[str]) -> list[str]:
        """Output columns, ``default`` when the caller configured none."""
        if self.metadata is None:
            return list(default)
        return self.metadata.columns


def scrape_params(
    query: str = Query(
        _API.default_query,
        min_length=1,
        max_length=_API.max_query_length,
        description="Search keywords",
    ),
    max_videos: int = Query(
        _API.default_max_videos, alias="maxVideos", ge=1, le=_API.max_videos_limit
    ),
    max_vid_comments: int = Query(
        _API.default_max_video_comments,
        alias="maxVidComments",
        ge=1,
        le=_API.max_video_comments_limit,
        description="Maximum comments per video",
    ),
    max_comments: int = Query(
        _API.default_max_comments,
        alias="maxComments",
        ge=1,
        le=_API.max_comments_limit,
        description="Maximum comments per run",
    ),
    upload_date: str = Query(
        _API.default_upload_date, alias="uploadDate", pattern=_UPLOAD_DATE_PATTERN
    ),
    sort_by: str = Query(_API.default_sort_by, alias="sortBy", pattern=_SORT_BY_PATTERN),
    selected_fields: Optional[str] = Query(
        None, alias="selectedFields", description="Comma-separated field names"
    ),
    column_order: Optional[str] = Query(
        None, alias="columnOrder", description="Comma-separated output column order"
    ),
) -> ScrapeParams:
    """Build the run session and column configuration from query parameters."""
    if not query.strip():
        raise HTTPException(status_code=422, detail="query must not be blank")

    metadata = None
    if selected_fields is not None or column_order is not None:
        selected = parse_field_list(selected_fields)
        order = parse_field_list(column_order) if column_order else selected
        metadata = MetadataConfig(selected_fields=tuple(selected), column_order=tuple(order))

    return ScrapeParams(
        session=SearchSession(
            query=query.strip(),
            upload_date=upload_date,
            sort_by=sort_by,
            max_videos=max_videos,
            max_video_comments=max_vid_comments,
            max_total_comments=max_comments,
        ),
        metadata=metadata,
    )


def resume_params(
    start_video_index: int = Query(0, alias="startVideoIndex", ge=0),
    last_comment_index: int = Query(0, alias="lastCommentIndex", ge=0),
    comment_offset: int = Query(0, alias="commentOffset", ge=0),
    continuation_token: Optional[str] = Query(None, alias="continuationToken"),
    comment_continuation: Optional[str] = Query(None, alias="commentContinuation"),
    last_video_id: Optional[str] = Query(None, alias="lastVideoId", max_length=64),
) -> Optional[ResumeState]:
    """
    Rebuild the resume state a previous ``complete`` event handed out.

    Returns None for a fresh run. Handles that do not decode are rejected
    with 422 rather than silently restarting the run.
    """
    search_continuation = decode_continuation(continuation_token)
    if continuation_token and search_continuation is None:
        raise HTTPException(status_code=422, detail="Invalid continuationToken")

    comment_handle = decode_continuation(comment_continuation)
    if comment_continuation and comment_handle is None:
        raise HTTPException(status_code=422, detail="Invalid commentContinuation")

    state = ResumeState(
        last_video_index=start_video_index,
        last_video_id=last_video_id or None,
        comment_page_count=last_comment_index,
        comment_offset=comment_offset,
        comment_continuation=comment_handle,
        search_continuation=search_continuation,
    )
    if state == ResumeState():
        return None
    return state
