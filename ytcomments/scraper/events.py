"""
Lifecycle events emitted by a scraping run.

A run yields events in order: info, search, then per video a video event,
comment batches and a progress event, and finally one complete event (or a
fatal error event instead). Every event carries the run's running totals.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar, Optional, Sequence

from ytcomments.export.fields import filter_record
from ytcomments.scraper.models import CommentRecord, ResumeState, VideoMetadata
from ytcomments.youtube.continuation import encode_continuation


@dataclass
class ScrapeEvent:
    """Base event. ``to_payload`` renders the JSON object sent to clients."""

    type: ClassVar[str] = ""

    videos_processed: int
    comments_found: int

    def to_payload(self, columns: Optional[Sequence[str]] = None) -> dict[str, Any]:
        payload: dict[str, Any] = {"type": self.type}
        payload.update(self._fields(columns))
        payload["videosProcessed"] = self.videos_processed
        payload["commentsFound"] = self.comments_found
        return payload

    def _fields(self, columns: Optional[Sequence[str]]) -> dict[str, Any]:
        return {}


@dataclass
class InfoEvent(ScrapeEvent):
    type: ClassVar[str] = "info"

    query: str = ""
    max_videos: int = 0
    max_comments: int = 0
    resumed: bool = False

    def _fields(self, columns):
        return {
            "query": self.query,
            "maxVideos": self.max_videos,
            "maxComments": self.max_comments,
            "resumed": self.resumed,
        }


@dataclass
class SearchEvent(ScrapeEvent):
    type: ClassVar[str] = "search"

    total_videos: int = 0

    def _fields(self, columns):
        return {"totalVideos": self.total_videos}


@dataclass
class VideoEvent(ScrapeEvent):
    type: ClassVar[str] = "video"

    video: Optional[VideoMetadata] = None
    video_number: int = 0

    def _fields(self, columns):
        return {
            "video": self.video.to_dict() if self.video else None,
            "videoNumber": self.video_number,
        }


@dataclass
class CommentsEvent(ScrapeEvent):
    type: ClassVar[str] = "comments"

    records: list[CommentRecord] = field(default_factory=list)

    def _fields(self, columns):
        rows = [record.to_dict() for record in self.records]
        if columns is not None:
            rows = [filter_record(row, columns) for row in rows]
        return {"data": rows}


@dataclass
class ProgressEvent(ScrapeEvent):
    type: ClassVar[str] = "progress"

    time_elapsed: float = 0.0

    def _fields(self, columns):
        return {"timeElapsed": self.time_elapsed}


@dataclass
class ErrorEvent(ScrapeEvent):
    type: ClassVar[str] = "error"

    message: str = ""

    # Set for failures scoped to one video
    video_id: Optional[str] = None

    # True when the run ends with this event
    fatal: bool = False

    def _fields(self, columns):
        fields: dict[str, Any] = {"message": self.message, "fatal": self.fatal}
        if self.video_id:
            fields["videoId"] = self.video_id
        return fields


@dataclass
class CompleteEvent(ScrapeEvent):
    type: ClassVar[str] = "complete"

    time_elapsed: float = 0.0
    timed_out: bool = False

    # Where a follow-up run continues; None when the query is exhausted
    resume: Optional[ResumeState] = None

    def _fields(self, columns):
        resume = self.resume
        return {
            "videosScraped": self.videos_processed,
            "totalComments": self.comments_found,
            "timeElapsed": self.time_elapsed,
            "timedOut": self.timed_out,
            "canContinue": resume is not None,
            "lastVideoIndex": resume.last_video_index if resume else self.videos_processed,
            "lastCommentIndex": resume.comment_page_count if resume else 0,
            "commentOffset": resume.comment_offset if resume else 0,
            "commentContinuation": (
                encode_continuation(resume.comment_continuation)
                if resume and resume.comment_continuation
                else None
            ),
            "continuationToken": (
                encode_continuation(resume.search_continuation)
                if resume and resume.search_continuation
                else None
            ),
            "lastVideoId": resume.last_video_id if resume else None,
        }
