"""
Run bookkeeping: time budget, progress counters and resume positions.

A run never keeps state on the server. Where it stops is captured in a
``ResumeState`` that the caller sends back with its next request; the
tracker turns that state into a starting position and, at the end of a
run, turns the run's context back into a new ``ResumeState``.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional

from ytcomments.config.settings import ScraperSettings, get_settings
from ytcomments.scraper.extractor import extract_video_metadata, is_valid_video_node
from ytcomments.scraper.models import ResumeState, SearchSession, VideoMetadata
from ytcomments.youtube.client import YouTubeClient
from ytcomments.youtube.http_client import TimeBudgetExceeded
from ytcomments.youtube.models import CommentPage, Continuation, SearchPage

logger = logging.getLogger(__name__)


class ExecutionTimer:
    """Cooperative wall-clock budget started at construction."""

    def __init__(self, budget: float, clock: Callable[[], float] = time.monotonic) -> None:
        self._budget = budget
        self._clock = clock
        self._start = clock()

    @property
    def budget(self) -> float:
        return self._budget

    def elapsed(self) -> float:
        """Seconds since the timer started."""
        return self._clock() - self._start

    def has_time_left(self) -> bool:
        return self.elapsed() < self._budget

    def remaining(self) -> float:
        """Seconds left before the budget is spent, never negative."""
        return max(0.0, self._budget - self.elapsed())


@dataclass(frozen=True)
class VideoPosition:
    """Where comment reading stopped inside one video."""

    video_id: str
    page_count: int = 0
    offset: int = 0
    continuation: Optional[Continuation] = None


@dataclass(frozen=True)
class SearchPosition:
    """Results page and entry index at which traversal starts."""

    page: SearchPage
    start_index: int = 0

    # Entry skipped if met again (the video resumed before traversal)
    skip_video_id: Optional[str] = None

    # Pages advanced while approximating the position
    pages_advanced: int = 0


@dataclass
class RunContext:
    """Mutable counters and position of one run, owned by that run only."""

    session: SearchSession
    timer: ExecutionTimer
    videos_processed: int = 0
    comments_found: int = 0

    # Results page being traversed and whether every entry on it was visited
    search_page: Optional[SearchPage] = None
    page_fully_read: bool = False

    # Set when a video was cut short by the time budget or the comment cap
    pending: Optional[VideoPosition] = None

    # Client whose requests are bound to the timer
    client: Optional[YouTubeClient] = None

    @property
    def video_cap_hit(self) -> bool:
        return self.videos_processed >= self.session.max_videos

    @property
    def comment_cap_hit(self) -> bool:
        return self.comments_found >= self.session.max_total_comments

    @property
    def timed_out(self) -> bool:
        return not self.timer.has_time_left()

    def should_stop(self) -> bool:
        return self.video_cap_hit or self.comment_cap_hit or self.timed_out


class ResumeTracker:
    """Decides where a run starts and what a suspended run hands back."""

    def __init__(
        self,
        client: YouTubeClient,
        timer: ExecutionTimer,
        settings: Optional[ScraperSettings] = None,
    ) -> None:
        self._client = client
        self._timer = timer
        self._settings = settings or get_settings().scraper

    # ------------------------------------------------------------------
    # Start of a run
    # ------------------------------------------------------------------

    def open_search(
        self,
        session: SearchSession,
        resume: Optional[ResumeState] = None,
    ) -> SearchPosition:
        """
        Fetch the results page traversal starts on.

        A search continuation is fetched directly. Without one the search is
        re-run and ``floor(last_video_index / page_size)`` pages are skipped,
        which only approximates the old position.
        """
        if resume is not None and resume.search_continuation is not None:
            page = self._client.next_search_page(resume.search_continuation)
            return SearchPosition(page=page, skip_video_id=resume.last_video_id)

        page = self._client.search(session.query, session.upload_date, session.sort_by)
        if resume is None or resume.last_video_index <= 0:
            return SearchPosition(page=page, skip_video_id=resume.last_video_id if resume else None)

        page_size = len(page.videos)
        target = resume.last_video_index
        wanted = target // page_size if page_size else 0

        advanced = 0
        while advanced < wanted and page.has_continuation and self._timer.has_time_left():
            try:
                page = self._client.next_search_page(page.continuation)
            except TimeBudgetExceeded:
                break
            advanced += 1

        start_index = target - advanced * page_size
        if resume.has_pending_video:
            start_index += 1

        logger.info(
            "Repositioned search for %r: %d page(s) advanced, starting at entry %d",
            session.query,
            advanced,
            start_index,
        )
        return SearchPosition(
            page=page,
            start_index=max(0, start_index),
            skip_video_id=resume.last_video_id,
            pages_advanced=advanced,
        )

    def pending_metadata(self, video_id: str) -> VideoMetadata:
        """Metadata of the video being resumed, minimal when the lookup fails."""
        if self._timer.has_time_left():
            try:
                node = self._client.lookup_video(video_id)
            except Exception as exc:
                logger.info("Metadata lookup for %s failed: %s", video_id, exc)
                node = None
            if is_valid_video_node(node):
                return extract_video_metadata(node)
        return VideoMetadata(id=video_id, title="", channel="")

    def open_pending_comments(self, resume: ResumeState) -> tuple[CommentPage, VideoPosition]:
        """
        Re-open the comment page of the resumed video.

        Returns the page plus the position reached, whose ``offset`` entries
        on that page were already read by the previous run.
        """
        video_id = resume.last_video_id or ""
        if resume.comment_continuation is not None:
            page = self._client.next_comments_page(resume.comment_continuation, video_id)
            return page, VideoPosition(
                video_id=video_id,
                page_count=resume.comment_page_count,
                offset=resume.comment_offset,
                continuation=resume.comment_continuation,
            )

        page = self._client.get_comments(video_id, self._settings.comment_sort)
        followed = 0
        while (
            followed < resume.comment_page_count
            and page.has_continuation
            and self._timer.has_time_left()
        ):
            page = self._client.next_comments_page(page.continuation, video_id)
            followed += 1

        return page, VideoPosition(
            video_id=video_id,
            page_count=followed,
            offset=resume.comment_offset,
            continuation=page.source,
        )

    # ------------------------------------------------------------------
    # End of a run
    # ------------------------------------------------------------------

    def suspend(self, ctx: RunContext) -> Optional[ResumeState]:
        """
        Capture the resume state of a finished run.

        Returns None when the query is exhausted or the video cap is reached,
        i.e. when a follow-up run would have nothing left to do.
        """
        position = ctx.pending
        if position is not None and (position.page_count or position.offset or position.continuation):
            return ResumeState(
                last_video_index=ctx.videos_processed,
                last_video_id=position.video_id,
                comment_page_count=position.page_count,
                comment_offset=position.offset,
                comment_continuation=position.continuation,
            )

        if position is not None:
            # Nothing of the video was read yet: restart it as a regular entry
            return ResumeState(last_video_index=ctx.videos_processed)

        page = ctx.search_page
        if ctx.video_cap_hit or page is None:
            return None

        search_has_more = page.has_continuation
        if not (ctx.timed_out or ctx.comment_cap_hit or search_has_more):
            return None
        if not search_has_more and ctx.page_fully_read:
            return None

        return ResumeState(
            last_video_index=ctx.videos_processed,
            search_continuation=page.continuation if ctx.page_fully_read else None,
        )
