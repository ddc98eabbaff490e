"""Search -> video -> comments traversal driving both streamed and buffered runs."""

from __future__ import annotations

import enum
import logging
import time
from dataclasses import dataclass
from typing import Callable, Generator, Iterator, Optional

from ytcomments.config.settings import ScraperSettings, get_settings
from ytcomments.scraper.errors import NoCommentsFound, ScrapeError
from ytcomments.scraper.events import (
    CommentsEvent,
    CompleteEvent,
    ErrorEvent,
    InfoEvent,
    ProgressEvent,
    ScrapeEvent,
    SearchEvent,
    VideoEvent,
)
from ytcomments.scraper.extractor import (
    extract_comment_data,
    extract_video_metadata,
    is_valid_video_node,
)
from ytcomments.scraper.models import (
    CommentRecord,
    ResumeState,
    RunStats,
    ScrapeResult,
    SearchSession,
    VideoMetadata,
)
from ytcomments.scraper.tracker import (
    ExecutionTimer,
    ResumeTracker,
    RunContext,
    SearchPosition,
    VideoPosition,
)
from ytcomments.youtube.client import YouTubeClient
from ytcomments.youtube.http_client import TimeBudgetExceeded
from ytcomments.youtube.models import CommentPage, VideoNode

logger = logging.getLogger(__name__)

EventStream = Generator[ScrapeEvent, None, None]


class StopReason(enum.Enum):
    EXHAUSTED = "exhausted"
    TIME = "time"
    TOTAL_CAP = "total_cap"
    VIDEO_CAP = "video_cap"
    PAGE_CAP = "page_cap"
    FAILED = "failed"


@dataclass(frozen=True)
class VideoOutcome:
    """How comment reading for one video ended."""

    reason: StopReason
    position: Optional[VideoPosition] = None

    @property
    def pending(self) -> bool:
        """True when the video still has comments a later run should read."""
        return self.position is not None and self.reason in (StopReason.TIME, StopReason.TOTAL_CAP)


class CommentScraper:
    """
    Drives a scraping run against the video platform.

    ``run`` yields lifecycle events as data becomes available and supports
    resuming a suspended run. ``scrape_all`` consumes the same traversal and
    buffers every record for a single CSV export.
    """

    def __init__(
        self,
        client: Optional[YouTubeClient] = None,
        settings: Optional[ScraperSettings] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._settings = settings or get_settings().scraper
        self._client = client or YouTubeClient()
        self._clock = clock

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def run(
        self,
        session: SearchSession,
        resume: Optional[ResumeState] = None,
        time_budget: Optional[float] = None,
    ) -> Iterator[ScrapeEvent]:
        """Traverse search results and comments, yielding events until done or out of time."""
        budget = self._settings.stream_time_budget if time_budget is None else time_budget
        timer = ExecutionTimer(budget, self._clock)
        client = self._client.with_time_limit(timer.remaining)
        tracker = ResumeTracker(client, timer, self._settings)
        ctx = RunContext(
            session=session,
            timer=timer,
            client=client,
            videos_processed=resume.last_video_index if resume else 0,
        )

        logger.info(
            "Starting run for %r (max_videos=%d, max_comments=%d, resumed=%s)",
            session.query,
            session.max_videos,
            session.max_total_comments,
            resume is not None,
        )
        yield InfoEvent(
            videos_processed=ctx.videos_processed,
            comments_found=0,
            query=session.query,
            max_videos=session.max_videos,
            max_comments=session.max_total_comments,
            resumed=resume is not None,
        )

        try:
            position = tracker.open_search(session, resume)
        except Exception as exc:
            logger.exception("Search failed for %r", session.query)
            yield self._error(ctx, f"Search failed: {exc}", fatal=True)
            return

        ctx.search_page = position.page
        yield SearchEvent(
            videos_processed=ctx.videos_processed,
            comments_found=ctx.comments_found,
            total_videos=len(position.page.videos),
        )

        try:
            if resume is not None and resume.has_pending_video:
                yield from self._resume_pending_video(ctx, tracker, resume)
            if ctx.pending is None:
                yield from self._traverse(ctx, position)
        except Exception as exc:
            logger.exception("Run for %r aborted", session.query)
            yield self._error(ctx, f"Scraping failed: {exc}", fatal=True)
            return

        resume_state = tracker.suspend(ctx)
        elapsed = round(timer.elapsed(), 3)
        logger.info(
            "Run for %r finished: videos=%d comments=%d elapsed=%.2fs timed_out=%s can_continue=%s",
            session.query,
            ctx.videos_processed,
            ctx.comments_found,
            elapsed,
            ctx.timed_out,
            resume_state is not None,
        )
        yield CompleteEvent(
            videos_processed=ctx.videos_processed,
            comments_found=ctx.comments_found,
            time_elapsed=elapsed,
            timed_out=ctx.timed_out,
            resume=resume_state,
        )

    def scrape_all(
        self,
        session: SearchSession,
        time_budget: Optional[float] = None,
    ) -> ScrapeResult:
        """
        Run a fresh traversal and buffer every record in discovery order.

        Raises:
            ScrapeError: the search or the traversal loop failed.
            NoCommentsFound: the run finished without any record.
        """
        budget = self._settings.download_time_budget if time_budget is None else time_budget
        result = ScrapeResult()

        for event in self.run(session, resume=None, time_budget=budget):
            if isinstance(event, CommentsEvent):
                result.records.extend(event.records)
            elif isinstance(event, ErrorEvent):
                if event.fatal:
                    raise ScrapeError(event.message)
                logger.warning("Non-fatal error during download run: %s", event.message)
            elif isinstance(event, CompleteEvent):
                result.videos_scraped = event.videos_processed
                result.stats = RunStats(
                    videos_processed=event.videos_processed,
                    comments_found=event.comments_found,
                    elapsed_seconds=event.time_elapsed,
                    timed_out=event.timed_out,
                )

        if not result.records:
            raise NoCommentsFound(
                f"No comments could be found for the given search parameters (query={session.query!r})."
            )
        return result

    # ------------------------------------------------------------------
    # Traversal
    # ------------------------------------------------------------------

    def _resume_pending_video(
        self,
        ctx: RunContext,
        tracker: ResumeTracker,
        resume: ResumeState,
    ) -> EventStream:
        video_id = resume.last_video_id or ""
        untouched = VideoPosition(
            video_id=video_id,
            page_count=resume.comment_page_count,
            offset=resume.comment_offset,
            continuation=resume.comment_continuation,
        )
        if ctx.timed_out:
            ctx.pending = untouched
            return

        metadata = tracker.pending_metadata(video_id)
        if ctx.timed_out:
            ctx.pending = untouched
            return
        yield self._video_event(ctx, metadata)

        try:
            page, position = tracker.open_pending_comments(resume)
        except TimeBudgetExceeded:
            ctx.pending = untouched
            return
        except Exception as exc:
            logger.warning("Resuming comments of video %s failed: %s", video_id, exc)
            ctx.videos_processed += 1
            yield self._error(ctx, f"Error in continuation for video {video_id}: {exc}", video_id=video_id)
            yield self._progress(ctx)
            return

        outcome = yield from self._collect_comments(
            ctx, metadata, page, page_count=position.page_count, offset=position.offset
        )
        yield from self._finish_video(ctx, outcome)

    def _traverse(self, ctx: RunContext, position: SearchPosition) -> EventStream:
        page = position.page
        index = position.start_index

        while True:
            while index < len(page.videos):
                if ctx.should_stop():
                    return
                node = page.videos[index]
                index += 1
                if not is_valid_video_node(node) or node.id == position.skip_video_id:
                    continue
                yield from self._scrape_video(ctx, node)
                if ctx.pending is not None:
                    return

            ctx.page_fully_read = True
            if not page.has_continuation or ctx.should_stop():
                return

            try:
                page = ctx.client.next_search_page(page.continuation)
            except TimeBudgetExceeded:
                return
            except Exception as exc:
                logger.warning("Fetching the next search page failed: %s", exc)
                yield self._error(ctx, f"Error fetching more search results: {exc}")
                return

            ctx.search_page = page
            ctx.page_fully_read = False
            index = 0

    def _scrape_video(self, ctx: RunContext, node: VideoNode) -> EventStream:
        metadata = extract_video_metadata(node)
        yield self._video_event(ctx, metadata)

        try:
            page = ctx.client.get_comments(node.id, self._settings.comment_sort)
        except TimeBudgetExceeded:
            logger.info("Time budget spent while opening comments of video %s", node.id)
            ctx.pending = VideoPosition(node.id)
            return
        except Exception as exc:
            logger.warning("Fetching comments of video %s failed: %s", node.id, exc)
            ctx.videos_processed += 1
            yield self._error(ctx, f"Error in processing video {node.id}: {exc}", video_id=node.id)
            yield self._progress(ctx)
            return

        outcome = yield from self._collect_comments(ctx, metadata, page)
        yield from self._finish_video(ctx, outcome)

    def _collect_comments(
        self,
        ctx: RunContext,
        metadata: VideoMetadata,
        page: CommentPage,
        page_count: int = 0,
        offset: int = 0,
    ) -> Generator[ScrapeEvent, None, VideoOutcome]:
        """Read comments page by page, following continuations up to ``max_comment_pages``."""
        batch: list[CommentRecord] = []
        taken = 0

        while True:
            position = offset
            while position < len(page.comments):
                reason = self._stop_reason(ctx, taken)
                if reason is not None:
                    yield from self._flush(ctx, batch)
                    return VideoOutcome(
                        reason,
                        VideoPosition(metadata.id, page_count, position, page.source),
                    )

                record = extract_comment_data(
                    page.comments[position], metadata, self._settings.author_marker
                )
                position += 1
                if record is None:
                    continue

                batch.append(record)
                taken += 1
                ctx.comments_found += 1
                if len(batch) >= self._settings.comment_batch_size:
                    yield from self._flush(ctx, batch)

            yield from self._flush(ctx, batch)

            if not page.has_continuation:
                return VideoOutcome(StopReason.EXHAUSTED)

            reason = self._stop_reason(ctx, taken)
            if reason is not None:
                return VideoOutcome(
                    reason,
                    VideoPosition(metadata.id, page_count + 1, 0, page.continuation),
                )

            if page_count >= self._settings.max_comment_pages:
                logger.info(
                    "Stopped following comments of video %s after %d pages", metadata.id, page_count
                )
                return VideoOutcome(StopReason.PAGE_CAP)

            try:
                page = ctx.client.next_comments_page(page.continuation, metadata.id)
            except TimeBudgetExceeded:
                return VideoOutcome(
                    StopReason.TIME,
                    VideoPosition(metadata.id, page_count + 1, 0, page.continuation),
                )
            except Exception as exc:
                logger.warning("Fetching more comments of video %s failed: %s", metadata.id, exc)
                yield self._error(
                    ctx, f"Error loading more comments for video {metadata.id}: {exc}", video_id=metadata.id
                )
                return VideoOutcome(StopReason.FAILED)

            page_count += 1
            offset = 0

    def _finish_video(self, ctx: RunContext, outcome: VideoOutcome) -> EventStream:
        if outcome.pending:
            ctx.pending = outcome.position
            return
        ctx.videos_processed += 1
        yield self._progress(ctx)

    @staticmethod
    def _stop_reason(ctx: RunContext, taken: int) -> Optional[StopReason]:
        if ctx.timed_out:
            return StopReason.TIME
        if ctx.comment_cap_hit:
            return StopReason.TOTAL_CAP
        if taken >= ctx.session.max_video_comments:
            return StopReason.VIDEO_CAP
        return None

    # ------------------------------------------------------------------
    # Event helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _flush(ctx: RunContext, batch: list[CommentRecord]) -> EventStream:
        if batch:
            yield CommentsEvent(
                videos_processed=ctx.videos_processed,
                comments_found=ctx.comments_found,
                records=list(batch),
            )
            batch.clear()

    @staticmethod
    def _video_event(ctx: RunContext, metadata: VideoMetadata) -> VideoEvent:
        return VideoEvent(
            videos_processed=ctx.videos_processed,
            comments_found=ctx.comments_found,
            video=metadata,
            video_number=ctx.videos_processed + 1,
        )

    @staticmethod
    def _progress(ctx: RunContext) -> ProgressEvent:
        return ProgressEvent(
            videos_processed=ctx.videos_processed,
            comments_found=ctx.comments_found,
            time_elapsed=round(ctx.timer.elapsed(), 3),
        )

    @staticmethod
    def _error(
        ctx: RunContext,
        message: str,
        video_id: Optional[str] = None,
        fatal: bool = False,
    ) -> ErrorEvent:
        return ErrorEvent(
            videos_processed=ctx.videos_processed,
            comments_found=ctx.comments_found,
            message=message,
            video_id=video_id,
            fatal=fatal,
        )
