"""
Shared test helpers for the ytcomments test suite.

Provides factories for platform nodes and pages, plus an in-memory
``FakeYouTubeClient`` that serves prepared pages instead of calling the
network. Pages are chained through continuation tokens the same way the
real client chains them.
"""

from __future__ import annotations

from typing import Optional

from ytcomments.scraper.models import SearchSession
from ytcomments.youtube.client import CommentsUnavailableError
from ytcomments.youtube.http_client import TimeBudgetExceeded, YouTubeRequestError
from ytcomments.youtube.models import (
    CommentNode,
    CommentPage,
    Continuation,
    SearchPage,
    VideoNode,
)


# ---------------------------------------------------------------------------
# Sample data factories
# ---------------------------------------------------------------------------


def make_video_node(
    video_id: str = "vid00000001",
    title: str = "Test Video",
    author: str = "Test Channel",
    **kwargs,
) -> VideoNode:
    """Create a regular search video node. Override any field via kwargs."""
    defaults = dict(
        kind="videoRenderer",
        id=video_id,
        title=title,
        author=author,
        author_id="UCtest",
        view_count="1.234 x ditonton",
        duration=125,
        published="2 hari yang lalu",
        is_live=False,
        is_upcoming=False,
    )
    defaults.update(kwargs)
    return VideoNode(**defaults)


def make_comment_node(
    text: str = "Nice video",
    author: str = "@viewer",
    comment_id: Optional[str] = None,
    **kwargs,
) -> CommentNode:
    """Create a comment node with sensible defaults."""
    defaults = dict(
        comment_id=comment_id,
        author_name=author,
        content=text,
        published_time="1 jam yang lalu",
        like_count="3",
    )
    defaults.update(kwargs)
    return CommentNode(**defaults)


def make_search_session(query: str = "test", **kwargs) -> SearchSession:
    """Create a SearchSession with roomy limits unless overridden."""
    defaults = dict(
        query=query,
        upload_date="week",
        sort_by="view_count",
        max_videos=20,
        max_video_comments=100,
        max_total_comments=500,
    )
    defaults.update(kwargs)
    return SearchSession(**defaults)


def make_search_pages(*video_lists: list[VideoNode]) -> list[SearchPage]:
    """Chain results pages: page i continues with token ``s{i+1}``."""
    pages = []
    for index, videos in enumerate(video_lists):
        has_next = index < len(video_lists) - 1
        pages.append(
            SearchPage(
                videos=list(videos),
                continuation=Continuation("search", f"s{index + 1}") if has_next else None,
                source=Continuation("search", f"s{index}") if index else None,
            )
        )
    return pages


def make_comment_pages(video_id: str, *texts_per_page: list[str]) -> list[CommentPage]:
    """Chain comment pages of one video; every page is re-fetchable through its source."""
    pages = []
    for index, texts in enumerate(texts_per_page):
        has_next = index < len(texts_per_page) - 1
        pages.append(
            CommentPage(
                video_id=video_id,
                comments=[
                    make_comment_node(text, author=f"@user{index}_{n}", comment_id=f"{video_id}-{index}-{n}")
                    for n, text in enumerate(texts)
                ],
                continuation=Continuation("next", f"{video_id}-p{index + 1}") if has_next else None,
                source=Continuation("next", f"{video_id}-p{index}"),
            )
        )
    return pages


def make_videos(count: int, prefix: str = "v") -> list[VideoNode]:
    """Create ``count`` distinct video nodes with ids ``{prefix}0``, ``{prefix}1``..."""
    return [make_video_node(f"{prefix}{n}", title=f"Video {prefix}{n}") for n in range(count)]


# ---------------------------------------------------------------------------
# Fakes
# ---------------------------------------------------------------------------


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 100.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeYouTubeClient:
    """
    In-memory stand-in for ``YouTubeClient``.

    Every call is recorded in ``calls`` together with the clock reading at
    which it started, and advances ``clock`` by ``step`` seconds. Video ids
    and tokens listed in ``out_of_time`` raise ``TimeBudgetExceeded``.
    """

    def __init__(
        self,
        search_pages: Optional[list[SearchPage]] = None,
        comment_pages: Optional[dict[str, list[CommentPage]]] = None,
        failing_videos: tuple[str, ...] = (),
        failing_tokens: tuple[str, ...] = (),
        fail_search: bool = False,
        out_of_time: tuple[str, ...] = (),
        clock: Optional[FakeClock] = None,
        step: float = 0.0,
    ) -> None:
        self.search_pages = search_pages or [SearchPage()]
        self.comment_pages = comment_pages or {}
        self.failing_videos = set(failing_videos)
        self.failing_tokens = set(failing_tokens)
        self.fail_search = fail_search
        self.out_of_time = set(out_of_time)
        self.time_left = None
        self.clock = clock
        self.step = step
        self.calls: list[tuple[str, str, float]] = []

        self._search_by_token = {
            page.source.token: page for page in self.search_pages if page.source is not None
        }
        self._comments_by_token = {
            page.source.token: page
            for pages in self.comment_pages.values()
            for page in pages
            if page.source is not None
        }

    def with_time_limit(self, time_left):
        self.time_left = time_left
        return self

    def _record(self, name: str, arg: str) -> None:
        started = self.clock() if self.clock is not None else 0.0
        self.calls.append((name, arg, started))
        if self.clock is not None:
            self.clock.advance(self.step)
        if arg in self.out_of_time:
            raise TimeBudgetExceeded(f"Time budget spent before request for {arg}")

    def call_names(self) -> list[str]:
        return [name for name, _, _ in self.calls]

    def search(self, query: str, upload_date: str = "all", sort_by: str = "relevance") -> SearchPage:
        self._record("search", query)
        if self.fail_search:
            raise YouTubeRequestError("search unavailable")
        return self.search_pages[0]

    def next_search_page(self, continuation: Continuation) -> SearchPage:
        self._record("next_search_page", continuation.token)
        if continuation.token in self.failing_tokens:
            raise YouTubeRequestError(f"bad search continuation {continuation.token}")
        return self._search_by_token[continuation.token]

    def get_comments(self, video_id: str, sort: str = "NEWEST_FIRST") -> CommentPage:
        self._record("get_comments", video_id)
        if video_id in self.failing_videos:
            raise CommentsUnavailableError(f"Comments are not available for video {video_id}")
        pages = self.comment_pages.get(video_id)
        if not pages:
            return CommentPage(video_id=video_id)
        return pages[0]

    def next_comments_page(self, continuation: Continuation, video_id: str) -> CommentPage:
        self._record("next_comments_page", continuation.token)
        if continuation.token in self.failing_tokens:
            raise YouTubeRequestError(f"bad comment continuation {continuation.token}")
        return self._comments_by_token[continuation.token]

    def lookup_video(self, video_id: str) -> Optional[VideoNode]:
        self._record("lookup_video", video_id)
        for page in self.search_pages:
            for node in page.videos:
                if node.id == video_id:
                    return node
        return None
