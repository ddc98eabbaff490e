"""Tests for the buffered (download) run."""

from __future__ import annotations

import pytest

from tests.conftest import (
    FakeClock,
    FakeYouTubeClient,
    make_comment_pages,
    make_search_session,
    make_videos,
)
from ytcomments.config.settings import ScraperSettings
from ytcomments.scraper.errors import NoCommentsFound, ScrapeError
from ytcomments.scraper.orchestrator import CommentScraper
from ytcomments.youtube.models import SearchPage


def _scraper(client, clock=None, **settings_kwargs) -> CommentScraper:
    return CommentScraper(client=client, settings=ScraperSettings(**settings_kwargs), clock=clock or FakeClock())


def test_collects_records_in_discovery_order():
    client = FakeYouTubeClient(
        search_pages=[SearchPage(videos=make_videos(2))],
        comment_pages={
            "v0": make_comment_pages("v0", ["a", "b"], ["c"]),
            "v1": make_comment_pages("v1", ["d"]),
        },
    )

    result = _scraper(client).scrape_all(make_search_session())

    assert [r.comment for r in result.records] == ["a", "b", "c", "d"]
    assert [r.id for r in result.records] == ["v0", "v0", "v0", "v1"]
    assert result.videos_scraped == 2
    assert result.stats.comments_found == 4
    assert not result.stats.timed_out


def test_uses_download_budget():
    clock = FakeClock()
    client = FakeYouTubeClient(
        search_pages=[SearchPage(videos=make_videos(4))],
        comment_pages={f"v{n}": make_comment_pages(f"v{n}", [f"x{n}"]) for n in range(4)},
        clock=clock,
        step=1.0,
    )

    result = _scraper(client, clock=clock, download_time_budget=2.5).scrape_all(make_search_session())

    assert [r.comment for r in result.records] == ["x0"]
    assert result.stats.timed_out


def test_no_records_raises_no_comments_found():
    client = FakeYouTubeClient(search_pages=[SearchPage()])
    with pytest.raises(NoCommentsFound):
        _scraper(client).scrape_all(make_search_session())


def test_search_failure_raises_scrape_error():
    client = FakeYouTubeClient(fail_search=True)
    with pytest.raises(ScrapeError, match="search unavailable") as exc_info:
        _scraper(client).scrape_all(make_search_session())
    assert not isinstance(exc_info.value, NoCommentsFound)


def test_video_failures_do_not_abort():
    client = FakeYouTubeClient(
        search_pages=[SearchPage(videos=make_videos(2))],
        comment_pages={"v1": make_comment_pages("v1", ["kept"])},
        failing_videos=("v0",),
    )

    result = _scraper(client).scrape_all(make_search_session())

    assert [r.comment for r in result.records] == ["kept"]
