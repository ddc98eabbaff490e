"""Integration tests for the API endpoints using FastAPI TestClient."""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from tests.conftest import FakeYouTubeClient, make_comment_pages, make_video_node, make_videos
from ytcomments.api.app import create_app
from ytcomments.config.settings import Settings
from ytcomments.youtube.continuation import encode_continuation
from ytcomments.youtube.models import Continuation, SearchPage


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    """Settings pointing at a temp directory."""
    s = Settings(project_root=tmp_path)
    s.ensure_dirs()
    return s


@pytest.fixture
def youtube() -> FakeYouTubeClient:
    return FakeYouTubeClient(
        search_pages=[SearchPage(videos=[make_video_node("v1", title="Judul", author="Kanal")])],
        comment_pages={"v1": make_comment_pages("v1", ["pertama", "kedua, lagi"])},
    )


@pytest.fixture
def app(settings: Settings, youtube: FakeYouTubeClient):
    return create_app(settings, client=youtube)


@pytest.fixture
def client(app) -> TestClient:
    return TestClient(app)


def _events(resp) -> list[dict]:
    frames = [frame for frame in resp.text.split("\n\n") if frame]
    assert all(frame.startswith("data: ") for frame in frames)
    return [json.loads(frame[len("data: "):]) for frame in frames]


# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------


class TestHealth:
    def test_returns_ok(self, client: TestClient):
        resp = client.get("/health")
        assert resp.status_code == 200
        assert resp.json()["status"] == "ok"


# ---------------------------------------------------------------------------
# Streaming scraper
# ---------------------------------------------------------------------------


class TestScraperStream:
    def test_sse_framing_and_headers(self, client: TestClient):
        resp = client.get("/api/scraper", params={"query": "berita"})

        assert resp.status_code == 200
        assert resp.headers["content-type"].startswith("text/event-stream")
        assert resp.headers["cache-control"] == "no-cache"

        events = _events(resp)
        assert [e["type"] for e in events] == ["info", "search", "video", "comments", "progress", "complete"]
        assert events[0]["query"] == "berita"
        assert events[-1]["videosScraped"] == 1
        assert events[-1]["totalComments"] == 2
        assert events[-1]["canContinue"] is False

    def test_defaults(self, client: TestClient, youtube: FakeYouTubeClient):
        events = _events(client.get("/api/scraper"))

        info = events[0]
        assert info["query"] == "berita terkini"
        assert info["maxVideos"] == 20
        assert info["maxComments"] == 500
        assert info["resumed"] is False
        assert youtube.calls[0][:2] == ("search", "berita terkini")

    def test_default_columns(self, client: TestClient):
        events = _events(client.get("/api/scraper"))
        rows = next(e for e in events if e["type"] == "comments")["data"]
        assert rows[0] == {"author": "user0_0", "comment": "pertama", "id": "v1", "channel": "Kanal", "title": "Judul"}
        assert list(rows[0]) == ["author", "comment", "id", "channel", "title"]

    def test_selected_fields_and_order(self, client: TestClient):
        events = _events(
            client.get(
                "/api/scraper",
                params={"selectedFields": "author,comment,like_count", "columnOrder": "like_count,comment"},
            )
        )
        rows = next(e for e in events if e["type"] == "comments")["data"]
        assert list(rows[0]) == ["like_count", "comment", "author"]

    def test_empty_selection_falls_back(self, client: TestClient):
        events = _events(client.get("/api/scraper", params={"selectedFields": ""}))
        rows = next(e for e in events if e["type"] == "comments")["data"]
        assert list(rows[0]) == ["author", "comment"]

    def test_zero_videos_completes_with_zero_counts(self, settings: Settings):
        empty = TestClient(create_app(settings, client=FakeYouTubeClient(search_pages=[SearchPage()])))

        events = _events(empty.get("/api/scraper", params={"query": "nothing"}))

        assert events[-1]["type"] == "complete"
        assert events[-1]["videosScraped"] == 0
        assert events[-1]["totalComments"] == 0

    def test_search_failure_ends_with_fatal_error(self, settings: Settings):
        failing = TestClient(create_app(settings, client=FakeYouTubeClient(fail_search=True)))

        events = _events(failing.get("/api/scraper"))

        assert [e["type"] for e in events] == ["info", "error"]
        assert events[-1]["fatal"] is True

    def test_resume_round_trip(self, settings: Settings):
        youtube = FakeYouTubeClient(
            search_pages=[SearchPage(videos=[make_video_node("v1")])],
            comment_pages={"v1": make_comment_pages("v1", ["c1", "c2", "c3", "c4", "c5"])},
        )
        api = TestClient(create_app(settings, client=youtube))
        params = {"query": "test", "maxVideos": 1, "maxVidComments": 3, "maxComments": 3}

        first = _events(api.get("/api/scraper", params=params))
        complete = first[-1]
        assert complete["totalComments"] == 3
        assert complete["canContinue"] is True

        resume = {
            "startVideoIndex": complete["lastVideoIndex"],
            "lastCommentIndex": complete["lastCommentIndex"],
            "commentOffset": complete["commentOffset"],
            "commentContinuation": complete["commentContinuation"],
            "lastVideoId": complete["lastVideoId"],
        }
        second = _events(api.get("/api/scraper", params={**params, **resume}))

        assert second[0]["resumed"] is True
        comments = [row["comment"] for e in second if e["type"] == "comments" for row in e["data"]]
        assert comments == ["c4", "c5"]
        assert second[-1]["canContinue"] is False

    def test_search_token_resume(self, settings: Settings):
        pages = [
            SearchPage(videos=make_videos(1), continuation=Continuation("search", "s1")),
            SearchPage(videos=[make_video_node("w0")], source=Continuation("search", "s1")),
        ]
        youtube = FakeYouTubeClient(
            search_pages=pages,
            comment_pages={"w0": make_comment_pages("w0", ["from page two"])},
        )
        api = TestClient(create_app(settings, client=youtube))
        token = encode_continuation(Continuation("search", "s1"))

        events = _events(api.get("/api/scraper", params={"startVideoIndex": 1, "continuationToken": token}))

        assert youtube.call_names()[0] == "next_search_page"
        assert events[-1]["videosScraped"] == 2

    @pytest.mark.parametrize(
        "params",
        [
            {"query": ""},
            {"query": "   "},
            {"maxVideos": 0},
            {"maxVideos": 100000},
            {"maxComments": -1},
            {"uploadDate": "decade"},
            {"sortBy": "popularity"},
            {"startVideoIndex": -1},
            {"continuationToken": "garbage!!"},
        ],
    )
    def test_validation_rejects_before_any_call(self, client: TestClient, youtube: FakeYouTubeClient, params):
        resp = client.get("/api/scraper", params=params)
        assert resp.status_code == 422
        assert youtube.calls == []


# ---------------------------------------------------------------------------
# Download
# ---------------------------------------------------------------------------


class TestDownload:
    def test_returns_csv_attachment(self, client: TestClient):
        resp = client.get("/api/download", params={"query": "Berita Hari Ini"})

        assert resp.status_code == 200
        assert resp.headers["content-type"].startswith("text/csv")
        assert resp.headers["cache-control"] == "no-cache"
        disposition = resp.headers["content-disposition"]
        assert disposition.startswith('attachment; filename="youtube-comments-berita_hari_ini-')
        assert disposition.endswith('.csv"')
        assert resp.text == (
            "label,author,comment,id,channel,title\n"
            "0,user0_0,pertama,v1,Kanal,Judul\n"
            '0,user0_1,"kedua, lagi",v1,Kanal,Judul\n'
        )

    def test_selected_columns(self, client: TestClient):
        resp = client.get("/api/download", params={"selectedFields": "comment,title", "columnOrder": "title"})
        assert resp.text.splitlines()[0] == "title,comment"

    def test_no_data_is_404(self, settings: Settings):
        empty = TestClient(create_app(settings, client=FakeYouTubeClient(search_pages=[SearchPage()])))

        resp = empty.get("/api/download")

        assert resp.status_code == 404
        assert resp.json()["error"] == "No data found"
        assert "No comments could be found" in resp.json()["message"]

    def test_failure_is_500(self, settings: Settings):
        failing = TestClient(create_app(settings, client=FakeYouTubeClient(fail_search=True)))

        resp = failing.get("/api/download")

        assert resp.status_code == 500
        assert resp.json()["error"] == "An error occurred while scraping"
        assert "search unavailable" in resp.json()["message"]

    def test_unexpected_client_error_is_500(self, app, client: TestClient):
        broken = MagicMock()
        broken.with_time_limit.return_value = broken
        broken.search.side_effect = RuntimeError("boom")
        app.state.youtube_client = broken

        resp = client.get("/api/download")

        assert resp.status_code == 500
        assert "boom" in resp.json()["message"]

    def test_validation_error(self, client: TestClient, youtube: FakeYouTubeClient):
        resp = client.get("/api/download", params={"maxVidComments": 0})
        assert resp.status_code == 422
        assert youtube.calls == []

    def test_blank_query_is_rejected(self, client: TestClient, youtube: FakeYouTubeClient):
        resp = client.get("/api/download", params={"query": " \t "})
        assert resp.status_code == 422
        assert resp.json()["detail"] == "query must not be blank"
        assert youtube.calls == []
