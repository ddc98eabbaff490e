"""Client for the video platform's search and comment endpoints."""

from __future__ import annotations

import base64
import logging
from typing import Callable, Optional

from ytcomments.config.settings import YouTubeSettings, get_settings
from ytcomments.youtube.http_client import InnerTubeHttpClient, YouTubeRequestError
from ytcomments.youtube.models import CommentPage, Continuation, SearchPage, VideoNode
from ytcomments.youtube.parser import InnerTubeParser

logger = logging.getLogger(__name__)

UPLOAD_DATE_FILTERS: dict[str, Optional[int]] = {
    "all": None,
    "hour": 1,
    "today": 2,
    "week": 3,
    "month": 4,
    "year": 5,
}

SORT_ORDERS: dict[str, int] = {
    "relevance": 0,
    "rating": 1,
    "upload_date": 2,
    "view_count": 3,
}

_RESULT_TYPE_VIDEO = 1


class CommentsUnavailableError(YouTubeRequestError):
    """Raised when a video exposes no comment section (disabled, private, ...)."""


def encode_search_params(upload_date: str = "all", sort_by: str = "relevance") -> str:
    """
    Encode search filters into the ``params`` field of a search request.

    The field is a small protobuf message: field 1 holds the sort order and
    field 2 a nested filter message (1 = upload date, 2 = result type).
    """
    if upload_date not in UPLOAD_DATE_FILTERS:
        raise ValueError(f"Unknown upload date filter: {upload_date}")
    if sort_by not in SORT_ORDERS:
        raise ValueError(f"Unknown sort order: {sort_by}")

    message = b""
    sort = SORT_ORDERS[sort_by]
    if sort:
        message += bytes([0x08, sort])

    filters = b""
    period = UPLOAD_DATE_FILTERS[upload_date]
    if period:
        filters += bytes([0x08, period])
    filters += bytes([0x10, _RESULT_TYPE_VIDEO])

    message += bytes([0x12, len(filters)]) + filters
    return base64.b64encode(message).decode()


class YouTubeClient:
    """
    Search and comment retrieval on top of the InnerTube JSON API.

    Pages come back as parsed dataclasses; following pages are fetched by
    handing their ``continuation`` back to this client.
    """

    def __init__(
        self,
        http_client: Optional[InnerTubeHttpClient] = None,
        parser: Optional[InnerTubeParser] = None,
        settings: Optional[YouTubeSettings] = None,
        time_left: Optional[Callable[[], float]] = None,
    ) -> None:
        self._settings = settings or get_settings().youtube
        self._http = http_client or InnerTubeHttpClient(self._settings)
        self._parser = parser or InnerTubeParser()
        self._time_left = time_left

    def with_time_limit(self, time_left: Callable[[], float]) -> "YouTubeClient":
        """
        Return a client sharing this one's session whose requests stop once
        ``time_left()`` reaches zero. Requests raise ``TimeBudgetExceeded`` then.
        """
        return YouTubeClient(
            http_client=self._http,
            parser=self._parser,
            settings=self._settings,
            time_left=time_left,
        )

    def _post(self, endpoint: str, body: dict) -> dict:
        return self._http.post(endpoint, body, time_left=self._time_left)

    def search(
        self,
        query: str,
        upload_date: str = "all",
        sort_by: str = "relevance",
    ) -> SearchPage:
        """Run a video search and return its first results page."""
        body = {"query": query, "params": encode_search_params(upload_date, sort_by)}
        data = self._post("search", body)
        page = self._parser.parse_search_page(data)
        logger.debug("Search %r returned %d entries", query, len(page.videos))
        return page

    def next_search_page(self, continuation: Continuation) -> SearchPage:
        """Fetch the results page a search continuation points to."""
        data = self._post(continuation.endpoint, {"continuation": continuation.token})
        return self._parser.parse_search_page(data, source=continuation)

    def get_comments(self, video_id: str, sort: str = "NEWEST_FIRST") -> CommentPage:
        """Open the comment section of a video and return its first page."""
        # up to three requests; each one checks the time limit before it starts
        watch = self._post("next", {"videoId": video_id})
        token = self._parser.find_comments_token(watch)
        if not token:
            raise CommentsUnavailableError(f"Comments are not available for video {video_id}")

        source = Continuation("next", token)
        data = self._post("next", {"continuation": token})

        sort_token = self._parser.find_sort_token(data, sort)
        if sort_token and sort_token != token:
            source = Continuation("next", sort_token)
            data = self._post("next", {"continuation": sort_token})

        return self._parser.parse_comment_page(data, video_id, source=source)

    def next_comments_page(self, continuation: Continuation, video_id: str) -> CommentPage:
        """Fetch the comment page a comment continuation points to."""
        data = self._post(continuation.endpoint, {"continuation": continuation.token})
        return self._parser.parse_comment_page(data, video_id, source=continuation)

    def lookup_video(self, video_id: str) -> Optional[VideoNode]:
        """Find the search node of a single video by searching for its id."""
        page = self.search(video_id)
        for node in page.videos:
            if node.id == video_id:
                return node
        return None
