"""HTTP client for InnerTube requests with retry and backoff."""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, Optional

import requests

from ytcomments.config.settings import YouTubeSettings, get_settings

logger = logging.getLogger(__name__)


class YouTubeRequestError(RuntimeError):
    """Raised when a platform request fails after all retries."""


class TimeBudgetExceeded(YouTubeRequestError):
    """Raised when a request is not sent because the run's time budget is spent."""


class InnerTubeHttpClient:
    """Posts JSON bodies to InnerTube endpoints and returns decoded responses."""

    _RETRYABLE_STATUS_CODES = {429, 500, 502, 503, 504}

    def __init__(
        self,
        settings: Optional[YouTubeSettings] = None,
        session: Optional[requests.Session] = None,
        sleep_func: Callable[[float], None] = time.sleep,
    ) -> None:
        self._settings = settings or get_settings().youtube
        self._session = session or requests.Session()
        self._session.headers.update({
            "User-Agent": self._settings.user_agent,
            "Content-Type": "application/json",
            "Accept-Language": f"{self._settings.hl},en;q=0.8",
            "X-YouTube-Client-Name": "1",
            "X-YouTube-Client-Version": self._settings.client_version,
        })
        self._sleep = sleep_func

    def context(self) -> dict[str, Any]:
        """Client context block every InnerTube request body carries."""
        return {
            "client": {
                "clientName": self._settings.client_name,
                "clientVersion": self._settings.client_version,
                "hl": self._settings.hl,
                "gl": self._settings.gl,
            }
        }

    def post(
        self,
        endpoint: str,
        body: dict[str, Any],
        time_left: Optional[Callable[[], float]] = None,
    ) -> dict[str, Any]:
        """
        POST ``body`` (plus the client context) to an endpoint, e.g. ``"search"``.

        ``time_left`` returns the seconds a run may still spend. When given, no
        attempt starts once it reaches zero, each request timeout is capped by it
        and a retry is dropped when its backoff would not fit.
        """
        url = f"{self._settings.base_url}{self._settings.api_path}/{endpoint}?prettyPrint=false"
        payload = {"context": self.context(), **body}
        last_error: Optional[Exception] = None
        attempts = 0

        for attempt in range(self._settings.max_retries + 1):
            timeout = self._settings.request_timeout
            if time_left is not None:
                remaining = time_left()
                if remaining <= 0:
                    if attempt == 0:
                        raise TimeBudgetExceeded(
                            f"Time budget spent before request to {endpoint}"
                        )
                    break
                timeout = min(timeout, remaining)

            attempts += 1
            try:
                response = self._session.post(url, json=payload, timeout=timeout)
            except requests.RequestException as exc:
                last_error = exc
                if not self._should_retry(attempt, time_left):
                    break
                self._sleep_with_backoff(attempt)
                continue

            if response.status_code in self._RETRYABLE_STATUS_CODES:
                last_error = YouTubeRequestError(
                    f"Retryable HTTP status {response.status_code} from {endpoint}"
                )
                if not self._should_retry(attempt, time_left):
                    break
                self._sleep_with_backoff(attempt)
                continue

            if response.status_code >= 400:
                raise YouTubeRequestError(
                    f"InnerTube request to {endpoint} failed with status {response.status_code}"
                )

            try:
                data = response.json()
            except ValueError as exc:
                raise YouTubeRequestError(f"Invalid JSON returned by {endpoint}") from exc
            if not isinstance(data, dict):
                raise YouTubeRequestError(f"Unexpected response shape from {endpoint}")
            return data

        raise YouTubeRequestError(
            f"Request to {endpoint} failed after {attempts} attempts: {last_error}"
        ) from last_error

    def _should_retry(self, attempt: int, time_left: Optional[Callable[[], float]]) -> bool:
        if attempt >= self._settings.max_retries:
            return False
        if time_left is None:
            return True
        # the retry needs the backoff plus some time for the request itself
        return time_left() > self._backoff(attempt)

    def _backoff(self, attempt: int) -> float:
        return min(self._settings.backoff_base * (2 ** attempt), self._settings.max_backoff)

    def _sleep_with_backoff(self, attempt: int) -> None:
        backoff = self._backoff(attempt)
        logger.debug("Retrying InnerTube request in %.1fs (attempt %d)", backoff, attempt + 1)
        self._sleep(backoff)
