"""Streaming scrape route (server-sent events)."""

from __future__ import annotations

import json
import logging
from typing import Iterator, Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import StreamingResponse

from ytcomments.api.routes.params import ScrapeParams, resume_params, scrape_params
from ytcomments.export.fields import DEFAULT_FIELDS
from ytcomments.scraper.models import ResumeState
from ytcomments.scraper.orchestrator import CommentScraper

router = APIRouter(prefix="/api", tags=["scraper"])
logger = logging.getLogger(__name__)

_SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
}


def _sse_frames(
    scraper: CommentScraper,
    params: ScrapeParams,
    resume: Optional[ResumeState],
) -> Iterator[str]:
    columns = params.columns(DEFAULT_FIELDS)
    for event in scraper.run(params.session, resume=resume):
        payload = event.to_payload(columns)
        yield f"data: {json.dumps(payload, ensure_ascii=False)}\n\n"


@router.get("/scraper")
def stream_scrape(
    request: Request,
    params: ScrapeParams = Depends(scrape_params),
    resume: Optional[ResumeState] = Depends(resume_params),
) -> StreamingResponse:
    """Run one time-boxed scrape and stream its events as they happen."""
    settings = request.app.state.settings
    scraper = CommentScraper(
        client=request.app.state.youtube_client,
        settings=settings.scraper,
    )
    logger.info("Streaming run requested for %r (resume=%s)", params.session.query, resume is not None)

    return StreamingResponse(
        _sse_frames(scraper, params, resume),
        media_type="text/event-stream",
        headers=_SSE_HEADERS,
    )
