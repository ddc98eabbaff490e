"""Buffered scrape route returning a CSV attachment."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import JSONResponse

from ytcomments.api.routes.params import ScrapeParams, scrape_params
from ytcomments.api.schemas import ErrorResponse
from ytcomments.export.csv_codec import convert_to_csv, export_filename
from ytcomments.export.fields import DEFAULT_EXPORT_COLUMNS
from ytcomments.scraper.errors import NoCommentsFound
from ytcomments.scraper.orchestrator import CommentScraper

router = APIRouter(prefix="/api", tags=["scraper"])
logger = logging.getLogger(__name__)


def _error_response(status_code: int, error: str, message: str) -> JSONResponse:
    body = ErrorResponse(error=error, message=message)
    return JSONResponse(status_code=status_code, content=body.model_dump())


@router.get(
    "/download",
    response_class=Response,
    responses={404: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
def download(
    request: Request,
    params: ScrapeParams = Depends(scrape_params),
) -> Response:
    """Scrape within the download budget and return every record as one CSV file."""
    settings = request.app.state.settings
    scraper = CommentScraper(
        client=request.app.state.youtube_client,
        settings=settings.scraper,
    )
    query = params.session.query

    try:
        result = scraper.scrape_all(params.session)
    except NoCommentsFound as exc:
        logger.info("Download for %r produced no comments", query)
        return _error_response(404, "No data found", str(exc))
    except Exception as exc:
        logger.exception("Download for %r failed", query)
        return _error_response(500, "An error occurred while scraping", str(exc))

    rows = [record.to_dict() for record in result.records]
    content = convert_to_csv(rows, params.columns(DEFAULT_EXPORT_COLUMNS))
    filename = export_filename(query)
    logger.info(
        "Download for %r: %d comments from %d videos -> %s",
        query,
        len(rows),
        result.videos_scraped,
        filename,
    )

    return Response(
        content=content,
        media_type="text/csv",
        headers={
            "Content-Disposition": f'attachment; filename="{filename}"',
            "Cache-Control": "no-cache",
        },
    )
