"""CLI entrypoint for scraping comments into a CSV file."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path

from ytcomments.config.logging_config import setup_logging
from ytcomments.config.settings import get_settings
from ytcomments.export.csv_codec import convert_to_csv, export_filename
from ytcomments.export.fields import DEFAULT_EXPORT_COLUMNS, parse_field_list
from ytcomments.scraper.errors import NoCommentsFound, ScrapeError
from ytcomments.scraper.models import MetadataConfig, SearchSession
from ytcomments.scraper.orchestrator import CommentScraper
from ytcomments.youtube.client import SORT_ORDERS, UPLOAD_DATE_FILTERS


def build_parser() -> argparse.ArgumentParser:
    """Build CLI argument parser."""
    defaults = get_settings().api
    parser = argparse.ArgumentParser(description="Search YouTube and export video comments as CSV.")
    parser.add_argument("--query", default=defaults.default_query, help="Search keywords.")
    parser.add_argument("--max-videos", type=int, default=defaults.default_max_videos)
    parser.add_argument(
        "--max-video-comments",
        type=int,
        default=defaults.default_max_video_comments,
        help="Maximum comments taken from a single video.",
    )
    parser.add_argument(
        "--max-comments",
        type=int,
        default=defaults.default_max_comments,
        help="Maximum comments collected in total.",
    )
    parser.add_argument(
        "--upload-date",
        choices=sorted(UPLOAD_DATE_FILTERS),
        default=defaults.default_upload_date,
    )
    parser.add_argument(
        "--sort-by",
        choices=sorted(SORT_ORDERS),
        default=defaults.default_sort_by,
    )
    parser.add_argument(
        "--fields",
        default=None,
        help="Comma-separated fields to export (defaults to label,author,comment,id,channel,title).",
    )
    parser.add_argument(
        "--column-order",
        default=None,
        help="Comma-separated column order (defaults to --fields).",
    )
    parser.add_argument(
        "--time-budget",
        type=float,
        default=None,
        help="Wall-clock limit in seconds (defaults to the download budget).",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="CSV file to write (defaults to a timestamped file under data/exports).",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Overrides the configured log level.",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """Run a buffered scrape and write the CSV export."""
    parser = build_parser()
    args = parser.parse_args(argv)
    if not args.query.strip():
        parser.error("--query must not be blank")

    settings = get_settings()
    setup_logging(log_dir=settings.logs_dir, level=args.log_level, settings=settings.logging)
    logger = logging.getLogger(__name__)

    columns = list(DEFAULT_EXPORT_COLUMNS)
    if args.fields is not None or args.column_order is not None:
        selected = parse_field_list(args.fields)
        config = MetadataConfig(
            selected_fields=tuple(selected),
            column_order=tuple(parse_field_list(args.column_order) if args.column_order else selected),
        )
        columns = config.columns
    session = SearchSession(
        query=args.query,
        upload_date=args.upload_date,
        sort_by=args.sort_by,
        max_videos=args.max_videos,
        max_video_comments=args.max_video_comments,
        max_total_comments=args.max_comments,
    )

    try:
        result = CommentScraper().scrape_all(session, time_budget=args.time_budget)
    except NoCommentsFound as exc:
        print(str(exc))
        return 1
    except ScrapeError as exc:
        logger.error("Scrape failed: %s", exc)
        return 1

    output = args.output or settings.exports_dir / export_filename(args.query)
    output.parent.mkdir(parents=True, exist_ok=True)
    rows = [record.to_dict() for record in result.records]
    output.write_text(convert_to_csv(rows, columns), encoding="utf-8")

    print(
        "query={query} videos={videos} comments={comments} timed_out={timed_out} output={output}".format(
            query=args.query,
            videos=result.videos_scraped,
            comments=len(result.records),
            timed_out=result.stats.timed_out,
            output=output,
        )
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
