"""Metadata field catalogue and column selection for display and export."""

from __future__ import annotations

from typing import Any, Iterable, Mapping, Optional

VIDEO_FIELDS: tuple[str, ...] = (
    "id",
    "title",
    "channel",
    "channel_id",
    "description",
    "view_count",
    "duration",
    "upload_date",
    "is_live",
    "is_upcoming",
    "keywords",
)

COMMENT_FIELDS: tuple[str, ...] = (
    "author",
    "comment",
    "published_time",
    "like_count",
    "reply_count",
    "comment_id",
    "is_liked",
    "is_hearted",
)

ALL_FIELDS: tuple[str, ...] = VIDEO_FIELDS + COMMENT_FIELDS + ("label",)

# Selection forced back in when a caller ends up with nothing selected
FALLBACK_FIELDS: tuple[str, ...] = ("author", "comment")

DEFAULT_FIELDS: tuple[str, ...] = ("author", "comment", "id", "channel", "title")

# Column order of a CSV export when the caller gives no configuration
DEFAULT_EXPORT_COLUMNS: tuple[str, ...] = ("label",) + DEFAULT_FIELDS


def parse_field_list(raw: Optional[str]) -> list[str]:
    """Parse a comma-separated field list, dropping unknown names and duplicates."""
    if not raw:
        return []

    fields: list[str] = []
    for part in raw.split(","):
        name = part.strip()
        if name in ALL_FIELDS and name not in fields:
            fields.append(name)
    return fields


def resolve_columns(
    column_order: Iterable[str],
    selected_fields: Iterable[str],
) -> list[str]:
    """
    Compute the effective output columns.

    ``column_order`` filtered to the selected fields keeps its sequence;
    selected fields it does not mention are appended in selection order.
    An empty selection falls back to ``FALLBACK_FIELDS``.
    """
    selected: list[str] = []
    for name in selected_fields:
        if name not in selected:
            selected.append(name)
    if not selected:
        selected = list(FALLBACK_FIELDS)

    columns: list[str] = []
    for name in column_order:
        if name in selected and name not in columns:
            columns.append(name)
    for name in selected:
        if name not in columns:
            columns.append(name)
    return columns


def filter_record(record: Mapping[str, Any], columns: Iterable[str]) -> dict[str, Any]:
    """Keep only the listed columns that carry a value, in column order."""
    return {
        name: record[name]
        for name in columns
        if record.get(name) is not None
    }
