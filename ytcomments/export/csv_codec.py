"""
CSV serialization for comment records.

Only values containing a comma, a double quote or a line break are wrapped
in quotes, and lines end with ``\\n``. Existing consumers compare exports
byte for byte against that layout.
"""

from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Any, Iterable, Mapping, Optional, Sequence

from ytcomments.export.fields import DEFAULT_EXPORT_COLUMNS

_NEEDS_QUOTES = re.compile(r'[",\n\r]')
_UNSAFE_FILENAME_CHARS = re.compile(r"[^a-z0-9]", re.IGNORECASE)


def escape_csv(value: str) -> str:
    """Escape a single cell value."""
    if not value:
        return ""
    if _NEEDS_QUOTES.search(value):
        return '"' + value.replace('"', '""') + '"'
    return value


def format_value(value: Any) -> str:
    """Render a record value as cell text before escaping."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        return value
    return str(value)


def convert_to_csv(
    records: Iterable[Mapping[str, Any]],
    columns: Sequence[str] = DEFAULT_EXPORT_COLUMNS,
) -> str:
    """Serialize records to CSV text, one ``\\n``-terminated line per row."""
    lines = [",".join(columns)]
    for record in records:
        lines.append(
            ",".join(escape_csv(format_value(record.get(name))) for name in columns)
        )
    return "\n".join(lines) + "\n"


def export_filename(query: str, now: Optional[datetime] = None) -> str:
    """Build the download filename for a query, e.g. ``youtube-comments-cats-<ts>.csv``."""
    now = now or datetime.now(timezone.utc)
    sanitized = _UNSAFE_FILENAME_CHARS.sub("_", query).lower()
    timestamp = now.strftime("%Y-%m-%dT%H:%M:%S.") + f"{now.microsecond // 1000:03d}Z"
    timestamp = timestamp.replace(":", "-").replace(".", "-")
    return f"youtube-comments-{sanitized}-{timestamp}.csv"
