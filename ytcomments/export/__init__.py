"""CSV export and metadata field selection."""

from ytcomments.export.csv_codec import convert_to_csv, escape_csv, export_filename
from ytcomments.export.fields import (
    ALL_FIELDS,
    DEFAULT_FIELDS,
    filter_record,
    parse_field_list,
    resolve_columns,
)

__all__ = [
    "ALL_FIELDS",
    "DEFAULT_FIELDS",
    "convert_to_csv",
    "escape_csv",
    "export_filename",
    "filter_record",
    "parse_field_list",
    "resolve_columns",
]
