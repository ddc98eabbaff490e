"""Tests for field selection and column ordering."""

from __future__ import annotations

from ytcomments.export.fields import (
    ALL_FIELDS,
    FALLBACK_FIELDS,
    filter_record,
    parse_field_list,
    resolve_columns,
)


class TestParseFieldList:
    def test_keeps_known_fields_in_order(self):
        assert parse_field_list("comment, author ,title") == ["comment", "author", "title"]

    def test_drops_unknown_and_duplicates(self):
        assert parse_field_list("author,bogus,author,,label") == ["author", "label"]

    def test_empty_input(self):
        assert parse_field_list("") == []
        assert parse_field_list(None) == []


class TestResolveColumns:
    def test_order_filtered_to_selection(self):
        columns = resolve_columns(
            ["title", "author", "view_count", "comment"],
            ["author", "comment", "title"],
        )
        assert columns == ["title", "author", "comment"]

    def test_unordered_selection_is_appended(self):
        assert resolve_columns(["comment"], ["author", "comment", "id"]) == ["comment", "author", "id"]

    def test_empty_selection_falls_back(self):
        assert resolve_columns(["title"], []) == list(FALLBACK_FIELDS)
        assert resolve_columns([], []) == list(FALLBACK_FIELDS)

    def test_never_empty_for_any_order(self):
        for order in ([], ["label"], list(ALL_FIELDS)):
            columns = resolve_columns(order, [])
            assert "author" in columns
            assert "comment" in columns

    def test_idempotent(self):
        selected = ["channel", "author", "comment"]
        once = resolve_columns(["comment", "channel"], selected)
        twice = resolve_columns(once, once)
        assert twice == once


class TestFilterRecord:
    def test_keeps_listed_columns_with_values(self):
        record = {"author": "a", "comment": "c", "title": None, "label": 0, "extra": "x"}
        assert filter_record(record, ["comment", "title", "label", "author"]) == {
            "comment": "c",
            "label": 0,
            "author": "a",
        }
