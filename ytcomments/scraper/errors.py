"""Exceptions raised by buffered scraping runs."""

from __future__ import annotations


class ScrapeError(RuntimeError):
    """A run failed as a whole (search failure or an error in the traversal loop)."""


class NoCommentsFound(ScrapeError):
    """A run finished without collecting a single record."""
