"""Conversion of platform nodes into video metadata and comment records."""

from __future__ import annotations

import re
from typing import Any, Optional

from ytcomments.scraper.models import CommentRecord, VideoMetadata
from ytcomments.youtube.models import CommentNode, VideoNode

# Node kinds that never carry the fields a record needs
REJECTED_KINDS = frozenset({
    "shortsLockupViewModel",
    "playlistPanelVideoRenderer",
    "watchCardCompactVideoRenderer",
    "reelItemRenderer",
})

_NON_DIGITS = re.compile(r"[^0-9]")


def is_valid_video_node(node: Optional[VideoNode]) -> bool:
    """True for search nodes that can be scraped as a regular video."""
    if node is None or node.kind in REJECTED_KINDS:
        return False
    return bool(node.id and node.title and node.author)


def to_int(value: Any) -> int:
    """Keep ints, otherwise strip every non-digit character and parse (0 if nothing is left)."""
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value)
    digits = _NON_DIGITS.sub("", str(value))
    return int(digits) if digits else 0


def extract_video_metadata(node: VideoNode) -> VideoMetadata:
    """Build the metadata of an accepted video node."""
    keywords: Optional[str] = None
    if node.keywords:
        if isinstance(node.keywords, (list, tuple)):
            keywords = ", ".join(str(keyword) for keyword in node.keywords)
        else:
            keywords = str(node.keywords)

    return VideoMetadata(
        id=node.id,
        title=str(node.title),
        channel=node.author,
        channel_id=node.author_id or None,
        description=node.description or None,
        view_count=to_int(node.view_count) if node.view_count is not None else None,
        duration=to_int(node.duration) if node.duration is not None else None,
        upload_date=node.published or None,
        is_live=bool(node.is_live) if node.is_live is not None else None,
        is_upcoming=bool(node.is_upcoming) if node.is_upcoming is not None else None,
        keywords=keywords,
    )


def extract_comment_data(
    node: Optional[CommentNode],
    metadata: VideoMetadata,
    author_marker: str = "@",
) -> Optional[CommentRecord]:
    """
    Flatten a comment and its video's metadata into a record.

    Returns None when the author name or the text is missing or empty after
    unwrapping; callers skip such comments without counting them.
    """
    if node is None:
        return None

    author = node.author_name or ""
    if author_marker and author.startswith(author_marker):
        author = author[1:]
    text = str(node.content) if node.content is not None else ""

    if not author or not text:
        return None

    return CommentRecord(
        id=metadata.id,
        title=metadata.title,
        channel=metadata.channel,
        author=author,
        comment=text,
        label=0,
        channel_id=metadata.channel_id,
        description=metadata.description,
        view_count=metadata.view_count,
        duration=metadata.duration,
        upload_date=metadata.upload_date,
        is_live=metadata.is_live,
        is_upcoming=metadata.is_upcoming,
        keywords=metadata.keywords,
        comment_id=node.comment_id or None,
        published_time=node.published_time or None,
        like_count=node.like_count or None,
        reply_count=node.reply_count or None,
        is_liked=bool(node.is_liked) if node.is_liked is not None else None,
        is_hearted=bool(node.is_hearted) if node.is_hearted is not None else None,
    )
