"""Parsing utilities for InnerTube search, watch-next and comment responses."""

from __future__ import annotations

from typing import Any, Iterator, Optional

from ytcomments.youtube.models import (
    CommentNode,
    CommentPage,
    Continuation,
    SearchPage,
    VideoNode,
)

# Renderers that represent a single video anywhere in a results tree
VIDEO_KINDS = frozenset({
    "videoRenderer",
    "reelItemRenderer",
    "shortsLockupViewModel",
    "playlistPanelVideoRenderer",
    "watchCardCompactVideoRenderer",
})

COMMENT_SORT_OPTIONS = {"TOP_COMMENTS": 0, "NEWEST_FIRST": 1}

_MAX_DEPTH = 40


def _dig(obj: Any, *path: Any) -> Any:
    """Follow a key/index path, returning None as soon as a step is missing."""
    for step in path:
        if isinstance(step, int):
            if not isinstance(obj, list) or not -len(obj) <= step < len(obj):
                return None
        elif not isinstance(obj, dict):
            return None
        obj = obj[step] if isinstance(step, int) else obj.get(step)
        if obj is None:
            return None
    return obj


def _text(obj: Any) -> str:
    """Flatten a platform text object (simpleText, runs or content) to a string."""
    if obj is None:
        return ""
    if isinstance(obj, str):
        return obj
    if not isinstance(obj, dict):
        return ""
    if "simpleText" in obj:
        return str(obj["simpleText"])
    if "runs" in obj:
        return "".join(str(run.get("text", "")) for run in obj["runs"] if isinstance(run, dict))
    if "content" in obj:
        return str(obj["content"])
    return ""


def _command_token(obj: Any) -> Optional[str]:
    """Extract the continuation token of a continuationItemRenderer-like node."""
    token = _dig(obj, "continuationEndpoint", "continuationCommand", "token")
    if not token:
        token = _dig(obj, "button", "buttonRenderer", "command", "continuationCommand", "token")
    return token or None


def parse_duration(text: str) -> Optional[int]:
    """Convert ``"1:02:03"`` style length text to seconds."""
    parts = text.strip().split(":")
    if not parts or not all(part.isdigit() for part in parts):
        return None
    seconds = 0
    for part in parts:
        seconds = seconds * 60 + int(part)
    return seconds


class InnerTubeParser:
    """Parser for the JSON trees returned by InnerTube endpoints."""

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------

    def parse_search_page(
        self,
        data: dict[str, Any],
        source: Optional[Continuation] = None,
    ) -> SearchPage:
        """Parse an initial search response or a search continuation response."""
        sections = _dig(
            data,
            "contents",
            "twoColumnSearchResultsRenderer",
            "primaryContents",
            "sectionListRenderer",
            "contents",
        )
        if sections is None:
            sections = []
            for command in data.get("onResponseReceivedCommands") or []:
                items = _dig(command, "appendContinuationItemsAction", "continuationItems")
                sections.extend(items or [])

        videos: list[VideoNode] = []
        next_token: Optional[str] = None
        for section in sections:
            if not isinstance(section, dict):
                continue
            if "continuationItemRenderer" in section:
                next_token = _command_token(section["continuationItemRenderer"]) or next_token
                continue
            for kind, node in self._iter_video_nodes(section):
                videos.append(self._to_video_node(kind, node))

        continuation = Continuation("search", next_token) if next_token else None
        return SearchPage(videos=videos, continuation=continuation, source=source)

    def _iter_video_nodes(self, obj: Any, depth: int = 0) -> Iterator[tuple[str, dict]]:
        if depth > _MAX_DEPTH:
            return
        if isinstance(obj, dict):
            for key, value in obj.items():
                if key in VIDEO_KINDS and isinstance(value, dict):
                    yield key, value
                else:
                    yield from self._iter_video_nodes(value, depth + 1)
        elif isinstance(obj, list):
            for item in obj:
                yield from self._iter_video_nodes(item, depth + 1)

    def _to_video_node(self, kind: str, node: dict[str, Any]) -> VideoNode:
        if kind == "shortsLockupViewModel":
            entity_id = node.get("entityId", "")
            return VideoNode(
                kind=kind,
                id=entity_id.replace("shorts-shelf-item-", "", 1),
                title=_text(_dig(node, "overlayMetadata", "primaryText")),
            )

        owner = node.get("ownerText") or node.get("longBylineText") or node.get("shortBylineText")
        owner_run = _dig(owner, "runs", 0) or {}

        description = _text(_dig(node, "detailedMetadataSnippets", 0, "snippetText"))
        if not description:
            description = _text(node.get("descriptionSnippet"))

        view_text = _text(node.get("viewCountText"))
        length_text = _text(node.get("lengthText"))
        duration: Any = None
        if length_text:
            duration = parse_duration(length_text)
            if duration is None:
                duration = length_text

        badges = node.get("badges") or []
        is_live = any(
            _dig(badge, "metadataBadgeRenderer", "style") == "BADGE_STYLE_TYPE_LIVE_NOW"
            for badge in badges
        )

        return VideoNode(
            kind=kind,
            id=node.get("videoId", ""),
            title=_text(node.get("title") or node.get("headline")),
            author=owner_run.get("text", "") if owner_run else _text(owner),
            author_id=_dig(owner_run, "navigationEndpoint", "browseEndpoint", "browseId"),
            description=description or None,
            view_count=view_text or None,
            duration=duration,
            published=_text(node.get("publishedTimeText")) or None,
            is_live=is_live,
            is_upcoming="upcomingEventData" in node,
            keywords=node.get("keywords"),
        )

    # ------------------------------------------------------------------
    # Watch-next / comments
    # ------------------------------------------------------------------

    def find_comments_token(self, data: dict[str, Any]) -> Optional[str]:
        """Find the token that opens the comment section of a watch-next response."""
        contents = _dig(
            data, "contents", "twoColumnWatchNextResults", "results", "results", "contents"
        ) or []
        for item in contents:
            section = _dig(item, "itemSectionRenderer")
            if not section or section.get("sectionIdentifier") != "comment-item-section":
                continue
            for entry in section.get("contents") or []:
                token = _command_token(_dig(entry, "continuationItemRenderer"))
                if token:
                    return token

        for panel in data.get("engagementPanels") or []:
            renderer = _dig(panel, "engagementPanelSectionListRenderer") or {}
            if renderer.get("panelIdentifier") != "engagement-panel-comments-section":
                continue
            for entry in _dig(renderer, "content", "sectionListRenderer", "contents") or []:
                for inner in _dig(entry, "itemSectionRenderer", "contents") or []:
                    token = _command_token(_dig(inner, "continuationItemRenderer"))
                    if token:
                        return token
        return None

    def find_sort_token(self, data: dict[str, Any], sort: str) -> Optional[str]:
        """Find the token that reloads the comment section in the requested order."""
        index = COMMENT_SORT_OPTIONS.get(sort)
        if index is None:
            return None
        for item in self._continuation_items(data):
            header = item.get("commentsHeaderRenderer")
            if not header:
                continue
            options = _dig(header, "sortMenu", "sortFilterSubMenuRenderer", "subMenuItems") or []
            return _dig(options, index, "serviceEndpoint", "continuationCommand", "token")
        return None

    def parse_comment_page(
        self,
        data: dict[str, Any],
        video_id: str,
        source: Optional[Continuation] = None,
    ) -> CommentPage:
        """Parse a comment page in either the entity-payload or the legacy renderer format."""
        entities: dict[str, dict] = {}
        toolbar_states: dict[str, dict] = {}
        mutations = _dig(data, "frameworkUpdates", "entityBatchUpdate", "mutations") or []
        for mutation in mutations:
            payload = mutation.get("payload") or {}
            entity = payload.get("commentEntityPayload")
            if entity:
                comment_id = _dig(entity, "properties", "commentId")
                if comment_id:
                    entities[comment_id] = entity
            state = payload.get("engagementToolbarStateEntityPayload")
            if state and state.get("key"):
                toolbar_states[state["key"]] = state

        comments: list[CommentNode] = []
        next_token: Optional[str] = None
        for item in self._continuation_items(data):
            thread = item.get("commentThreadRenderer")
            if thread:
                view_model = _dig(thread, "commentViewModel", "commentViewModel")
                comment_id = view_model.get("commentId") if view_model else None
                if comment_id and comment_id in entities:
                    comments.append(self._from_entity(entities[comment_id], toolbar_states))
                    continue
                legacy = _dig(thread, "comment", "commentRenderer")
                if legacy:
                    comments.append(self._from_renderer(legacy))
                continue

            if "continuationItemRenderer" in item:
                next_token = _command_token(item["continuationItemRenderer"]) or next_token

        continuation = Continuation("next", next_token) if next_token else None
        return CommentPage(
            video_id=video_id,
            comments=comments,
            continuation=continuation,
            source=source,
        )

    @staticmethod
    def _continuation_items(data: dict[str, Any]) -> Iterator[dict]:
        for endpoint in data.get("onResponseReceivedEndpoints") or []:
            items = (
                _dig(endpoint, "reloadContinuationItemsCommand", "continuationItems")
                or _dig(endpoint, "appendContinuationItemsAction", "continuationItems")
                or []
            )
            for item in items:
                if isinstance(item, dict):
                    yield item

    @staticmethod
    def _from_entity(entity: dict[str, Any], toolbar_states: dict[str, dict]) -> CommentNode:
        props = entity.get("properties") or {}
        toolbar = entity.get("toolbar") or {}
        state = toolbar_states.get(props.get("toolbarStateKey", "")) or {}

        like_state = state.get("likeState")
        heart_state = state.get("heartState")
        return CommentNode(
            comment_id=props.get("commentId"),
            author_name=_dig(entity, "author", "displayName"),
            content=_text(props.get("content")),
            published_time=props.get("publishedTime"),
            like_count=toolbar.get("likeCountNotliked") or None,
            reply_count=toolbar.get("replyCount") or None,
            is_liked=like_state == "TOOLBAR_LIKE_STATE_LIKED" if like_state else None,
            is_hearted=heart_state == "TOOLBAR_HEART_STATE_HEARTED" if heart_state else None,
        )

    @staticmethod
    def _from_renderer(raw: dict[str, Any]) -> CommentNode:
        reply_count = raw.get("replyCount")
        is_hearted = _dig(
            raw,
            "actionButtons",
            "commentActionButtonsRenderer",
            "creatorHeart",
            "creatorHeartRenderer",
            "isHearted",
        )
        return CommentNode(
            comment_id=raw.get("commentId"),
            author_name=_text(raw.get("authorText")),
            content=_text(raw.get("contentText")),
            published_time=_text(raw.get("publishedTimeText")) or None,
            like_count=_text(raw.get("voteCount")) or None,
            reply_count=str(reply_count) if reply_count else None,
            is_liked=raw.get("isLiked"),
            is_hearted=is_hearted,
        )
