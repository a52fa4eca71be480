"""Hidden HTML markers that tie a pull request to its preview theme.

The preview comment carries ``<!-- SHOPIFY_THEME_ID: <id> -->``.  Comments
written by earlier releases used ``<!-- THEME_NAME:<name>:ID:<id>:END -->``
instead; those are still honoured when looking a theme up, but never written.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

MARKER_RE = re.compile(r"<!-- SHOPIFY_THEME_ID: (\d+) -->")

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


@dataclass(frozen=True)
class ThemeMarker:
    theme_id: str
    comment_id: Optional[int]
    created_at: datetime


def theme_marker(theme_id: str | int) -> str:
    return f"<!-- SHOPIFY_THEME_ID: {theme_id} -->"


def _legacy_pattern(theme_name: str) -> re.Pattern[str]:
    return re.compile(rf"<!-- THEME_NAME:{re.escape(theme_name)}:ID:(\d+):END -->")


def _parse_timestamp(value: Any) -> datetime:
    if not value:
        return _EPOCH
    try:
        parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        return _EPOCH
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def theme_markers(comments: Iterable[Dict[str, Any]]) -> List[ThemeMarker]:
    """Every theme-ID marker found in *comments*, in comment order."""
    found: List[ThemeMarker] = []
    for comment in comments:
        body = comment.get("body") or ""
        created = _parse_timestamp(comment.get("created_at"))
        for match in MARKER_RE.finditer(body):
            found.append(ThemeMarker(match.group(1), comment.get("id"), created))
    return found


def latest_theme_id(comments: Iterable[Dict[str, Any]]) -> Optional[str]:
    """Theme id from the most recently created marker comment."""
    markers = theme_markers(comments)
    if not markers:
        return None
    # max() keeps the first of equal timestamps; later comments win ties
    newest = max(reversed(markers), key=lambda m: m.created_at)
    return newest.theme_id


def legacy_theme_id(comments: Iterable[Dict[str, Any]], theme_name: str) -> Optional[str]:
    pattern = _legacy_pattern(theme_name)
    for comment in comments:
        match = pattern.search(comment.get("body") or "")
        if match:
            return match.group(1)
    return None


def find_theme_id(comments: List[Dict[str, Any]], theme_name: str) -> Optional[str]:
    return latest_theme_id(comments) or legacy_theme_id(comments, theme_name)


def comment_with_theme_id(
    comments: Iterable[Dict[str, Any]], theme_id: str | int
) -> Optional[int]:
    marker = theme_marker(theme_id)
    for comment in comments:
        if marker in (comment.get("body") or ""):
            return comment.get("id")
    return None


def marker_in(body: str) -> Optional[str]:
    match = MARKER_RE.search(body)
    return match.group(1) if match else None
