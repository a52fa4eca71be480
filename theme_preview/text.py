"""Helpers for turning Shopify CLI output into something usable.

The CLI mixes progress lines, box-drawn banners, ANSI colours and (with
``--json``) a trailing JSON document on the same stream.  Everything here is
plain string work on that stream.
"""
from __future__ import annotations

import json
import re
from typing import Any, Dict, Optional

THEME_NAME_MAX = 50

_ANSI_RE = re.compile(r"\x1b\[[0-9;]*[mGKH]")
_BOX_RE = re.compile(r"[╭╮╰╯─│║┃┊┋╎╏]")
_SPACES_RE = re.compile(r"  +")
_WHITESPACE_RE = re.compile(r"\s+", re.ASCII)
_NAME_DISALLOWED_RE = re.compile(r"[^A-Za-z0-9\s\-_.\[\]]", re.ASCII)
_THEME_ID_LINE_RE = re.compile(r"Theme ID: (\d+)")
_THEME_ID_JSON_RE = re.compile(r'"id":\s*(\d+)')
_PAYLOAD_START = '{"theme"'


def strip_ansi_codes(text: str) -> str:
    return _ANSI_RE.sub("", text)


def clean_cli_output(text: str) -> str:
    """Reduce CLI output to its meaningful lines for chat and PR comments."""
    lines = []
    for line in text.splitlines():
        line = _BOX_RE.sub(" ", line)
        line = strip_ansi_codes(line).strip()
        line = _SPACES_RE.sub(" ", line)
        if line == "error":
            line = "Error:"
        if line:
            lines.append(line)
    return "\n".join(lines)


def sanitize_theme_name(title: str, fallback: str = "") -> str:
    """Derive a theme name from a pull request title.

    Only ASCII letters, digits, ASCII whitespace and ``- _ . [ ]`` survive.
    Whitespace runs collapse to one space and the result is cut to 50
    characters; a space that lands on the cut is kept.  Deploy and cleanup
    must agree on this name, so both go through this function.
    """
    name = _NAME_DISALLOWED_RE.sub("", title)
    name = _WHITESPACE_RE.sub(" ", name).strip()
    name = name[:THEME_NAME_MAX]
    return name or fallback


def normalize_store(store: str) -> str:
    store = store.strip()
    for prefix in ("https://", "http://"):
        if store.startswith(prefix):
            store = store[len(prefix):]
            break
    return store.rstrip("/")


def preview_url(store: str, theme_id: str | int) -> str:
    return f"https://{normalize_store(store)}?preview_theme_id={theme_id}"


def extract_theme_payload(output: str) -> Optional[Dict[str, Any]]:
    """Return the last ``{"theme": {...}}`` JSON object embedded in *output*."""
    decoder = json.JSONDecoder()
    start = output.rfind(_PAYLOAD_START)
    while start != -1:
        try:
            obj, _ = decoder.raw_decode(output, start)
        except ValueError:
            obj = None
        if isinstance(obj, dict) and isinstance(obj.get("theme"), dict):
            return obj
        start = output.rfind(_PAYLOAD_START, 0, start)
    return None


def theme_id_from_payload(payload: Optional[Dict[str, Any]]) -> Optional[str]:
    if not payload:
        return None
    theme_id = payload.get("theme", {}).get("id")
    if theme_id in (None, "", "null"):
        return None
    return str(theme_id)


def theme_error_count(payload: Optional[Dict[str, Any]]) -> int:
    if not payload:
        return 0
    errors = payload.get("theme", {}).get("errors") or {}
    return len(errors)


def theme_warning(payload: Optional[Dict[str, Any]]) -> Optional[str]:
    if not payload:
        return None
    warning = payload.get("theme", {}).get("warning")
    if warning in (None, "", "null"):
        return None
    return str(warning)


def format_theme_errors(payload: Optional[Dict[str, Any]]) -> str:
    """One ``• file: message`` line per rejected file."""
    if not payload:
        return ""
    errors = payload.get("theme", {}).get("errors") or {}
    lines = []
    for key, value in errors.items():
        if isinstance(value, list):
            value = ", ".join(str(v) for v in value)
        lines.append(f"• {key}: {value}")
    return "\n".join(lines)


def scrape_theme_id(output: str) -> Optional[str]:
    """Last-resort theme id extraction for output without a usable payload."""
    for pattern in (_THEME_ID_LINE_RE, _THEME_ID_JSON_RE):
        match = pattern.search(output)
        if match:
            return match.group(1)
    return None
