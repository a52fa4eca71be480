"""Preview theme lifecycle on the store: create, upload, prune, delete."""

from __future__ import annotations

import logging
import re
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Iterable, List, Optional

from . import text
from .config import Settings
from .errors import (
    ShopifyCLIError,
    ThemeNotFoundError,
    ThemeValidationError,
)
from .shopify import ShopifyCLI

logger = logging.getLogger(__name__)

# Merchant-edited JSON that must survive updates of an existing preview
STORE_OWNED_JSON = (
    "config/settings_data.json",
    "templates/*.json",
    "sections/*.json",
    "layout/*.json",
)

# Pulled from the source theme before a preview is first created
SETTINGS_JSON = (
    "templates/*.json",
    "sections/*.json",
    "config/settings_data.json",
    "locales/*.json",
    "snippets/*.json",
)

_LIMIT_RE = re.compile(r"limit|maximum|exceeded|too many", re.IGNORECASE)
_MISSING_RE = re.compile(r"doesn't exist|does not exist|not found", re.IGNORECASE)
_DELETED_RE = re.compile(r"^Success\b|\bTheme\b.*\bdeleted\b")
_NEGATED_RE = re.compile(r"\b(?:not|cannot|unable|failed)\b|n't", re.IGNORECASE)


def is_limit_error(output: str) -> bool:
    return bool(_LIMIT_RE.search(output))


def reports_deletion(output: str) -> bool:
    """True when a line of *output* confirms the theme was deleted."""
    for line in text.clean_cli_output(output).splitlines():
        if _DELETED_RE.search(line) and not _NEGATED_RE.search(line):
            return True
    return False


@dataclass
class ThemeResult:
    theme_id: str
    warning: Optional[str] = None
    created: bool = False


def _updated_at(theme: Dict[str, Any]) -> datetime:
    raw = str(theme.get("updated_at") or "")
    try:
        parsed = datetime.fromisoformat(raw.replace("Z", "+00:00"))
    except ValueError:
        return datetime.min.replace(tzinfo=timezone.utc)
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)


class ThemeManager:
    def __init__(
        self,
        cli: ShopifyCLI,
        settings: Settings,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.cli = cli
        self.settings = settings
        self._sleep = sleep

    def delete_theme(self, theme_id: str) -> bool:
        logger.info("Deleting theme %s", theme_id)
        try:
            result = self.cli.delete(theme_id)
        except ShopifyCLIError as exc:
            logger.warning("Could not delete theme %s: %s", theme_id, exc)
            return False
        if result.ok or reports_deletion(result.output):
            logger.info("Theme %s deleted", theme_id)
            return True
        if _MISSING_RE.search(result.output):
            logger.warning("Theme %s not found", theme_id)
        else:
            logger.warning(
                "Could not delete theme %s: %s", theme_id, text.clean_cli_output(result.output)
            )
        return False

    def find_theme_by_name(self, name: str) -> Optional[str]:
        """Exact-name lookup; ``None`` when absent or the list is unavailable."""
        try:
            themes = self.cli.list_themes()
        except ShopifyCLIError as exc:
            logger.warning("%s", exc)
            return None
        for theme in themes:
            if theme.get("name") == name and theme.get("id"):
                logger.info("Found theme %r with id %s", name, theme["id"])
                return str(theme["id"])
        logger.debug("No theme named %r among %d themes", name, len(themes))
        return None

    def preview_candidates(
        self, themes: List[Dict[str, Any]], exclude: Iterable[str] = ()
    ) -> List[Dict[str, Any]]:
        """Unpublished preview themes, oldest update first."""
        excluded = {str(e) for e in exclude}
        patterns = self.settings.preview_name_patterns
        candidates = [
            t
            for t in themes
            if t.get("role") == "unpublished"
            and str(t.get("id")) not in excluded
            and any(p in (t.get("name") or "") for p in patterns)
        ]
        return sorted(candidates, key=_updated_at)

    def prune_preview_themes(
        self,
        exclude: Iterable[str] = (),
        themes: Optional[List[Dict[str, Any]]] = None,
    ) -> int:
        """Delete up to ``max_limit_deletions`` of the oldest preview themes."""
        if themes is None:
            try:
                themes = self.cli.list_themes()
            except ShopifyCLIError as exc:
                logger.warning("%s", exc)
                return 0
        deleted = 0
        for theme in self.preview_candidates(themes, exclude):
            if deleted >= self.settings.max_limit_deletions:
                break
            logger.info(
                "Deleting old preview theme %r (id %s, updated %s)",
                theme.get("name"),
                theme.get("id"),
                theme.get("updated_at"),
            )
            if self.delete_theme(str(theme["id"])):
                deleted += 1
        if deleted:
            logger.info("Deleted %d old preview theme(s)", deleted)
        else:
            logger.warning("No old preview themes could be deleted")
        return deleted

    def ensure_capacity(self) -> None:
        try:
            themes = self.cli.list_themes()
        except ShopifyCLIError as exc:
            logger.warning("Skipping theme limit check: %s", exc)
            return
        if len(themes) >= self.settings.theme_limit:
            logger.info(
                "Store holds %d of %d themes; pruning previews",
                len(themes),
                self.settings.theme_limit,
            )
            self.prune_preview_themes(themes=themes)

    def pull_settings(self, source_theme_id: Optional[str] = None) -> bool:
        if source_theme_id:
            logger.info("Pulling settings from theme %s", source_theme_id)
        else:
            logger.info("No source theme given; pulling settings from the live theme")
        result = self.cli.pull(
            source_theme_id, path=self.settings.theme_root, only=SETTINGS_JSON
        )
        if not result.ok:
            logger.warning(
                "Could not pull all settings files (fine if some do not exist): %s",
                text.clean_cli_output(result.output),
            )
        return result.ok

    def create_theme(self, name: str) -> ThemeResult:
        """Push the working tree as a new unpublished theme called *name*.

        A theme-limit failure triggers one round of pruning and one retry.
        Validation failures are not retried; the half-created theme is deleted
        before :class:`ThemeValidationError` is raised.
        """
        pruned = False
        while True:
            logger.info("Creating new theme %r", name)
            result = self.cli.push(
                name,
                path=self.settings.theme_root,
                unpublished=True,
                ignore=self.settings.ignore_files,
            )
            payload = text.extract_theme_payload(result.output)
            # a payload with errors is a validation failure even if it says "limit"
            if (
                not result.ok
                and not text.theme_error_count(payload)
                and is_limit_error(result.output)
            ):
                logger.warning("Theme limit reached")
                if not pruned and self.prune_preview_themes():
                    pruned = True
                    self._sleep(2)
                    continue
                raise ShopifyCLIError(
                    "Theme limit reached and older previews could not be removed automatically.",
                    result.output,
                    result.returncode,
                )
            break

        if payload is None:
            theme_id = text.scrape_theme_id(result.output) if result.ok else None
            if theme_id:
                logger.info("Theme created with id %s (parsed from text output)", theme_id)
                return ThemeResult(theme_id, created=True)
            raise ShopifyCLIError(
                f"Failed to create theme: {text.clean_cli_output(result.output)}",
                result.output,
                result.returncode,
            )

        theme_id = text.theme_id_from_payload(payload) or text.scrape_theme_id(result.output)
        error_count = text.theme_error_count(payload)
        if error_count:
            logger.error("Theme was created with %d error(s)", error_count)
            errors = text.format_theme_errors(payload) or result.output
            if theme_id and not self.delete_theme(theme_id):
                logger.warning("Could not clean up failed theme %s", theme_id)
            raise ThemeValidationError(errors, result.output)
        if not theme_id:
            raise ShopifyCLIError(
                "Failed to extract theme ID from Shopify response", result.output
            )
        warning = text.theme_warning(payload)
        if warning:
            logger.warning("Theme created with warnings: %s", warning)
        logger.info("Theme created with id %s", theme_id)
        return ThemeResult(theme_id, warning, created=True)

    def upload_theme(self, theme_id: str, include_json: bool = False) -> ThemeResult:
        """Push the working tree into an existing theme.

        Without *include_json* the store-owned JSON files are left alone so
        merchant edits made in the preview survive.
        """
        ignore = list(self.settings.ignore_files)
        if not include_json:
            ignore = [*STORE_OWNED_JSON, *ignore]
        attempts = max(1, self.settings.upload_retries)
        for attempt in range(attempts):
            logger.info("Uploading theme to id %s (attempt %d)", theme_id, attempt + 1)
            result = self.cli.push(theme_id, path=self.settings.theme_root, ignore=ignore)
            payload = text.extract_theme_payload(result.output)
            if text.theme_error_count(payload):
                raise ThemeValidationError(
                    text.format_theme_errors(payload) or result.output, result.output
                )
            if result.ok:
                return ThemeResult(theme_id, text.theme_warning(payload))
            if _MISSING_RE.search(result.output):
                raise ThemeNotFoundError(
                    f"Theme {theme_id} no longer exists on Shopify",
                    result.output,
                    result.returncode,
                )
            if attempt < attempts - 1:
                wait = self.settings.upload_backoff_sec * (2 ** attempt)
                logger.warning("Theme upload failed; retrying in %ss", wait)
                self._sleep(wait)
        raise ShopifyCLIError(
            f"Theme upload failed: {text.clean_cli_output(result.output)}",
            result.output,
            result.returncode,
        )
