"""Delete a pull request's preview theme once the pull request closes."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from . import markers
from .config import REQUIRED_FOR_PR, Settings
from .deploy import theme_name_for
from .errors import GitHubAPIError
from .github import GitHubClient
from .themes import ThemeManager

logger = logging.getLogger(__name__)


@dataclass
class CleanupResult:
    theme_name: str
    deleted: bool
    theme_id: Optional[str] = None
    matched_by: Optional[str] = None


class CleanupRunner:
    def __init__(self, settings: Settings, github: GitHubClient, themes: ThemeManager) -> None:
        self.settings = settings
        self.github = github
        self.themes = themes

    def run(self) -> CleanupResult:
        self.settings.require(*REQUIRED_FOR_PR)
        name = theme_name_for(self.settings)
        logger.info("Looking for theme: %s", name)

        try:
            comments = self.github.list_comments(self.settings.pr_number)
        except GitHubAPIError as exc:
            logger.warning("Could not read PR comments: %s", exc)
            comments = []
        theme_id = markers.find_theme_id(comments, name)

        if theme_id:
            logger.info("Found theme id %s in PR comments", theme_id)
            if self.themes.delete_theme(theme_id):
                return CleanupResult(name, True, theme_id, "comment")
            logger.warning("Could not delete theme %s by id; searching by name", theme_id)
        else:
            logger.info("No theme id in PR comments; searching by name")

        by_name = self.themes.find_theme_by_name(name)
        if by_name and self.themes.delete_theme(by_name):
            return CleanupResult(name, True, by_name, "name")

        logger.info(
            "No theme was deleted (it may have been removed manually or never created)"
        )
        return CleanupResult(name, False, theme_id)
