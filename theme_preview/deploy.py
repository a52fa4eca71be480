"""Create or update the preview theme for a pull request."""

from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass
from typing import Optional

from . import markers, text
from .actions import write_output
from .comments import render_error_comment, render_preview_comment
from .config import REQUIRED_FOR_PR, Settings
from .errors import (
    BuildError,
    GitHubAPIError,
    ThemeNotFoundError,
    ThemePreviewError,
    ThemeValidationError,
)
from .github import GitHubClient
from .notifications import NotificationEvent, NotificationManager
from .notifications.channel import ERROR, SUCCESS, WARNING
from .themes import ThemeManager, ThemeResult

logger = logging.getLogger(__name__)


@dataclass
class DeployResult:
    status: str
    theme_name: str
    theme_id: Optional[str] = None
    preview_url: Optional[str] = None
    warning: Optional[str] = None
    created: bool = False


def theme_name_for(settings: Settings) -> str:
    return text.sanitize_theme_name(settings.pr_title, fallback=f"PR-{settings.pr_number}")


def run_build(command: str, cwd: Optional[str] = None) -> None:
    logger.info("Running build command: %s", command)
    proc = subprocess.run(command, shell=True, cwd=cwd)
    if proc.returncode != 0:
        raise BuildError(f"Build command exited with status {proc.returncode}: {command}")
    logger.info("Build completed")


class DeployRunner:
    def __init__(
        self,
        settings: Settings,
        github: GitHubClient,
        themes: ThemeManager,
        notifier: NotificationManager,
    ) -> None:
        self.settings = settings
        self.github = github
        self.themes = themes
        self.notifier = notifier

    def run(self) -> DeployResult:
        self.settings.require(*REQUIRED_FOR_PR)
        name = theme_name_for(self.settings)
        logger.info("Theme name: %s", name)
        try:
            return self._deploy(name)
        except ThemePreviewError as exc:
            self._report_failure(exc)
            raise

    def _deploy(self, name: str) -> DeployResult:
        s = self.settings
        pr = s.pr_number
        if s.preview_label and not self.github.pr_has_label(pr, s.preview_label):
            logger.info("PR #%s lacks label %r; skipping preview", pr, s.preview_label)
            return DeployResult("skipped", name)

        comments = self.github.list_comments(pr)
        existing_id = markers.find_theme_id(comments, name)
        if existing_id:
            logger.info("Found existing theme id %s in PR comments", existing_id)
        else:
            logger.info("No existing theme found in PR comments")

        if s.build_command:
            run_build(s.build_command)

        result: Optional[ThemeResult] = None
        if existing_id:
            try:
                result = self.themes.upload_theme(existing_id, include_json=False)
            except ThemeNotFoundError:
                logger.warning("Theme %s is gone; creating a new one", existing_id)
        if result is None:
            by_name = self.themes.find_theme_by_name(name)
            if by_name:
                result = self.themes.upload_theme(by_name, include_json=False)
            else:
                self.themes.ensure_capacity()
                self.themes.pull_settings(s.source_theme_id)
                result = self.themes.create_theme(name)

        url = text.preview_url(s.store, result.theme_id)
        logger.info("Preview URL: %s", url)
        body = render_preview_comment(name, result.theme_id, url, result.warning)
        try:
            self.github.post_or_update_comment(pr, body, comments)
        except GitHubAPIError as exc:
            # theme is already live at this point
            logger.warning("Could not post preview comment: %s", exc)

        status = WARNING if result.warning else SUCCESS
        self.notifier.notify_all(
            NotificationEvent.from_settings(
                s,
                status,
                result.warning or "",
                preview_url=url,
                theme_id=result.theme_id,
            )
        )
        write_output("theme-id", result.theme_id, s.github_output)
        write_output("preview-url", url, s.github_output)
        logger.info("Deployment complete")
        return DeployResult(
            status, name, result.theme_id, url, result.warning, result.created
        )

    def _report_failure(self, exc: ThemePreviewError) -> None:
        detail = exc.errors if isinstance(exc, ThemeValidationError) else str(exc)
        logger.error("Deployment failed: %s", exc)
        if self.settings.pr_number and not isinstance(exc, GitHubAPIError):
            try:
                self.github.create_comment(
                    self.settings.pr_number,
                    render_error_comment(detail, self.settings.store),
                )
            except GitHubAPIError as comment_exc:
                logger.error("Could not post error comment: %s", comment_exc)
        self.notifier.notify_all(
            NotificationEvent.from_settings(self.settings, ERROR, text.clean_cli_output(detail))
        )
