"""Exception hierarchy for theme preview operations."""

from __future__ import annotations

from typing import Optional


class ThemePreviewError(Exception):
    """Base class for failures that abort a deploy or cleanup."""


class ConfigError(ThemePreviewError):
    """Required settings are missing or a settings file is unreadable."""


class BuildError(ThemePreviewError):
    """The user supplied build command exited non-zero."""


class GitHubAPIError(ThemePreviewError):
    """A GitHub REST call kept failing after all retries."""

    def __init__(self, message: str, status: Optional[int] = None, body: str = "") -> None:
        super().__init__(message)
        self.status = status
        self.body = body


class ShopifyCLIError(ThemePreviewError):
    """The Shopify CLI failed or produced output that could not be used."""

    def __init__(self, message: str, output: str = "", returncode: Optional[int] = None) -> None:
        super().__init__(message)
        self.output = output
        self.returncode = returncode


class ThemeNotFoundError(ShopifyCLIError):
    """The targeted theme no longer exists on the store."""


class ThemeValidationError(ShopifyCLIError):
    """Shopify rejected one or more theme files.

    ``errors`` holds a human readable, one-line-per-file summary suitable for
    a pull request comment.
    """

    def __init__(self, errors: str, output: str = "") -> None:
        super().__init__("Theme upload failed with validation errors", output=output)
        self.errors = errors
