"""Notification channel interface and the event it carries."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Optional, Protocol

from ..config import Settings

SUCCESS = "success"
ERROR = "error"
WARNING = "warning"
INFO = "info"

STATUS_TEXT = {
    SUCCESS: "Theme deployed successfully",
    ERROR: "Theme deployment failed",
    WARNING: "Theme deployed with warnings",
    INFO: "Theme deployment info",
}


@dataclass
class NotificationEvent:
    """What happened to one pull request's preview."""

    status: str
    message: str = ""
    preview_url: Optional[str] = None
    theme_id: Optional[str] = None
    repository: Optional[str] = None
    pr_number: Optional[int] = None
    pr_title: str = ""
    server_url: Optional[str] = None
    timestamp: int = field(default_factory=lambda: int(time.time()))

    @classmethod
    def from_settings(
        cls, settings: Settings, status: str, message: str = "", **kwargs
    ) -> "NotificationEvent":
        """Event for the pull request described by *settings*."""
        return cls(
            status=status,
            message=message,
            repository=settings.repository or None,
            pr_number=settings.pr_number,
            pr_title=settings.pr_title,
            server_url=settings.server_url,
            **kwargs,
        )

    @property
    def status_text(self) -> str:
        return STATUS_TEXT.get(self.status, STATUS_TEXT[INFO])

    @property
    def pr_url(self) -> Optional[str]:
        if self.server_url and self.repository and self.pr_number:
            return f"{self.server_url.rstrip('/')}/{self.repository}/pull/{self.pr_number}"
        return None

    @property
    def details(self) -> Optional[str]:
        """The message, unless it only repeats the status text."""
        if self.message and self.message != self.status_text:
            return self.message
        return None


class NotificationChannel(Protocol):
    """Lightweight interface for notification providers."""
    name: str

    def send(self, event: NotificationEvent) -> bool:
        """Send a notification.

        Returns True on success, False otherwise.
        """
        ...
