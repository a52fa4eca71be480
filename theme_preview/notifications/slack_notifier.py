"""Slack notification provider (incoming webhook with attachments)."""

from __future__ import annotations

import time
from typing import Callable, Dict, List, Optional

import requests

from .channel import ERROR, INFO, SUCCESS, WARNING, NotificationChannel, NotificationEvent
from .utils import _log_dry_run, post_webhook

_STYLE = {
    SUCCESS: ("✅", "#36a64f"),
    ERROR: ("❌", "#ff0000"),
    WARNING: ("⚠️", "#ff9900"),
    INFO: ("ℹ️", "#0099ff"),
}


class SlackNotifier(NotificationChannel):
    """Send notifications to Slack via incoming webhook."""
    name = "slack"

    def __init__(
        self,
        webhook_url: Optional[str] = None,
        dry_run: bool = False,
        session: Optional[requests.Session] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.webhook_url = webhook_url
        self.dry_run = dry_run
        self.session = session or requests.Session()
        self._sleep = sleep
        self._last_payload: Optional[dict] = None

    def build_payload(self, event: NotificationEvent) -> dict:
        emoji, color = _STYLE.get(event.status, _STYLE[INFO])
        fields: List[Dict] = []
        if event.repository:
            fields.append({"title": "Repository", "value": event.repository, "short": True})
        if event.pr_url:
            fields.append({
                "title": "PR",
                "value": f"<{event.pr_url}|#{event.pr_number}: {event.pr_title}>",
                "short": True,
            })
        if event.theme_id:
            fields.append({"title": "Theme ID", "value": str(event.theme_id), "short": True})
        if event.preview_url:
            fields.append({
                "title": "Preview URL",
                "value": f"<{event.preview_url}|View Preview>",
                "short": True,
            })
        fields.append({"title": "Status", "value": event.status_text, "short": False})
        if event.details:
            fields.append({"title": "Details", "value": event.details, "short": False})
        return {
            "username": "PR Theme Preview Bot",
            "icon_emoji": ":shopify:",
            "text": f"{emoji} Shopify Theme Deployed",
            "attachments": [
                {
                    "color": color,
                    "fields": fields,
                    "footer": "Shopify Theme Preview",
                    "ts": event.timestamp,
                }
            ],
        }

    def send(self, event: NotificationEvent) -> bool:
        if not self.webhook_url:
            return False

        payload = self.build_payload(event)
        self._last_payload = payload

        if self.dry_run:
            _log_dry_run(self, payload)
            return True

        return post_webhook(self, self.session, self.webhook_url, payload, self._sleep)
