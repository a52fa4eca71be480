"""Microsoft Teams notification provider (connector MessageCard)."""

from __future__ import annotations

import time
from typing import Callable, Dict, List, Optional

import requests

from .channel import ERROR, INFO, SUCCESS, WARNING, NotificationChannel, NotificationEvent
from .utils import _log_dry_run, post_webhook

_ICONS = "https://img.icons8.com/color/48/000000"
_STYLE = {
    SUCCESS: ("28a745", f"{_ICONS}/checkmark.png"),
    ERROR: ("dc3545", f"{_ICONS}/cancel.png"),
    WARNING: ("ffc107", f"{_ICONS}/warning-shield.png"),
    INFO: ("0078d4", f"{_ICONS}/info.png"),
}


def _open_uri(name: str, uri: str) -> Dict:
    return {"@type": "OpenUri", "name": name, "targets": [{"os": "default", "uri": uri}]}


class MSTeamsNotifier(NotificationChannel):
    """Send notifications to a Microsoft Teams incoming webhook."""
    name = "msteams"

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
        color, image = _STYLE.get(event.status, _STYLE[INFO])
        facts: List[Dict] = []
        if event.repository:
            facts.append({"name": "Repository", "value": event.repository})
        if event.pr_number:
            label = f"#{event.pr_number}: {event.pr_title}"
            value = f"[{label}]({event.pr_url})" if event.pr_url else label
            facts.append({"name": "Pull Request", "value": value})
        if event.theme_id:
            facts.append({"name": "Theme ID", "value": str(event.theme_id)})
        facts.append({"name": "Status", "value": event.status_text})

        sections: List[Dict] = [
            {
                "activityTitle": "Shopify Theme Deployed",
                "activitySubtitle": event.status_text,
                "activityImage": image,
                "facts": facts,
                "markdown": True,
            }
        ]
        if event.details:
            sections.append({"text": f"**Details:**\n\n{event.details}", "markdown": True})

        actions: List[Dict] = []
        if event.preview_url:
            actions.append(_open_uri("View Preview", event.preview_url))
        if event.pr_url:
            actions.append(_open_uri("View Pull Request", event.pr_url))

        return {
            "@type": "MessageCard",
            "@context": "https://schema.org/extensions",
            "summary": "Shopify Theme Deployed",
            "themeColor": color,
            "title": "Shopify Theme Preview",
            "sections": sections,
            "potentialAction": actions,
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
