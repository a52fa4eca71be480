"""Notification manager for multiple channels."""
from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Dict, List

from ..config import Settings
from .channel import NotificationChannel, NotificationEvent
from .msteams_notifier import MSTeamsNotifier
from .slack_notifier import SlackNotifier
from .utils import provider_name


logger = logging.getLogger(__name__)


class NotificationManager:
    """Manage a collection of notification providers."""

    def __init__(self, providers: List[NotificationChannel]):
        self._providers = list(providers)

    @classmethod
    def from_settings(cls, settings: Settings) -> "NotificationManager":
        """Build providers for every configured webhook."""
        providers: List[NotificationChannel] = []
        if settings.slack_webhook_url:
            providers.append(
                SlackNotifier(settings.slack_webhook_url, dry_run=settings.notifications_dry_run)
            )
        if settings.msteams_webhook_url:
            providers.append(
                MSTeamsNotifier(settings.msteams_webhook_url, dry_run=settings.notifications_dry_run)
            )
        if not providers:
            logger.info("No chat webhooks configured; notifications disabled.")
        return cls(providers)

    def notify_all(self, event: NotificationEvent) -> Dict[str, bool]:
        """Send *event* via all providers.

        Providers run concurrently and failures are isolated per channel.
        Returns a mapping of provider name to success boolean.
        """
        results: Dict[str, bool] = {}
        if not self._providers:
            return results

        def worker(provider: NotificationChannel) -> bool:
            try:
                return bool(provider.send(event))
            except Exception:
                logger.exception("%s notifier failed", provider_name(provider))
                return False

        with ThreadPoolExecutor() as executor:
            future_to_name = {
                executor.submit(worker, provider): provider_name(provider)
                for provider in self._providers
            }
            for future in as_completed(future_to_name):
                results[future_to_name[future]] = future.result()

        return results
