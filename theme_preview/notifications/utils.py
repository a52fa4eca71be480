"""Utilities shared by the notification providers."""

from __future__ import annotations

import json
import logging
import time
from typing import Any, Callable, Dict

import requests

from .channel import NotificationChannel

logger = logging.getLogger(__name__)

WEBHOOK_TIMEOUT = (5, 10)


def provider_name(provider: NotificationChannel) -> str:
    """Return a canonical name for *provider*.

    If the provider defines a ``name`` attribute, it is used directly.
    Otherwise the class name is used with any trailing ``Notifier`` suffix
    removed.
    """

    name = getattr(provider, "name", None)
    if name:
        return name
    cls_name = type(provider).__name__
    if cls_name.endswith("Notifier"):
        cls_name = cls_name[:-8]
    return cls_name


def _log_dry_run(provider: NotificationChannel, payload: object) -> None:
    """Log dry-run payloads in a standardized format."""
    try:
        content = json.dumps(payload, ensure_ascii=False)
    except (TypeError, ValueError):
        content = repr(payload)
    print(f"DRYRUN {provider_name(provider)}: {content}")


def post_webhook(
    provider: NotificationChannel,
    session: requests.Session,
    url: str,
    payload: Dict[str, Any],
    sleep: Callable[[float], None] = time.sleep,
) -> bool:
    """POST *payload* as JSON, retrying once after a second."""
    for attempt in range(2):
        try:
            resp = session.post(url, json=payload, timeout=WEBHOOK_TIMEOUT)
            resp.raise_for_status()
            return True
        except requests.RequestException as e:
            if attempt == 0:
                sleep(1)
            else:
                logger.warning(
                    "%s notification failed: %s: %s",
                    provider_name(provider),
                    e.__class__.__name__,
                    e,
                )
    return False
