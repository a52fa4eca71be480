"""Chat notifications about preview deployments."""

from .channel import NotificationChannel, NotificationEvent
from .manager import NotificationManager

__all__ = ["NotificationChannel", "NotificationEvent", "NotificationManager"]
