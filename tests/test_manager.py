import logging
import threading

from theme_preview.config import Settings
from theme_preview.notifications import NotificationManager
from theme_preview.notifications.channel import ERROR, NotificationEvent
from theme_preview.notifications.msteams_notifier import MSTeamsNotifier
from theme_preview.notifications.slack_notifier import SlackNotifier


class GoodNotifier:
    name = "good"

    def __init__(self):
        self.events = []

    def send(self, event):
        self.events.append(event)
        return True


class BadNotifier:
    name = "bad"

    def send(self, event):
        raise RuntimeError("boom")


class QuietNotifier:
    def send(self, event):
        return False


def test_notify_all_isolates_failures(caplog):
    good = GoodNotifier()
    manager = NotificationManager([good, BadNotifier(), QuietNotifier()])
    results = manager.notify_all(NotificationEvent(status="success"))
    assert results == {"good": True, "bad": False, "Quiet": False}
    assert len(good.events) == 1
    assert "bad notifier failed" in caplog.text


def test_notify_all_runs_providers_concurrently():
    barrier = threading.Barrier(2, timeout=5)

    class Waiting:
        def __init__(self, name):
            self.name = name

        def send(self, event):
            barrier.wait()
            return True

    manager = NotificationManager([Waiting("a"), Waiting("b")])
    assert manager.notify_all(NotificationEvent(status="info")) == {"a": True, "b": True}


def test_notify_all_without_providers():
    assert NotificationManager([]).notify_all(NotificationEvent(status="success")) == {}


def test_from_settings_builds_configured_channels():
    settings = Settings(
        slack_webhook_url="https://hooks.slack.test/x",
        msteams_webhook_url="https://teams.test/hook",
        notifications_dry_run=True,
    )
    providers = NotificationManager.from_settings(settings)._providers
    assert [type(p) for p in providers] == [SlackNotifier, MSTeamsNotifier]
    assert all(p.dry_run for p in providers)


def test_from_settings_without_webhooks(caplog):
    caplog.set_level(logging.INFO)
    manager = NotificationManager.from_settings(Settings())
    assert manager._providers == []
    assert "notifications disabled" in caplog.text


def test_event_from_settings_carries_pull_request_context(settings):
    event = NotificationEvent.from_settings(settings, ERROR, "broken", theme_id="5")
    assert event.status == ERROR
    assert event.details == "broken"
    assert event.theme_id == "5"
    assert event.pr_url == "https://github.com/octo/shop/pull/7"
    assert event.pr_title == "PR-7 Fix header!"
