import pytest

from theme_preview.config import Settings
from theme_preview.github import GitHubClient
from theme_preview.notifications import NotificationManager
from theme_preview.shopify import ShopifyCLI
from theme_preview.themes import ThemeManager

from tests.helpers import FakeGitHubSession, FakeRunner, RecordingNotifier

_ENV_VARS = [
    "GITHUB_TOKEN",
    "SHOPIFY_FLAG_STORE",
    "SHOPIFY_CLI_THEME_TOKEN",
    "PR_TITLE",
    "PR_NUMBER",
    "GITHUB_REPOSITORY",
    "GITHUB_SERVER_URL",
    "GITHUB_API_URL",
    "GITHUB_OUTPUT",
    "SOURCE_THEME_ID",
    "BUILD_COMMAND",
    "THEME_ROOT",
    "IGNORE_FILES",
    "SLACK_WEBHOOK_URL",
    "MS_TEAMS_WEBHOOK_URL",
    "PREVIEW_LABEL",
    "NOTIFICATIONS_DRY_RUN",
    "THEME_PREVIEW_CONFIG",
]


@pytest.fixture(autouse=True)
def isolated_env(tmp_path_factory, monkeypatch):
    """Run every test in a fresh cwd with no CI variables leaking in."""
    monkeypatch.chdir(tmp_path_factory.mktemp("cwd"))
    for var in _ENV_VARS:
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def settings(tmp_path):
    return Settings(
        github_token="tok",
        store="https://demo.myshopify.com/",
        theme_token="shptka_x",
        pr_title="PR-7 Fix header!",
        pr_number=7,
        repository="octo/shop",
        github_output=str(tmp_path / "github_output"),
        upload_backoff_sec=0.5,
        rate_limit_wait_sec=60,
    )


@pytest.fixture
def sleeps():
    return []


@pytest.fixture
def runner():
    return FakeRunner()


@pytest.fixture
def themes(runner, settings, sleeps):
    return ThemeManager(ShopifyCLI(runner=runner), settings, sleep=sleeps.append)


@pytest.fixture
def gh_session():
    return FakeGitHubSession()


@pytest.fixture
def github(gh_session, sleeps):
    return GitHubClient("tok", "octo/shop", session=gh_session, sleep=sleeps.append)


@pytest.fixture
def recorder():
    return RecordingNotifier()


@pytest.fixture
def notifier(recorder):
    return NotificationManager([recorder])
