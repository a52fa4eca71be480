"""Command line interface: ``theme-preview deploy|cleanup``."""

from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from . import __version__
from .cleanup import CleanupRunner
from .config import Settings
from .deploy import DeployRunner
from .errors import ThemePreviewError
from .github import GitHubClient
from .notifications import NotificationManager
from .shopify import ShopifyCLI
from .themes import ThemeManager

logger = logging.getLogger("theme_preview")


def configure_logging(verbose: bool = False) -> None:
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
    root = logging.getLogger("theme_preview")
    root.handlers[:] = [handler]
    root.setLevel(logging.DEBUG if verbose else logging.INFO)
    root.propagate = False


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="theme-preview",
        description="Manage the Shopify preview theme of a pull request",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--config",
        help="YAML or JSON settings file (default: env THEME_PREVIEW_CONFIG or .theme-preview.yml)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("deploy", help="Create or update the preview theme and report it")
    sub.add_parser("cleanup", help="Delete the preview theme")
    return parser


def _clients(settings: Settings):
    github = GitHubClient(
        settings.github_token,
        settings.repository,
        api_url=settings.api_url,
        max_retries=settings.github_retries,
        rate_limit_wait=settings.rate_limit_wait_sec,
    )
    cli = ShopifyCLI(settings.shopify_executable, env=settings.cli_env())
    return github, ThemeManager(cli, settings)


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose)
    try:
        settings = Settings.from_env(config_path=args.config)
        github, themes = _clients(settings)
        if args.command == "deploy":
            result = DeployRunner(
                settings, github, themes, NotificationManager.from_settings(settings)
            ).run()
            if result.status == "skipped":
                logger.info("Nothing deployed")
        else:
            CleanupRunner(settings, github, themes).run()
    except ThemePreviewError as exc:
        logger.error("%s", exc)
        return 1
    return 0


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    raise SystemExit(main())
