"""Configuration loading for the theme preview tool.

Secrets and pull request context always come from the environment the CI
runner provides.  Tunables (theme limit, retry counts, which theme names count
as previews) may additionally be kept in a YAML or JSON file, by default
``.theme-preview.yml`` in the working directory.  Environment variables win
over the file, and the file wins over the built-in defaults.
"""
from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Mapping, Optional

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from .errors import ConfigError

DEFAULT_CONFIG_PATH = ".theme-preview.yml"

DEFAULTS: Dict = {
    "theme_limit": 20,
    "max_limit_deletions": 2,
    "preview_name_patterns": ["PR-", "FLASH-"],
    "upload_retries": 3,
    "upload_backoff_sec": 2.0,
    "github_retries": 3,
    "rate_limit_wait_sec": 60.0,
    "shopify_executable": "shopify",
}

# Settings attribute -> environment variable
_ENV_NAMES = {
    "github_token": "GITHUB_TOKEN",
    "store": "SHOPIFY_FLAG_STORE",
    "theme_token": "SHOPIFY_CLI_THEME_TOKEN",
    "pr_title": "PR_TITLE",
    "pr_number": "PR_NUMBER",
    "repository": "GITHUB_REPOSITORY",
}


def load_config(path: str | None = None) -> Dict:
    """Load tunables from *path* or from ``.theme-preview.yml``.

    ``.json`` files are parsed as JSON, anything else as YAML via
    ruamel.yaml.  A missing file yields the defaults.
    """
    cfg_path = Path(path or DEFAULT_CONFIG_PATH)
    merged = dict(DEFAULTS)
    if not cfg_path.exists():
        if path:
            raise ConfigError(f"Config file not found: {cfg_path}")
        return merged
    try:
        text = cfg_path.read_text(encoding="utf-8")
        if cfg_path.suffix.lower() == ".json":
            data = json.loads(text) or {}
        else:
            data = YAML(typ="safe").load(text) or {}
    except (OSError, ValueError, YAMLError) as exc:
        raise ConfigError(f"Could not read {cfg_path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"{cfg_path} must contain a mapping, got {type(data).__name__}")
    unknown = sorted(set(data) - set(DEFAULTS))
    if unknown:
        raise ConfigError(f"Unknown settings in {cfg_path}: {', '.join(unknown)}")
    merged.update(_checked(data, cfg_path))
    return merged


def _checked(data: Dict, cfg_path: Path) -> Dict:
    """Coerce file values to the type of their default; raise on mismatch."""
    checked = {}
    for key, value in data.items():
        default = DEFAULTS[key]
        if isinstance(default, list):
            if not isinstance(value, list) or not all(isinstance(v, str) and v for v in value):
                raise ConfigError(f"{key} in {cfg_path} must be a list of non-empty strings")
            checked[key] = list(value)
        elif isinstance(default, str):
            if not isinstance(value, str) or not value:
                raise ConfigError(f"{key} in {cfg_path} must be a non-empty string")
            checked[key] = value
        else:
            if isinstance(value, bool):
                raise ConfigError(f"{key} in {cfg_path} must be a number, got {value!r}")
            try:
                checked[key] = type(default)(value)
            except (TypeError, ValueError) as exc:
                raise ConfigError(f"{key} in {cfg_path} must be a number, got {value!r}") from exc
            if checked[key] < 0:
                raise ConfigError(f"{key} in {cfg_path} must not be negative")
    return checked


def _split_patterns(raw: str) -> List[str]:
    return [p.strip() for p in raw.split(",") if p.strip()]


def _truthy(value: Optional[str]) -> bool:
    return (value or "").strip().lower() in {"1", "true", "yes", "on"}


@dataclass
class Settings:
    github_token: str = ""
    store: str = ""
    theme_token: str = ""
    pr_title: str = ""
    pr_number: Optional[int] = None
    repository: str = ""
    server_url: str = "https://github.com"
    api_url: str = "https://api.github.com"
    github_output: Optional[str] = None
    source_theme_id: Optional[str] = None
    build_command: Optional[str] = None
    theme_root: str = "."
    ignore_files: List[str] = field(default_factory=list)
    slack_webhook_url: Optional[str] = None
    msteams_webhook_url: Optional[str] = None
    preview_label: Optional[str] = None
    notifications_dry_run: bool = False
    theme_limit: int = DEFAULTS["theme_limit"]
    max_limit_deletions: int = DEFAULTS["max_limit_deletions"]
    preview_name_patterns: List[str] = field(
        default_factory=lambda: list(DEFAULTS["preview_name_patterns"])
    )
    upload_retries: int = DEFAULTS["upload_retries"]
    upload_backoff_sec: float = DEFAULTS["upload_backoff_sec"]
    github_retries: int = DEFAULTS["github_retries"]
    rate_limit_wait_sec: float = DEFAULTS["rate_limit_wait_sec"]
    shopify_executable: str = DEFAULTS["shopify_executable"]

    @classmethod
    def from_env(
        cls,
        env: Mapping[str, str] | None = None,
        config_path: str | None = None,
    ) -> "Settings":
        env = os.environ if env is None else env
        path = config_path or env.get("THEME_PREVIEW_CONFIG") or None
        tunables = load_config(path)

        pr_number: Optional[int] = None
        raw_number = (env.get("PR_NUMBER") or "").strip()
        if raw_number:
            try:
                pr_number = int(raw_number)
            except ValueError as exc:
                raise ConfigError(f"PR_NUMBER must be an integer, got {raw_number!r}") from exc

        return cls(
            github_token=env.get("GITHUB_TOKEN", ""),
            store=env.get("SHOPIFY_FLAG_STORE", ""),
            theme_token=env.get("SHOPIFY_CLI_THEME_TOKEN", ""),
            pr_title=env.get("PR_TITLE", ""),
            pr_number=pr_number,
            repository=env.get("GITHUB_REPOSITORY", ""),
            server_url=env.get("GITHUB_SERVER_URL") or "https://github.com",
            api_url=env.get("GITHUB_API_URL") or "https://api.github.com",
            github_output=env.get("GITHUB_OUTPUT") or None,
            source_theme_id=env.get("SOURCE_THEME_ID") or None,
            build_command=env.get("BUILD_COMMAND") or None,
            theme_root=env.get("THEME_ROOT") or ".",
            ignore_files=_split_patterns(env.get("IGNORE_FILES", "")),
            slack_webhook_url=env.get("SLACK_WEBHOOK_URL") or None,
            msteams_webhook_url=env.get("MS_TEAMS_WEBHOOK_URL") or None,
            preview_label=env.get("PREVIEW_LABEL") or None,
            notifications_dry_run=_truthy(env.get("NOTIFICATIONS_DRY_RUN")),
            theme_limit=tunables["theme_limit"],
            max_limit_deletions=tunables["max_limit_deletions"],
            preview_name_patterns=list(tunables["preview_name_patterns"]),
            upload_retries=tunables["upload_retries"],
            upload_backoff_sec=tunables["upload_backoff_sec"],
            github_retries=tunables["github_retries"],
            rate_limit_wait_sec=tunables["rate_limit_wait_sec"],
            shopify_executable=tunables["shopify_executable"],
        )

    def require(self, *names: str) -> None:
        """Raise :class:`ConfigError` listing every unset setting in *names*."""
        missing = [
            _ENV_NAMES.get(name, name.upper())
            for name in names
            if getattr(self, name) in (None, "")
        ]
        if missing:
            raise ConfigError(f"Missing required settings: {', '.join(missing)}")

    def cli_env(self) -> Dict[str, str]:
        """Environment for Shopify CLI child processes."""
        env = dict(os.environ)
        env["SHOPIFY_FLAG_STORE"] = self.store
        env["SHOPIFY_CLI_THEME_TOKEN"] = self.theme_token
        return env


REQUIRED_FOR_PR = ("github_token", "store", "theme_token", "pr_title", "pr_number", "repository")
