"""Thin wrapper around the ``shopify theme`` command line."""

from __future__ import annotations

import json
import logging
import subprocess
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence

from .errors import ShopifyCLIError

logger = logging.getLogger(__name__)


@dataclass
class CLIResult:
    args: List[str]
    returncode: int
    output: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0


def ignore_flags(patterns: Iterable[str]) -> List[str]:
    return [f"--ignore={p}" for p in patterns if p]


def only_flags(patterns: Iterable[str]) -> List[str]:
    return [f"--only={p}" for p in patterns if p]


class ShopifyCLI:
    """Runs ``shopify theme ...`` with stderr folded into stdout."""

    def __init__(
        self,
        executable: str = "shopify",
        env: Optional[Mapping[str, str]] = None,
        runner: Callable[..., subprocess.CompletedProcess] = subprocess.run,
    ) -> None:
        self.executable = executable
        self.env = dict(env) if env is not None else None
        self._run = runner

    def run(self, *args: str) -> CLIResult:
        cmd = [self.executable, "theme", *args]
        logger.debug("Running %s", " ".join(cmd))
        try:
            proc = self._run(
                cmd,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                encoding="utf-8",
                errors="replace",
                env=self.env,
            )
        except OSError as exc:
            raise ShopifyCLIError(f"Could not run {self.executable}: {exc}") from exc
        return CLIResult(cmd, proc.returncode, proc.stdout or "")

    def push(
        self,
        theme: str,
        *,
        path: str = ".",
        unpublished: bool = False,
        ignore: Sequence[str] = (),
    ) -> CLIResult:
        args = []
        if unpublished:
            args.append("--unpublished")
        args += ["--theme", str(theme), "--path", path, "--nodelete", "--no-color", "--json"]
        args += ignore_flags(ignore)
        return self.run("push", *args)

    def pull(
        self,
        theme_id: Optional[str] = None,
        *,
        path: str = ".",
        only: Sequence[str] = (),
    ) -> CLIResult:
        selector = ["--theme", str(theme_id)] if theme_id else ["--live"]
        args = [*selector, "--path", path, *only_flags(only), "--nodelete", "--no-color"]
        return self.run("pull", *args)

    def delete(self, theme_id: str) -> CLIResult:
        return self.run("delete", "--theme", str(theme_id), "--force")

    def list_themes(self) -> List[Dict[str, Any]]:
        result = self.run("list", "--json")
        if not result.ok:
            raise ShopifyCLIError(
                "Could not retrieve theme list", result.output, result.returncode
            )
        try:
            data = json.loads(result.output)
        except ValueError:
            # banners sometimes precede the JSON document
            start = result.output.find("[")
            brace = result.output.find("{")
            if start == -1 or (brace != -1 and brace < start):
                start = brace
            try:
                data = json.JSONDecoder().raw_decode(result.output, max(start, 0))[0]
            except ValueError as exc:
                raise ShopifyCLIError(
                    "Could not parse theme list", result.output, result.returncode
                ) from exc
        if isinstance(data, dict):
            data = data.get("themes", [])
        if not isinstance(data, list):
            raise ShopifyCLIError("Unexpected theme list shape", result.output)
        return [t for t in data if isinstance(t, dict)]
