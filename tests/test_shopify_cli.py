import json
import subprocess

import pytest

from theme_preview.errors import ShopifyCLIError
from theme_preview.shopify import ShopifyCLI, ignore_flags


def test_push_composes_flags(runner):
    cli = ShopifyCLI("shopify", runner=runner)
    cli.push("PR-1 Banner", path="dist", unpublished=True, ignore=["a/*.json", ""])
    assert runner.calls[0] == [
        "shopify", "theme", "push", "--unpublished",
        "--theme", "PR-1 Banner", "--path", "dist",
        "--nodelete", "--no-color", "--json", "--ignore=a/*.json",
    ]


def test_run_merges_stderr_and_passes_env(runner):
    cli = ShopifyCLI("shopify", env={"SHOPIFY_FLAG_STORE": "demo"}, runner=runner)
    runner.script("delete", 0, "Theme deleted")
    result = cli.delete("42")
    assert result.ok
    assert result.output == "Theme deleted"
    assert runner.calls[0] == ["shopify", "theme", "delete", "--theme", "42", "--force"]
    kwargs = runner.kwargs[0]
    assert kwargs["stderr"] is subprocess.STDOUT
    assert kwargs["env"] == {"SHOPIFY_FLAG_STORE": "demo"}
    assert (kwargs["encoding"], kwargs["errors"]) == ("utf-8", "replace")


def test_pull_from_source_theme_or_live(runner):
    cli = ShopifyCLI(runner=runner)
    cli.pull("77", only=["templates/*.json"])
    cli.pull(None)
    assert runner.calls[0][3:6] == ["--theme", "77", "--path"]
    assert "--only=templates/*.json" in runner.calls[0]
    assert runner.calls[1][3] == "--live"


def test_missing_executable_raises():
    def boom(*args, **kwargs):
        raise FileNotFoundError("shopify")

    with pytest.raises(ShopifyCLIError, match="Could not run shopify"):
        ShopifyCLI(runner=boom).run("list")


def test_list_themes_accepts_array_and_object(runner):
    cli = ShopifyCLI(runner=runner)
    runner.script("list", 0, json.dumps([{"id": 1, "name": "Live"}]))
    runner.script("list", 0, json.dumps({"themes": [{"id": 2, "name": "PR-2"}]}))
    assert cli.list_themes() == [{"id": 1, "name": "Live"}]
    assert cli.list_themes() == [{"id": 2, "name": "PR-2"}]


def test_list_themes_skips_leading_banner(runner):
    runner.script("list", 0, "Update available!\n" + json.dumps([{"id": 3, "name": "x"}]))
    assert ShopifyCLI(runner=runner).list_themes() == [{"id": 3, "name": "x"}]


def test_list_themes_failures_raise(runner):
    cli = ShopifyCLI(runner=runner)
    runner.script("list", 1, "Not logged in")
    runner.script("list", 0, "garbage")
    with pytest.raises(ShopifyCLIError, match="retrieve"):
        cli.list_themes()
    with pytest.raises(ShopifyCLIError, match="parse"):
        cli.list_themes()


def test_ignore_flags_skip_blanks():
    assert ignore_flags(["x", "", "y/*"]) == ["--ignore=x", "--ignore=y/*"]


def test_undecodable_output_is_replaced(tmp_path):
    exe = tmp_path / "fake-shopify"
    exe.write_text("#!/bin/sh\nprintf 'Uploading \\377 done'\nexit 1\n")
    exe.chmod(0o755)
    result = ShopifyCLI(str(exe)).run("push")
    assert result.returncode == 1
    assert result.output == "Uploading � done"
