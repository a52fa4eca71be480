"""Fakes for the Shopify CLI process runner and the GitHub HTTP session."""

from __future__ import annotations

import json
import subprocess
from collections import defaultdict, deque
from typing import Any, Dict, List, Optional

import requests


def make_response(status: int = 200, data: Any = None, text: Optional[str] = None) -> requests.Response:
    resp = requests.Response()
    resp.status_code = status
    if text is None:
        text = "" if data is None else json.dumps(data)
    resp._content = text.encode("utf-8")
    resp.encoding = "utf-8"
    return resp


def push_output(
    theme_id: Optional[int] = 123,
    errors: Optional[Dict[str, Any]] = None,
    warning: Optional[str] = None,
    banner: str = "Uploading files...\n",
) -> str:
    theme: Dict[str, Any] = {"id": theme_id, "name": "x", "role": "unpublished"}
    if errors:
        theme["errors"] = errors
    if warning:
        theme["warning"] = warning
    return banner + json.dumps({"theme": theme})


class FakeRunner:
    """Scripted stand-in for ``subprocess.run`` keyed by theme subcommand."""

    def __init__(self) -> None:
        self.calls: List[List[str]] = []
        self.kwargs: List[Dict[str, Any]] = []
        self.scripts: Dict[str, deque] = defaultdict(deque)
        self.defaults: Dict[str, tuple] = {"list": (0, "[]")}

    def script(self, subcommand: str, returncode: int = 0, output: str = "") -> None:
        self.scripts[subcommand].append((returncode, output))

    def __call__(self, cmd, **kwargs):
        self.calls.append(list(cmd))
        self.kwargs.append(kwargs)
        sub = cmd[2]
        queue = self.scripts[sub]
        if queue:
            rc, out = queue.popleft()
        else:
            rc, out = self.defaults.get(sub, (0, ""))
        return subprocess.CompletedProcess(cmd, rc, stdout=out)

    def commands(self, subcommand: str) -> List[List[str]]:
        return [c for c in self.calls if c[2] == subcommand]


class FakeGitHubSession:
    """In-memory issue comments and labels served on the REST paths."""

    def __init__(self) -> None:
        self.comments: List[Dict[str, Any]] = []
        self.labels: List[str] = []
        self.requests: List[tuple] = []
        self.failures: deque = deque()
        self._next_id = 100

    def add_comment(self, body: str, created_at: str = "2024-01-01T00:00:00Z") -> Dict[str, Any]:
        self._next_id += 1
        comment = {"id": self._next_id, "body": body, "created_at": created_at}
        self.comments.append(comment)
        return comment

    def calls(self, method: str) -> List[tuple]:
        return [r for r in self.requests if r[0] == method]

    def request(self, method, url, headers=None, json=None, params=None, timeout=None):
        self.requests.append((method, url, json, params))
        if self.failures:
            failure = self.failures.popleft()
            if isinstance(failure, Exception):
                raise failure
            return make_response(failure, {"message": "nope"})
        path = "/" + url.split("://", 1)[1].split("/", 1)[1]
        if method == "GET" and path.endswith("/comments"):
            page = int((params or {}).get("page", 1))
            per_page = int((params or {}).get("per_page", 30))
            start = (page - 1) * per_page
            return make_response(200, self.comments[start:start + per_page])
        if method == "POST" and path.endswith("/comments"):
            return make_response(201, self.add_comment(json["body"]))
        if method == "PATCH" and "/issues/comments/" in path:
            comment_id = int(path.rsplit("/", 1)[1])
            for comment in self.comments:
                if comment["id"] == comment_id:
                    comment["body"] = json["body"]
                    return make_response(200, comment)
            return make_response(404, {"message": "Not Found"})
        if method == "GET" and path.endswith("/labels"):
            return make_response(200, [{"name": n} for n in self.labels])
        return make_response(404, {"message": "Not Found"})


class RecordingNotifier:
    name = "recording"

    def __init__(self) -> None:
        self.events = []

    def send(self, event) -> bool:
        self.events.append(event)
        return True
