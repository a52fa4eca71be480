"""Minimal GitHub REST client for pull request comments and labels."""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, Dict, List, Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from . import markers
from .errors import GitHubAPIError

logger = logging.getLogger(__name__)

PER_PAGE = 100
RATE_LIMIT_STATUSES = (403, 429)


def build_session(connect_retries: int = 2) -> requests.Session:
    """Session that retries dropped connections; status retries are ours."""
    s = requests.Session()
    retry = Retry(
        total=connect_retries,
        connect=connect_retries,
        read=0,
        status=0,
        backoff_factor=0.5,
        raise_on_status=False,
    )
    adapter = HTTPAdapter(max_retries=retry)
    s.mount("https://", adapter)
    s.mount("http://", adapter)
    return s


class GitHubClient:
    """Issue comment and label operations for one repository."""

    def __init__(
        self,
        token: str,
        repository: str,
        api_url: str = "https://api.github.com",
        session: Optional[requests.Session] = None,
        max_retries: int = 3,
        rate_limit_wait: float = 60,
        timeout: float = 30,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.repository = repository
        self.api_url = api_url.rstrip("/")
        self.session = session or build_session()
        self.max_retries = max(1, max_retries)
        self.rate_limit_wait = rate_limit_wait
        self.timeout = timeout
        self._sleep = sleep
        self._headers = {
            "Authorization": f"token {token}",
            "Accept": "application/vnd.github.v3+json",
            "User-Agent": "shopify-pr-theme-preview",
        }

    def request(
        self,
        method: str,
        path: str,
        payload: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """Call the API and return the decoded JSON body.

        Rate limit responses (403/429) wait ``rate_limit_wait`` seconds.  Any
        other failure backs off exponentially starting at one second.
        """
        url = f"{self.api_url}{path}"
        wait = 1.0
        status: Optional[int] = None
        body = ""
        for attempt in range(1, self.max_retries + 1):
            try:
                resp = self.session.request(
                    method,
                    url,
                    headers=self._headers,
                    json=payload,
                    params=params,
                    timeout=self.timeout,
                )
            except requests.RequestException as exc:
                status, body = None, str(exc)
            else:
                status, body = resp.status_code, resp.text
                if 200 <= status < 300:
                    if not resp.content:
                        return None
                    try:
                        return resp.json()
                    except ValueError as exc:
                        raise GitHubAPIError(
                            f"GitHub returned invalid JSON for {method} {path}", status, body
                        ) from exc
                if status in RATE_LIMIT_STATUSES:
                    logger.warning(
                        "GitHub API rate limit hit (HTTP %s); waiting %ss",
                        status,
                        self.rate_limit_wait,
                    )
                    if attempt < self.max_retries:
                        self._sleep(self.rate_limit_wait)
                    continue
            if attempt < self.max_retries:
                logger.warning(
                    "GitHub API %s %s failed (%s); retrying in %ss",
                    method,
                    path,
                    f"HTTP {status}" if status else body,
                    wait,
                )
                self._sleep(wait)
                wait *= 2
        raise GitHubAPIError(
            f"GitHub API {method} {path} failed after {self.max_retries} attempts",
            status,
            body,
        )

    def _issue_path(self, number: int) -> str:
        return f"/repos/{self.repository}/issues/{number}"

    def list_comments(self, pr_number: int) -> List[Dict[str, Any]]:
        comments: List[Dict[str, Any]] = []
        page = 1
        while True:
            batch = self.request(
                "GET",
                f"{self._issue_path(pr_number)}/comments",
                params={"per_page": PER_PAGE, "page": page},
            ) or []
            comments += batch
            if len(batch) < PER_PAGE:
                break
            page += 1
        return comments

    def create_comment(self, pr_number: int, body: str) -> Dict[str, Any]:
        return self.request("POST", f"{self._issue_path(pr_number)}/comments", {"body": body})

    def update_comment(self, comment_id: int, body: str) -> Dict[str, Any]:
        return self.request(
            "PATCH", f"/repos/{self.repository}/issues/comments/{comment_id}", {"body": body}
        )

    def post_or_update_comment(
        self,
        pr_number: int,
        body: str,
        comments: Optional[List[Dict[str, Any]]] = None,
    ) -> Dict[str, Any]:
        """Edit the comment that already carries this body's theme marker.

        Bodies without a marker, or whose marker is not on the pull request
        yet, are posted as a new comment.
        """
        theme_id = markers.marker_in(body)
        if theme_id:
            if comments is None:
                comments = self.list_comments(pr_number)
            existing = markers.comment_with_theme_id(comments, theme_id)
            if existing:
                logger.info("Updating comment %s for theme %s", existing, theme_id)
                return self.update_comment(existing, body)
        logger.info("Creating new comment on PR #%s", pr_number)
        return self.create_comment(pr_number, body)

    def list_labels(self, pr_number: int) -> List[str]:
        labels = self.request("GET", f"{self._issue_path(pr_number)}/labels") or []
        return [label.get("name", "") for label in labels]

    def pr_has_label(self, pr_number: int, name: str) -> bool:
        wanted = name.strip().lower()
        return any(label.strip().lower() == wanted for label in self.list_labels(pr_number))
