from __future__ import annotations

import logging
import os
from typing import TYPE_CHECKING, Any, Final
from urllib.parse import parse_qs, urlparse

import requests
from github import Auth, Github, GithubException
from requests.utils import parse_header_links

from . import utils
from .exceptions import MigrationError, TrackerAPIError
from .protocols import TrackerResponse
from .rate_limit import retry_after_from_headers

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

# Module-wide logger
logger: logging.Logger = logging.getLogger(__name__)

_TOKEN_ENV_VAR: Final[str] = "GITHUB_TOKEN"  # noqa: S105
_DEFAULT_TOKEN_PASS_PATH: Final[str] = "github/cli/token"  # noqa: S105
_OCTOCAT_URL: Final[str] = "https://api.github.com/octocat"


def get_token(pass_path: str | None = None) -> str | None:
    """Get GitHub token from pass path, env var GITHUB_TOKEN, or default pass location."""
    # Try pass path first
    if pass_path:
        return utils.get_pass_value(pass_path)

    # Try environment variable
    token: str | None = os.environ.get(_TOKEN_ENV_VAR)
    if token:
        return token

    # Try default pass path
    try:
        return utils.get_pass_value(_DEFAULT_TOKEN_PASS_PATH)
    except (utils.PassError, OSError):
        logger.debug("No GitHub token specified nor found")
        return None


def get_client(token: str) -> Github:
    """Get a GitHub client using the token.

    PyGithub's own throttling and retries are disabled: requests are paced by
    the Migrator from the Retry-After header, and failed calls are not retried.
    """
    return Github(
        auth=Auth.Token(token),
        retry=None,
        seconds_between_requests=None,
        seconds_between_writes=None,
    )


def parse_repo_path(repo_path: str) -> tuple[str, str]:
    """Split and validate an "owner/repository" path.

    Raises:
        MigrationError: If the path is not of the form owner/repository
    """
    stripped = repo_path.strip()
    if stripped.count("/") != 1:
        msg = f"Invalid GitHub repository path '{repo_path}'. Expected format: 'owner/repository'"
        raise MigrationError(msg)

    owner, repo_name = stripped.split("/")
    if not owner or not repo_name:
        msg = f"Invalid GitHub repository path '{repo_path}'. Both owner and repository name must be non-empty"
        raise MigrationError(msg)
    return owner, repo_name


def _count_from_link_header(headers: Mapping[str, Any], page_items: int) -> int:
    """Derive the total item count of a per_page=1 listing from its Link header."""
    link = next((value for name, value in headers.items() if name.lower() == "link"), None)
    if not link:
        return page_items
    last = next((entry["url"] for entry in parse_header_links(link) if entry.get("rel") == "last"), None)
    if not last:
        return page_items
    pages = parse_qs(urlparse(last).query).get("page")
    return int(pages[0]) if pages else page_items


class GitHubTracker:
    """IssueTracker backed by the GitHub REST API."""

    def __init__(self, client: Github, repo_path: str) -> None:
        self.owner, self.repo_name = parse_repo_path(repo_path)
        self._client: Github = client

    @property
    def issues_url(self) -> str:
        return f"/repos/{self.owner}/{self.repo_name}/issues"

    def _request(self, verb: str, url: str, **kwargs: Any) -> tuple[dict[str, Any], Any]:
        try:
            return self._client.requester.requestJsonAndCheck(verb, url, **kwargs)
        except GithubException as e:
            msg = f"GitHub API {verb} {url} failed: {e.status} {e.data}"
            raise TrackerAPIError(msg, retry_after=retry_after_from_headers(e.headers), status=e.status) from e
        except requests.RequestException as e:
            msg = f"GitHub API {verb} {url} failed: {e}"
            raise TrackerAPIError(msg) from e

    def count_issues(self) -> TrackerResponse[int]:
        """Count all issues of the repository, open and closed.

        Pull requests are included: they share GitHub's number sequence.
        """
        headers, data = self._request("GET", self.issues_url, parameters={"state": "all", "per_page": 1})
        count = _count_from_link_header(headers, len(data or []))
        logger.debug(f"Repository {self.owner}/{self.repo_name} has {count} existing issues")
        return TrackerResponse(count, retry_after_from_headers(headers))

    def create_issue(
        self,
        title: str,
        body: str,
        *,
        closed: bool = False,  # noqa: ARG002 - GitHub creates issues open; Migrator closes them
        labels: Sequence[str] = (),
    ) -> TrackerResponse[int]:
        payload: dict[str, Any] = {"title": title, "body": body}
        if labels:
            payload["labels"] = list(labels)
        headers, data = self._request("POST", self.issues_url, input=payload)
        retry_after = retry_after_from_headers(headers)
        if not isinstance(data, dict) or not isinstance(data.get("number"), int):
            msg = f"GitHub API POST {self.issues_url} returned no issue number"
            raise TrackerAPIError(msg, retry_after=retry_after)
        return TrackerResponse(data["number"], retry_after)

    def close_issue(self, number: int) -> TrackerResponse[None]:
        headers, _ = self._request("PATCH", f"{self.issues_url}/{number}", input={"state": "closed"})
        return TrackerResponse(None, retry_after_from_headers(headers))


def fetch_octocat(message: str, token: str | None = None) -> str | None:
    """Ask GitHub's octocat endpoint to say something. Purely decorative.

    Returns:
        The ASCII art, or None if the request failed
    """
    headers = {"Authorization": f"Bearer {token}"} if token else {}
    try:
        response = requests.get(_OCTOCAT_URL, params={"s": message}, headers=headers, timeout=10)
        response.raise_for_status()
    except requests.RequestException as e:
        logger.debug(f"Could not fetch octocat: {e}")
        return None
    return response.text
