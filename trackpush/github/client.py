"""GitHub client — compare two commits of the repository running the action."""

from __future__ import annotations

import logging
from typing import Protocol

import httpx

from trackpush.errors import (
    ConfigurationError,
    GitHubError,
    GitHubNotFoundError,
    InvocationTimeoutError,
)
from trackpush.utils.deadline import Deadline

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.github.com"
USER_AGENT = "trackpush"


class CommitComparer(Protocol):
    """The git-host capability the history comparator depends on."""

    def compare_commits(self, base: str, head: str) -> str:
        """Return the raw status of ``head`` relative to ``base``."""
        ...


def split_repository(full_name: str) -> tuple[str, str]:
    """Split ``owner/repo`` into its parts."""
    if not full_name:
        raise ConfigurationError("a github repository was not provided")
    parts = full_name.split("/")
    if len(parts) != 2:
        raise ConfigurationError(
            "a github repository was not provided in the format owner/repo"
        )
    return parts[0], parts[1]


class GitHubClient:
    """Minimal GitHub REST client scoped to a single repository."""

    def __init__(
        self,
        token: str,
        repository: str,
        api_url: str = DEFAULT_API_URL,
        deadline: Deadline | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        if not token:
            raise ConfigurationError("a github authentication token was not provided")
        self.owner, self.repo = split_repository(repository)
        self.deadline = deadline or Deadline()
        self._client = httpx.Client(
            base_url=(api_url or DEFAULT_API_URL).rstrip("/"),
            headers={
                "Authorization": f"Bearer {token}",
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": "2022-11-28",
                "User-Agent": USER_AGENT,
            },
            transport=transport,
        )

    def __enter__(self) -> "GitHubClient":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    def compare_commits(self, base: str, head: str) -> str:
        """Return GitHub's comparison status of ``head`` against ``base``.

        Raises:
            GitHubNotFoundError: One of the commits is unknown to GitHub.
            GitHubError: Any other failure.
        """
        path = f"/repos/{self.owner}/{self.repo}/compare/{base}...{head}"
        timeout = self.deadline.check()
        logger.debug("github compare %s...%s", base, head)
        try:
            response = self._client.get(path, params={"per_page": 1}, timeout=timeout)
        except httpx.TimeoutException as e:
            raise InvocationTimeoutError(
                f"timed out after {self.deadline.seconds:g}s comparing commits"
            ) from e
        except httpx.TransportError as e:
            raise GitHubError(f"comparing {base}...{head}: {e}") from e

        if response.status_code == 404:
            raise GitHubNotFoundError(
                f"commit comparison {base}...{head} not found", status_code=404
            )
        if response.status_code != 200:
            raise GitHubError(
                f"comparing {base}...{head}: GitHub returned "
                f"{response.status_code} {_message(response)}",
                status_code=response.status_code,
            )
        try:
            body = response.json()
        except ValueError as e:
            raise GitHubError(
                f"comparing {base}...{head}: response is not valid JSON",
                status_code=response.status_code,
            ) from e
        if not isinstance(body, dict):
            raise GitHubError(
                f"comparing {base}...{head}: unexpected response body",
                status_code=response.status_code,
            )
        return body.get("status", "")


def _message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text[:200]
    return body.get("message", "") if isinstance(body, dict) else ""
