"""Tests for the GitHub compare client."""

import httpx
import pytest

from trackpush.errors import (
    ConfigurationError,
    GitHubError,
    GitHubNotFoundError,
    InvocationTimeoutError,
)
from trackpush.github.client import GitHubClient, split_repository

from fakes import CURRENT, OLDER


def _client(handler, repository="acme/protos") -> GitHubClient:
    return GitHubClient("gh-token", repository, transport=httpx.MockTransport(handler))


def test_compare_returns_status():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["auth"] = request.headers["Authorization"]
        return httpx.Response(200, json={"status": "ahead", "ahead_by": 3})

    with _client(handler) as client:
        assert client.compare_commits(OLDER, CURRENT) == "ahead"
    assert seen["path"] == f"/repos/acme/protos/compare/{OLDER}...{CURRENT}"
    assert seen["auth"] == "Bearer gh-token"


def test_compare_not_found():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404, json={"message": "Not Found"})

    with _client(handler) as client:
        with pytest.raises(GitHubNotFoundError):
            client.compare_commits(OLDER, CURRENT)


def test_compare_server_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(502, text="bad gateway")

    with _client(handler) as client:
        with pytest.raises(GitHubError, match="502") as excinfo:
            client.compare_commits(OLDER, CURRENT)
    assert not isinstance(excinfo.value, GitHubNotFoundError)


def test_compare_read_timeout_is_an_invocation_timeout():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("slow github", request=request)

    with _client(handler) as client:
        with pytest.raises(InvocationTimeoutError, match="comparing commits"):
            client.compare_commits(OLDER, CURRENT)


def test_compare_non_json_body_is_a_github_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=b"<html>proxy</html>")

    with _client(handler) as client:
        with pytest.raises(GitHubError, match="not valid JSON") as excinfo:
            client.compare_commits(OLDER, CURRENT)
    assert not isinstance(excinfo.value, GitHubNotFoundError)


def test_compare_non_object_body_is_a_github_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=["ahead"])

    with _client(handler) as client:
        with pytest.raises(GitHubError, match="unexpected response body"):
            client.compare_commits(OLDER, CURRENT)


def test_requires_token():
    with pytest.raises(ConfigurationError, match="github authentication token"):
        GitHubClient("", "acme/protos")


def test_split_repository():
    assert split_repository("acme/protos") == ("acme", "protos")


def test_split_repository_requires_value():
    with pytest.raises(ConfigurationError, match="a github repository was not provided$"):
        split_repository("")


def test_split_repository_requires_owner_and_repo():
    with pytest.raises(ConfigurationError, match="format owner/repo"):
        split_repository("acme/protos/extra")
