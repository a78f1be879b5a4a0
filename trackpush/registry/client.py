"""Registry RPC client — Connect protocol with JSON bodies over httpx.

Each method maps to one unary RPC of the registry API::

    POST https://api.<remote>/buf.alpha.registry.v1alpha1.<Service>/<Method>

Failures come back as ``{"code": "...", "message": "..."}`` and are raised as
``RegistryError`` so callers can branch on ``not_found`` / ``already_exists``.
"""

from __future__ import annotations

import logging
from typing import Protocol

import httpx

from trackpush.errors import ErrorCode, InvocationTimeoutError, RegistryError
from trackpush.registry.models import (
    LocalModulePin,
    ModuleContent,
    Repository,
    RepositoryCommit,
    RepositoryTag,
)
from trackpush.utils.deadline import Deadline

logger = logging.getLogger(__name__)

API_PACKAGE = "buf.alpha.registry.v1alpha1"
USER_AGENT = "trackpush"


class RegistryService(Protocol):
    """The registry capabilities the reconciler depends on."""

    def get_repository_commit_by_reference(
        self, owner: str, repository: str, reference: str
    ) -> RepositoryCommit: ...

    def push(
        self,
        owner: str,
        repository: str,
        branch: str,
        module: ModuleContent,
        tags: list[str],
        tracks: list[str],
    ) -> LocalModulePin: ...

    def get_repository_by_full_name(self, full_name: str) -> Repository: ...

    def create_repository_tag(
        self, repository_id: str, name: str, commit_name: str
    ) -> RepositoryTag: ...

    def delete_repository_track_by_name(
        self, owner: str, repository: str, name: str
    ) -> None: ...


def default_base_url(remote: str) -> str:
    """API base URL for a registry remote such as ``buf.build``."""
    return f"https://api.{remote}"


class RegistryClient:
    """Synchronous registry client bound to one remote.

    Parameters
    ----------
    base_url : str
        API root, usually ``default_base_url(identity.remote)``.
    token : str
        Bearer token sent with every call.
    deadline : Deadline | None
        Shared run deadline; each request gets the remaining time as timeout.
    transport : httpx.BaseTransport | None
        Optional transport, used by tests.
    """

    def __init__(
        self,
        base_url: str,
        token: str,
        deadline: Deadline | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.deadline = deadline or Deadline()
        self._client = httpx.Client(
            base_url=self.base_url,
            headers={
                "Authorization": f"Bearer {token}",
                "Connect-Protocol-Version": "1",
                "User-Agent": USER_AGENT,
            },
            transport=transport,
        )

    def __enter__(self) -> "RegistryClient":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    # ------------------------------------------------------------------
    # RPCs
    # ------------------------------------------------------------------

    def get_repository_commit_by_reference(
        self, owner: str, repository: str, reference: str
    ) -> RepositoryCommit:
        data = self._call(
            "RepositoryCommitService",
            "GetRepositoryCommitByReference",
            {
                "repositoryOwner": owner,
                "repositoryName": repository,
                "reference": reference,
            },
        )
        return RepositoryCommit.from_json(data.get("repositoryCommit", {}))

    def push(
        self,
        owner: str,
        repository: str,
        branch: str,
        module: ModuleContent,
        tags: list[str],
        tracks: list[str],
    ) -> LocalModulePin:
        data = self._call(
            "PushService",
            "Push",
            {
                "owner": owner,
                "repository": repository,
                "branch": branch,
                "module": module.to_json(),
                "tags": list(tags),
                "tracks": list(tracks),
            },
        )
        return LocalModulePin.from_json(data.get("localModulePin", {}))

    def get_repository_by_full_name(self, full_name: str) -> Repository:
        data = self._call(
            "RepositoryService",
            "GetRepositoryByFullName",
            {"fullName": full_name},
        )
        return Repository.from_json(data.get("repository", {}))

    def create_repository_tag(
        self, repository_id: str, name: str, commit_name: str
    ) -> RepositoryTag:
        data = self._call(
            "RepositoryTagService",
            "CreateRepositoryTag",
            {"repositoryId": repository_id, "name": name, "commitName": commit_name},
        )
        return RepositoryTag.from_json(data.get("repositoryTag", {}))

    def delete_repository_track_by_name(
        self, owner: str, repository: str, name: str
    ) -> None:
        self._call(
            "RepositoryTrackService",
            "DeleteRepositoryTrackByName",
            {"ownerName": owner, "repositoryName": repository, "name": name},
        )

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    def _call(self, service: str, method: str, body: dict) -> dict:
        path = f"/{API_PACKAGE}.{service}/{method}"
        timeout = self.deadline.check()
        logger.debug("registry call %s", path)
        try:
            response = self._client.post(path, json=body, timeout=timeout)
        except httpx.TimeoutException as e:
            raise InvocationTimeoutError(
                f"timed out after {self.deadline.seconds:g}s calling {service}.{method}"
            ) from e
        except httpx.TransportError as e:
            raise RegistryError(ErrorCode.UNAVAILABLE, f"{service}.{method}: {e}") from e

        if response.status_code != 200:
            raise _error_from_response(response)
        if not response.content:
            return {}
        try:
            data = response.json()
        except ValueError as e:
            raise RegistryError(
                ErrorCode.UNKNOWN, f"{service}.{method}: response is not valid JSON"
            ) from e
        if not isinstance(data, dict):
            raise RegistryError(
                ErrorCode.UNKNOWN, f"{service}.{method}: unexpected response body"
            )
        return data


# Connect maps codes to HTTP statuses; used when the body carries no code.
_HTTP_STATUS_CODES = {
    400: ErrorCode.INVALID_ARGUMENT,
    401: ErrorCode.UNAUTHENTICATED,
    403: ErrorCode.PERMISSION_DENIED,
    404: ErrorCode.NOT_FOUND,
    409: ErrorCode.ALREADY_EXISTS,
    429: ErrorCode.UNAVAILABLE,
    502: ErrorCode.UNAVAILABLE,
    503: ErrorCode.UNAVAILABLE,
    504: ErrorCode.UNAVAILABLE,
}


def _error_from_response(response: httpx.Response) -> RegistryError:
    try:
        body = response.json()
    except ValueError:
        body = {}
    if not isinstance(body, dict):
        body = {}

    raw_code = body.get("code", "")
    if raw_code:
        code = ErrorCode.parse(raw_code)
    else:
        code = _HTTP_STATUS_CODES.get(response.status_code, ErrorCode.UNKNOWN)
    message = body.get("message") or response.reason_phrase or code.value
    logger.debug("registry error %s (%s): %s", response.status_code, code.value, message)
    return RegistryError(code, message)
