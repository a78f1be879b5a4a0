"""Error taxonomy for a single action run.

Every fatal condition is a ``TrackPushError``; the CLI renders it as one
``::error::`` line and exits non-zero. Skip conditions are not errors.
"""

from __future__ import annotations

from enum import Enum


class TrackPushError(Exception):
    """Base class for every fatal error raised by trackpush."""


class ConfigurationError(TrackPushError):
    """A required input is missing or malformed."""


class PolicyViolationError(TrackPushError):
    """The requested write would break a track invariant."""


class InvocationTimeoutError(TrackPushError):
    """The run exceeded its overall deadline."""


class UnexpectedCompareStatusError(TrackPushError):
    """The git host reported a comparison status we do not know."""


class ErrorCode(Enum):
    """Registry RPC error codes (Connect protocol names)."""

    CANCELED = "canceled"
    UNKNOWN = "unknown"
    INVALID_ARGUMENT = "invalid_argument"
    DEADLINE_EXCEEDED = "deadline_exceeded"
    NOT_FOUND = "not_found"
    ALREADY_EXISTS = "already_exists"
    PERMISSION_DENIED = "permission_denied"
    RESOURCE_EXHAUSTED = "resource_exhausted"
    FAILED_PRECONDITION = "failed_precondition"
    ABORTED = "aborted"
    OUT_OF_RANGE = "out_of_range"
    UNIMPLEMENTED = "unimplemented"
    INTERNAL = "internal"
    UNAVAILABLE = "unavailable"
    DATA_LOSS = "data_loss"
    UNAUTHENTICATED = "unauthenticated"

    @classmethod
    def parse(cls, value: str) -> ErrorCode:
        try:
            return cls(value)
        except ValueError:
            return cls.UNKNOWN


class RegistryError(TrackPushError):
    """A registry call failed with a structured error code."""

    def __init__(self, code: ErrorCode, message: str):
        super().__init__(message)
        self.code = code
        self.message = message


class GitHubError(TrackPushError):
    """A GitHub REST call failed."""

    def __init__(self, message: str, status_code: int = 0):
        super().__init__(message)
        self.status_code = status_code


class GitHubNotFoundError(GitHubError):
    """GitHub answered 404 for the requested reference."""

