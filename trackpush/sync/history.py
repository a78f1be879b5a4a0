"""History comparison — relate recorded commit tags to the current git commit.

A registry commit carries, among other tags, the SHAs of the git commits it
was pushed from. Comparing those SHAs with the current commit on the git host
tells whether the track already holds this commit, something newer, or an
unrelated history.
"""

from __future__ import annotations

import logging
import string
from dataclasses import dataclass
from enum import Enum

from trackpush.errors import GitHubNotFoundError
from trackpush.github.client import CommitComparer

logger = logging.getLogger(__name__)

COMMIT_TAG_LENGTH = 40

_HEX_DIGITS = frozenset(string.hexdigits)


class CompareStatus(Enum):
    """Relationship of a candidate commit to a reference commit."""

    IDENTICAL = "identical"
    AHEAD = "ahead"  # candidate is newer
    BEHIND = "behind"  # reference is newer
    DIVERGED = "diverged"
    NOT_FOUND = "not_found"  # reference no longer in git history
    UNRECOGNIZED = "unrecognized"

    @classmethod
    def from_reported(cls, value: str) -> CompareStatus:
        """Map a status string reported by the git host."""
        for status in (cls.IDENTICAL, cls.AHEAD, cls.BEHIND, cls.DIVERGED):
            if value == status.value:
                return status
        return cls.UNRECOGNIZED


@dataclass(frozen=True)
class Comparison:
    """Outcome of comparing ``candidate`` against ``reference``."""

    candidate: str
    reference: str
    status: CompareStatus
    reported: str = ""


def is_commit_tag(name: str) -> bool:
    """True when ``name`` is shaped like a full git SHA-1."""
    return len(name) == COMMIT_TAG_LENGTH and all(c in _HEX_DIGITS for c in name)


def filter_commit_tags(tag_names: list[str]) -> list[str]:
    """Keep only the git-commit tags, in their original order."""
    return [name for name in tag_names if is_commit_tag(name)]


def classify(github: CommitComparer, candidate: str, reference: str) -> Comparison:
    """Compare ``candidate`` with ``reference`` on the git host.

    A reference the host no longer knows yields ``NOT_FOUND`` instead of an
    error. Every other host failure propagates.
    """
    try:
        reported = github.compare_commits(reference, candidate)
    except GitHubNotFoundError:
        logger.debug("reference %s not found on the git host", reference)
        return Comparison(candidate, reference, CompareStatus.NOT_FOUND)
    status = CompareStatus.from_reported(reported)
    logger.debug("%s compared to %s: %s", candidate, reference, reported)
    return Comparison(candidate, reference, status, reported)
