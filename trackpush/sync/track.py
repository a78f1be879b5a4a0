"""Track resolution — which registry track a git ref writes to."""

from __future__ import annotations

from trackpush.errors import PolicyViolationError

MAIN_TRACK = "main"


def resolve_track(track: str, default_branch: str, ref_name: str) -> str:
    """Return the registry track to use for ``track``.

    The declared track is normalized to ``"main"`` when it names the default
    branch and is either the triggering ref or no ref is known (manual runs).
    Any other value is returned unchanged.
    """
    if track == default_branch and (track == ref_name or ref_name == ""):
        return MAIN_TRACK
    return track


def check_main_track_guard(track: str, default_branch: str, ref_name: str) -> None:
    """Refuse writes to the main track from a branch other than the default one.

    With a default branch such as ``master`` and a separate ``main`` branch,
    both would otherwise land on the ``main`` track and interleave histories.
    """
    if default_branch != MAIN_TRACK and track == MAIN_TRACK and track == ref_name:
        raise PolicyViolationError("cannot push to main track from a non-default branch")
