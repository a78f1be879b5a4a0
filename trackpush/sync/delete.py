"""Track deletion — drop the registry track of a deleted git branch."""

from __future__ import annotations

import logging

from trackpush.errors import ConfigurationError, ErrorCode, RegistryError
from trackpush.registry.client import RegistryService
from trackpush.registry.models import ModuleIdentity
from trackpush.sync.track import MAIN_TRACK, resolve_track
from trackpush.utils.workflow import WorkflowCommands

logger = logging.getLogger(__name__)


def delete_track(
    registry: RegistryService,
    identity: ModuleIdentity,
    track: str,
    default_branch: str,
    ref_name: str,
    ref_type: str,
    commands: WorkflowCommands,
    event_name: str = "delete",
) -> bool:
    """Delete the track matching a deleted branch.

    Returns True when the registry deleted a track. The main track is never
    deleted, and a track that is already gone is not an error.
    """
    if ref_type != "branch":
        commands.notice(
            f'Skipping because "{event_name}" events are not supported with "{ref_type}" references'
        )
        return False
    if not track:
        raise ConfigurationError("track not provided")
    if not default_branch:
        raise ConfigurationError("default_branch not provided")

    track = resolve_track(track, default_branch, ref_name)
    if track == MAIN_TRACK:
        commands.notice("Skipping because the main track can not be deleted")
        return False

    logger.info("deleting track %s of %s", track, identity.identity_string)
    try:
        registry.delete_repository_track_by_name(identity.owner, identity.repository, track)
    except RegistryError as e:
        if e.code != ErrorCode.NOT_FOUND:
            raise
        commands.notice(f"Track {track} does not exist")
        return False
    return True
