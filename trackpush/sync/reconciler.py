"""Push reconciler — push a module snapshot onto a registry track, at most once.

One reconcile call handles one CI event:

1. only branch refs are reconciled, everything else is skipped;
2. inputs are validated and the main-track guard is applied before any
   network call;
3. the commit tags recorded on the track are compared with the current commit
   and the first identical or newer one ends the run;
4. otherwise the content is pushed, and a duplicate-content rejection falls
   back to tagging the existing commit, which makes reruns safe.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

from trackpush.errors import (
    ConfigurationError,
    ErrorCode,
    RegistryError,
    UnexpectedCompareStatusError,
)
from trackpush.github.client import CommitComparer
from trackpush.registry.client import RegistryService
from trackpush.registry.models import ModuleContent, ModuleIdentity
from trackpush.sync.history import CompareStatus, classify, filter_commit_tags
from trackpush.sync.repair import tag_existing_commit
from trackpush.sync.track import check_main_track_guard, resolve_track
from trackpush.utils.workflow import COMMIT_OUTPUT, COMMIT_URL_OUTPUT, WorkflowCommands

logger = logging.getLogger(__name__)

REF_TYPE_BRANCH = "branch"


class PushAction(Enum):
    """What a reconcile call ended up doing."""

    PUSHED = "pushed"
    TAGGED = "tagged"  # content existed, the git commit was tagged onto it
    SKIPPED = "skipped"


@dataclass
class PushRequest:
    """Everything one push event needs, already read from the environment."""

    module: ModuleContent
    identity: ModuleIdentity
    track: str
    default_branch: str
    ref_name: str
    commit: str
    ref_type: str = REF_TYPE_BRANCH
    event_name: str = "push"


@dataclass
class PushResult:
    """The registry commit now holding the content."""

    commit: str
    track: str
    identity: ModuleIdentity

    @property
    def url(self) -> str:
        return self.identity.commit_url(self.commit)


@dataclass
class PushOutcome:
    action: PushAction
    track: str = ""
    result: PushResult | None = None


class PushReconciler:
    """Reconciles a module snapshot with a registry track.

    Parameters
    ----------
    registry : RegistryService
        Registry client for the module's remote.
    github : CommitComparer
        Git host client used to compare commit tags with the current commit.
    commands : WorkflowCommands
        Where notices and outputs are written.
    """

    def __init__(
        self,
        registry: RegistryService,
        github: CommitComparer,
        commands: WorkflowCommands,
    ) -> None:
        self.registry = registry
        self.github = github
        self.commands = commands

    def reconcile(self, request: PushRequest) -> PushOutcome:
        if request.ref_type != REF_TYPE_BRANCH:
            return self._skip(
                f'Skipping because "{request.event_name}" events are not supported '
                f'with "{request.ref_type}" references'
            )

        if not request.track:
            raise ConfigurationError("track not provided")
        if not request.default_branch:
            raise ConfigurationError("default_branch not provided")
        if not request.commit:
            raise ConfigurationError("current git commit not found in environment")
        check_main_track_guard(request.track, request.default_branch, request.ref_name)

        track = resolve_track(request.track, request.default_branch, request.ref_name)
        identity = request.identity
        logger.info("reconciling %s on track %s", identity.identity_string, track)

        for tag in self._track_tags(identity, track):
            comparison = classify(self.github, request.commit, tag)
            status = comparison.status
            if status == CompareStatus.NOT_FOUND:
                continue
            if status == CompareStatus.IDENTICAL:
                return self._skip(
                    f"Skipping because the current git commit is already the head of track {track}",
                    track,
                )
            if status == CompareStatus.BEHIND:
                return self._skip(
                    f"Skipping because the current git commit is behind the head of track {track}",
                    track,
                )
            if status == CompareStatus.DIVERGED:
                self.commands.notice(
                    f"The current git commit is diverged from the head of track {track}"
                )
                continue
            if status == CompareStatus.AHEAD:
                continue
            raise UnexpectedCompareStatusError(f"unexpected status: {comparison.reported}")

        action = PushAction.PUSHED
        try:
            pin = self.registry.push(
                identity.owner,
                identity.repository,
                "",
                request.module,
                [request.commit],
                [track],
            )
            commit = pin.commit
        except RegistryError as e:
            if e.code != ErrorCode.ALREADY_EXISTS:
                raise
            logger.info("content already on %s, tagging it with %s", track, request.commit)
            repository_tag = tag_existing_commit(self.registry, identity, request.commit, track)
            commit = repository_tag.commit_name or self._head_commit(identity, track)
            action = PushAction.TAGGED

        result = PushResult(commit=commit, track=track, identity=identity)
        self.commands.set_output(COMMIT_OUTPUT, result.commit)
        self.commands.set_output(COMMIT_URL_OUTPUT, result.url)
        return PushOutcome(action=action, track=track, result=result)

    def _track_tags(self, identity: ModuleIdentity, track: str) -> list[str]:
        """Commit tags on the track's head; a track not created yet has none."""
        try:
            head = self.registry.get_repository_commit_by_reference(
                identity.owner, identity.repository, track
            )
        except RegistryError as e:
            if e.code != ErrorCode.NOT_FOUND:
                raise
            logger.info("track %s does not exist yet", track)
            return []
        tags = filter_commit_tags(head.tags)
        logger.debug("track %s head %s has %d commit tag(s)", track, head.name, len(tags))
        return tags

    def _head_commit(self, identity: ModuleIdentity, track: str) -> str:
        head = self.registry.get_repository_commit_by_reference(
            identity.owner, identity.repository, track
        )
        return head.name

    def _skip(self, reason: str, track: str = "") -> PushOutcome:
        self.commands.notice(reason)
        return PushOutcome(action=PushAction.SKIPPED, track=track)
