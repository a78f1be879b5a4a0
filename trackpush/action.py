"""Action entry point — dispatch one GitHub event to push or track deletion."""

from __future__ import annotations

import logging
from contextlib import ExitStack
from dataclasses import dataclass, field
from typing import Callable

from trackpush.config import (
    EVENT_DELETE,
    EVENT_PUSH,
    EVENT_WORKFLOW_DISPATCH,
    ActionConfig,
)
from trackpush.errors import ConfigurationError
from trackpush.github.client import CommitComparer, GitHubClient
from trackpush.registry.client import RegistryClient, RegistryService, default_base_url
from trackpush.registry.models import ModuleIdentity
from trackpush.sync.delete import delete_track
from trackpush.sync.reconciler import REF_TYPE_BRANCH, PushOutcome, PushReconciler, PushRequest
from trackpush.sync.track import check_main_track_guard
from trackpush.utils.deadline import Deadline
from trackpush.utils.git_ops import resolve_input
from trackpush.utils.module_reader import ReadModule, read_module
from trackpush.utils.workflow import WorkflowCommands

logger = logging.getLogger(__name__)


def load_module(locator: str) -> ReadModule:
    """Read the module behind ``locator``, cloning it first if it is a git URL."""
    with resolve_input(locator) as handle:
        return read_module(handle.module_path)


def new_registry_client(
    identity: ModuleIdentity, config: ActionConfig, deadline: Deadline
) -> RegistryClient:
    base_url = config.registry_api_url or default_base_url(identity.remote)
    return RegistryClient(base_url, config.buf_token, deadline=deadline)


def new_github_client(config: ActionConfig, deadline: Deadline) -> GitHubClient:
    return GitHubClient(
        config.github_token,
        config.repository,
        api_url=config.github_api_url,
        deadline=deadline,
    )


@dataclass
class ActionDependencies:
    """Collaborator factories; tests swap these for in-memory fakes."""

    module_loader: Callable[[str], ReadModule] = load_module
    registry_factory: Callable[[ModuleIdentity, ActionConfig, Deadline], RegistryService] = (
        new_registry_client
    )
    github_factory: Callable[[ActionConfig, Deadline], CommitComparer] = new_github_client
    deadline: Deadline | None = field(default=None)


def run_action(
    config: ActionConfig,
    commands: WorkflowCommands,
    deps: ActionDependencies | None = None,
) -> PushOutcome | bool | None:
    """Handle the event described by ``config``.

    Returns the push outcome for push events, whether a track was deleted for
    delete events, and None for skipped event types.
    """
    deps = deps or ActionDependencies()
    if not config.buf_token:
        raise ConfigurationError("a buf authentication token was not provided")

    event_name = config.event_name
    if not event_name:
        raise ConfigurationError("a github event name was not provided")
    deadline = deps.deadline or Deadline(config.timeout)

    if event_name == EVENT_DELETE:
        return _delete(config, commands, deps, deadline)
    if event_name in (EVENT_PUSH, EVENT_WORKFLOW_DISPATCH):
        return _push(config, commands, deps, deadline)
    commands.notice(f'Skipping because "{event_name}" events are not supported')
    return None


def _push(
    config: ActionConfig,
    commands: WorkflowCommands,
    deps: ActionDependencies,
    deadline: Deadline,
) -> PushOutcome | None:
    if config.ref_type != REF_TYPE_BRANCH:
        commands.notice(
            f'Skipping because "{config.event_name}" events are not supported '
            f'with "{config.ref_type}" references'
        )
        return None

    check_main_track_guard(config.track, config.default_branch, config.ref_name)
    module = deps.module_loader(config.input)
    logger.info("read %d file(s) of %s", len(module.content.files), module.identity.identity_string)

    with ExitStack() as stack:
        github = deps.github_factory(config, deadline)
        _close_later(stack, github)
        registry = deps.registry_factory(module.identity, config, deadline)
        _close_later(stack, registry)

        reconciler = PushReconciler(registry, github, commands)
        return reconciler.reconcile(
            PushRequest(
                module=module.content,
                identity=module.identity,
                track=config.track,
                default_branch=config.default_branch,
                ref_name=config.ref_name,
                commit=config.sha,
                ref_type=config.ref_type,
                event_name=config.event_name,
            )
        )


def _delete(
    config: ActionConfig,
    commands: WorkflowCommands,
    deps: ActionDependencies,
    deadline: Deadline,
) -> bool:
    if config.ref_type != REF_TYPE_BRANCH:
        commands.notice(
            f'Skipping because "{config.event_name}" events are not supported '
            f'with "{config.ref_type}" references'
        )
        return False

    module = deps.module_loader(config.input)
    with ExitStack() as stack:
        registry = deps.registry_factory(module.identity, config, deadline)
        _close_later(stack, registry)
        return delete_track(
            registry,
            module.identity,
            config.track,
            config.default_branch,
            config.ref_name,
            config.ref_type,
            commands,
            event_name=config.event_name,
        )


def _close_later(stack: ExitStack, client: object) -> None:
    close = getattr(client, "close", None)
    if callable(close):
        stack.callback(close)
