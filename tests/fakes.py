"""In-memory stand-ins for the registry, GitHub and the workflow runner."""

from __future__ import annotations

from trackpush.errors import ErrorCode, GitHubNotFoundError, RegistryError
from trackpush.registry.models import (
    LocalModulePin,
    ModuleContent,
    ModuleFile,
    ModuleIdentity,
    Repository,
    RepositoryCommit,
    RepositoryTag,
)
from trackpush.utils.workflow import WorkflowCommands

IDENTITY = ModuleIdentity("buf.build", "acme", "weather")
CURRENT = "a" * 40
OLDER = "b" * 40
NEWER = "c" * 40


def sample_module() -> ModuleContent:
    return ModuleContent(
        files=[ModuleFile(path="acme/weather/v1/weather.proto", content=b'syntax = "proto3";\n')]
    )


class RecordingCommands(WorkflowCommands):
    """Keeps notices, errors and outputs in memory."""

    def __init__(self) -> None:
        super().__init__(stream=None)
        self.notices: list[str] = []
        self.errors: list[str] = []
        self.outputs: dict[str, str] = {}

    def notice(self, message: str) -> None:
        self.notices.append(message)

    def error(self, message: str) -> None:
        self.errors.append(message)

    def set_output(self, name: str, value: str) -> None:
        self.outputs[name] = value


class FakeRegistry:
    """Registry with one repository whose tracks are kept in a dict.

    Pushing content identical to the track head raises ``already_exists``,
    like the real registry does.
    """

    def __init__(self, tags: list[str] | None = None, repository_exists: bool = True):
        self.calls: list[tuple] = []
        self.repository_exists = repository_exists
        self.heads: dict[str, RepositoryCommit] = {
            "main": RepositoryCommit(id="c-0", name="commit0", tags=list(tags or [])),
        }
        self.contents: dict[str, dict] = {}
        self.push_error: RegistryError | None = None
        self.tag_error: RegistryError | None = None
        self.delete_error: RegistryError | None = None
        self.tag_commit_names = True
        self._next = 1

    def get_repository_commit_by_reference(self, owner, repository, reference):
        self.calls.append(("get_commit", owner, repository, reference))
        if reference not in self.heads:
            raise RegistryError(ErrorCode.NOT_FOUND, f"{reference} not found")
        return self.heads[reference]

    def push(self, owner, repository, branch, module, tags, tracks):
        self.calls.append(("push", owner, repository, branch, tuple(tags), tuple(tracks)))
        if self.push_error is not None:
            raise self.push_error
        content = module.to_json()
        for track in tracks:
            if self.contents.get(track) == content:
                raise RegistryError(ErrorCode.ALREADY_EXISTS, "commit already exists")
        name = f"commit{self._next}"
        self._next += 1
        for track in tracks:
            self.heads[track] = RepositoryCommit(id=f"c-{name}", name=name, tags=list(tags))
            self.contents[track] = content
        return LocalModulePin(remote="buf.build", owner=owner, repository=repository, commit=name)

    def get_repository_by_full_name(self, full_name):
        self.calls.append(("get_repository", full_name))
        if not self.repository_exists:
            raise RegistryError(ErrorCode.NOT_FOUND, "repository not found")
        return Repository(id="repo-1", name=full_name.split("/")[1], owner=full_name.split("/")[0])

    def create_repository_tag(self, repository_id, name, commit_name):
        self.calls.append(("create_tag", repository_id, name, commit_name))
        if self.tag_error is not None:
            raise self.tag_error
        head = self.heads.get(commit_name)
        if head is None:
            raise RegistryError(ErrorCode.NOT_FOUND, f"{commit_name} not found")
        head.tags.append(name)
        return RepositoryTag(
            id="tag-1", name=name, commit_name=head.name if self.tag_commit_names else ""
        )

    def delete_repository_track_by_name(self, owner, repository, name):
        self.calls.append(("delete_track", owner, repository, name))
        if self.delete_error is not None:
            raise self.delete_error
        if name not in self.heads:
            raise RegistryError(ErrorCode.NOT_FOUND, f"{name} not found")
        del self.heads[name]

    def call_names(self) -> list[str]:
        return [c[0] for c in self.calls]


class FakeGitHub:
    """Answers comparisons from a ``{base: status}`` table.

    A status of None makes the comparison raise ``GitHubNotFoundError``.
    """

    def __init__(self, statuses: dict[str, str | None] | None = None):
        self.statuses = statuses or {}
        self.compared: list[tuple[str, str]] = []

    def compare_commits(self, base: str, head: str) -> str:
        self.compared.append((base, head))
        status = self.statuses.get(base)
        if status is None:
            raise GitHubNotFoundError(f"{base} not found", status_code=404)
        return status
