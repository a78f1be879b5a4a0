"""Registry data models — module identity, content, commits, tags and pins."""

from __future__ import annotations

import base64
from dataclasses import dataclass, field

from trackpush.errors import ConfigurationError


@dataclass(frozen=True)
class ModuleIdentity:
    """Address of a module on the registry: ``remote/owner/repository``."""

    remote: str
    owner: str
    repository: str

    @classmethod
    def parse(cls, name: str) -> ModuleIdentity:
        """Parse a module name such as ``buf.build/acme/weather``."""
        parts = name.strip().split("/")
        if len(parts) != 3 or not all(parts):
            raise ConfigurationError(
                f"module name {name!r} is not in the format remote/owner/repository"
            )
        return cls(remote=parts[0], owner=parts[1], repository=parts[2])

    @property
    def identity_string(self) -> str:
        return f"{self.remote}/{self.owner}/{self.repository}"

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.repository}"

    def commit_url(self, commit: str) -> str:
        """Browsable URL of a registry commit of this module."""
        return f"https://{self.identity_string}/tree/{commit}"


@dataclass
class ModuleFile:
    """A single file of a module, keyed by its module-relative path."""

    path: str
    content: bytes = b""

    def to_json(self) -> dict:
        return {
            "path": self.path,
            "content": base64.b64encode(self.content).decode("ascii"),
        }


@dataclass
class ModulePin:
    """A dependency pinned to a registry commit (one ``buf.lock`` entry)."""

    remote: str
    owner: str
    repository: str
    commit: str

    def to_json(self) -> dict:
        return {
            "remote": self.remote,
            "owner": self.owner,
            "repository": self.repository,
            "commit": self.commit,
        }


@dataclass
class ModuleContent:
    """Module snapshot as it is sent to the registry."""

    files: list[ModuleFile] = field(default_factory=list)
    dependencies: list[ModulePin] = field(default_factory=list)
    documentation_path: str = ""
    documentation: str = ""
    license: str = ""

    @property
    def paths(self) -> list[str]:
        return [f.path for f in self.files]

    def to_json(self) -> dict:
        data: dict = {
            "files": [f.to_json() for f in sorted(self.files, key=lambda f: f.path)],
            "dependencies": [d.to_json() for d in self.dependencies],
        }
        if self.documentation:
            data["documentation"] = self.documentation
            data["documentationPath"] = self.documentation_path
        if self.license:
            data["license"] = self.license
        return data


@dataclass
class RepositoryCommit:
    """A registry commit together with the names of its tags."""

    id: str
    name: str
    tags: list[str] = field(default_factory=list)

    @classmethod
    def from_json(cls, data: dict) -> RepositoryCommit:
        return cls(
            id=data.get("id", ""),
            name=data.get("name", ""),
            tags=[t.get("name", "") for t in data.get("tags", [])],
        )


@dataclass
class Repository:
    """A registry repository."""

    id: str
    name: str
    owner: str = ""

    @classmethod
    def from_json(cls, data: dict) -> Repository:
        return cls(
            id=data.get("id", ""),
            name=data.get("name", ""),
            owner=data.get("ownerName", ""),
        )


@dataclass
class RepositoryTag:
    """A named tag pointing at a registry commit."""

    id: str
    name: str
    commit_name: str

    @classmethod
    def from_json(cls, data: dict) -> RepositoryTag:
        return cls(
            id=data.get("id", ""),
            name=data.get("name", ""),
            commit_name=data.get("commitName", ""),
        )


@dataclass
class LocalModulePin:
    """What the registry returns after a successful push."""

    remote: str
    owner: str
    repository: str
    commit: str

    @classmethod
    def from_json(cls, data: dict) -> LocalModulePin:
        return cls(
            remote=data.get("remote", ""),
            owner=data.get("owner", ""),
            repository=data.get("repository", ""),
            commit=data.get("commit", ""),
        )
