"""Git operations — resolve a module input locator to a local directory."""

from __future__ import annotations

import logging
import shutil
import tempfile
from dataclasses import dataclass
from pathlib import Path

from git import GitCommandError, Repo

from trackpush.errors import ConfigurationError

logger = logging.getLogger(__name__)

GIT_URL_PREFIXES = ("http://", "https://", "ssh://", "git@", "git://", "file://")


@dataclass
class InputHandle:
    """A resolved module input, possibly backed by a temporary clone.

    Use as a context manager so temporary clones are cleaned up::

        with resolve_input(locator) as handle:
            read_module(handle.module_path)
    """

    module_path: Path
    """Directory holding the module (``buf.yaml``)."""

    clone_dir: Path | None = None
    """Root of the temporary clone, if any."""

    def __enter__(self) -> "InputHandle":
        return self

    def __exit__(self, *exc) -> None:
        self.cleanup()

    def cleanup(self) -> None:
        if self.clone_dir is not None and self.clone_dir.exists():
            shutil.rmtree(self.clone_dir, ignore_errors=True)


@dataclass
class GitInput:
    """A git input locator: ``<url>#branch=<b>,ref=<r>,subdir=<d>,depth=<n>``."""

    url: str
    branch: str = ""
    ref: str = ""
    subdir: str = ""
    depth: int = 1


def is_git_url(locator: str) -> bool:
    return locator.startswith(GIT_URL_PREFIXES) or locator.split("#", 1)[0].endswith(".git")


def parse_git_input(locator: str) -> GitInput:
    """Split a git input locator into URL and clone options."""
    url, _, options = locator.partition("#")
    git_input = GitInput(url=url)
    if not options:
        return git_input
    for option in options.split(","):
        key, sep, value = option.partition("=")
        if not sep or not value:
            raise ConfigurationError(f"invalid git input option {option!r} in {locator!r}")
        if key == "branch":
            git_input.branch = value
        elif key == "ref":
            git_input.ref = value
        elif key == "subdir":
            git_input.subdir = value.strip("/")
        elif key == "depth":
            try:
                git_input.depth = int(value)
            except ValueError:
                raise ConfigurationError(f"depth must be an integer in {locator!r}")
        else:
            raise ConfigurationError(f"unknown git input option {key!r} in {locator!r}")
    if git_input.branch and git_input.ref:
        raise ConfigurationError(f"branch and ref are mutually exclusive in {locator!r}")
    return git_input


def resolve_input(locator: str) -> InputHandle:
    """Resolve a module input locator, cloning git URLs to a temp directory.

    Raises:
        ConfigurationError: The locator is neither a directory nor a
            cloneable git URL.
    """
    locator = locator or "."
    if is_git_url(locator):
        return _clone_input(parse_git_input(locator))

    path = Path(locator)
    if path.is_dir():
        return InputHandle(module_path=path)
    raise ConfigurationError(f"input {locator!r} is not a directory or git URL")


def _clone_input(git_input: GitInput) -> InputHandle:
    clone_dir = Path(tempfile.mkdtemp(prefix="trackpush_"))
    logger.debug("cloning %s into %s", git_input.url, clone_dir)
    try:
        if git_input.ref:
            # Arbitrary refs cannot be shallow-cloned by name; fetch and check out.
            repo = Repo.clone_from(git_input.url, clone_dir)
            repo.git.checkout(git_input.ref)
        elif git_input.branch:
            Repo.clone_from(
                git_input.url, clone_dir, depth=git_input.depth, branch=git_input.branch
            )
        else:
            Repo.clone_from(git_input.url, clone_dir, depth=git_input.depth)
    except GitCommandError as e:
        shutil.rmtree(clone_dir, ignore_errors=True)
        raise ConfigurationError(f"could not clone {git_input.url}: {str(e.stderr or '').strip()}") from e

    module_path = clone_dir / git_input.subdir if git_input.subdir else clone_dir
    if not module_path.is_dir():
        shutil.rmtree(clone_dir, ignore_errors=True)
        raise ConfigurationError(f"subdir {git_input.subdir!r} not found in {git_input.url}")
    return InputHandle(module_path=module_path, clone_dir=clone_dir)
