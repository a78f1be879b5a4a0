"""Module reader — turn a module directory into registry content and identity."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import yaml

from trackpush.errors import ConfigurationError
from trackpush.registry.models import ModuleContent, ModuleFile, ModuleIdentity, ModulePin

CONFIG_FILE = "buf.yaml"
LOCK_FILE = "buf.lock"

# Documentation candidates, in order of preference
DOC_FILES = ("buf.md", "README.md", "README.markdown")
LICENSE_FILE = "LICENSE"

# Directories to always skip
SKIP_DIRS = {
    ".git", "node_modules", ".venv", "venv", "dist", "build", "target", "vendor",
}

SOURCE_SUFFIX = ".proto"


@dataclass
class ModuleConfig:
    """The parts of ``buf.yaml`` a push needs."""

    name: str
    excludes: list[str]


@dataclass
class ReadModule:
    content: ModuleContent
    identity: ModuleIdentity


def read_module(module_dir: str | Path) -> ReadModule:
    """Read the module rooted at ``module_dir``.

    Raises:
        ConfigurationError: ``buf.yaml`` is missing, malformed, or unnamed.
    """
    root = Path(module_dir)
    config = load_config(root / CONFIG_FILE)
    if not config.name:
        raise ConfigurationError(f"{root / CONFIG_FILE} does not declare a module name")
    identity = ModuleIdentity.parse(config.name)

    files = [
        ModuleFile(path=rel, content=_read_bytes(root / rel))
        for rel in scan_module_files(root, config.excludes)
    ]
    for extra in (CONFIG_FILE, LOCK_FILE):
        if (root / extra).is_file():
            files.append(ModuleFile(path=extra, content=_read_bytes(root / extra)))

    content = ModuleContent(files=files, dependencies=load_lock(root / LOCK_FILE))
    for doc in DOC_FILES:
        if (root / doc).is_file():
            content.documentation_path = doc
            content.documentation = _read_text(root / doc)
            break
    if (root / LICENSE_FILE).is_file():
        content.license = _read_text(root / LICENSE_FILE)

    return ReadModule(content=content, identity=identity)


def load_config(path: Path) -> ModuleConfig:
    if not path.is_file():
        raise ConfigurationError(f"module configuration {path} not found")
    data = _load_yaml(path)

    build = data.get("build") or {}
    if not isinstance(build, dict):
        raise ConfigurationError(f"build in {path} must be a mapping")
    excludes = build.get("excludes", []) or []
    if not isinstance(excludes, list) or not all(isinstance(e, str) for e in excludes):
        raise ConfigurationError(f"build.excludes in {path} must be a list of paths")
    return ModuleConfig(
        name=str(data.get("name", "") or ""),
        excludes=[e.strip("/") for e in excludes],
    )


def load_lock(path: Path) -> list[ModulePin]:
    """Read pinned dependencies from ``buf.lock``; no lock file means none."""
    if not path.is_file():
        return []
    data = _load_yaml(path)

    deps = data.get("deps", []) or []
    if not isinstance(deps, list) or not all(isinstance(d, dict) for d in deps):
        raise ConfigurationError(f"deps in {path} must be a list of mappings")
    return [
        ModulePin(
            remote=dep.get("remote", ""),
            owner=dep.get("owner", ""),
            repository=dep.get("repository", ""),
            commit=dep.get("commit", ""),
        )
        for dep in deps
    ]


def _load_yaml(path: Path) -> dict:
    try:
        with open(path) as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigurationError(f"could not parse {path}: {e}") from e
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigurationError(f"could not read {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigurationError(f"{path} must contain a mapping")
    return data


def _read_bytes(path: Path) -> bytes:
    try:
        return path.read_bytes()
    except OSError as e:
        raise ConfigurationError(f"could not read {path}: {e}") from e


def _read_text(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise ConfigurationError(f"{path} is not valid UTF-8") from e
    except OSError as e:
        raise ConfigurationError(f"could not read {path}: {e}") from e


def scan_module_files(root: Path, excludes: list[str] | None = None) -> list[str]:
    """Return module-relative paths of every ``.proto`` file, sorted."""
    excludes = excludes or []
    paths = []
    for item in root.rglob(f"*{SOURCE_SUFFIX}"):
        if not item.is_file():
            continue
        rel = item.relative_to(root)
        if _should_skip(rel, excludes):
            continue
        paths.append(rel.as_posix())
    return sorted(paths)


def _should_skip(rel: Path, excludes: list[str]) -> bool:
    for part in rel.parts[:-1]:
        if part in SKIP_DIRS:
            return True
    rel_str = rel.as_posix()
    return any(rel_str == e or rel_str.startswith(e + "/") for e in excludes)
