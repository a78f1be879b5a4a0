"""Tests for resolving module input locators."""

import tempfile
from pathlib import Path

import pytest
from git import Actor, Repo

from trackpush.errors import ConfigurationError
from trackpush.utils.git_ops import is_git_url, parse_git_input, resolve_input


def _make_repo(root: Path) -> Repo:
    repo = Repo.init(root)
    proto_dir = root / "proto"
    proto_dir.mkdir()
    (proto_dir / "buf.yaml").write_text("version: v1\nname: buf.build/acme/weather\n")
    repo.index.add(["proto/buf.yaml"])
    author = Actor("CI", "ci@example.com")
    repo.index.commit("initial", author=author, committer=author)
    return repo


def test_is_git_url():
    assert is_git_url("https://github.com/acme/protos.git")
    assert is_git_url("git@github.com:acme/protos.git")
    assert is_git_url("protos.git#branch=main")
    assert not is_git_url(".")
    assert not is_git_url("proto/acme")


def test_parse_git_input_options():
    git_input = parse_git_input("https://github.com/acme/protos.git#branch=dev,subdir=proto/,depth=5")
    assert git_input.url == "https://github.com/acme/protos.git"
    assert git_input.branch == "dev"
    assert git_input.subdir == "proto"
    assert git_input.depth == 5


def test_parse_git_input_rejects_unknown_option():
    with pytest.raises(ConfigurationError, match="unknown git input option"):
        parse_git_input("https://github.com/acme/protos.git#tag=v1")


def test_parse_git_input_rejects_branch_and_ref():
    with pytest.raises(ConfigurationError, match="mutually exclusive"):
        parse_git_input("https://github.com/acme/protos.git#branch=main,ref=abc")


def test_local_directory():
    with tempfile.TemporaryDirectory() as tmpdir:
        with resolve_input(tmpdir) as handle:
            assert handle.module_path == Path(tmpdir)
            assert handle.clone_dir is None


def test_missing_directory():
    with pytest.raises(ConfigurationError, match="not a directory or git URL"):
        resolve_input("/does/not/exist")


def test_clone_with_subdir_is_cleaned_up():
    with tempfile.TemporaryDirectory() as tmpdir:
        _make_repo(Path(tmpdir))
        with resolve_input(f"file://{tmpdir}#subdir=proto") as handle:
            assert (handle.module_path / "buf.yaml").is_file()
            clone_dir = handle.clone_dir
            assert clone_dir is not None and clone_dir.exists()
        assert not clone_dir.exists()


def test_clone_with_missing_subdir():
    with tempfile.TemporaryDirectory() as tmpdir:
        _make_repo(Path(tmpdir))
        with pytest.raises(ConfigurationError, match="subdir 'nope' not found"):
            resolve_input(f"file://{tmpdir}#subdir=nope")
