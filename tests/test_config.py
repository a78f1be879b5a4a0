"""Tests for environment configuration, workflow commands and the deadline."""

import io
import tempfile
from pathlib import Path

import pytest

from trackpush.config import ActionConfig
from trackpush.errors import InvocationTimeoutError
from trackpush.utils.deadline import Deadline
from trackpush.utils.workflow import WorkflowCommands


# --- Config ---


def test_from_env_reads_inputs_and_runner_variables():
    config = ActionConfig.from_env(
        {
            "INPUT_BUF_TOKEN": "buf",
            "INPUT_GITHUB_TOKEN": "gh",
            "INPUT_TRACK": "dev",
            "INPUT_DEFAULT_BRANCH": "main",
            "INPUT_INPUT": "proto",
            "GITHUB_EVENT_NAME": "push",
            "GITHUB_REF_NAME": "dev",
            "GITHUB_REF_TYPE": "branch",
            "GITHUB_SHA": "f" * 40,
            "GITHUB_REPOSITORY": "acme/protos",
        }
    )
    assert config.buf_token == "buf"
    assert config.github_token == "gh"
    assert config.track == "dev"
    assert config.input == "proto"
    assert config.sha == "f" * 40
    assert config.repository == "acme/protos"
    assert config.timeout == 120.0


def test_from_env_defaults():
    config = ActionConfig.from_env({})
    assert config.input == "."
    assert config.buf_token == ""
    assert config.event_name == ""


def test_buf_token_falls_back_to_registry_variable():
    assert ActionConfig.from_env({"BUF_TOKEN": "ambient"}).buf_token == "ambient"
    config = ActionConfig.from_env({"BUF_TOKEN": "ambient", "INPUT_BUF_TOKEN": "input"})
    assert config.buf_token == "input"


# --- Workflow commands ---


def test_notice_and_error_lines():
    stream = io.StringIO()
    commands = WorkflowCommands(stream=stream)
    commands.notice("Skipping because reasons")
    commands.error("first line\nsecond line")
    assert stream.getvalue() == (
        "::notice::Skipping because reasons\n"
        "::error::first line%0Asecond line\n"
    )


def test_outputs_go_to_stdout_and_output_file():
    stream = io.StringIO()
    with tempfile.TemporaryDirectory() as tmpdir:
        output_file = Path(tmpdir) / "output"
        commands = WorkflowCommands(stream=stream, output_file=output_file)
        commands.set_output("commit", "9a1b")
        assert output_file.read_text() == "commit=9a1b\n"
    assert stream.getvalue() == "::set-output name=commit::9a1b\n"


# --- Deadline ---


def test_deadline_counts_down():
    now = [100.0]
    deadline = Deadline(30, clock=lambda: now[0])
    assert deadline.check() == 30
    now[0] = 125.0
    assert deadline.remaining() == 5
    now[0] = 131.0
    assert deadline.remaining() == 0
    with pytest.raises(InvocationTimeoutError, match="timed out after 30s"):
        deadline.check()
