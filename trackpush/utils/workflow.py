"""Workflow commands — the line protocol GitHub Actions reads from stdout.

Notices and errors are single ``::notice::`` / ``::error::`` lines. Outputs are
written as ``::set-output`` lines and, when the runner provides a
``GITHUB_OUTPUT`` file, appended there as ``name=value`` as well.
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import TextIO

COMMIT_OUTPUT = "commit"
COMMIT_URL_OUTPUT = "commit_url"


def _escape(value: str) -> str:
    # Workflow commands are line oriented; keep every message on one line.
    return value.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


class WorkflowCommands:
    """Writes notices, errors and outputs for the Actions runner."""

    def __init__(self, stream: TextIO | None = None, output_file: str | Path | None = None):
        self.stream = stream if stream is not None else sys.stdout
        self.output_file = Path(output_file) if output_file else None

    def notice(self, message: str) -> None:
        self._write(f"::notice::{_escape(message)}")

    def error(self, message: str) -> None:
        self._write(f"::error::{_escape(message)}")

    def set_output(self, name: str, value: str) -> None:
        self._write(f"::set-output name={name}::{_escape(value)}")
        if self.output_file is not None:
            with open(self.output_file, "a") as f:
                f.write(f"{name}={value}\n")

    def _write(self, line: str) -> None:
        self.stream.write(line + "\n")
        self.stream.flush()
