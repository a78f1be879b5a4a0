"""Action configuration read from the GitHub Actions environment."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping

from trackpush.utils.deadline import DEFAULT_TIMEOUT_SECONDS

# Environment set by the Actions runner
GITHUB_REPOSITORY_KEY = "GITHUB_REPOSITORY"
GITHUB_REF_NAME_KEY = "GITHUB_REF_NAME"
GITHUB_REF_TYPE_KEY = "GITHUB_REF_TYPE"
GITHUB_SHA_KEY = "GITHUB_SHA"
GITHUB_EVENT_NAME_KEY = "GITHUB_EVENT_NAME"
GITHUB_API_URL_KEY = "GITHUB_API_URL"
GITHUB_OUTPUT_KEY = "GITHUB_OUTPUT"

# Action inputs
BUF_TOKEN_INPUT = "INPUT_BUF_TOKEN"
DEFAULT_BRANCH_INPUT = "INPUT_DEFAULT_BRANCH"
GITHUB_TOKEN_INPUT = "INPUT_GITHUB_TOKEN"
INPUT_INPUT = "INPUT_INPUT"
TRACK_INPUT = "INPUT_TRACK"

# Registry client
BUF_TOKEN_KEY = "BUF_TOKEN"
REGISTRY_API_URL_KEY = "BUF_REGISTRY_API_URL"

# Event names
EVENT_DELETE = "delete"
EVENT_PUSH = "push"
EVENT_WORKFLOW_DISPATCH = "workflow_dispatch"


@dataclass
class ActionConfig:
    """Inputs of one action run. Empty strings mean "not provided"."""

    buf_token: str = ""
    github_token: str = ""
    track: str = ""
    default_branch: str = ""
    input: str = "."
    event_name: str = ""
    ref_name: str = ""
    ref_type: str = ""
    sha: str = ""
    repository: str = ""
    github_api_url: str = ""
    registry_api_url: str = ""
    output_file: str = ""
    timeout: float = DEFAULT_TIMEOUT_SECONDS

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> ActionConfig:
        env = os.environ if environ is None else environ
        return cls(
            # BUF_TOKEN is what the registry CLI itself reads; the input wins.
            buf_token=env.get(BUF_TOKEN_INPUT, "") or env.get(BUF_TOKEN_KEY, ""),
            github_token=env.get(GITHUB_TOKEN_INPUT, ""),
            track=env.get(TRACK_INPUT, ""),
            default_branch=env.get(DEFAULT_BRANCH_INPUT, ""),
            input=env.get(INPUT_INPUT, "") or ".",
            event_name=env.get(GITHUB_EVENT_NAME_KEY, ""),
            ref_name=env.get(GITHUB_REF_NAME_KEY, ""),
            ref_type=env.get(GITHUB_REF_TYPE_KEY, ""),
            sha=env.get(GITHUB_SHA_KEY, ""),
            repository=env.get(GITHUB_REPOSITORY_KEY, ""),
            github_api_url=env.get(GITHUB_API_URL_KEY, ""),
            registry_api_url=env.get(REGISTRY_API_URL_KEY, ""),
            output_file=env.get(GITHUB_OUTPUT_KEY, ""),
        )
