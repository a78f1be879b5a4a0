"""trackpush CLI — the entry point invoked by the GitHub Action."""

import logging
import sys

import click
from rich.console import Console
from rich.logging import RichHandler

from trackpush import __version__

console = Console(stderr=True)
logger = logging.getLogger(__name__)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


@click.group()
@click.version_option(version=__version__)
@click.option("--verbose", "-v", is_flag=True, envvar="RUNNER_DEBUG", help="Log diagnostics to stderr")
def main(verbose: bool):
    """trackpush — push module snapshots to a registry track from CI.

    Reconciles the module checked out by a workflow with the registry track of
    its branch: pushes new content, skips content the track already has, and
    tags existing commits when a rerun finds its content already pushed.
    """
    _configure_logging(verbose)


# ── Run ──────────────────────────────────────────────────────────────


@main.command()
@click.option("--input", "input_", envvar="INPUT_INPUT", default=".", help="Module directory or git URL")
@click.option("--track", envvar="INPUT_TRACK", default="", help="Registry track to push to")
@click.option("--default-branch", envvar="INPUT_DEFAULT_BRANCH", default="", help="Repository default branch")
@click.option("--timeout", default=120.0, show_default=True, help="Overall timeout in seconds")
def run(input_: str, track: str, default_branch: str, timeout: float):
    """Handle the GitHub event described by the environment.

    push and workflow_dispatch events push the module; delete events remove
    the track of the deleted branch. Errors are reported as ::error:: lines.
    """
    from trackpush.action import run_action
    from trackpush.config import ActionConfig
    from trackpush.errors import TrackPushError
    from trackpush.utils.workflow import WorkflowCommands

    config = ActionConfig.from_env()
    config.input = input_ or "."
    config.track = track
    config.default_branch = default_branch
    config.timeout = timeout

    commands = WorkflowCommands(output_file=config.output_file or None)
    try:
        run_action(config, commands)
    except TrackPushError as e:
        commands.error(str(e))
        sys.exit(1)
    except Exception as e:
        logger.debug("unhandled error", exc_info=True)
        commands.error(f"{type(e).__name__}: {e}")
        sys.exit(1)


# ── Resolve track ────────────────────────────────────────────────────


@main.command(name="resolve-track")
@click.argument("track")
@click.option("--default-branch", required=True, help="Repository default branch")
@click.option("--ref-name", default="", help="Ref that triggered the workflow")
def resolve_track_command(track: str, default_branch: str, ref_name: str):
    """Print the registry track a declared TRACK resolves to."""
    from trackpush.errors import PolicyViolationError
    from trackpush.sync.track import check_main_track_guard, resolve_track

    try:
        check_main_track_guard(track, default_branch, ref_name)
    except PolicyViolationError as e:
        console.print(f"[red]{e}[/]")
        sys.exit(1)
    click.echo(resolve_track(track, default_branch, ref_name))


if __name__ == "__main__":
    main()
