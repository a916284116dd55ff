"""
Command-line entry point, also used as the git ``prepare-commit-msg`` hook.

Usage:
    aittributor                       # print detected agents, exit 1 if none
    aittributor .git/COMMIT_EDITMSG   # append trailers (hook mode)
    aittributor --debug               # narrate every detection step on stderr
"""

import logging
import sys
from pathlib import Path

import click

from .agents import Agent
from .config import Config, load_config
from .detect import DetectionOptions, detect_agents
from .git import TrailerError, append_trailers, find_git_root
from .timebox import run_with_timeout
from .util import console, setup_logging

logger = logging.getLogger(__name__)


def resolve_repo_root() -> Path:
    cwd = Path.cwd()
    return find_git_root(cwd) or cwd


def report(agents: list[Agent]) -> int:
    if not agents:
        console.print("No agent found", markup=False)
        return 1
    for agent in agents:
        click.echo(agent.identity)
    return 0


def annotate(commit_msg_file: Path, agents: list[Agent]) -> int:
    for agent in agents:
        try:
            append_trailers(commit_msg_file, agent)
        except (TrailerError, OSError) as e:
            console.print(
                f"aittributor: failed to append trailers: {e}",
                markup=False,
                style="yellow",
            )
    return 0


def run(commit_msg_file: Path | None, config: Config) -> int:
    options = DetectionOptions(
        repo_root=resolve_repo_root(),
        breadcrumbs=config.breadcrumbs,
        recency_secs=config.recency_secs,
    )
    agents = detect_agents(options)

    if commit_msg_file is None:
        return report(agents)
    return annotate(commit_msg_file, agents)


@click.command()
@click.argument(
    "commit_msg_file",
    required=False,
    type=click.Path(dir_okay=False, path_type=Path),
)
@click.argument("commit_source", required=False, default="")
@click.argument("commit_sha", required=False, default="")
@click.option("--debug", is_flag=True, help="Print detection steps to stderr.")
def main(
    commit_msg_file: Path | None,
    commit_source: str,
    commit_sha: str,
    debug: bool,
):
    """Git prepare-commit-msg hook that adds AI agent attribution.

    COMMIT_SOURCE and COMMIT_SHA are passed by git and accepted for
    compatibility; they do not affect detection.
    """
    config = load_config()
    debug = debug or config.debug
    setup_logging(debug)
    logger.debug(f"Commit source: {commit_source!r}, sha: {commit_sha!r}")

    try:
        result = run_with_timeout(lambda: run(commit_msg_file, config), config.timeout)
    except Exception as e:
        # attribution is best-effort, never fail the commit over it
        logger.warning(f"aittributor: detection failed: {e}", exc_info=debug)
        sys.exit(0 if commit_msg_file else 1)

    if result.timed_out:
        console.print(
            "aittributor: timed out, skipping attribution.",
            markup=False,
            style="yellow",
        )
        return

    sys.exit(result.value or 0)


if __name__ == "__main__":
    main()
