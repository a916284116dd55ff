"""
Agent detection: combine every signal into one ordered, deduplicated list.

Signals are gathered in a fixed order and never short-circuit:

1. environment variables
2. the ancestor walk
3. the sibling/descendant walk
4. breadcrumb session logs

The breadcrumb scan does filesystem I/O, so it is started on its own thread
before the process walks and joined after them. Its results are always merged
last, whichever finishes first.
"""

import logging
import os
import queue
import threading
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from .agents import KNOWN_AGENTS, Agent, find_by_env
from .breadcrumbs import DEFAULT_RECENCY_SECS, detect_agents_from_breadcrumbs
from .process import ProcessSnapshot, walk_ancestry, walk_ancestry_and_descendants

logger = logging.getLogger(__name__)


@dataclass
class DetectionOptions:
    """Inputs for a detection run. ``None`` fields are read from the OS."""

    repo_root: Path
    pid: int | None = None
    snapshot: ProcessSnapshot | None = None
    environ: Mapping[str, str] | None = None
    home: Path | None = None
    breadcrumbs: bool = True
    recency_secs: float = DEFAULT_RECENCY_SECS
    agents: tuple[Agent, ...] = KNOWN_AGENTS


def dedup_agents(agents: list[Agent]) -> list[Agent]:
    """Keep the first agent per email address, preserving order.

    Identities that differ only in display name (``Claude Code`` vs
    ``Claude Opus 4.6``, both ``noreply@anthropic.com``) collapse to one.
    """
    seen: set[str] = set()
    unique = []
    for agent in agents:
        if agent.email in seen:
            continue
        seen.add(agent.email)
        unique.append(agent)
    return unique


def detect_from_environment(options: DetectionOptions) -> list[Agent]:
    logger.debug("Checking environment variables...")
    if agent := find_by_env(options.environ, options.agents):
        logger.debug(f"  Found agent via env: {agent.identity}")
        return [agent]
    return []


def detect_from_processes(options: DetectionOptions) -> list[Agent]:
    """Run the ancestor walk, then the descendant walk, on one snapshot."""
    snapshot = options.snapshot
    if snapshot is None:
        snapshot = ProcessSnapshot.capture()
    pid = os.getpid() if options.pid is None else options.pid

    found = walk_ancestry(snapshot, pid, options.agents)
    found.extend(
        walk_ancestry_and_descendants(
            snapshot, options.repo_root, pid, options.agents
        )
    )
    return found


def _start_breadcrumb_scan(
    options: DetectionOptions,
) -> "queue.Queue[list[Agent]] | None":
    if not options.breadcrumbs:
        logger.debug("Breadcrumb fallback disabled")
        return None

    result: queue.Queue[list[Agent]] = queue.Queue(maxsize=1)

    def scan() -> None:
        try:
            agents = detect_agents_from_breadcrumbs(
                options.repo_root,
                home=options.home,
                recency_secs=options.recency_secs,
                agents=options.agents,
            )
        except Exception as e:
            logger.debug(f"Breadcrumb scan failed: {e}")
            agents = []
        result.put(agents)

    threading.Thread(target=scan, daemon=True, name="aittributor-breadcrumbs").start()
    return result


def detect_agents(options: DetectionOptions) -> list[Agent]:
    """Detect all agents implicated in the current commit."""
    logger.debug("=== Agent Detection Debug ===")
    logger.debug(f"  Repository path: {options.repo_root}")

    breadcrumb_result = _start_breadcrumb_scan(options)

    agents = detect_from_environment(options)
    try:
        agents.extend(detect_from_processes(options))
    except Exception as e:
        # psutil may refuse to enumerate processes on locked-down systems
        logger.debug(f"Process detection failed: {e}")

    if breadcrumb_result is not None:
        agents.extend(breadcrumb_result.get())

    merged = dedup_agents(agents)
    logger.debug(f"Detected agents: {[a.identity for a in merged]}")
    return merged
