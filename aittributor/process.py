"""
Process-table snapshot and the two traversals used to find agents in it.

The ancestor walk climbs from the hook's own process to the root, checking
every process on the way. The descendant walk covers the case where the agent
is not an ancestor (it shelled out through an intermediate process, or the
commit was started from another terminal): for each ancestor it searches the
subtrees of that ancestor's siblings, accepting only agents whose working
directory is inside the repository.
"""

import logging
import os
from collections import deque
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from pathlib import Path

import psutil

from .agents import KNOWN_AGENTS, Agent, find_for_process
from .util import cwd_matches

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProcessRecord:
    pid: int
    ppid: int | None
    name: str
    cmdline: tuple[str, ...] = ()
    cwd: str | None = None


class ProcessSnapshot:
    """Immutable point-in-time view of the process table, keyed by pid."""

    def __init__(self, records: Iterable[ProcessRecord]):
        self._processes: dict[int, ProcessRecord] = {r.pid: r for r in records}
        self._children: dict[int, list[ProcessRecord]] = {}
        for record in self._processes.values():
            if record.ppid is not None:
                self._children.setdefault(record.ppid, []).append(record)

    @classmethod
    def capture(cls) -> "ProcessSnapshot":
        """Read the live process table via psutil.

        Processes that disappear or deny access mid-read keep whatever fields
        were readable; psutil reports the rest as ``None``.
        """
        records = []
        for proc in psutil.process_iter(["pid", "ppid", "name", "cmdline", "cwd"]):
            info = proc.info
            records.append(
                ProcessRecord(
                    pid=info["pid"],
                    ppid=info.get("ppid"),
                    name=info.get("name") or "",
                    cmdline=tuple(info.get("cmdline") or ()),
                    cwd=info.get("cwd"),
                )
            )
        logger.debug(f"Captured {len(records)} processes")
        return cls(records)

    def get(self, pid: int) -> ProcessRecord | None:
        return self._processes.get(pid)

    def __contains__(self, pid: int) -> bool:
        return pid in self._processes

    def __len__(self) -> int:
        return len(self._processes)

    def __iter__(self) -> Iterator[ProcessRecord]:
        return iter(self._processes.values())

    def children(self, pid: int) -> list[ProcessRecord]:
        return list(self._children.get(pid, ()))


def _parent_of(process: ProcessRecord) -> int | None:
    """Parent pid, or None for roots and self-parented processes."""
    if process.ppid is None or process.ppid == process.pid:
        return None
    return process.ppid


def walk_ancestry(
    snapshot: ProcessSnapshot,
    pid: int | None = None,
    agents: tuple[Agent, ...] = KNOWN_AGENTS,
) -> list[Agent]:
    """Collect agent matches from ``pid`` up through all of its ancestors."""
    current: int | None = os.getpid() if pid is None else pid
    found: list[Agent] = []
    visited: set[int] = set()

    logger.debug(f"Walking ancestry from PID {current}...")

    while current is not None and current not in visited:
        process = snapshot.get(current)
        if process is None:
            break
        visited.add(current)
        logger.debug(f"  PID {current}: {process.name}")

        if agent := find_for_process(process, agents):
            found.append(agent)
        current = _parent_of(process)

    return found


def check_process_tree(
    snapshot: ProcessSnapshot,
    root_pid: int,
    repo_root: str | Path,
    agents: tuple[Agent, ...] = KNOWN_AGENTS,
) -> list[Agent]:
    """Breadth-first search of the subtree under ``root_pid``.

    A process counts only when it matches an agent and its cwd lies inside
    ``repo_root``; the same tool open in another checkout is ignored.
    """
    queue: deque[int] = deque([root_pid])
    visited: set[int] = set()
    found: list[Agent] = []

    while queue:
        pid = queue.popleft()
        if pid in visited:
            continue
        visited.add(pid)

        process = snapshot.get(pid)
        if process is None:
            continue
        logger.debug(f"    Checking PID {pid}: {process.name}")

        agent = find_for_process(process, agents)
        if agent and process.cwd and cwd_matches(process.cwd, repo_root):
            logger.debug("    Found agent in tree with matching cwd")
            found.append(agent)

        queue.extend(child.pid for child in snapshot.children(pid))

    return found


def walk_ancestry_and_descendants(
    snapshot: ProcessSnapshot,
    repo_root: str | Path,
    pid: int | None = None,
    agents: tuple[Agent, ...] = KNOWN_AGENTS,
) -> list[Agent]:
    """For each ancestor, search the subtrees of every child of its parent."""
    current = os.getpid() if pid is None else pid
    checked: set[int] = set()
    found: list[Agent] = []

    logger.debug("Walking ancestry and descendants...")

    while (process := snapshot.get(current)) is not None:
        if current in checked:
            break
        checked.add(current)

        parent = _parent_of(process)
        if parent is None:
            break
        logger.debug(f"  Checking siblings of PID {current} (parent: {parent})")

        for sibling in snapshot.children(parent):
            found.extend(check_process_tree(snapshot, sibling.pid, repo_root, agents))

        current = parent

    return found
