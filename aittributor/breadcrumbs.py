"""
Breadcrumb fallback: correlate recent agent session logs with the repository.

Some agents write one JSONL file per session under the user's home directory,
and an early line of each carries the session's working directory as a
``"cwd":"..."`` field. A recently modified log whose cwd lies inside the
repository is taken as evidence that the agent was working there.

Only a literal ``"cwd":"`` marker is searched for; the files are never parsed
as JSON.
"""

import logging
import os
import time
from dataclasses import dataclass
from pathlib import Path

from .agents import KNOWN_AGENTS, Agent, find_by_identity_prefix
from .util import cwd_matches, path_with_tilde

logger = logging.getLogger(__name__)

# files older than this are not considered
DEFAULT_RECENCY_SECS = 2 * 60 * 60

# lines read from each session file when looking for "cwd"
MAX_LINES_TO_SCAN = 5

CWD_MARKER = '"cwd":"'


@dataclass(frozen=True)
class BreadcrumbSource:
    identity_prefix: str
    base_dir: str
    file_ext: str


def sources_from_agents(
    agents: tuple[Agent, ...] = KNOWN_AGENTS,
) -> list[BreadcrumbSource]:
    return [
        BreadcrumbSource(agent.name, agent.breadcrumb_dir, agent.breadcrumb_ext)
        for agent in agents
        if agent.breadcrumb_dir and agent.breadcrumb_ext
    ]


@dataclass(frozen=True)
class BreadcrumbCandidate:
    path: Path
    mtime: float


def extract_cwd_from_json(line: str) -> str | None:
    start = line.find(CWD_MARKER)
    if start == -1:
        return None
    start += len(CWD_MARKER)
    end = start
    while end < len(line):
        char = line[end]
        if char == "\\":
            end += 2
            continue
        if char == '"':
            return line[start:end]
        end += 1
    return None


def file_has_matching_cwd(path: Path, repo_root: str | Path) -> bool:
    """Check the first few lines of ``path`` for a cwd inside ``repo_root``.

    The first line carrying a cwd decides the outcome.
    """
    try:
        with open(path, encoding="utf-8", errors="replace") as f:
            for lineno, line in enumerate(f):
                if lineno >= MAX_LINES_TO_SCAN:
                    break
                cwd = extract_cwd_from_json(line)
                if cwd is not None:
                    logger.debug(f"    {path} cwd: {cwd}")
                    return cwd_matches(cwd, repo_root)
    except OSError as e:
        logger.debug(f"    Could not read {path}: {e}")
    return False


def iter_candidates(base: Path, ext: str, cutoff: float):
    """Yield recent files with extension ``ext`` anywhere below ``base``."""
    dirs_to_visit = [base]
    suffix = f".{ext}"

    while dirs_to_visit:
        current = dirs_to_visit.pop()
        try:
            entries = list(os.scandir(current))
        except OSError:
            continue
        for entry in entries:
            try:
                if entry.is_dir(follow_symlinks=False):
                    dirs_to_visit.append(Path(entry.path))
                    continue
                if not entry.name.endswith(suffix):
                    continue
                mtime = entry.stat().st_mtime
            except OSError:
                continue
            if mtime >= cutoff:
                yield BreadcrumbCandidate(Path(entry.path), mtime)


def find_session_file_with_cwd(
    base: Path, ext: str, repo_root: str | Path, cutoff: float
) -> Path | None:
    """Return the first recent session file under ``base`` matching the repo."""
    for candidate in iter_candidates(base, ext, cutoff):
        if file_has_matching_cwd(candidate.path, repo_root):
            return candidate.path
    return None


def check_source(
    source: BreadcrumbSource,
    repo_root: str | Path,
    home: Path,
    cutoff: float,
    agents: tuple[Agent, ...] = KNOWN_AGENTS,
) -> Agent | None:
    base = home / source.base_dir
    logger.debug(
        f"  {source.identity_prefix} breadcrumb dir: {path_with_tilde(base)}"
    )

    if not base.is_dir():
        logger.debug("    Not found")
        return None

    match = find_session_file_with_cwd(base, source.file_ext, repo_root, cutoff)
    if match is None:
        logger.debug(f"    No match for {source.identity_prefix}")
        return None
    logger.debug(f"    Matched {path_with_tilde(match)}")
    return find_by_identity_prefix(source.identity_prefix, agents)


def detect_agents_from_breadcrumbs(
    repo_root: str | Path,
    home: Path | None = None,
    recency_secs: float = DEFAULT_RECENCY_SECS,
    agents: tuple[Agent, ...] = KNOWN_AGENTS,
) -> list[Agent]:
    """Scan every breadcrumb source; at most one agent per source."""
    if home is None:
        try:
            home = Path.home()
        except RuntimeError:
            logger.debug("No home directory, skipping breadcrumbs")
            return []
    cutoff = time.time() - recency_secs
    found: list[Agent] = []

    logger.debug("=== Breadcrumb Fallback ===")

    for source in sources_from_agents(agents):
        if agent := check_source(source, repo_root, home, cutoff, agents):
            found.append(agent)

    return found
