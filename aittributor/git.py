"""Git helpers: locating the repository root and appending commit trailers."""

import logging
import subprocess
from pathlib import Path

from .agents import Agent

logger = logging.getLogger(__name__)

AI_ASSISTED_TRAILER = "Ai-assisted: true"


class TrailerError(RuntimeError):
    """Raised when ``git interpret-trailers`` fails."""


def find_git_root(start: Path | None = None) -> Path | None:
    """Find the repository root by walking up from ``start``.

    Args:
        start: Directory to search from. Defaults to cwd.

    Returns:
        The first directory containing a ``.git`` entry, or None.
    """
    current = (start or Path.cwd()).absolute()
    for directory in (current, *current.parents):
        if (directory / ".git").exists():
            return directory
    return None


def append_trailers(commit_msg_file: Path, agent: Agent) -> bool:
    """Append ``Co-authored-by`` and ``Ai-assisted`` trailers for ``agent``.

    Skips the file when a ``Co-authored-by`` trailer with the agent's email is
    already present, whatever its display name. ``Ai-assisted: true`` is added
    with ``addIfDifferent`` so it appears once no matter how many agents are
    appended.

    Returns:
        True if git was invoked, False if the trailer was already present.

    Raises:
        TrailerError: If git exits non-zero.
        OSError: If the file cannot be read or git cannot be started.
    """
    # commit messages may use any i18n.commitEncoding, so compare raw bytes
    content = commit_msg_file.read_bytes()

    if b"Co-authored-by:" in content and agent.email.encode() in content:
        logger.debug("Trailers already present, skipping git interpret-trailers")
        return False

    co_authored = f"Co-authored-by: {agent.identity}"
    cmd = [
        "git",
        "interpret-trailers",
        "--in-place",
        "--trailer",
        co_authored,
        "--if-exists",
        "addIfDifferent",
        "--trailer",
        AI_ASSISTED_TRAILER,
        str(commit_msg_file),
    ]
    logger.debug(f"Running: {' '.join(cmd)}")

    result = subprocess.run(cmd, capture_output=True, check=False)
    if result.returncode != 0:
        stderr = result.stderr.decode(errors="replace").strip()
        raise TrailerError(f"git interpret-trailers failed: {stderr}")
    return True
