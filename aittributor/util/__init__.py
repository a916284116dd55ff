"""
Utility package for aittributor.
"""

import logging
from pathlib import Path, PurePath

from rich.console import Console
from rich.logging import RichHandler

# stdout belongs to the hook's output, diagnostics go to stderr
console = Console(stderr=True, highlight=False, soft_wrap=True)


def path_with_tilde(path: Path) -> str:
    home = str(Path.home())
    path_str = str(path)
    if path_str.startswith(home):
        return path_str.replace(home, "~", 1)
    return path_str


def cwd_matches(cwd: str | PurePath, repo_root: str | PurePath) -> bool:
    """Check whether ``repo_root`` is a path-prefix of ``cwd``, by component.

    >>> cwd_matches("/Users/foo/monorepo/apps/backend", "/Users/foo/monorepo")
    True
    >>> cwd_matches("/Users/foo/aittributor2", "/Users/foo/aittributor")
    False
    """
    cwd_parts = PurePath(cwd).parts
    root_parts = PurePath(repo_root).parts
    return cwd_parts[: len(root_parts)] == root_parts


def setup_logging(debug: bool = False) -> None:
    """Route log records to stderr through rich."""
    handler = RichHandler(
        console=console,
        show_time=False,
        show_path=False,
        markup=False,
    )
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(message)s",
        handlers=[handler],
        force=True,
    )
