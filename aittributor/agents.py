"""
Registry of known AI coding agents.

Each agent is identified by a ``Name <email>`` identity string and one or more
detection predicates: process-name substrings, required environment variables,
and optionally a directory of session logs ("breadcrumbs") it leaves under the
user's home directory.

The catalog is fixed at build time. Lookups iterate in declaration order, so
when a token could match several agents the earliest-declared one wins.
"""

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import PurePath
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .process import ProcessRecord

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Agent:
    """A recognized AI coding tool."""

    identity: str
    process_names: tuple[str, ...] = ()
    env_vars: tuple[tuple[str, str], ...] = ()
    breadcrumb_dir: str | None = None
    breadcrumb_ext: str | None = None

    @property
    def email(self) -> str:
        return extract_email_addr(self.identity)

    @property
    def name(self) -> str:
        """Display name, without the email part."""
        return self.identity.split("<", 1)[0].strip()


KNOWN_AGENTS: tuple[Agent, ...] = (
    Agent(
        "Claude Code <noreply@anthropic.com>",
        process_names=("claude",),
        breadcrumb_dir=".claude/projects",
        breadcrumb_ext="jsonl",
    ),
    Agent("Goose <opensource@block.xyz>", process_names=("goose",)),
    Agent("Cursor <noreply@cursor.com>", process_names=("cursor", "cursor-agent")),
    Agent("Aider <noreply@aider.chat>", process_names=("aider",)),
    Agent("Windsurf <noreply@codeium.com>", process_names=("windsurf",)),
    Agent(
        "Codex <noreply@openai.com>",
        process_names=("codex",),
        breadcrumb_dir=".codex/sessions",
        breadcrumb_ext="jsonl",
    ),
    Agent("GitHub Copilot <noreply@github.com>", process_names=("copilot-agent",)),
    Agent(
        "Amazon Q Developer <noreply@amazon.com>", process_names=("amazon-q", "q")
    ),
    Agent("Amp <amp@ampcode.com>", process_names=("amp",)),
    Agent("Cline <noreply@cline.bot>", env_vars=(("CLINE_ACTIVE", "true"),)),
    Agent(
        "Gemini CLI Agent <gemini-cli-agent@google.com>", process_names=("gemini",)
    ),
)


def extract_email_addr(identity: str) -> str:
    """Return the address between ``<`` and ``>``, or the whole string.

    >>> extract_email_addr("Amp <amp@ampcode.com>")
    'amp@ampcode.com'
    >>> extract_email_addr("plain@email.com")
    'plain@email.com'
    """
    start = identity.find("<")
    end = identity.find(">", start + 1)
    if start != -1 and end != -1:
        return identity[start + 1 : end]
    return identity


def find_by_process_token(
    token: str, agents: tuple[Agent, ...] = KNOWN_AGENTS
) -> Agent | None:
    """Match a binary name or argv token against the registry.

    The token is reduced to its final path component and lowercased; an agent
    matches when any of its patterns is a substring of that basename.
    """
    basename = PurePath(token).name or token
    basename = basename.lower()
    for agent in agents:
        if not agent.process_names:
            continue
        if any(pattern in basename for pattern in agent.process_names):
            return agent
    return None


def find_by_env(
    environ: Mapping[str, str] | None = None,
    agents: tuple[Agent, ...] = KNOWN_AGENTS,
) -> Agent | None:
    """Return the first agent whose required env vars are all set exactly."""
    if environ is None:
        environ = os.environ
    for agent in agents:
        if not agent.env_vars:
            continue
        if all(environ.get(key) == value for key, value in agent.env_vars):
            return agent
    return None


def find_by_identity_prefix(
    prefix: str, agents: tuple[Agent, ...] = KNOWN_AGENTS
) -> Agent | None:
    return next((a for a in agents if a.identity.startswith(prefix)), None)


def find_for_process(
    process: "ProcessRecord", agents: tuple[Agent, ...] = KNOWN_AGENTS
) -> Agent | None:
    """Match a process by name, then ``argv[0]``, then its first non-flag argument.

    Agents are often started through wrappers or runtimes (``node cursor-agent``),
    so the binary name alone is not enough.
    """
    logger.debug(f"      Checking process name: {process.name}")
    if agent := find_by_process_token(process.name, agents):
        logger.debug(f"        Matched agent: {agent.identity}")
        return agent

    if process.cmdline:
        arg0 = process.cmdline[0]
        logger.debug(f"      Checking basename(argv[0]): {arg0}")
        if agent := find_by_process_token(arg0, agents):
            logger.debug(f"        Matched agent: {agent.identity}")
            return agent

    arg = next((a for a in process.cmdline[1:] if not a.startswith("-")), None)
    if arg is not None:
        logger.debug(f"      Checking first non-flag arg from argv[1:]: {arg}")
        if agent := find_by_process_token(arg, agents):
            logger.debug(f"        Matched agent: {agent.identity}")
            return agent

    return None
