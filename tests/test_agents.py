"""Tests for the agent registry and process matching."""

import pytest

from aittributor.agents import (
    KNOWN_AGENTS,
    Agent,
    extract_email_addr,
    find_by_env,
    find_by_identity_prefix,
    find_by_process_token,
    find_for_process,
)
from aittributor.process import ProcessRecord


def _agent(prefix: str) -> Agent:
    agent = find_by_identity_prefix(prefix)
    assert agent is not None
    return agent


@pytest.mark.parametrize(
    "agent,pattern",
    [(agent, pattern) for agent in KNOWN_AGENTS for pattern in agent.process_names],
)
def test_exact_process_name_finds_its_agent(agent: Agent, pattern: str):
    assert find_by_process_token(pattern) is agent


@pytest.mark.parametrize(
    "token",
    ["claude", "Claude", "claude-code", "cursor-agent", "amazon-q", "goose"],
)
def test_find_by_process_token_substring(token: str):
    assert find_by_process_token(token) is not None


def test_find_by_process_token_uses_basename():
    assert find_by_process_token("/opt/homebrew/bin/amp") is find_by_process_token(
        "amp"
    )
    assert find_by_process_token("/opt/homebrew/bin/amp") is _agent("Amp")


def test_find_by_process_token_unknown():
    assert find_by_process_token("unknown") is None
    assert find_by_process_token("") is None


def test_find_by_process_token_declaration_order_wins():
    first = Agent("First <first@example.com>", process_names=("tool",))
    second = Agent("Second <second@example.com>", process_names=("tool-x",))
    assert find_by_process_token("tool-x", (first, second)) is first


def test_env_only_agent_never_matches_by_name():
    cline = _agent("Cline")
    assert cline.process_names == ()
    assert find_by_process_token("cline") is None


def test_find_by_env():
    agent = find_by_env({"CLINE_ACTIVE": "true"})
    assert agent is _agent("Cline")


def test_find_by_env_is_exact():
    assert find_by_env({"CLINE_ACTIVE": "TRUE"}) is None
    assert find_by_env({"CLINE_ACTIVE": "1"}) is None
    assert find_by_env({}) is None


def test_find_by_env_requires_all_pairs():
    agent = Agent("Both <both@example.com>", env_vars=(("A", "1"), ("B", "2")))
    assert find_by_env({"A": "1"}, (agent,)) is None
    assert find_by_env({"A": "1", "B": "2"}, (agent,)) is agent


def test_find_by_env_defaults_to_os_environ(monkeypatch):
    monkeypatch.setenv("CLINE_ACTIVE", "true")
    assert find_by_env() is _agent("Cline")


def test_find_by_identity_prefix():
    assert _agent("Claude Code").email == "noreply@anthropic.com"
    assert find_by_identity_prefix("Nonexistent") is None


def test_extract_email_addr():
    assert (
        extract_email_addr("Claude Code <noreply@anthropic.com>")
        == "noreply@anthropic.com"
    )
    assert (
        extract_email_addr("Claude Opus 4.6 <noreply@anthropic.com>")
        == "noreply@anthropic.com"
    )
    assert extract_email_addr("plain@email.com") == "plain@email.com"
    assert extract_email_addr("Amp <amp@ampcode.com>") == "amp@ampcode.com"


def test_every_identity_has_one_email():
    for agent in KNOWN_AGENTS:
        assert agent.identity.count("<") == 1
        assert "@" in agent.email
        assert agent.name and "<" not in agent.name


class TestFindForProcess:
    def test_binary_name(self):
        proc = ProcessRecord(1, None, "claude", ("claude", "--resume"))
        assert find_for_process(proc) is _agent("Claude Code")

    def test_argv0_basename(self):
        proc = ProcessRecord(1, None, "MainThread", ("/usr/local/bin/aider",))
        assert find_for_process(proc) is _agent("Aider")

    def test_first_non_flag_argument(self):
        proc = ProcessRecord(1, None, "node", ("node", "cursor-agent", "chat"))
        assert find_for_process(proc) is _agent("Cursor")

    def test_flags_are_skipped(self):
        argv = ("node", "--inspect", "/opt/lib/node_modules/.bin/codex", "run")
        proc = ProcessRecord(1, None, "node", argv)
        assert find_for_process(proc) is _agent("Codex")

    def test_only_first_non_flag_argument_is_checked(self):
        proc = ProcessRecord(1, None, "node", ("node", "server.js", "claude"))
        assert find_for_process(proc) is None

    def test_no_cmdline(self):
        assert find_for_process(ProcessRecord(1, None, "zsh")) is None
