import pytest

from aittributor.process import ProcessRecord, ProcessSnapshot


@pytest.fixture
def make_snapshot():
    """Build a ProcessSnapshot from ``(pid, ppid, name, cmdline, cwd)`` tuples."""

    def _make(*rows) -> ProcessSnapshot:
        records = []
        for pid, ppid, name, *rest in rows:
            cmdline = tuple(rest[0]) if rest else ()
            cwd = rest[1] if len(rest) > 1 else None
            records.append(ProcessRecord(pid, ppid, name, cmdline, cwd))
        return ProcessSnapshot(records)

    return _make


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    """Keep the developer's environment out of detection and config."""
    for key in (
        "CLINE_ACTIVE",
        "AITTRIBUTOR_TIMEOUT",
        "AITTRIBUTOR_BREADCRUMBS",
        "AITTRIBUTOR_DEBUG",
    ):
        monkeypatch.delenv(key, raising=False)
