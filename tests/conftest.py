"""Shared test fixtures for agentdash tests."""

import shutil
import tempfile
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from agentdash.agents import AgentRecord, TokenUsage

T0 = datetime(2026, 1, 15, 10, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    tmp = tempfile.mkdtemp()
    yield Path(tmp)
    shutil.rmtree(tmp, ignore_errors=True)


@pytest.fixture
def dash_dir(temp_dir, monkeypatch):
    """Point AGENTDASH_DIR at a fresh .agentdash directory."""
    d = temp_dir / ".agentdash"
    d.mkdir()
    monkeypatch.setenv("AGENTDASH_DIR", str(d))
    yield d


@pytest.fixture
def t0():
    return T0


@pytest.fixture
def make_agent():
    """Factory for AgentRecords with sensible defaults.

    ``minutes`` offsets start_time from T0 so sort-by-start tests are easy
    to read.
    """
    def _make(
        agent_id: str = "agent-1",
        status: str = "queued",
        model: str = "gpt-4",
        cost: float = 0.0,
        minutes: int = 0,
        **kwargs,
    ) -> AgentRecord:
        start = T0 + timedelta(minutes=minutes)
        if status in ("completed", "failed", "cancelled") and "end_time" not in kwargs:
            kwargs["end_time"] = start + timedelta(minutes=5)
        return AgentRecord(
            id=agent_id,
            model=model,
            start_time=start,
            status=status,
            cost=cost,
            tokens=kwargs.pop("tokens", TokenUsage()),
            **kwargs,
        )

    return _make
