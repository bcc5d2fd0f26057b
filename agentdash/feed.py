"""Inbound agent-status feed.

The transport that produces agent snapshots is outside this package. What
arrives here is a JSON document written by that transport:

    {
      "agents":   [ {agent record}, ... ],
      "cost":     {"spent": ..., "budget": ..., "period": ..., "breakdown": {...}},
      "quality":  {"score": ..., "threshold": ..., "dimensions": {...}, "history": [...]},
      "projects": [ {"id": ..., "name": ...}, ... ],
      "generated_at": "2026-01-15T10:00:00+00:00"
    }

Every key is optional. Records are taken as delivered; the end_time/status
invariant is the producer's responsibility.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any

from .agents import AgentRecord, parse_timestamp, utcnow
from .config import DEFAULT_QUALITY_THRESHOLD
from .controls import ControlIntent
from .costs import CostSummary, summarize_agents
from .quality import QualitySummary
from .stores import Project


class FeedError(Exception):
    """Raised when a feed document cannot be read or parsed."""


@dataclass(frozen=True)
class FeedReport:
    agents: list[AgentRecord] = field(default_factory=list)
    cost: CostSummary | None = None
    quality: QualitySummary | None = None
    projects: list[Project] = field(default_factory=list)
    generated_at: datetime | None = None


def parse_report(
    data: dict[str, Any],
    default_threshold: float = DEFAULT_QUALITY_THRESHOLD,
) -> FeedReport:
    """Build a FeedReport from a decoded feed document.

    Raises:
        FeedError: If any section is malformed.
    """
    if not isinstance(data, dict):
        raise FeedError("Feed document must be a JSON object")
    try:
        agents = [AgentRecord.from_dict(a) for a in data.get("agents") or []]
        cost = CostSummary.from_dict(data["cost"]) if data.get("cost") else None
        quality = (
            QualitySummary.from_dict(data["quality"], default_threshold)
            if data.get("quality") else None
        )
        projects = [Project.from_dict(p) for p in data.get("projects") or []]
        generated_at = parse_timestamp(data.get("generated_at"))
    except (KeyError, ValueError, TypeError, AttributeError, OverflowError, OSError) as exc:
        raise FeedError(f"Malformed feed: {exc!r}") from exc

    return FeedReport(
        agents=agents,
        cost=cost,
        quality=quality,
        projects=projects,
        generated_at=generated_at,
    )


def load_feed(
    path: Path | str,
    default_threshold: float = DEFAULT_QUALITY_THRESHOLD,
) -> FeedReport:
    """Read and parse a feed file.

    A missing file is an empty feed, not an error: the transport may not
    have written anything yet.

    Raises:
        FeedError: If the file exists but is unreadable or malformed.
    """
    path = Path(path)
    if not path.exists():
        return FeedReport()

    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except (json.JSONDecodeError, UnicodeDecodeError, OSError) as exc:
        raise FeedError(f"Could not read feed {path}: {exc}") from exc

    return parse_report(data, default_threshold)


# ---------------------------------------------------------------------------
# Demo data
# ---------------------------------------------------------------------------

_DEMO_AGENTS = [
    # id, name, model, status, age_minutes, cost, input, output
    ("a1b2c3d4", "Snap fork unification", "claude-sonnet", "running", 42, 1.84, 182_000, 21_400),
    ("e5f6a7b8", "Queue scripts", "gpt-4", "running", 17, 0.92, 64_000, 9_800),
    ("c9d0e1f2", "Void transparency fix", "claude-sonnet", "queued", 3, 0.0, 0, 0),
    ("a3b4c5d6", "Panel drag handler", "claude-opus", "completed", 160, 4.37, 301_000, 44_200),
    ("e7f8a9b0", "Center line replacement", "gpt-4", "failed", 95, 0.61, 51_000, 3_100),
    ("c1d2e3f4", "Gatekeeper review", "claude-haiku", "paused", 28, 0.12, 40_500, 2_200),
    ("a5b6c7d8", "Flaky test triage", "claude-haiku", "cancelled", 210, 0.05, 12_000, 800),
    ("e9f0a1b2", "Roadmap sync", "claude-sonnet", "completed", 300, 2.10, 150_000, 18_000),
]

_DEMO_TIMELINES = {
    "queued": [],
    "running": ["running"],
    "paused": ["running", "paused"],
    "completed": ["running", "completed"],
    "failed": ["running", "failed"],
    "cancelled": ["cancelled"],
}


class DemoFeed:
    """Generates sample feed documents that change a little on every call.

    Control intents sent back through ``apply_intent`` stick: later documents
    report the requested status for that agent.
    """

    def __init__(self, budget: float = 50.0) -> None:
        self.tick = 0
        self.budget = budget
        self.overrides: dict[str, str] = {}

    def apply_intent(self, intent: ControlIntent) -> None:
        self.overrides[intent.agent_id] = intent.to_status

    def generate(self, now: datetime | None = None) -> dict[str, Any]:
        self.tick += 1
        return generate_demo_report(
            self.tick, now=now, budget=self.budget, overrides=self.overrides
        )


def generate_demo_report(
    tick: int = 0,
    now: datetime | None = None,
    budget: float = 50.0,
    overrides: dict[str, str] | None = None,
) -> dict[str, Any]:
    """Return a feed document with a realistic spread of agent states.

    Running agents accumulate tokens and cost as ``tick`` grows. ``overrides``
    maps agent ids to the status to report instead of the built-in one.
    """
    now = now or utcnow()
    overrides = overrides or {}
    agents = []
    for agent_id, name, model, status, age, cost, tokens_in, tokens_out in _DEMO_AGENTS:
        status = overrides.get(agent_id, status)
        start = now - timedelta(minutes=age)
        if status == "running":
            cost += 0.03 * tick
            tokens_in += 2_500 * tick
            tokens_out += 300 * tick

        steps = _DEMO_TIMELINES[status]
        timeline = []
        for i, state in enumerate(steps, start=1):
            at = start + timedelta(minutes=age * i / (len(steps) + 1))
            timeline.append({"state": state, "timestamp": at.isoformat()})
        end_time = timeline[-1]["timestamp"] if status in ("completed", "failed", "cancelled") else None

        record: dict[str, Any] = {
            "id": agent_id,
            "name": name,
            "model": model,
            "status": status,
            "start_time": start.isoformat(),
            "end_time": end_time,
            "tokens": {"input": tokens_in, "output": tokens_out},
            "cost": round(cost, 4),
            "timeline": timeline,
        }
        if status == "completed":
            record["quality"] = {"score": 84 if agent_id == "a3b4c5d6" else 73, "pass": True}
        if status == "failed":
            record["error"] = {"message": "Tests failed after 3 attempts", "code": "E_TESTS"}
        agents.append(record)

    summary = summarize_agents(
        (AgentRecord.from_dict(a) for a in agents), budget=budget, period="daily"
    )
    breakdown = {model: round(spent, 4) for model, spent in summary.breakdown.items()}
    return {
        "agents": agents,
        "cost": {
            "spent": round(sum(breakdown.values()), 4),
            "budget": summary.budget,
            "period": summary.period,
            "breakdown": breakdown,
        },
        "quality": {
            "score": 78,
            "threshold": DEFAULT_QUALITY_THRESHOLD,
            "dimensions": {
                "correctness": 88,
                "style": 74,
                "test_coverage": 61,
                "documentation": 80,
            },
            "history": [62, 66, 71, 69, 75, 77, 74, 78],
        },
        "projects": [
            {"id": "PROJ-core", "name": "Core engine", "description": "Geometry kernel work"},
            {"id": "PROJ-gate", "name": "Gatekeeping", "description": "Review automation"},
        ],
        "generated_at": now.isoformat(),
    }
