"""Agent records and the lifecycle state machine.

Records are frozen dataclasses. Every lifecycle function returns a new
record rather than mutating the one it was given, so snapshots held by
views never change underneath them.

Lifecycle:

    queued    -> running, cancelled
    running   -> completed, failed, paused, cancelled
    paused    -> running, cancelled
    failed    -> queued      (retry)
    cancelled -> queued      (retry)
    completed -> (none)

Illegal transitions and disabled controls are no-ops: the original record
is returned unchanged.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Any

from .config import ALL_CONTROLS, ALL_STATUSES, TERMINAL_STATUSES, AgentStatus, Control

logger = logging.getLogger(__name__)


VALID_TRANSITIONS: dict[str, frozenset[str]] = {
    "queued": frozenset({"running", "cancelled"}),
    "running": frozenset({"completed", "failed", "paused", "cancelled"}),
    "paused": frozenset({"running", "cancelled"}),
    "failed": frozenset({"queued"}),
    "cancelled": frozenset({"queued"}),
    "completed": frozenset(),
}

# Statuses in which each control is enabled
CONTROL_ENABLED: dict[str, frozenset[str]] = {
    "pause": frozenset({"running"}),
    "resume": frozenset({"paused"}),
    "cancel": frozenset({"running", "queued", "paused"}),
    "retry": frozenset({"failed", "cancelled"}),
}

# Status each control moves an agent to
CONTROL_TARGETS: dict[str, AgentStatus] = {
    "pause": "paused",
    "resume": "running",
    "cancel": "cancelled",
    "retry": "queued",
}


def utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)


def parse_timestamp(value: Any) -> datetime | None:
    """Parse an ISO string, epoch number or datetime into an aware datetime.

    Epoch values above 1e11 are treated as milliseconds.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, (int, float)):
        seconds = value / 1000 if value > 1e11 else value
        return datetime.fromtimestamp(seconds, tz=timezone.utc)
    else:
        dt = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def _format_timestamp(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


@dataclass(frozen=True)
class TokenUsage:
    """Input/output token counts for one agent."""

    input: int = 0
    output: int = 0

    @property
    def total(self) -> int:
        return self.input + self.output


@dataclass(frozen=True)
class QualityResult:
    """Quality gate outcome attached to a completed agent."""

    score: float
    passed: bool


@dataclass(frozen=True)
class AgentError:
    """Failure details attached to a failed agent."""

    message: str
    code: str | None = None
    stack: str | None = None


@dataclass(frozen=True)
class TimelineEntry:
    """One lifecycle transition."""

    state: str
    timestamp: datetime


@dataclass(frozen=True)
class AgentRecord:
    """One autonomous task runner tracked by the dashboard."""

    id: str
    model: str
    start_time: datetime
    status: str = "queued"
    name: str | None = None
    end_time: datetime | None = None
    tokens: TokenUsage = field(default_factory=TokenUsage)
    cost: float = 0.0
    quality: QualityResult | None = None
    timeline: tuple[TimelineEntry, ...] = ()
    error: AgentError | None = None

    @property
    def display_name(self) -> str:
        return self.name or self.id

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AgentRecord":
        """Create an AgentRecord from a feed dictionary.

        Accepts both snake_case and camelCase keys (``start_time`` /
        ``startTime``). Records are not checked against the end_time/status
        invariant; that belongs to whoever produces the feed.

        Raises:
            KeyError: If ``id`` is missing.
            ValueError: If ``status`` is not a known lifecycle state or a
                timestamp cannot be parsed.
        """
        status = data.get("status", "queued")
        if status not in ALL_STATUSES:
            raise ValueError(f"Unknown agent status: {status!r}")

        tokens = data.get("tokens") or {}
        quality = data.get("quality")
        error = data.get("error")
        if isinstance(error, str):
            error = {"message": error}

        start_time = parse_timestamp(data.get("start_time", data.get("startTime")))

        return cls(
            id=str(data["id"]),
            model=str(data.get("model") or "unknown"),
            start_time=start_time or utcnow(),
            status=status,
            name=data.get("name"),
            end_time=parse_timestamp(data.get("end_time", data.get("endTime"))),
            tokens=TokenUsage(
                input=max(int(tokens.get("input", 0) or 0), 0),
                output=max(int(tokens.get("output", 0) or 0), 0),
            ),
            cost=max(float(data.get("cost", 0) or 0), 0.0),
            quality=QualityResult(
                score=float(quality.get("score", 0)),
                passed=bool(quality.get("pass", quality.get("passed", False))),
            ) if quality else None,
            timeline=tuple(
                TimelineEntry(state=e["state"], timestamp=parse_timestamp(e["timestamp"]))
                for e in data.get("timeline") or []
            ),
            error=AgentError(
                message=str(error.get("message", "")),
                code=error.get("code"),
                stack=error.get("stack"),
            ) if error else None,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-serialisable dictionary."""
        return {
            "id": self.id,
            "name": self.name,
            "model": self.model,
            "status": self.status,
            "start_time": _format_timestamp(self.start_time),
            "end_time": _format_timestamp(self.end_time),
            "tokens": {"input": self.tokens.input, "output": self.tokens.output},
            "cost": self.cost,
            "quality": (
                {"score": self.quality.score, "pass": self.quality.passed}
                if self.quality else None
            ),
            "timeline": [
                {"state": e.state, "timestamp": _format_timestamp(e.timestamp)}
                for e in self.timeline
            ],
            "error": (
                {"message": self.error.message, "code": self.error.code, "stack": self.error.stack}
                if self.error else None
            ),
        }


def create_agent(
    agent_id: str,
    model: str,
    name: str | None = None,
    now: datetime | None = None,
) -> AgentRecord:
    """Create a new agent in the ``queued`` state."""
    return AgentRecord(id=agent_id, model=model, name=name, start_time=now or utcnow())


# ---------------------------------------------------------------------------
# State machine
# ---------------------------------------------------------------------------


def is_terminal(status: str) -> bool:
    return status in TERMINAL_STATUSES


def can_transition(from_status: str, to_status: str) -> bool:
    """Return True if ``from_status -> to_status`` is a legal transition."""
    return to_status in VALID_TRANSITIONS.get(from_status, frozenset())


def is_control_enabled(status: str, control: str) -> bool:
    return status in CONTROL_ENABLED.get(control, frozenset())


def available_controls(status: str) -> list[Control]:
    """Return the controls enabled for ``status``, in display order."""
    return [c for c in ALL_CONTROLS if is_control_enabled(status, c)]


def transition(
    agent: AgentRecord,
    to_status: str,
    *,
    now: datetime | None = None,
    error: AgentError | None = None,
    quality: QualityResult | None = None,
) -> AgentRecord:
    """Move ``agent`` to ``to_status`` and append one timeline entry.

    Entering a terminal state sets ``end_time``; leaving one (retry) clears
    it along with any error and quality result. ``error`` is only kept for
    ``failed`` and ``quality`` only for ``completed``.

    Returns:
        The updated record, or ``agent`` itself if the transition is illegal.
    """
    if not can_transition(agent.status, to_status):
        logger.debug(
            "Ignoring illegal transition %s -> %s for agent %s",
            agent.status, to_status, agent.id,
        )
        return agent

    now = now or utcnow()
    terminal = is_terminal(to_status)

    return replace(
        agent,
        status=to_status,
        end_time=now if terminal else None,
        error=error if to_status == "failed" else None,
        quality=quality if to_status == "completed" else None,
        timeline=agent.timeline + (TimelineEntry(state=to_status, timestamp=now),),
    )


def apply_control(
    agent: AgentRecord,
    control: str,
    now: datetime | None = None,
) -> AgentRecord:
    """Apply a user control (pause/resume/cancel/retry) to ``agent``.

    A disabled control leaves the record unchanged.
    """
    if not is_control_enabled(agent.status, control):
        logger.debug("Control %r disabled for agent %s (%s)", control, agent.id, agent.status)
        return agent
    return transition(agent, CONTROL_TARGETS[control], now=now)


def record_usage(
    agent: AgentRecord,
    input_tokens: int = 0,
    output_tokens: int = 0,
    cost: float = 0.0,
) -> AgentRecord:
    """Add token and cost deltas to a running agent.

    Usage only accumulates while the agent is ``running``; negative deltas
    are dropped so totals never decrease.
    """
    if agent.status != "running":
        return agent
    return replace(
        agent,
        tokens=TokenUsage(
            input=agent.tokens.input + max(input_tokens, 0),
            output=agent.tokens.output + max(output_tokens, 0),
        ),
        cost=agent.cost + max(cost, 0.0),
    )


def time_in_state(
    agent: AgentRecord,
    status: str | None = None,
    now: datetime | None = None,
) -> float:
    """Return seconds spent in ``status``, or total elapsed if ``status`` is None.

    The agent is considered ``queued`` from ``start_time`` until its first
    timeline entry. Total elapsed time stops at ``end_time`` when set.
    """
    now = now or utcnow()

    if status is None:
        end = agent.end_time or now
        return max((end - agent.start_time).total_seconds(), 0.0)

    # (state, entered_at) spans, the last one open-ended
    spans = [("queued", agent.start_time)] + [(e.state, e.timestamp) for e in agent.timeline]
    total = 0.0
    for i, (state, entered) in enumerate(spans):
        if state != status:
            continue
        if i + 1 < len(spans):
            left = spans[i + 1][1]
        else:
            left = (agent.end_time or now) if is_terminal(state) else now
        total += max((left - entered).total_seconds(), 0.0)
    return total
