"""Cost and budget accounting.

Two colour policies are kept side by side because they answer different
questions:

- ``AGENT_BUDGET_POLICY`` (per-agent / daily usage): red at 100%, yellow at 80%.
- ``COST_METER_POLICY`` (aggregate cost meter): red at 80%, yellow at 50%.

Callers pick one explicitly. A zero budget always yields ``gray``.
"""

from __future__ import annotations

import calendar
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Iterable

from .agents import AgentRecord
from .config import BudgetPeriod


@dataclass(frozen=True)
class ThresholdPolicy:
    """Percentage bands for budget colouring."""

    name: str
    red_at: float
    yellow_at: float

    def color(self, percentage: float, budget: float) -> str:
        if budget <= 0:
            return "gray"
        if percentage >= self.red_at:
            return "red"
        if percentage >= self.yellow_at:
            return "yellow"
        return "green"


AGENT_BUDGET_POLICY = ThresholdPolicy(name="agent_budget", red_at=100, yellow_at=80)
COST_METER_POLICY = ThresholdPolicy(name="cost_meter", red_at=80, yellow_at=50)

POLICIES: dict[str, ThresholdPolicy] = {
    AGENT_BUDGET_POLICY.name: AGENT_BUDGET_POLICY,
    COST_METER_POLICY.name: COST_METER_POLICY,
}


@dataclass(frozen=True)
class CostSummary:
    """Spend for one budget period, as supplied by the billing collaborator.

    ``spent`` is expected to equal the sum of ``breakdown`` when a breakdown
    is given. The tracker does not re-check it.
    """

    spent: float
    budget: float
    period: BudgetPeriod = "monthly"
    breakdown: dict[str, float] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CostSummary":
        period = data.get("period", "monthly")
        if period not in ("daily", "monthly"):
            raise ValueError(f"Unknown budget period: {period!r}")
        return cls(
            spent=float(data.get("spent", 0) or 0),
            budget=float(data.get("budget", 0) or 0),
            period=period,
            breakdown={str(k): float(v) for k, v in (data.get("breakdown") or {}).items()},
        )


@dataclass(frozen=True)
class BudgetStatus:
    """Derived budget figures for display."""

    spent: float
    budget: float
    percentage: float
    remaining: float
    over_budget: bool
    color: str
    daily_rate: float | None = None
    projection: float | None = None
    breakdown: list[tuple[str, float]] = field(default_factory=list)


def budget_percentage(spent: float, budget: float) -> float:
    """Percentage of ``budget`` used, capped at 100. Zero budget gives 0."""
    if budget <= 0:
        return 0.0
    return min(spent / budget * 100, 100.0)


def sorted_breakdown(breakdown: dict[str, float] | None) -> list[tuple[str, float]]:
    """Breakdown entries ordered by spend, largest first."""
    if not breakdown:
        return []
    return sorted(breakdown.items(), key=lambda item: item[1], reverse=True)


def project_spend(
    spent: float,
    days_elapsed: float | None,
    total_days: float | None,
) -> tuple[float | None, float | None]:
    """Linear projection of spend to the end of the period.

    Returns:
        (daily_rate, projection), both None unless ``days_elapsed > 0`` and
        ``total_days`` is given.
    """
    if not days_elapsed or days_elapsed <= 0 or total_days is None:
        return None, None
    daily_rate = spent / days_elapsed
    return daily_rate, daily_rate * total_days


def evaluate_budget(
    spent: float,
    budget: float,
    *,
    breakdown: dict[str, float] | None = None,
    days_elapsed: float | None = None,
    total_days: float | None = None,
    policy: ThresholdPolicy = COST_METER_POLICY,
) -> BudgetStatus:
    """Compute percentage, colour, remaining and projection for a budget."""
    percentage = budget_percentage(spent, budget)
    daily_rate, projection = project_spend(spent, days_elapsed, total_days)
    return BudgetStatus(
        spent=spent,
        budget=budget,
        percentage=percentage,
        remaining=max(budget - spent, 0.0),
        over_budget=spent > budget,
        color=policy.color(percentage, budget),
        daily_rate=daily_rate,
        projection=projection,
        breakdown=sorted_breakdown(breakdown),
    )


def evaluate_summary(
    summary: CostSummary,
    *,
    policy: ThresholdPolicy = COST_METER_POLICY,
    today: date | None = None,
) -> BudgetStatus:
    """Evaluate a CostSummary, projecting over its own period."""
    days_elapsed, total_days = period_progress(summary.period, today)
    return evaluate_budget(
        summary.spent,
        summary.budget,
        breakdown=summary.breakdown,
        days_elapsed=days_elapsed,
        total_days=total_days,
        policy=policy,
    )


def period_progress(period: BudgetPeriod, today: date | None = None) -> tuple[int, int]:
    """Return (days_elapsed, total_days) for the period containing ``today``.

    A daily period is one day long and always one day in. Monthly periods
    count today as elapsed.
    """
    if period == "daily":
        return 1, 1
    today = today or date.today()
    return today.day, calendar.monthrange(today.year, today.month)[1]


def summarize_agents(
    agents: Iterable[AgentRecord],
    budget: float,
    period: BudgetPeriod = "monthly",
) -> CostSummary:
    """Build a CostSummary from agent records, grouped by model.

    The breakdown is built first and ``spent`` is its sum, so the pair is
    always consistent.
    """
    breakdown: dict[str, float] = {}
    for agent in agents:
        breakdown[agent.model] = breakdown.get(agent.model, 0.0) + agent.cost
    return CostSummary(
        spent=sum(breakdown.values()),
        budget=budget,
        period=period,
        breakdown=breakdown,
    )


# ---------------------------------------------------------------------------
# Formatting
# ---------------------------------------------------------------------------


def format_currency(amount: float) -> str:
    """Format an amount as dollars, e.g. ``$1,234.56``."""
    sign = "-" if amount < 0 else ""
    return f"{sign}${abs(amount):,.2f}"


def format_budget_percentage(spent: float, budget: float) -> str:
    """Uncapped whole-number percentage of budget, or ``N/A`` with no budget."""
    if budget <= 0:
        return "N/A"
    return f"{round(spent / budget * 100)}%"
