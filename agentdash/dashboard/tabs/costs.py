"""Costs tab: aggregate cost meter, daily usage meter and model breakdown."""

from __future__ import annotations

from textual.app import ComposeResult
from textual.containers import VerticalScroll
from textual.widgets import Label

from ...costs import (
    AGENT_BUDGET_POLICY,
    COST_METER_POLICY,
    POLICIES,
    evaluate_budget,
    evaluate_summary,
    format_currency,
    summarize_agents,
)
from ..widgets.budget_meter import BudgetMeter
from .base import TabBase


class CostsTab(TabBase):
    """Spend against budget.

    The aggregate meter uses the configured policy (cost meter by default).
    The daily usage meter sums agent costs against ``budget.daily`` and always
    uses the per-agent budget policy.
    """

    def compose(self) -> ComposeResult:
        report = self._report
        budget = self._ctx.budget
        policy = POLICIES.get(budget.get("policy", ""), COST_METER_POLICY)

        with VerticalScroll(classes="costs-layout"):
            yield Label("COST METER", classes="detail-section-header")
            if report.cost is None:
                yield Label("No cost data.", classes="dim-text")
            else:
                status = evaluate_summary(report.cost, policy=policy)
                yield BudgetMeter(status, label=report.cost.period.capitalize())

                yield Label("")
                yield Label("BY MODEL", classes="detail-section-header")
                if status.breakdown:
                    for model, spent in status.breakdown:
                        share = (spent / status.spent * 100) if status.spent > 0 else 0
                        yield Label(
                            f"{model:<20} {format_currency(spent):>10}  {share:5.1f}%",
                            classes="cost-row",
                        )
                else:
                    yield Label("(no breakdown)", classes="dim-text")

            daily_budget = budget.get("daily", 0.0)
            if daily_budget > 0 and report.agents:
                usage = summarize_agents(report.agents, budget=daily_budget, period="daily")
                yield Label("")
                yield Label("DAILY USAGE", classes="detail-section-header")
                yield BudgetMeter(
                    evaluate_budget(usage.spent, usage.budget, policy=AGENT_BUDGET_POLICY),
                    label="Agents",
                )
