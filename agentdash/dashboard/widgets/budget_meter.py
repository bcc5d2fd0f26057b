"""Budget meter widget: bar, spend figures and end-of-period projection."""

from __future__ import annotations

from rich.text import Text
from textual.widgets import Static

from ...costs import BudgetStatus, format_budget_percentage, format_currency
from ..utils import meter_bar

# Rich styles for threshold colours
COLOR_STYLES = {
    "green": "bold green",
    "yellow": "bold yellow",
    "red": "bold red",
    "gray": "dim",
}


def render_budget(status: BudgetStatus, label: str = "Spend", width: int = 24) -> Text:
    """Build the Rich text for one budget meter.

    The bar uses the capped percentage; the figure next to it is uncapped so
    overspend stays visible. A projection above budget is drawn in red.
    """
    style = COLOR_STYLES.get(status.color, "")
    text = Text()
    text.append(f"{label:<8}")
    text.append(meter_bar(status.percentage, width), style=style)
    text.append(f" {format_budget_percentage(status.spent, status.budget):>5}", style=style)
    text.append(f"  {format_currency(status.spent)} / {format_currency(status.budget)}")
    if status.over_budget and status.budget > 0:
        text.append("  OVER BUDGET", style="bold red")
    else:
        text.append(f"  {format_currency(status.remaining)} left", style="dim")

    if status.projection is not None:
        over = status.budget > 0 and status.projection > status.budget
        text.append("\n")
        text.append(f"{'':<8}{format_currency(status.daily_rate or 0)}/day → ", style="dim")
        text.append(
            f"{format_currency(status.projection)} projected",
            style="bold red" if over else "green",
        )
    return text


class BudgetMeter(Static):
    """Static widget wrapping render_budget()."""

    def __init__(self, status: BudgetStatus, label: str = "Spend", **kwargs: object) -> None:
        super().__init__(render_budget(status, label), **kwargs)
        self.add_class("budget-meter")
