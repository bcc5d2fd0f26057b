"""Common base for the Agents, Costs and Quality tabs."""

from __future__ import annotations

from textual.widget import Widget

from ...feed import FeedReport
from ..data import DashboardContext


class TabBase(Widget):
    """A tab bound to the app's DashboardContext.

    Holds the latest FeedReport for tabs that render straight from it. By
    default a new report recomposes the whole tab; tabs driven by the stores
    override ``_refresh`` instead.
    """

    DEFAULT_CSS = """
    TabBase { height: 100%; }
    """

    def __init__(self, context: DashboardContext, **kwargs: object) -> None:
        super().__init__(**kwargs)
        self._ctx = context
        self._report = FeedReport()

    def update_data(self, report: FeedReport) -> None:
        self._report = report
        self._refresh()

    def _refresh(self) -> None:
        self.refresh(recompose=True)
