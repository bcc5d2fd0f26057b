"""Agent dashboard: Textual TUI app.

Launch with: python -m agentdash.dashboard

The app is the composition root: it creates the agent, UI and project
stores and the control dispatcher, and hands them to the tabs.
"""

from __future__ import annotations

import logging
from pathlib import Path

from textual import work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.widgets import Footer, Header, TabbedContent, TabPane

from ..config import DEFAULT_QUALITY_THRESHOLD, DEFAULT_REFRESH_INTERVAL
from ..controls import ControlDispatcher
from ..feed import FeedReport
from ..stores import create_agent_store, create_project_store, create_ui_store
from .data import DashboardContext, DataManager
from .tabs.agents import AgentsTab
from .tabs.costs import CostsTab
from .tabs.quality import QualityTab

logger = logging.getLogger(__name__)


class AgentDashboard(App):
    """Three tabs: Agents, Costs, Quality."""

    CSS_PATH = Path(__file__).parent / "styles" / "dashboard.tcss"

    TITLE = "Agents"
    SUB_TITLE = "Dashboard"

    BINDINGS = [
        Binding("q", "quit", "Quit", show=True),
        Binding("r", "refresh", "Refresh", show=True),
        Binding("a", "show_tab('agents')", "Agents", show=False),
        Binding("c", "show_tab('costs')", "Costs", show=False),
        Binding("g", "show_tab('quality')", "Quality", show=False),
    ]

    def __init__(
        self,
        data_manager: DataManager,
        *,
        refresh_interval: float = DEFAULT_REFRESH_INTERVAL,
        page_size: int = 10,
        threshold: float = DEFAULT_QUALITY_THRESHOLD,
        budget: dict | None = None,
        optimistic: bool = False,
        **kwargs: object,
    ) -> None:
        super().__init__(**kwargs)
        self._data_manager = data_manager
        self._refresh_interval = refresh_interval
        self._report = FeedReport()

        agent_store = create_agent_store()
        self._context = DashboardContext(
            agent_store=agent_store,
            ui_store=create_ui_store(page_size=page_size),
            project_store=create_project_store(),
            dispatcher=ControlDispatcher(
                agent_store, sender=data_manager.send_intent, optimistic=optimistic
            ),
            threshold=threshold,
            budget=budget or {},
        )
        self._context.project_store.subscribe(self._update_subtitle)

    @property
    def context(self) -> DashboardContext:
        return self._context

    def compose(self) -> ComposeResult:
        yield Header()
        with TabbedContent(id="tabs"):
            with TabPane("Agents [A]", id="agents"):
                yield AgentsTab(self._context, id="agents-tab")
            with TabPane("Costs [C]", id="costs"):
                yield CostsTab(self._context, id="costs-tab")
            with TabPane("Quality [G]", id="quality"):
                yield QualityTab(self._context, id="quality-tab")
        yield Footer()

    def on_mount(self) -> None:
        self._fetch_data()
        self.set_interval(self._refresh_interval, self._fetch_data)

    def action_refresh(self) -> None:
        self._fetch_data()

    def action_show_tab(self, tab_id: str) -> None:
        self._context.ui_store.actions.set_tab(tab_id)
        try:
            self.query_one(TabbedContent).active = tab_id
        except Exception:
            pass

    @work(thread=True, exclusive=True)
    def _fetch_data(self) -> None:
        """Load the feed in a background thread and apply it on the UI thread."""
        try:
            report = self._data_manager.fetch_sync()
        except Exception as exc:
            logger.exception("Data refresh failed")
            self.call_from_thread(
                self.notify,
                f"Data refresh failed: {exc}",
                severity="error",
                timeout=4,
            )
            return

        self.call_from_thread(self._apply_report, report)

    def _apply_report(self, report: FeedReport) -> None:
        """Apply a freshly fetched report to the stores and tabs (UI thread)."""
        self._report = report
        self._context.agent_store.actions.set_agents(report.agents)
        self._context.project_store.actions.set_projects(report.projects)
        for widget_id, widget_type in [
            ("#costs-tab", CostsTab),
            ("#quality-tab", QualityTab),
        ]:
            try:
                self.query_one(widget_id, widget_type).update_data(report)
            except Exception:
                logger.exception("Failed to update %s", widget_id)

    def _update_subtitle(self, state) -> None:
        names = ", ".join(p.name for p in state.projects)
        self.sub_title = names or "Dashboard"
