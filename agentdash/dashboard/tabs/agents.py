"""Agents tab: filtered/sorted/paged agent table with a detail pane.

The table is driven entirely by query_agents() over the agent store, with
filter, sort and page taken from the UI store. Both stores are subscribed
on mount, so any action on either redraws the tab.
"""

from __future__ import annotations

from rich.text import Text
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical, VerticalScroll
from textual.widget import Widget
from textual.widgets import DataTable, Label

from ...agents import AgentRecord, available_controls, time_in_state
from ...config import ALL_CONTROLS, COUNTED_STATUSES
from ...costs import format_currency
from ...quality import evaluate_quality
from ...query import QueryResult, query_agents
from ...stores import selected_agent
from ..data import DashboardContext
from ..utils import color_class, format_duration, format_tokens
from ..widgets.budget_meter import COLOR_STYLES
from ..widgets.status_badge import StatusBadge, badge_for
from .base import TabBase

COLUMNS = ("ID", "Name", "Model", "Status", "Tokens", "Cost", "Elapsed")

_BADGE_STYLES = {
    "badge--running": "bold green",
    "badge--queued": "dim",
    "badge--paused": "bold magenta",
    "badge--completed": "green",
    "badge--failed": "bold red",
    "badge--cancelled": "yellow",
}

_CONTROL_KEYS = {"pause": "z", "resume": "e", "cancel": "x", "retry": "y"}


def status_cell(status: str) -> Text:
    text, css_class = badge_for(status)
    return Text(text, style=_BADGE_STYLES.get(css_class, ""))


def counts_line(result: QueryResult) -> str:
    """Header counters, always over the unfiltered agent set."""
    parts = [f"{status}: {result.counts.get(status, 0)}" for status in COUNTED_STATUSES]
    return "  ".join(parts)


def pager_line(result: QueryResult, page: int, status_filter: str, sort_by: str, sort_order: str) -> str:
    arrow = "↓" if sort_order == "desc" else "↑"
    return (
        f"Page {page if result.total_pages else 0}/{result.total_pages}"
        f" · {result.total} shown · filter: {status_filter} · sort: {sort_by} {arrow}"
    )


class AgentDetail(Widget):
    """Detail pane for the selected agent."""

    DEFAULT_CSS = """
    AgentDetail {
        height: 100%;
        padding: 0 1;
    }
    """

    def __init__(
        self,
        agent: AgentRecord | None = None,
        transitioning: bool = False,
        threshold: float = 70,
        **kwargs: object,
    ) -> None:
        super().__init__(**kwargs)
        self._agent = agent
        self._transitioning = transitioning
        self._threshold = threshold

    def compose(self) -> ComposeResult:
        agent = self._agent
        if agent is None:
            yield Label("No agent selected.", classes="dim-text")
            return

        with VerticalScroll():
            with Horizontal(classes="agent-detail-title"):
                yield Label(agent.display_name, classes="agent-detail-name")
                yield StatusBadge(agent.status)
            yield Label(f"ID: {agent.id}", classes="agent-detail-row dim-text")
            yield Label(f"Model: {agent.model}", classes="agent-detail-row")
            yield Label(
                f"Tokens: {format_tokens(agent.tokens.input)} in / "
                f"{format_tokens(agent.tokens.output)} out",
                classes="agent-detail-row",
            )
            yield Label(f"Cost: {format_currency(agent.cost)}", classes="agent-detail-row")
            yield Label(
                f"Elapsed: {format_duration(time_in_state(agent))}"
                f" · running {format_duration(time_in_state(agent, 'running'))}",
                classes="agent-detail-row dim-text",
            )

            if agent.error:
                yield Label("")
                yield Label("ERROR", classes="detail-section-header")
                code = f" [{agent.error.code}]" if agent.error.code else ""
                yield Label(f"{agent.error.message}{code}", classes=f"agent-detail-row {color_class('red')}")

            if agent.quality:
                gate = evaluate_quality(agent.quality.score, self._threshold)
                yield Label("")
                yield Label("QUALITY", classes="detail-section-header")
                yield Label(
                    Text(
                        f"{gate.score:.0f} / {gate.threshold:.0f}  {'PASS' if gate.passed else 'FAIL'}",
                        style=COLOR_STYLES.get(gate.color, ""),
                    ),
                    classes="agent-detail-row",
                )

            yield Label("")
            yield Label("TIMELINE", classes="detail-section-header")
            if agent.timeline:
                for entry in agent.timeline:
                    yield Label(
                        f"{entry.timestamp:%H:%M:%S}  {entry.state}",
                        classes="agent-detail-row dim-text",
                    )
            else:
                yield Label("(no transitions)", classes="agent-detail-row dim-text")

            yield Label("")
            yield Label("CONTROLS", classes="detail-section-header")
            if self._transitioning:
                yield Label("waiting for confirmation…", classes=f"agent-detail-row {color_class('yellow')}")
            else:
                enabled = set(available_controls(agent.status))
                for control in ALL_CONTROLS:
                    css = "agent-detail-row" if control in enabled else "agent-detail-row dim-text"
                    mark = "●" if control in enabled else "○"
                    yield Label(f"{mark} [{_CONTROL_KEYS[control]}] {control}", classes=css)

    def update_agent(self, agent: AgentRecord | None, transitioning: bool) -> None:
        """Switch to a new agent and recompose the detail pane."""
        self._agent = agent
        self._transitioning = transitioning
        self.refresh(recompose=True)


class AgentsTab(TabBase):
    """Agent list with status filter, sort, paging and lifecycle controls."""

    BINDINGS = [
        Binding("f", "cycle_filter", "Filter", show=True),
        Binding("s", "cycle_sort", "Sort", show=True),
        Binding("o", "toggle_order", "Order", show=False),
        Binding("]", "next_page", "Next page", show=False),
        Binding("[", "prev_page", "Prev page", show=False),
        Binding("z", "control('pause')", "Pause", show=False),
        Binding("e", "control('resume')", "Resume", show=False),
        Binding("x", "control('cancel')", "Cancel", show=False),
        Binding("y", "control('retry')", "Retry", show=False),
    ]

    def __init__(self, context: DashboardContext, **kwargs: object) -> None:
        super().__init__(context, **kwargs)
        self._total_pages = 0
        self._unsubscribers: list = []

    def compose(self) -> ComposeResult:
        with Vertical():
            yield Label("", id="agent-counts", classes="agent-counts")
            with Horizontal(classes="agents-layout"):
                yield DataTable(id="agent-table", cursor_type="row", zebra_stripes=True)
                yield AgentDetail(
                    threshold=self._ctx.threshold,
                    classes="agent-detail-panel",
                    id="agent-detail",
                )
            yield Label("", id="agent-pager", classes="dim-text")

    def on_mount(self) -> None:
        self.query_one("#agent-table", DataTable).add_columns(*COLUMNS)
        self._unsubscribers = [
            self._ctx.agent_store.subscribe(lambda _state: self._refresh()),
            self._ctx.ui_store.subscribe(lambda _state: self._refresh()),
        ]
        self._refresh()

    def on_unmount(self) -> None:
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers = []

    def _refresh(self) -> None:
        state = self._ctx.agent_store.get_state()
        ui = self._ctx.ui_store.get_state()
        result = query_agents(
            state.agents,
            status_filter=ui.status_filter,
            sort_by=ui.sort_by,
            sort_order=ui.sort_order,
            page=ui.page,
            page_size=ui.page_size,
        )
        self._total_pages = result.total_pages

        try:
            table = self.query_one("#agent-table", DataTable)
        except Exception:
            return  # not mounted yet

        self.query_one("#agent-counts", Label).update(counts_line(result))
        self.query_one("#agent-pager", Label).update(
            pager_line(result, ui.page, ui.status_filter, ui.sort_by, ui.sort_order)
        )

        table.clear()
        cursor_row = None
        for index, agent in enumerate(result.page_items):
            table.add_row(
                agent.id[:8],
                agent.display_name[:28],
                agent.model,
                status_cell(agent.status),
                format_tokens(agent.tokens.total),
                format_currency(agent.cost),
                format_duration(time_in_state(agent)),
                key=agent.id,
            )
            if agent.id == state.selected_id:
                cursor_row = index
        if cursor_row is not None:
            table.move_cursor(row=cursor_row)

        selected = selected_agent(state)
        self.query_one("#agent-detail", AgentDetail).update_agent(
            selected, selected is not None and selected.id in state.transitioning
        )

    def on_data_table_row_highlighted(self, event: DataTable.RowHighlighted) -> None:
        agent_id = event.row_key.value if event.row_key else None
        if agent_id != self._ctx.agent_store.get_state().selected_id:
            self._ctx.agent_store.actions.select_agent(agent_id)

    def action_cycle_filter(self) -> None:
        self._ctx.ui_store.actions.cycle_filter()

    def action_cycle_sort(self) -> None:
        self._ctx.ui_store.actions.cycle_sort()

    def action_toggle_order(self) -> None:
        self._ctx.ui_store.actions.toggle_sort_order()

    def action_next_page(self) -> None:
        self._ctx.ui_store.actions.next_page(self._total_pages)

    def action_prev_page(self) -> None:
        self._ctx.ui_store.actions.prev_page()

    def action_control(self, control: str) -> None:
        agent = selected_agent(self._ctx.agent_store.get_state())
        if agent is None:
            self.app.notify("No agent selected", severity="warning", timeout=3)
            return
        try:
            intent = self._ctx.dispatcher.request(agent.id, control)
        except OSError as exc:
            self.app.notify(f"Could not send {control}: {exc}", severity="error", timeout=4)
            return
        if intent is None:
            self.app.notify(f"{control} is not available for {agent.display_name}", timeout=3)
        else:
            self.app.notify(f"{control} requested for {agent.display_name}", timeout=3)
