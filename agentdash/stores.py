"""Concrete stores: agent records, UI view state and the project list.

Each store is a ``Store`` over a frozen state dataclass with a dict of pure
actions. Actions take the current state first and return the next state;
they never raise for unknown ids, they just leave the state as it was.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from typing import Any, Iterable

from . import agents as lifecycle
from .agents import AgentError, AgentRecord, QualityResult
from .config import ALL_STATUSES, DEFAULT_PAGE_SIZE, SORT_KEYS, SortOrder
from .store import Store


# ---------------------------------------------------------------------------
# Agent store
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class AgentStoreState:
    agents: tuple[AgentRecord, ...] = ()
    selected_id: str | None = None
    transitioning: frozenset[str] = frozenset()


def get_agent(state: AgentStoreState, agent_id: str | None) -> AgentRecord | None:
    for agent in state.agents:
        if agent.id == agent_id:
            return agent
    return None


def selected_agent(state: AgentStoreState) -> AgentRecord | None:
    return get_agent(state, state.selected_id)


def _replace_agent(state: AgentStoreState, updated: AgentRecord) -> AgentStoreState:
    return replace(
        state,
        agents=tuple(updated if a.id == updated.id else a for a in state.agents),
    )


def _still_transitioning(
    state: AgentStoreState,
    agents: tuple[AgentRecord, ...],
) -> frozenset[str]:
    """Transitioning ids whose agent is still present with an unchanged status.

    A changed status is the confirmation of the pending request.
    """
    previous = {a.id: a.status for a in state.agents}
    current = {a.id: a.status for a in agents}
    return frozenset(
        agent_id for agent_id in state.transitioning
        if agent_id in current and current[agent_id] == previous.get(agent_id)
    )


def set_agents(state: AgentStoreState, agents: Iterable[AgentRecord]) -> AgentStoreState:
    """Replace the whole collection with a fresh snapshot."""
    agents = tuple(agents)
    ids = {a.id for a in agents}
    return replace(
        state,
        agents=agents,
        selected_id=state.selected_id if state.selected_id in ids else None,
        transitioning=_still_transitioning(state, agents),
    )


def upsert_agents(state: AgentStoreState, agents: Iterable[AgentRecord]) -> AgentStoreState:
    """Merge incoming records by id; new ids are appended in arrival order."""
    incoming = {a.id: a for a in agents}
    kept = tuple(incoming.pop(a.id, a) for a in state.agents)
    merged = kept + tuple(incoming.values())
    return replace(state, agents=merged, transitioning=_still_transitioning(state, merged))


def remove_agent(state: AgentStoreState, agent_id: str) -> AgentStoreState:
    return replace(
        state,
        agents=tuple(a for a in state.agents if a.id != agent_id),
        selected_id=None if state.selected_id == agent_id else state.selected_id,
        transitioning=state.transitioning - {agent_id},
    )


def select_agent(state: AgentStoreState, agent_id: str | None) -> AgentStoreState:
    """Select an agent; unknown ids clear the selection."""
    found = get_agent(state, agent_id)
    return replace(state, selected_id=found.id if found else None)


def apply_transition(
    state: AgentStoreState,
    agent_id: str,
    to_status: str,
    now: datetime | None = None,
    error: AgentError | None = None,
    quality: QualityResult | None = None,
) -> AgentStoreState:
    agent = get_agent(state, agent_id)
    if agent is None:
        return state
    updated = lifecycle.transition(agent, to_status, now=now, error=error, quality=quality)
    return _replace_agent(state, updated)


def apply_control(
    state: AgentStoreState,
    agent_id: str,
    control: str,
    now: datetime | None = None,
) -> AgentStoreState:
    agent = get_agent(state, agent_id)
    if agent is None:
        return state
    return _replace_agent(state, lifecycle.apply_control(agent, control, now=now))


def record_usage(
    state: AgentStoreState,
    agent_id: str,
    input_tokens: int = 0,
    output_tokens: int = 0,
    cost: float = 0.0,
) -> AgentStoreState:
    agent = get_agent(state, agent_id)
    if agent is None:
        return state
    return _replace_agent(
        state, lifecycle.record_usage(agent, input_tokens, output_tokens, cost)
    )


def mark_transitioning(state: AgentStoreState, agent_id: str) -> AgentStoreState:
    if get_agent(state, agent_id) is None:
        return state
    return replace(state, transitioning=state.transitioning | {agent_id})


def clear_transitioning(state: AgentStoreState, agent_id: str) -> AgentStoreState:
    return replace(state, transitioning=state.transitioning - {agent_id})


def confirm_transition(
    state: AgentStoreState,
    agent_id: str,
    to_status: str,
    now: datetime | None = None,
) -> AgentStoreState:
    """Apply a confirmed transition and clear the transitioning flag together."""
    return clear_transitioning(apply_transition(state, agent_id, to_status, now=now), agent_id)


AGENT_ACTIONS = {
    "set_agents": set_agents,
    "upsert_agents": upsert_agents,
    "remove_agent": remove_agent,
    "select_agent": select_agent,
    "apply_transition": apply_transition,
    "apply_control": apply_control,
    "record_usage": record_usage,
    "mark_transitioning": mark_transitioning,
    "clear_transitioning": clear_transitioning,
    "confirm_transition": confirm_transition,
}


def create_agent_store(initial: Iterable[AgentRecord] = ()) -> Store[AgentStoreState]:
    return Store(AgentStoreState(agents=tuple(initial)), AGENT_ACTIONS)


# ---------------------------------------------------------------------------
# UI view-state store
# ---------------------------------------------------------------------------

FILTER_CYCLE: list[str] = ["all"] + list(ALL_STATUSES)
TABS: list[str] = ["agents", "costs", "quality"]


@dataclass(frozen=True)
class UIState:
    active_tab: str = "agents"
    status_filter: str = "all"
    sort_by: str = "start_time"
    sort_order: SortOrder = "desc"
    page: int = 1
    page_size: int = DEFAULT_PAGE_SIZE


def set_tab(state: UIState, tab: str) -> UIState:
    if tab not in TABS:
        return state
    return replace(state, active_tab=tab)


def set_filter(state: UIState, status_filter: str) -> UIState:
    """Change the status filter and go back to the first page."""
    if status_filter not in FILTER_CYCLE:
        return state
    return replace(state, status_filter=status_filter, page=1)


def cycle_filter(state: UIState) -> UIState:
    index = FILTER_CYCLE.index(state.status_filter) if state.status_filter in FILTER_CYCLE else -1
    return set_filter(state, FILTER_CYCLE[(index + 1) % len(FILTER_CYCLE)])


def set_sort(state: UIState, sort_by: str, sort_order: SortOrder | None = None) -> UIState:
    if sort_by not in SORT_KEYS:
        return state
    order = sort_order if sort_order in ("asc", "desc") else state.sort_order
    return replace(state, sort_by=sort_by, sort_order=order, page=1)


def cycle_sort(state: UIState) -> UIState:
    index = SORT_KEYS.index(state.sort_by) if state.sort_by in SORT_KEYS else -1
    return set_sort(state, SORT_KEYS[(index + 1) % len(SORT_KEYS)])


def toggle_sort_order(state: UIState) -> UIState:
    return replace(state, sort_order="asc" if state.sort_order == "desc" else "desc")


def set_page(state: UIState, page: int) -> UIState:
    return replace(state, page=max(page, 1))


def next_page(state: UIState, total_pages: int) -> UIState:
    """Advance one page, stopping at the last page."""
    return replace(state, page=max(min(state.page + 1, total_pages), 1))


def prev_page(state: UIState) -> UIState:
    return replace(state, page=max(state.page - 1, 1))


UI_ACTIONS = {
    "set_tab": set_tab,
    "set_filter": set_filter,
    "cycle_filter": cycle_filter,
    "set_sort": set_sort,
    "cycle_sort": cycle_sort,
    "toggle_sort_order": toggle_sort_order,
    "set_page": set_page,
    "next_page": next_page,
    "prev_page": prev_page,
}


def create_ui_store(page_size: int = DEFAULT_PAGE_SIZE) -> Store[UIState]:
    return Store(UIState(page_size=page_size), UI_ACTIONS)


# ---------------------------------------------------------------------------
# Project store
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Project:
    id: str
    name: str
    description: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Project":
        return cls(
            id=str(data["id"]),
            name=str(data.get("name") or data["id"]),
            description=str(data.get("description") or ""),
        )


@dataclass(frozen=True)
class ProjectState:
    projects: tuple[Project, ...] = ()
    selected_id: str | None = None


def set_projects(state: ProjectState, projects: Iterable[Project]) -> ProjectState:
    projects = tuple(projects)
    ids = {p.id for p in projects}
    return ProjectState(
        projects=projects,
        selected_id=state.selected_id if state.selected_id in ids else None,
    )


def select_project(state: ProjectState, project_id: str | None) -> ProjectState:
    ids = {p.id for p in state.projects}
    return replace(state, selected_id=project_id if project_id in ids else None)


PROJECT_ACTIONS = {
    "set_projects": set_projects,
    "select_project": select_project,
}


def create_project_store(projects: Iterable[Project] = ()) -> Store[ProjectState]:
    return Store(ProjectState(projects=tuple(projects)), PROJECT_ACTIONS)
