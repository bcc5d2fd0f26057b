"""Filter, sort and paginate agent records for display."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Callable, Iterable, Sequence

from .agents import AgentRecord
from .config import ALL_STATUSES, DEFAULT_PAGE_SIZE, SortOrder

_SORT_KEYS: dict[str, Callable[[AgentRecord], object]] = {
    "start_time": lambda a: a.start_time,
    "cost": lambda a: a.cost,
    "model": lambda a: a.model,
    "status": lambda a: a.status,
}


@dataclass(frozen=True)
class QueryResult:
    """One page of agents plus header counters."""

    page_items: list[AgentRecord]
    total_pages: int
    total: int = 0
    counts: dict[str, int] = field(default_factory=dict)


def status_counts(agents: Iterable[AgentRecord]) -> dict[str, int]:
    """Count agents per status, with every known status present."""
    counts = {status: 0 for status in ALL_STATUSES}
    for agent in agents:
        counts[agent.status] = counts.get(agent.status, 0) + 1
    return counts


def filter_agents(agents: Iterable[AgentRecord], status_filter: str = "all") -> list[AgentRecord]:
    if not status_filter or status_filter == "all":
        return list(agents)
    return [a for a in agents if a.status == status_filter]


def sort_agents(
    agents: Iterable[AgentRecord],
    sort_by: str | None = None,
    sort_order: SortOrder = "asc",
) -> list[AgentRecord]:
    """Stable-sort agents by ``sort_by``.

    Descending order flips the comparison rather than reversing the result,
    so agents with equal keys keep their input order either way. An unknown
    or missing ``sort_by`` keeps input order.
    """
    key = _SORT_KEYS.get(sort_by or "")
    if key is None:
        return list(agents)
    return sorted(agents, key=key, reverse=(sort_order == "desc"))


def paginate(items: Sequence[AgentRecord], page: int, page_size: int) -> tuple[list[AgentRecord], int]:
    """Return (items on 1-indexed ``page``, total pages).

    Pages outside 1..total_pages come back empty.
    """
    if page_size <= 0:
        return [], 0
    total_pages = math.ceil(len(items) / page_size)
    if page < 1:
        return [], total_pages
    start = (page - 1) * page_size
    return list(items[start:start + page_size]), total_pages


def query_agents(
    agents: Sequence[AgentRecord],
    status_filter: str = "all",
    sort_by: str | None = None,
    sort_order: SortOrder = "asc",
    page: int = 1,
    page_size: int = DEFAULT_PAGE_SIZE,
) -> QueryResult:
    """Produce the page of agents a view renders.

    Counts are taken over the unfiltered input so header counters stay put
    while the user changes the filter. The input sequence is not modified.
    """
    filtered = filter_agents(agents, status_filter)
    ordered = sort_agents(filtered, sort_by, sort_order)
    page_items, total_pages = paginate(ordered, page, page_size)
    return QueryResult(
        page_items=page_items,
        total_pages=total_pages,
        total=len(filtered),
        counts=status_counts(agents),
    )
