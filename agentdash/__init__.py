"""Agent dashboard: lifecycle, accounting and quality gates for coding agents."""

from .agents import (
    AgentError,
    AgentRecord,
    QualityResult,
    TimelineEntry,
    TokenUsage,
    apply_control,
    available_controls,
    create_agent,
    record_usage,
    time_in_state,
    transition,
)
from .controls import ControlDispatcher, ControlIntent
from .costs import (
    AGENT_BUDGET_POLICY,
    COST_METER_POLICY,
    BudgetStatus,
    CostSummary,
    evaluate_budget,
)
from .feed import FeedError, FeedReport, load_feed
from .quality import QualityGate, QualitySummary, evaluate_quality
from .query import QueryResult, query_agents
from .store import Store
from .stores import create_agent_store, create_project_store, create_ui_store

__version__ = "0.1.0"

__all__ = [
    "AgentError",
    "AgentRecord",
    "QualityResult",
    "TimelineEntry",
    "TokenUsage",
    "apply_control",
    "available_controls",
    "create_agent",
    "record_usage",
    "time_in_state",
    "transition",
    "ControlDispatcher",
    "ControlIntent",
    "AGENT_BUDGET_POLICY",
    "COST_METER_POLICY",
    "BudgetStatus",
    "CostSummary",
    "evaluate_budget",
    "FeedError",
    "FeedReport",
    "load_feed",
    "QualityGate",
    "QualitySummary",
    "evaluate_quality",
    "QueryResult",
    "query_agents",
    "Store",
    "create_agent_store",
    "create_project_store",
    "create_ui_store",
]
