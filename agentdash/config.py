"""Configuration loading and constants for the agent dashboard."""

import os
from pathlib import Path
from typing import Any, Literal

import yaml


# ---------------------------------------------------------------------------
# Agent lifecycle states
# ---------------------------------------------------------------------------

AgentStatus = Literal[
    "queued",
    "running",
    "completed",
    "failed",
    "paused",
    "cancelled",
]

ALL_STATUSES: list[AgentStatus] = [
    "queued",
    "running",
    "completed",
    "failed",
    "paused",
    "cancelled",
]

# Terminal states: no outgoing transitions except retry from the failure ones
TERMINAL_STATUSES: frozenset[str] = frozenset({"completed", "failed", "cancelled"})

# Statuses reported in list header counters
COUNTED_STATUSES: list[AgentStatus] = ["running", "queued", "completed", "failed"]

Control = Literal["pause", "resume", "cancel", "retry"]

ALL_CONTROLS: list[Control] = ["pause", "resume", "cancel", "retry"]

SortKey = Literal["start_time", "cost", "model", "status"]
SORT_KEYS: list[SortKey] = ["start_time", "cost", "model", "status"]

SortOrder = Literal["asc", "desc"]

BudgetPeriod = Literal["daily", "monthly"]


# ---------------------------------------------------------------------------
# Defaults (can be overridden in config.yaml)
# ---------------------------------------------------------------------------

DEFAULT_PAGE_SIZE = 10
DEFAULT_REFRESH_INTERVAL = 5
DEFAULT_QUALITY_THRESHOLD = 70

DEFAULT_BUDGET_CONFIG = {
    "daily": 0.0,
    "monthly": 0.0,
    "period": "monthly",
    "policy": "cost_meter",
}

QUALITY_PRESETS = {
    "fast": 55,
    "balanced": 70,
    "thorough": 85,
    "critical": 95,
}


class ConfigError(ValueError):
    """Raised when config.yaml exists but cannot be parsed."""


def get_dashboard_dir() -> Path:
    """Get the .agentdash directory for the current project.

    Can be overridden via AGENTDASH_DIR environment variable (used by tests).
    """
    env_override = os.environ.get("AGENTDASH_DIR")
    if env_override:
        return Path(env_override)
    return Path.cwd() / ".agentdash"


def get_config_path() -> Path:
    """Get path to config.yaml."""
    return get_dashboard_dir() / "config.yaml"


def get_logs_dir() -> Path:
    """Get the logs directory."""
    return get_dashboard_dir() / "logs"


def load_config() -> dict[str, Any]:
    """Load config.yaml, returning an empty dict if the file does not exist.

    Raises:
        ConfigError: If the file exists but is not valid YAML or not a mapping.
    """
    config_path = get_config_path()
    if not config_path.exists():
        return {}

    try:
        with open(config_path) as f:
            config = yaml.safe_load(f) or {}
    except (yaml.YAMLError, OSError) as exc:
        raise ConfigError(f"Could not read {config_path}: {exc}") from exc

    if not isinstance(config, dict):
        raise ConfigError(f"{config_path} must contain a mapping at the top level")
    return config


def get_budget_config() -> dict[str, Any]:
    """Get budget settings merged over the defaults."""
    budget = load_config().get("budget") or {}
    result = DEFAULT_BUDGET_CONFIG.copy()
    result.update({k: v for k, v in budget.items() if k in result})
    result["daily"] = float(result["daily"] or 0)
    result["monthly"] = float(result["monthly"] or 0)
    return result


def preset_threshold(name: str | None) -> float | None:
    """Threshold for a named preset (fast/balanced/thorough/critical)."""
    value = QUALITY_PRESETS.get(name) if name else None
    return float(value) if value is not None else None


def get_quality_threshold() -> float:
    """Resolve the quality gate threshold.

    An explicit ``quality.threshold`` wins, then a named ``quality.preset``,
    then DEFAULT_QUALITY_THRESHOLD.
    """
    quality = load_config().get("quality") or {}
    threshold = quality.get("threshold")
    if threshold is not None:
        return float(threshold)
    preset = preset_threshold(quality.get("preset"))
    if preset is not None:
        return preset
    return float(DEFAULT_QUALITY_THRESHOLD)


def get_page_size() -> int:
    """Get the agent list page size."""
    query = load_config().get("query") or {}
    size = int(query.get("page_size", DEFAULT_PAGE_SIZE))
    return size if size > 0 else DEFAULT_PAGE_SIZE


def is_optimistic_controls() -> bool:
    """Whether control requests update local state before confirmation."""
    controls = load_config().get("controls") or {}
    return bool(controls.get("optimistic", False))


def get_refresh_interval() -> float:
    """Get the dashboard poll interval in seconds."""
    return float(load_config().get("refresh_interval", DEFAULT_REFRESH_INTERVAL))


def get_feed_path() -> Path:
    """Get the path of the agent-status feed file.

    Relative paths are resolved against the dashboard directory.
    """
    feed = load_config().get("feed") or {}
    path = feed.get("path")
    if not path:
        return get_dashboard_dir() / "feed.json"
    path = Path(path)
    if not path.is_absolute():
        path = get_dashboard_dir() / path
    return path
