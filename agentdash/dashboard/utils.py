"""Shared utility functions for the dashboard package."""

from __future__ import annotations


def format_duration(seconds: float | None) -> str:
    """Format a duration in seconds as '45s', '15m', '2h 5m' or '3d 4h'."""
    if seconds is None or seconds < 0:
        return ""
    secs = int(seconds)
    if secs < 60:
        return f"{secs}s"
    if secs < 3600:
        return f"{secs // 60}m"
    if secs < 86400:
        return f"{secs // 3600}h {(secs % 3600) // 60}m"
    return f"{secs // 86400}d {(secs % 86400) // 3600}h"


def format_tokens(count: int) -> str:
    """Compact token count: 950, 12.3k, 1.2M."""
    if count < 1000:
        return str(count)
    if count < 1_000_000:
        return f"{count / 1000:.1f}k"
    return f"{count / 1_000_000:.1f}M"


def meter_bar(percentage: float, width: int = 20) -> str:
    """Render a Unicode block bar for a 0-100 percentage."""
    pct = max(min(percentage, 100.0), 0.0)
    filled = min(width, int(width * pct / 100))
    return "█" * filled + "░" * (width - filled)


def color_class(color: str) -> str:
    """Map a threshold colour name to its CSS class."""
    return f"band--{color}"
