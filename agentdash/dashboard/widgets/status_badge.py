"""Lifecycle status badge used in the agent detail pane."""

from __future__ import annotations

from textual.widgets import Static

SPINNER_FRAMES = "⠋⠙⠹⠸⠼⠴⠦⠧⠇⠏"

# Five-character labels keep the status column aligned
_LABELS = {
    "queued": "QUEUE",
    "paused": "PAUSE",
    "completed": "DONE",
    "failed": "FAIL",
    "cancelled": "CANCL",
}


def badge_for(status: str, frame: int = 0) -> tuple[str, str]:
    """Return (label, css_class) for an agent status.

    Running agents get a spinner glyph; ``frame`` picks which one. Unknown
    statuses are truncated and styled as ``badge--unknown``.
    """
    if status == "running":
        return f"{SPINNER_FRAMES[frame % len(SPINNER_FRAMES)]} RUN", "badge--running"
    if status in _LABELS:
        return _LABELS[status], f"badge--{status}"
    return status.upper()[:5] or "?", "badge--unknown"


class StatusBadge(Static):
    """Inline badge for one agent's status; animates while the agent runs."""

    def __init__(self, status: str, **kwargs: object) -> None:
        label, css_class = badge_for(status)
        super().__init__(label, classes=f"status-badge {css_class}", **kwargs)
        self._status = status
        self._frame = 0

    def on_mount(self) -> None:
        if self._status == "running":
            self.set_interval(0.1, self._advance)

    def _advance(self) -> None:
        self._frame += 1
        self.update(badge_for(self._status, self._frame)[0])
