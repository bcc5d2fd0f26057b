"""Data layer for the agent dashboard.

DataManager reads the agent-status feed (or generates demo data) and writes
control intents to an outbox for the transport to pick up. Fetching happens
synchronously in a background thread via Textual's @work.

DashboardContext bundles the stores and dispatcher created by the app so
tabs receive them explicitly instead of importing shared instances.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from ..config import get_dashboard_dir
from ..controls import ControlDispatcher, ControlIntent
from ..feed import DemoFeed, FeedReport, load_feed, parse_report
from ..store import Store
from ..stores import AgentStoreState, ProjectState, UIState

logger = logging.getLogger(__name__)


@dataclass
class DashboardContext:
    agent_store: Store[AgentStoreState]
    ui_store: Store[UIState]
    project_store: Store[ProjectState]
    dispatcher: ControlDispatcher
    threshold: float
    budget: dict[str, Any] = field(default_factory=dict)


class DataManager:
    """Loads feed reports and forwards control intents."""

    def __init__(
        self,
        feed_path: Path | str,
        *,
        demo: bool = False,
        threshold: float = 70,
        outbox_path: Path | str | None = None,
        demo_budget: float = 50.0,
    ) -> None:
        self.feed_path = Path(feed_path)
        self.demo = demo
        self.threshold = threshold
        self.outbox_path = Path(outbox_path) if outbox_path else get_dashboard_dir() / "controls.jsonl"
        self._demo_feed = DemoFeed(budget=demo_budget) if demo else None

    def fetch_sync(self) -> FeedReport:
        """Fetch the current feed report.

        Intended to be called from a background thread via Textual's @work.

        Raises:
            FeedError: If the feed file is unreadable or malformed.
        """
        if self._demo_feed is not None:
            return parse_report(self._demo_feed.generate(), self.threshold)
        return load_feed(self.feed_path, self.threshold)

    def send_intent(self, intent: ControlIntent) -> None:
        """Append a control intent to the outbox as one JSON line.

        In demo mode the intent is applied to the demo feed instead, so the
        next generated report shows the requested status.
        """
        if self._demo_feed is not None:
            logger.info("Demo mode: applying %s for %s locally", intent.control, intent.agent_id)
            self._demo_feed.apply_intent(intent)
            return
        self.outbox_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.outbox_path, "a") as f:
            f.write(json.dumps(intent.to_dict()) + "\n")
