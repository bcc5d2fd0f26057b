"""Tests for the Textual dashboard.

Textual rendering is not exercised end-to-end. We test:
1. Formatting helpers (format_duration, format_tokens, meter_bar)
2. Status badges and table cells
3. Budget meter text
4. Agent list header and pager lines
5. DataManager fetching and the control outbox
6. Command-line parsing
"""

import json

import pytest

from agentdash.controls import ControlDispatcher, ControlIntent
from agentdash.costs import evaluate_budget
from agentdash.dashboard.__main__ import parse_args
from agentdash.dashboard.data import DataManager
from agentdash.dashboard.tabs.agents import counts_line, pager_line, status_cell
from agentdash.dashboard.utils import color_class, format_duration, format_tokens, meter_bar
from agentdash.dashboard.widgets.budget_meter import render_budget
from agentdash.dashboard.widgets.status_badge import badge_for
from agentdash.feed import FeedError
from agentdash.query import query_agents
from agentdash.stores import create_agent_store, get_agent


# ---------------------------------------------------------------------------
# Helper function tests
# ---------------------------------------------------------------------------


class TestFormatDuration:
    """Tests for format_duration()."""

    def test_none_returns_empty(self):
        assert format_duration(None) == ""

    def test_negative_returns_empty(self):
        assert format_duration(-1) == ""

    @pytest.mark.parametrize("seconds,expected", [
        (0, "0s"),
        (45, "45s"),
        (900, "15m"),
        (7500, "2h 5m"),
        (3 * 86400 + 4 * 3600, "3d 4h"),
    ])
    def test_units(self, seconds, expected):
        assert format_duration(seconds) == expected


class TestFormatTokens:
    @pytest.mark.parametrize("count,expected", [
        (950, "950"),
        (12_300, "12.3k"),
        (1_200_000, "1.2M"),
    ])
    def test_compact(self, count, expected):
        assert format_tokens(count) == expected


class TestMeterBar:
    def test_half(self):
        assert meter_bar(50, width=10) == "█" * 5 + "░" * 5

    def test_clamped(self):
        assert meter_bar(150, width=4) == "████"
        assert meter_bar(-10, width=4) == "░░░░"

    def test_color_class(self):
        assert color_class("red") == "band--red"


# ---------------------------------------------------------------------------
# Badges and meters
# ---------------------------------------------------------------------------


class TestBadgeFor:
    """Tests for badge_for()."""

    @pytest.mark.parametrize("status,expected", [
        ("queued", ("QUEUE", "badge--queued")),
        ("paused", ("PAUSE", "badge--paused")),
        ("completed", ("DONE", "badge--completed")),
        ("failed", ("FAIL", "badge--failed")),
        ("cancelled", ("CANCL", "badge--cancelled")),
    ])
    def test_known_statuses(self, status, expected):
        assert badge_for(status) == expected

    def test_running_has_spinner(self):
        text, css_class = badge_for("running")
        assert text.endswith("RUN")
        assert css_class == "badge--running"

    def test_unknown_status(self):
        assert badge_for("exploded") == ("EXPLO", "badge--unknown")

    def test_spinner_frames_cycle(self):
        first, _ = badge_for("running", 0)
        assert badge_for("running", 1)[0] != first
        assert badge_for("running", 10)[0] == first

    def test_frame_ignored_for_other_statuses(self):
        assert badge_for("paused", 3) == ("PAUSE", "badge--paused")

    def test_status_cell_styles(self):
        assert status_cell("failed").plain == "FAIL"
        assert status_cell("failed").style == "bold red"


class TestRenderBudget:
    def test_under_budget(self):
        text = render_budget(evaluate_budget(25, 100), label="Monthly", width=8).plain
        assert "25%" in text
        assert "$25.00 / $100.00" in text
        assert "$75.00 left" in text
        assert "projected" not in text

    def test_over_budget_uncapped_figure(self):
        text = render_budget(evaluate_budget(150, 100), width=8).plain
        assert "150%" in text
        assert "OVER BUDGET" in text

    def test_projection_line(self):
        status = evaluate_budget(30, 50, days_elapsed=10, total_days=30)
        text = render_budget(status, width=8).plain
        assert "$3.00/day" in text
        assert "$90.00 projected" in text

    def test_zero_budget(self):
        text = render_budget(evaluate_budget(5, 0), width=8).plain
        assert "N/A" in text
        assert "OVER BUDGET" not in text


# ---------------------------------------------------------------------------
# Agent list lines
# ---------------------------------------------------------------------------


class TestAgentListLines:
    def test_counts_line(self, make_agent):
        agents = [
            make_agent("a", status="running"),
            make_agent("b", status="running"),
            make_agent("c", status="failed"),
            make_agent("d", status="paused"),
        ]
        result = query_agents(agents, status_filter="failed")
        assert counts_line(result) == "running: 2  queued: 0  completed: 0  failed: 1"

    def test_pager_line(self, make_agent):
        agents = [make_agent(f"a{i}") for i in range(23)]
        result = query_agents(agents, page=2)
        line = pager_line(result, 2, "all", "cost", "desc")
        assert line.startswith("Page 2/3")
        assert "23 shown" in line
        assert "sort: cost ↓" in line

    def test_pager_line_empty(self):
        result = query_agents([], status_filter="failed")
        assert pager_line(result, 1, "failed", "start_time", "asc").startswith("Page 0/0")


# ---------------------------------------------------------------------------
# Data layer
# ---------------------------------------------------------------------------


class TestDataManager:
    def test_demo_fetch(self, temp_dir):
        manager = DataManager(temp_dir / "feed.json", demo=True, threshold=85)
        report = manager.fetch_sync()
        assert len(report.agents) == 8
        assert report.quality.threshold == 70
        assert report.cost.period == "daily"

    def test_feed_fetch(self, temp_dir):
        feed = temp_dir / "feed.json"
        feed.write_text(json.dumps({
            "agents": [{"id": "a1", "status": "running"}],
            "quality": {"score": 90},
        }))
        report = DataManager(feed, threshold=85).fetch_sync()
        assert [a.id for a in report.agents] == ["a1"]
        assert report.quality.threshold == 85

    def test_missing_feed_is_empty(self, temp_dir):
        report = DataManager(temp_dir / "missing.json").fetch_sync()
        assert report.agents == []

    def test_bad_feed_raises(self, temp_dir):
        feed = temp_dir / "feed.json"
        feed.write_text("nope")
        with pytest.raises(FeedError):
            DataManager(feed).fetch_sync()

    def test_send_intent_appends_lines(self, temp_dir, t0):
        outbox = temp_dir / "out" / "controls.jsonl"
        manager = DataManager(temp_dir / "feed.json", outbox_path=outbox)
        manager.send_intent(ControlIntent("a1", "pause", "paused", t0))
        manager.send_intent(ControlIntent("a2", "retry", "queued", t0))

        lines = [json.loads(line) for line in outbox.read_text().splitlines()]
        assert [(d["entity_id"], d["action_type"]) for d in lines] == [("a1", "pause"), ("a2", "retry")]
        assert lines[0]["payload"] == {"status": "paused"}

    def test_send_intent_demo_writes_nothing(self, temp_dir, t0):
        outbox = temp_dir / "controls.jsonl"
        manager = DataManager(temp_dir / "feed.json", demo=True, outbox_path=outbox)
        manager.send_intent(ControlIntent("a1", "pause", "paused", t0))
        assert not outbox.exists()

    def test_demo_control_survives_next_poll(self, temp_dir):
        """An optimistic pause in demo mode is still there after a refresh."""
        manager = DataManager(temp_dir / "feed.json", demo=True)
        store = create_agent_store(manager.fetch_sync().agents)
        dispatcher = ControlDispatcher(store, manager.send_intent, optimistic=True)

        dispatcher.request("a1b2c3d4", "pause")
        store.actions.set_agents(manager.fetch_sync().agents)

        assert get_agent(store.get_state(), "a1b2c3d4").status == "paused"
        assert dispatcher.is_enabled("a1b2c3d4", "resume")

    def test_default_outbox_in_dashboard_dir(self, dash_dir):
        manager = DataManager(dash_dir / "feed.json")
        assert manager.outbox_path == dash_dir / "controls.jsonl"


class TestParseArgs:
    def test_defaults(self):
        args = parse_args([])
        assert args.feed is None
        assert args.demo is False
        assert args.refresh is None

    def test_all_flags(self):
        args = parse_args(["--feed", "f.json", "--demo", "--refresh", "2"])
        assert args.feed == "f.json"
        assert args.demo is True
        assert args.refresh == 2.0
