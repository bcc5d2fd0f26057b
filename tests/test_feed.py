"""Tests for feed parsing and demo data."""

import json

import pytest

from agentdash.agents import is_terminal
from agentdash.controls import ControlIntent
from agentdash.feed import (
    DemoFeed,
    FeedError,
    FeedReport,
    generate_demo_report,
    load_feed,
    parse_report,
)


class TestParseReport:
    def test_empty_document(self):
        report = parse_report({})
        assert report == FeedReport()

    def test_full_document(self, t0):
        report = parse_report({
            "agents": [{"id": "a1", "model": "gpt-4", "status": "running", "start_time": t0.isoformat()}],
            "cost": {"spent": 3, "budget": 10, "period": "daily"},
            "quality": {"score": 81, "history": [70, 81]},
            "projects": [{"id": "p1", "name": "One"}],
            "generated_at": t0.isoformat(),
        }, default_threshold=85)
        assert report.agents[0].id == "a1"
        assert report.cost.budget == 10
        assert report.quality.threshold == 85
        assert report.projects[0].name == "One"
        assert report.generated_at == t0

    def test_not_a_mapping(self):
        with pytest.raises(FeedError):
            parse_report([1, 2, 3])

    @pytest.mark.parametrize("data", [
        {"agents": [{"id": "a1", "status": "melted"}]},
        {"agents": [{"status": "queued"}]},
        {"cost": {"period": "hourly"}},
        {"quality": {"score": "high"}},
        {"projects": [{"name": "no id"}]},
    ])
    def test_malformed_sections(self, data):
        with pytest.raises(FeedError):
            parse_report(data)


class TestLoadFeed:
    def test_missing_file_is_empty(self, temp_dir):
        assert load_feed(temp_dir / "nope.json") == FeedReport()

    def test_reads_file(self, temp_dir):
        path = temp_dir / "feed.json"
        path.write_text(json.dumps({"agents": [{"id": "a1", "status": "queued"}]}))
        report = load_feed(path)
        assert [a.id for a in report.agents] == ["a1"]

    def test_invalid_json(self, temp_dir):
        path = temp_dir / "feed.json"
        path.write_text("{not json")
        with pytest.raises(FeedError, match="Could not read feed"):
            load_feed(path)

    def test_invalid_utf8(self, temp_dir):
        path = temp_dir / "feed.json"
        path.write_bytes(b'{"agents": [{"id": "\xff\xfe"}]}')
        with pytest.raises(FeedError, match="Could not read feed"):
            load_feed(path)

    @pytest.mark.parametrize("start_time", ["Infinity", "1e300"])
    def test_out_of_range_timestamp(self, temp_dir, start_time):
        path = temp_dir / "feed.json"
        path.write_text('{"agents": [{"id": "a", "start_time": ' + start_time + "}]}")
        with pytest.raises(FeedError, match="Malformed feed"):
            load_feed(path)


class TestDemoReport:
    def test_parses_cleanly(self, t0):
        report = parse_report(generate_demo_report(now=t0))
        assert len(report.agents) == 8
        assert {a.status for a in report.agents} == {
            "running", "queued", "completed", "failed", "paused", "cancelled",
        }
        assert len(report.projects) == 2
        assert report.generated_at == t0

    def test_end_time_matches_status(self, t0):
        for agent in parse_report(generate_demo_report(now=t0)).agents:
            assert (agent.end_time is not None) == is_terminal(agent.status)

    def test_breakdown_sums_to_spent(self, t0):
        cost = generate_demo_report(tick=3, now=t0)["cost"]
        assert sum(cost["breakdown"].values()) == pytest.approx(cost["spent"])
        assert cost["period"] == "daily"

    def test_running_agents_grow_with_tick(self, t0):
        before = {a["id"]: a for a in generate_demo_report(tick=0, now=t0)["agents"]}
        after = {a["id"]: a for a in generate_demo_report(tick=5, now=t0)["agents"]}
        for agent_id, agent in after.items():
            if agent["status"] == "running":
                assert agent["cost"] > before[agent_id]["cost"]
            else:
                assert agent["cost"] == before[agent_id]["cost"]

    def test_demo_feed_ticks(self, t0):
        feed = DemoFeed(budget=20)
        feed.generate(now=t0)
        data = feed.generate(now=t0)
        assert feed.tick == 2
        assert data["cost"]["budget"] == 20

    def test_overrides_replace_status(self, t0):
        data = generate_demo_report(now=t0, overrides={"a1b2c3d4": "paused"})
        agent = next(a for a in parse_report(data).agents if a.id == "a1b2c3d4")
        assert agent.status == "paused"
        assert agent.end_time is None

    def test_overridden_to_terminal_gets_end_time(self, t0):
        data = generate_demo_report(now=t0, overrides={"a1b2c3d4": "cancelled"})
        agent = next(a for a in parse_report(data).agents if a.id == "a1b2c3d4")
        assert agent.status == "cancelled"
        assert agent.end_time is not None

    def test_demo_feed_remembers_intents(self, t0):
        feed = DemoFeed()
        feed.apply_intent(ControlIntent("e5f6a7b8", "cancel", "cancelled", t0))
        feed.generate(now=t0)
        statuses = {a["id"]: a["status"] for a in feed.generate(now=t0)["agents"]}
        assert statuses["e5f6a7b8"] == "cancelled"
