"""Tests for config loading."""

import pytest

from agentdash.config import (
    ConfigError,
    get_budget_config,
    get_config_path,
    get_feed_path,
    get_page_size,
    get_quality_threshold,
    get_refresh_interval,
    is_optimistic_controls,
    load_config,
    preset_threshold,
)


def _write_config(dash_dir, text):
    (dash_dir / "config.yaml").write_text(text)


class TestLoadConfig:
    def test_missing_file(self, dash_dir):
        assert load_config() == {}

    def test_config_path_uses_env(self, dash_dir):
        assert get_config_path() == dash_dir / "config.yaml"

    def test_invalid_yaml(self, dash_dir):
        _write_config(dash_dir, "budget: [unclosed\n")
        with pytest.raises(ConfigError):
            load_config()

    def test_non_mapping(self, dash_dir):
        _write_config(dash_dir, "- just\n- a list\n")
        with pytest.raises(ConfigError):
            load_config()

    def test_empty_file(self, dash_dir):
        _write_config(dash_dir, "")
        assert load_config() == {}


class TestDefaults:
    def test_all_defaults(self, dash_dir):
        assert get_budget_config() == {
            "daily": 0.0,
            "monthly": 0.0,
            "period": "monthly",
            "policy": "cost_meter",
        }
        assert get_quality_threshold() == 70
        assert get_page_size() == 10
        assert is_optimistic_controls() is False
        assert get_refresh_interval() == 5
        assert get_feed_path() == dash_dir / "feed.json"


class TestOverrides:
    def test_budget(self, dash_dir):
        _write_config(dash_dir, "budget:\n  daily: 25\n  policy: agent_budget\n  bogus: 1\n")
        budget = get_budget_config()
        assert budget["daily"] == 25.0
        assert budget["policy"] == "agent_budget"
        assert "bogus" not in budget

    def test_quality_preset(self, dash_dir):
        _write_config(dash_dir, "quality:\n  preset: thorough\n")
        assert get_quality_threshold() == 85

    def test_explicit_threshold_beats_preset(self, dash_dir):
        _write_config(dash_dir, "quality:\n  preset: thorough\n  threshold: 60\n")
        assert get_quality_threshold() == 60

    def test_unknown_preset_falls_back(self, dash_dir):
        _write_config(dash_dir, "quality:\n  preset: yolo\n")
        assert get_quality_threshold() == 70

    def test_page_size(self, dash_dir):
        _write_config(dash_dir, "query:\n  page_size: 25\n")
        assert get_page_size() == 25

    def test_non_positive_page_size(self, dash_dir):
        _write_config(dash_dir, "query:\n  page_size: 0\n")
        assert get_page_size() == 10

    def test_optimistic_controls(self, dash_dir):
        _write_config(dash_dir, "controls:\n  optimistic: true\n")
        assert is_optimistic_controls() is True

    def test_relative_feed_path(self, dash_dir):
        _write_config(dash_dir, "feed:\n  path: out/status.json\n")
        assert get_feed_path() == dash_dir / "out" / "status.json"

    def test_absolute_feed_path(self, dash_dir, temp_dir):
        target = temp_dir / "elsewhere.json"
        _write_config(dash_dir, f"feed:\n  path: {target}\n")
        assert get_feed_path() == target


class TestPresets:
    @pytest.mark.parametrize("name,threshold", [
        ("fast", 55),
        ("balanced", 70),
        ("thorough", 85),
        ("critical", 95),
    ])
    def test_known(self, name, threshold):
        assert preset_threshold(name) == threshold

    def test_unknown(self):
        assert preset_threshold("reckless") is None
        assert preset_threshold(None) is None
