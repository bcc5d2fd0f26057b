"""Tests for quality gate evaluation."""

import pytest

from agentdash.quality import (
    QualitySummary,
    band_color,
    dimension_colors,
    evaluate_quality,
    evaluate_summary,
    sparkline,
    sparkline_levels,
    trend_direction,
    trend_slope,
)


class TestEvaluateQuality:
    def test_comfortably_passing(self):
        gate = evaluate_quality(85, 70)
        assert gate.passed is True
        assert gate.color == "green"
        assert gate.retry_hint is False

    def test_marginal_pass(self):
        gate = evaluate_quality(75, 70)
        assert gate.passed is True
        assert gate.color == "yellow"
        assert gate.retry_hint is False

    def test_failing(self):
        gate = evaluate_quality(50, 70)
        assert gate.passed is False
        assert gate.color == "red"
        assert gate.retry_hint is True

    @pytest.mark.parametrize("score,color", [(70, "yellow"), (80, "green"), (79.9, "yellow"), (69.9, "red")])
    def test_boundaries(self, score, color):
        assert evaluate_quality(score, 70).color == color

    def test_exact_threshold_passes(self):
        assert evaluate_quality(70, 70).passed is True

    def test_default_threshold(self):
        gate = evaluate_quality(72)
        assert gate.threshold == 70
        assert gate.color == "yellow"

    def test_missing_score(self):
        gate = evaluate_quality(None, 70)
        assert gate.passed is False
        assert gate.color == "gray"
        assert gate.retry_hint is False


class TestDimensions:
    def test_colors_in_input_order(self):
        result = dimension_colors({"tests": 90, "docs": 72, "lint": 40}, 70)
        assert result == [
            ("tests", 90, "green"),
            ("docs", 72, "yellow"),
            ("lint", 40, "red"),
        ]

    def test_empty(self):
        assert dimension_colors({}) == []
        assert dimension_colors(None) == []

    def test_band_color_none(self):
        assert band_color(None) == "gray"


class TestSparkline:
    def test_levels_span_full_range(self):
        assert sparkline_levels([0, 50, 100]) == [0, 4, 7]

    def test_levels_relative_to_own_range(self):
        assert sparkline_levels([60, 80]) == [0, 7]

    def test_flat_history(self):
        assert sparkline_levels([75, 75, 75]) == [0, 0, 0]

    def test_empty(self):
        assert sparkline_levels([]) == []
        assert sparkline([]) == ""

    def test_characters(self):
        assert sparkline([0, 100]) == "▁█"
        assert len(sparkline([1, 2, 3, 4, 5])) == 5


class TestTrend:
    def test_slope(self):
        assert trend_slope([1, 2, 3, 4]) == pytest.approx(1.0)

    def test_short_history(self):
        assert trend_slope([5]) == 0
        assert trend_direction([]) == "stable"

    @pytest.mark.parametrize("history,direction", [
        ([60, 65, 70, 75], "improving"),
        ([90, 80, 70, 60], "declining"),
        ([70, 71, 70, 71], "stable"),
    ])
    def test_direction(self, history, direction):
        assert trend_direction(history) == direction


class TestSummary:
    def test_from_dict_uses_default_threshold(self):
        summary = QualitySummary.from_dict({"score": 80}, default_threshold=85)
        assert summary.threshold == 85
        assert summary.score == 80

    def test_from_dict_explicit_threshold_wins(self):
        summary = QualitySummary.from_dict({"score": 80, "threshold": 60}, default_threshold=85)
        assert summary.threshold == 60

    def test_from_dict_missing_score(self):
        assert QualitySummary.from_dict({}).score is None

    def test_evaluate_summary(self):
        report = evaluate_summary(QualitySummary(
            score=78,
            threshold=70,
            dimensions={"tests": 85, "style": 60},
            history=[60, 65, 70, 78],
        ))
        assert report.gate.color == "yellow"
        assert report.gate.passed is True
        assert report.dimensions[1] == ("style", 60, "red")
        assert len(report.sparkline) == 4
        assert report.trend == "improving"
