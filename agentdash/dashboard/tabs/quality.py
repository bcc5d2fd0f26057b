"""Quality tab: gate result, dimension bands, trend sparkline and per-agent scores."""

from __future__ import annotations

from rich.text import Text
from textual.app import ComposeResult
from textual.containers import VerticalScroll
from textual.widgets import Label

from ...quality import band_color, evaluate_summary
from ..utils import color_class
from ..widgets.budget_meter import COLOR_STYLES
from .base import TabBase


class QualityTab(TabBase):
    def compose(self) -> ComposeResult:
        summary = self._report.quality

        with VerticalScroll(classes="quality-layout"):
            yield Label("QUALITY GATE", classes="detail-section-header")
            if summary is None:
                yield Label("No quality data.", classes="dim-text")
            else:
                report = evaluate_summary(summary)
                gate = report.gate
                if gate.score is None:
                    yield Label("Score: (none)", classes="dim-text")
                else:
                    verdict = "PASS" if gate.passed else "FAIL"
                    yield Label(
                        Text(
                            f"Score {gate.score:.0f}  threshold {gate.threshold:.0f}  {verdict}",
                            style=COLOR_STYLES.get(gate.color, ""),
                        )
                    )
                if gate.retry_hint:
                    yield Label("Below threshold: retry with a stronger model.", classes=color_class("red"))

                if report.dimensions:
                    yield Label("")
                    yield Label("DIMENSIONS", classes="detail-section-header")
                    for name, score, color in report.dimensions:
                        yield Label(Text(f"{name:<16} {score:5.0f}", style=COLOR_STYLES.get(color, "")))

                if report.sparkline:
                    yield Label("")
                    yield Label("TREND", classes="detail-section-header")
                    yield Label(f"{report.sparkline}  {report.trend}")

            scored = [a for a in self._report.agents if a.quality is not None]
            if scored:
                threshold = summary.threshold if summary else self._ctx.threshold
                yield Label("")
                yield Label("COMPLETED AGENTS", classes="detail-section-header")
                for agent in scored:
                    color = band_color(agent.quality.score, threshold)
                    yield Label(
                        Text(
                            f"{agent.display_name[:28]:<28} {agent.quality.score:5.0f}",
                            style=COLOR_STYLES.get(color, ""),
                        )
                    )
