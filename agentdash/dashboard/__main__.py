"""Entry point: python -m agentdash.dashboard

Usage:
    python -m agentdash.dashboard                     # Read feed path from config.yaml
    python -m agentdash.dashboard --feed feed.json    # Explicit feed file
    python -m agentdash.dashboard --demo              # Demo mode with sample data
    python -m agentdash.dashboard --refresh 2         # Custom refresh interval
"""

import argparse
import logging

from ..config import (
    get_budget_config,
    get_feed_path,
    get_logs_dir,
    get_page_size,
    get_quality_threshold,
    get_refresh_interval,
    is_optimistic_controls,
)
from .app import AgentDashboard
from .data import DataManager


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Terminal dashboard for coding agents")
    parser.add_argument("--feed", help="Path to the agent-status feed JSON file")
    parser.add_argument("--demo", action="store_true", help="Run with generated sample data")
    parser.add_argument("--refresh", type=float, help="Refresh interval in seconds")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)

    log_path = get_logs_dir() / "dashboard.log"
    log_path.parent.mkdir(parents=True, exist_ok=True)
    logging.basicConfig(
        filename=str(log_path),
        level=logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger = logging.getLogger("agentdash.dashboard")

    try:
        threshold = get_quality_threshold()
        budget = get_budget_config()
        data_manager = DataManager(
            args.feed or get_feed_path(),
            demo=args.demo,
            threshold=threshold,
            demo_budget=budget["daily"] or 50.0,
        )
        app = AgentDashboard(
            data_manager,
            refresh_interval=args.refresh or get_refresh_interval(),
            page_size=get_page_size(),
            threshold=threshold,
            budget=budget,
            optimistic=args.demo or is_optimistic_controls(),
        )
        app.run()
    except Exception:
        logger.exception("Dashboard crashed")
        raise


if __name__ == "__main__":
    main()
