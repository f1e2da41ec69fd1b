"""
Reporting module for the scoring engine.

Plain-text market trend and score reports, used by the CLI.

Usage:
    from reporting import render_trend_report

    snapshots = service.market_snapshots("S10", PropertyType.SEMI_DETACHED, years)
    print(render_trend_report(snapshots, "S10", PropertyType.SEMI_DETACHED))
"""

from .market_report import render_trend_report, render_score_report

__all__ = [
    "render_trend_report",
    "render_score_report",
]
