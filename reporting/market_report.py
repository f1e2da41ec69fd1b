"""
Plain-text market and score reports.
"""

from typing import Dict, List

from core import CompositeScore, MarketSnapshot, PropertyType
from core.land_registry import compound_annual_growth_rate, year_over_year_growth
from utils.formatting import format_currency, format_percent, format_score


def render_trend_report(
    snapshots: Dict[int, MarketSnapshot],
    postcode: str,
    property_type: PropertyType,
) -> str:
    """Yearly price table for an area, with growth figures."""
    lines: List[str] = [
        f"Market trend: {postcode.upper()} - {property_type.label}",
        "",
    ]
    if not snapshots:
        lines.append("No sales found for this area and property type.")
        return "\n".join(lines)

    header = f"{'Year':<6}{'Sales':>7}{'Mean':>14}{'Median':>14}{'Min':>14}{'Max':>14}"
    lines.append(header)
    lines.append("-" * len(header))
    for year, snap in snapshots.items():
        lines.append(
            f"{year:<6}{snap.count:>7}"
            f"{format_currency(snap.mean_price):>14}"
            f"{format_currency(snap.median_price):>14}"
            f"{format_currency(snap.min_price):>14}"
            f"{format_currency(snap.max_price):>14}"
        )

    growth = year_over_year_growth(snapshots)
    if growth:
        lines.append("")
        for period, change in growth.items():
            lines.append(f"{period}: {format_percent(change)}")

    cagr = compound_annual_growth_rate(snapshots)
    if cagr is not None:
        lines.append(f"Compound annual growth: {format_percent(cagr, decimals=2)}")

    return "\n".join(lines)


def render_score_report(result: CompositeScore) -> str:
    """Composite score with its sub-metrics and notes."""
    lines = [
        f"Overall score:  {format_score(result.overall)}",
        f"Investment:     {format_score(result.investment)}",
        f"Personal fit:   {format_score(result.personal_fit)}",
        f"Coverage:       {format_percent(result.coverage, decimals=0)}",
        "",
    ]
    for name, value in result.metrics.to_dict().items():
        shown = "excluded" if value is None else f"{value:.3f}"
        lines.append(f"  {name}: {shown}")

    if result.breakdown.price_per_sqm:
        lines.append("")
        lines.append(
            f"Asking price per sqm: {format_currency(round(result.breakdown.price_per_sqm))}"
        )

    if result.notes:
        lines.append("")
        lines.extend(f"- {note}" for note in result.notes)
    return "\n".join(lines)
