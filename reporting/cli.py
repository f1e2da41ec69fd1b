#!/usr/bin/env python3
"""
CLI for market trend and property score reports.

Usage:
    python -m reporting.cli trend --postcode S10 --type S
    python -m reporting.cli score <input_json>

Examples:
    # Five-year trend for semi-detached houses in S10
    python -m reporting.cli trend --postcode S10 --type semi-detached

    # Last 12 months only, from a specific data directory
    python -m reporting.cli trend --postcode S10 --type S --window-months 12 --data-dir ./data

    # Score a property described in a JSON file
    python -m reporting.cli score listings/crimicar_avenue.json
"""

import argparse
import json
import logging
import sys
from datetime import date
from pathlib import Path

from core import (
    ComparableSet,
    CompositeScorer,
    LandRegistryService,
    MarketDataCache,
    PropertyType,
    ScoringInput,
)
from core.land_registry import trend_years
from utils.config import Config

from .market_report import render_score_report, render_trend_report


logger = logging.getLogger(__name__)


def parse_scoring_input_from_json(data: dict) -> ScoringInput:
    """
    Parse a JSON dictionary into a ScoringInput.

    Args:
        data: Dictionary with ask_price, living_area and optional market
            fields; "synthetic": true uses demonstration market data

    Returns:
        ScoringInput ready for scoring
    """
    if data.get("synthetic"):
        return ScoringInput.create_synthetic(
            ask_price=data["ask_price"],
            living_area=data["living_area"],
            days_on_market=data.get("days_on_market"),
            property_cagr=data.get("property_cagr"),
            preference_weights=data.get("preference_weights", {}),
            feature_matches=data.get("feature_matches", {}),
        )

    comps = data.get("comparables", {})
    return ScoringInput(
        ask_price=data["ask_price"],
        living_area=data["living_area"],
        days_on_market=data.get("days_on_market"),
        comparables=ComparableSet(
            listed=tuple(comps.get("listed", ())),
            sold_30d=tuple(comps.get("sold_30d", ())),
            sold_90d_band=tuple(comps.get("sold_90d_band", ())),
        ),
        road_sales_12m=data.get("road_sales_12m"),
        total_road_properties=data.get("total_road_properties"),
        postcode_turnover_prior=data.get("postcode_turnover_prior"),
        active_comps=data.get("active_comps"),
        rolling_median_active_comps=data.get("rolling_median_active_comps"),
        property_cagr=data.get("property_cagr"),
        area_cagr=data.get("area_cagr"),
        preference_weights=data.get("preference_weights", {}),
        feature_matches=data.get("feature_matches", {}),
    )


def cmd_trend(args, config: Config) -> int:
    """Print yearly market snapshots for an area."""
    property_type = PropertyType.from_string(args.type)
    if property_type is None:
        print(f"Error: Unknown property type: {args.type}", file=sys.stderr)
        return 1
    if args.window_months is not None and args.window_months < 0:
        print("Error: --window-months must not be negative", file=sys.stderr)
        return 1

    service = LandRegistryService(
        args.data_dir or config.data_dir,
        cache=MarketDataCache(ttl_seconds=config.cache_ttl_seconds),
    )
    end_year = args.end_year or date.today().year
    years = trend_years(end_year, args.years or config.trend_years)

    snapshots = service.market_snapshots(
        args.postcode,
        property_type,
        years,
        window_months=args.window_months,
    )
    print(render_trend_report(snapshots, args.postcode, property_type))
    return 0


def cmd_score(args, config: Config) -> int:
    """Score a property from a JSON input file."""
    input_path = Path(args.input_file)

    if not input_path.exists():
        print(f"Error: File not found: {input_path}", file=sys.stderr)
        return 1

    try:
        with open(input_path, "r") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        print(f"Error: Invalid JSON: {e}", file=sys.stderr)
        return 1

    try:
        scoring_input = parse_scoring_input_from_json(data)
    except (KeyError, TypeError, ValueError) as e:
        print(f"Error: Invalid scoring input: {e}", file=sys.stderr)
        return 1

    result = CompositeScorer().score(scoring_input)
    if args.json:
        print(json.dumps(result.to_dict(), indent=2))
    else:
        print(render_score_report(result))
    return 0


def main(argv=None) -> int:
    """Main CLI entry point."""
    config = Config.load()
    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    parser = argparse.ArgumentParser(
        description="HomeLens - Market Trend and Property Score Reports",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    python -m reporting.cli trend --postcode S10 --type S
    python -m reporting.cli score listing.json --json

Data:
    Trend reports read <DATA_DIR>/land-registry-price-paid-<year>.csv
        """,
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    # Trend command
    trend_parser = subparsers.add_parser(
        "trend",
        help="Yearly market snapshots for a postcode prefix",
    )
    trend_parser.add_argument("--postcode", required=True, help="Postcode prefix, e.g. S10")
    trend_parser.add_argument("--type", required=True, help="Property type code or name")
    trend_parser.add_argument("--window-months", type=int, default=None)
    trend_parser.add_argument("--years", type=int, default=None, help="Number of years")
    trend_parser.add_argument("--end-year", type=int, default=None)
    trend_parser.add_argument("--data-dir", default=None)
    trend_parser.set_defaults(func=cmd_trend)

    # Score command
    score_parser = subparsers.add_parser(
        "score",
        help="Score a property from a JSON input file",
    )
    score_parser.add_argument("input_file", help="Path to JSON input file")
    score_parser.add_argument("--json", action="store_true", help="Print raw JSON")
    score_parser.set_defaults(func=cmd_score)

    args = parser.parse_args(argv)
    return args.func(args, config)


if __name__ == "__main__":
    sys.exit(main())
