"""
Market Aggregator

Groups normalized sale records by postcode prefix, property type code
and calendar year, and derives street-level and growth statistics.

All functions are pure: they never mutate the records they are given
and hold no state between calls.
"""

from __future__ import annotations

import calendar
import re
from collections import defaultdict
from datetime import date
from typing import Dict, Iterable, List, Optional

from core.stats import round_half_up, upper_median

from .models import (
    MarketSnapshot,
    SaleRecord,
    normalise_postcode,
    property_type_code,
)


# =============================================================================
# Configuration Constants
# =============================================================================

# Street statistics cover the last year of sales
STREET_WINDOW_MONTHS = 12

# Look-back periods for sold price movement, in months
PRICE_CHANGE_PERIODS = (1, 3, 6, 12)

# Each side of a price movement comparison needs this many sales
MIN_PRICE_CHANGE_SALES = 3

# Similar sales sit within this fraction of the target price
SIMILAR_PRICE_TOLERANCE = 0.2

# Shortest sale-history span a property growth rate is derived from
MIN_HISTORY_YEARS = 1.0

DAYS_PER_YEAR = 365.25


# =============================================================================
# Filters
# =============================================================================

def matches_postcode(prefix_target: str, record_postcode: str) -> bool:
    """
    Prefix match on normalized postcodes.

    "S10" matches "S10 5PR"; the target is compared at its own full
    length and never truncated, so "S105" does not match "S10 4AB".
    """
    target = normalise_postcode(prefix_target)
    return normalise_postcode(record_postcode).startswith(target)


def subtract_months(reference: date, months: int) -> date:
    """Step back a number of calendar months, clamping the day."""
    month_index = reference.year * 12 + (reference.month - 1) - months
    year, month = divmod(month_index, 12)
    month += 1
    day = min(reference.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def within_rolling_window(
    value: date,
    months: int,
    reference_date: date = None,
) -> bool:
    """Inclusive window [reference - months, reference]."""
    reference = reference_date or date.today()
    return subtract_months(reference, months) <= value <= reference


def is_street_match(target_street: str, record_street: str) -> bool:
    """
    Exact match, or the target appears as whole words in the record.

    "Tom Lane" matches "Tom Lane, Fulwood" but not "Tom Lanes".
    """
    target = " ".join(target_street.lower().split())
    record = " ".join(record_street.lower().split())
    if not target or not record:
        return False
    if target == record:
        return True
    return re.search(rf"\b{re.escape(target)}\b", record) is not None


# =============================================================================
# Year Grouping
# =============================================================================

def summarize(year: int, prices: List[int]) -> MarketSnapshot:
    """Build the snapshot for one non-empty group of prices."""
    return MarketSnapshot(
        year=year,
        count=len(prices),
        mean_price=round_half_up(sum(prices) / len(prices)),
        median_price=int(upper_median(prices)),
        min_price=min(prices),
        max_price=max(prices),
    )


def group_by_year(
    records: Iterable[SaleRecord],
    prefix_target: str,
    property_type,
) -> Dict[int, MarketSnapshot]:
    """
    Filter by postcode prefix and exact type code, then group by year.

    Years with no matching sale are absent from the result.
    """
    code = property_type_code(property_type)
    prices_by_year: Dict[int, List[int]] = defaultdict(list)

    for record in records:
        if record.property_type != code:
            continue
        if not matches_postcode(prefix_target, record.postcode):
            continue
        prices_by_year[record.year].append(record.price)

    return {
        year: summarize(year, prices)
        for year, prices in sorted(prices_by_year.items())
    }


def aggregate(
    records: Iterable[SaleRecord],
    postcode_prefix: str,
    property_type,
    window_months: Optional[int] = None,
    reference_date: date = None,
) -> Dict[int, MarketSnapshot]:
    """
    Yearly market snapshots for a postcode prefix and property type.

    Args:
        records: Normalized sale records
        postcode_prefix: Area prefix, e.g. "S10"
        property_type: PropertyType, PPD code or listing-style name
        window_months: Restrict to sales in the last N months
        reference_date: End of the rolling window (default: today)

    Returns:
        Snapshots keyed by calendar year, ascending
    """
    if window_months is not None and window_months < 0:
        raise ValueError("window_months must not be negative")
    if window_months is not None:
        reference = reference_date or date.today()
        records = [
            r for r in records
            if within_rolling_window(r.transfer_date, window_months, reference)
        ]
    return group_by_year(records, postcode_prefix, property_type)


# =============================================================================
# Street Statistics
# =============================================================================

def street_sales(
    records: Iterable[SaleRecord],
    street: str,
    property_type=None,
    months: int = STREET_WINDOW_MONTHS,
    reference_date: date = None,
) -> List[SaleRecord]:
    """Sales on a street within the rolling window, optionally by type."""
    reference = reference_date or date.today()
    code = property_type_code(property_type) if property_type else None
    return [
        r for r in records
        if is_street_match(street, r.street)
        and (code is None or r.property_type == code)
        and within_rolling_window(r.transfer_date, months, reference)
    ]


def street_sales_count(
    records: Iterable[SaleRecord],
    street: str,
    property_type=None,
    months: int = STREET_WINDOW_MONTHS,
    reference_date: date = None,
) -> int:
    """Number of sales on a street in the last N months."""
    return len(street_sales(records, street, property_type, months, reference_date))


def street_average_price(
    records: Iterable[SaleRecord],
    street: str,
    property_type=None,
    months: int = STREET_WINDOW_MONTHS,
    reference_date: date = None,
) -> Optional[int]:
    """Mean sale price on a street in the last N months, None if no sales."""
    sales = street_sales(records, street, property_type, months, reference_date)
    if not sales:
        return None
    return round_half_up(sum(r.price for r in sales) / len(sales))


# =============================================================================
# Growth
# =============================================================================

def year_over_year_growth(snapshots: Dict[int, MarketSnapshot]) -> Dict[str, float]:
    """
    Fractional change in mean price between consecutive available years.

    Keys look like "2022-2023"; a missing year is bridged, not zero-filled.
    """
    years = sorted(snapshots)
    growth = {}
    for previous, current in zip(years, years[1:]):
        before = snapshots[previous].mean_price
        after = snapshots[current].mean_price
        growth[f"{previous}-{current}"] = (after - before) / before
    return growth


def compound_annual_growth_rate(
    snapshots: Dict[int, MarketSnapshot],
) -> Optional[float]:
    """
    CAGR of mean price from the first to the last available year.

    The exponent uses the calendar span between those years, so gaps do
    not inflate the rate. None with fewer than two years.
    """
    if len(snapshots) < 2:
        return None
    years = sorted(snapshots)
    first = snapshots[years[0]].mean_price
    last = snapshots[years[-1]].mean_price
    span = years[-1] - years[0]
    return (last / first) ** (1 / span) - 1


def sale_history(
    records: Iterable[SaleRecord],
    postcode: str,
    paon: str,
    street: str = "",
) -> List[SaleRecord]:
    """All sales of one address, oldest first."""
    target_postcode = normalise_postcode(postcode)
    target_paon = paon.strip().upper()
    history = [
        r for r in records
        if normalise_postcode(r.postcode) == target_postcode
        and r.paon.strip().upper() == target_paon
        and (not street or is_street_match(street, r.street))
    ]
    return sorted(history, key=lambda r: r.transfer_date)


def property_growth_rate(history: List[SaleRecord]) -> Optional[float]:
    """
    Annualised growth between the first and last sale of a property.

    None when there are fewer than two sales or the span is under a year.
    """
    if len(history) < 2:
        return None
    first, last = history[0], history[-1]
    years = (last.transfer_date - first.transfer_date).days / DAYS_PER_YEAR
    if years < MIN_HISTORY_YEARS:
        return None
    return (last.price / first.price) ** (1 / years) - 1


# =============================================================================
# Price Movement
# =============================================================================

def _mean(prices: List[int]) -> float:
    return sum(prices) / len(prices)


def sold_price_change_pct(
    records: Iterable[SaleRecord],
    reference_date: date = None,
    periods: Iterable[int] = PRICE_CHANGE_PERIODS,
    min_sales: int = MIN_PRICE_CHANGE_SALES,
) -> Dict[str, Optional[float]]:
    """
    Percentage change of recent against older mean sold price.

    For each period of N months, sales on or after the cutoff
    (reference - N months, up to the reference date) are compared with
    sales before it. A period is None unless both sides hold at least
    `min_sales` sales.

    Returns:
        {"last1m": 2.5, "last3m": None, ...} rounded to two places
    """
    reference = reference_date or date.today()
    records = [r for r in records if r.transfer_date <= reference]

    changes: Dict[str, Optional[float]] = {}
    for months in periods:
        cutoff = subtract_months(reference, months)
        recent = [r.price for r in records if r.transfer_date >= cutoff]
        older = [r.price for r in records if r.transfer_date < cutoff]

        key = f"last{months}m"
        if len(recent) < min_sales or len(older) < min_sales:
            changes[key] = None
            continue

        before = _mean(older)
        changes[key] = round((_mean(recent) - before) / before * 100, 2)
    return changes


def similar_sales(
    records: Iterable[SaleRecord],
    property_type=None,
    price: Optional[int] = None,
    tolerance: float = SIMILAR_PRICE_TOLERANCE,
) -> List[SaleRecord]:
    """
    Sales of the same type within a price band around a target.

    Either filter may be omitted. With a price, a sale qualifies when
    |sale price - price| <= tolerance * price.
    """
    if tolerance < 0:
        raise ValueError("tolerance must not be negative")
    code = property_type_code(property_type) if property_type else None
    return [
        r for r in records
        if (code is None or r.property_type == code)
        and (price is None or abs(r.price - price) <= tolerance * price)
    ]
