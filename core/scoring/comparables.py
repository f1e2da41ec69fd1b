"""
Comparable Set Builder

Assembles price-per-area samples for a subject property from listings
and sales supplied by external collaborators (portal scrapes, Land
Registry sales joined with EPC floor areas). No fetching happens here.

Samples:
- listed        currently advertised comparables
- sold_30d      sales completed in the last 30 days
- sold_90d_band sales completed in the last 90 days (includes sold_30d),
                restricted to a floor-area band when one is given
"""

from datetime import date
from typing import Iterable, List, Optional, Tuple

from core.land_registry.models import SaleRecord
from core.stats import round_half_up

from .models import ComparableSet


SOLD_RECENT_DAYS = 30
SOLD_BAND_DAYS = 90


def price_per_area(price: float, area: float) -> Optional[float]:
    """Price divided by area, or None if either is not positive."""
    if price is None or area is None or price <= 0 or area <= 0:
        return None
    return price / area


def in_area_band(area: float, band_area: Optional[Tuple[float, float]]) -> bool:
    """Inclusive floor-area band check; no band admits every area."""
    if band_area is None:
        return True
    min_area, max_area = band_area
    return min_area <= area <= max_area


def banded_average_sold_price(
    sales: Iterable[Tuple[float, float, date]],
    min_area: float,
    max_area: float,
    reference_date: date = None,
) -> Optional[int]:
    """
    Mean sold price over the last 90 days within a floor-area band.

    Args:
        sales: (price, floor area, sale date) triples
        min_area: Smallest floor area in the band, inclusive
        max_area: Largest floor area in the band, inclusive
        reference_date: Date sale ages are measured from (default: today)

    Returns:
        Rounded mean price, or None if no sale qualifies
    """
    if min_area > max_area:
        raise ValueError("min_area must not exceed max_area")
    reference = reference_date or date.today()
    prices = [
        price for price, area, sale_date in sales
        if price and price > 0
        and 0 <= (reference - sale_date).days <= SOLD_BAND_DAYS
        and in_area_band(area, (min_area, max_area))
    ]
    if not prices:
        return None
    return round_half_up(sum(prices) / len(prices))


class ComparableSetBuilder:
    """
    Collects listings and sales, then freezes them into a ComparableSet.

    Entries without a usable price or area are skipped and counted.
    """

    def __init__(
        self,
        reference_date: date = None,
        band_area: Optional[Tuple[float, float]] = None,
    ):
        """
        Args:
            reference_date: Date sale ages are measured from (default: today)
            band_area: (min, max) floor area for the 90-day band sample
        """
        if band_area is not None and band_area[0] > band_area[1]:
            raise ValueError("band_area minimum must not exceed its maximum")
        self._reference_date = reference_date or date.today()
        self._band_area = band_area
        self._listed: List[float] = []
        self._sold_30d: List[float] = []
        self._sold_90d: List[float] = []
        self.skipped = 0

    def add_listing(self, price: float, area: float) -> "ComparableSetBuilder":
        value = price_per_area(price, area)
        if value is None:
            self.skipped += 1
        else:
            self._listed.append(value)
        return self

    def add_sale(self, price: float, area: float, sale_date: date) -> "ComparableSetBuilder":
        """Place a completed sale into the 30-day and/or 90-day samples."""
        value = price_per_area(price, area)
        age_days = (self._reference_date - sale_date).days
        if value is None or age_days < 0 or age_days > SOLD_BAND_DAYS:
            self.skipped += 1
            return self
        if age_days <= SOLD_RECENT_DAYS:
            self._sold_30d.append(value)
        if in_area_band(area, self._band_area):
            self._sold_90d.append(value)
        return self

    def add_sale_record(self, record: SaleRecord, floor_area: float) -> "ComparableSetBuilder":
        """Add a Land Registry sale given its floor area (e.g. from EPC)."""
        return self.add_sale(record.price, floor_area, record.transfer_date)

    def build(self) -> ComparableSet:
        return ComparableSet(
            listed=tuple(self._listed),
            sold_30d=tuple(self._sold_30d),
            sold_90d_band=tuple(self._sold_90d),
        )
