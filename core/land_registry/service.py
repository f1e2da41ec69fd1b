"""
Land Registry Price Paid Data Service

Reads yearly Price Paid Data extracts from a local data directory and
serves market aggregates over them.

Expected layout:
    <data_dir>/land-registry-price-paid-2021.csv
    <data_dir>/land-registry-price-paid-2022.csv
    ...

A missing or unreadable year is logged and skipped; aggregation never
aborts because of one bad year.

Data Source: UK Land Registry Price Paid Data (completed sales only)
"""

import logging
import threading
from datetime import date
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Union

from core.cache import MarketDataCache

from .aggregator import aggregate, street_sales_count
from .models import MarketSnapshot, SaleRecord, normalise_postcode, property_type_code
from .normalizer import NormalizationReport, SaleRecordNormalizer


logger = logging.getLogger(__name__)


YEAR_FILE_TEMPLATE = "land-registry-price-paid-{year}.csv"

# Market reports cover five calendar years by default
DEFAULT_TREND_YEARS = 5


def trend_years(end_year: int, count: int = DEFAULT_TREND_YEARS) -> List[int]:
    """The `count` calendar years ending at `end_year`, ascending."""
    return list(range(end_year - count + 1, end_year + 1))


class LandRegistryService:
    """
    Service for loading sale records and aggregating them by year.

    The cache is owned by the caller and injected here; the service only
    stores parsed years and aggregates in it.
    """

    def __init__(
        self,
        data_dir: Union[str, Path],
        cache: Optional[MarketDataCache] = None,
    ):
        """
        Initialize the Land Registry service.

        Args:
            data_dir: Directory holding the yearly CSV extracts
            cache: Cache for parsed years (default: a fresh 24h cache)
        """
        self.data_dir = Path(data_dir)
        self.cache = cache if cache is not None else MarketDataCache()
        self.reports: Dict[int, NormalizationReport] = {}
        self._reports_lock = threading.Lock()

    def year_file(self, year: int) -> Path:
        return self.data_dir / YEAR_FILE_TEMPLATE.format(year=year)

    def load_year(self, year: int) -> List[SaleRecord]:
        """
        Load and normalize one year of sales.

        Returns:
            Parsed records (empty if the file is missing or unreadable)
        """
        return self.cache.get_or_load(("year", year), lambda: self._read_year(year))

    def _read_year(self, year: int) -> List[SaleRecord]:
        path = self.year_file(year)
        if not path.exists():
            logger.warning("Land Registry data file for %s not found: %s", year, path)
            return []

        normalizer = SaleRecordNormalizer()
        try:
            with path.open(encoding="utf-8") as handle:
                records = normalizer.normalize_many(handle)
        except (OSError, UnicodeDecodeError) as e:
            logger.error("Could not read Land Registry data for %s: %s", year, e)
            return []

        with self._reports_lock:
            self.reports[year] = normalizer.report
        logger.info(
            "Loaded %d records for %s (%d non-positive, %d malformed dropped)",
            normalizer.report.parsed,
            year,
            normalizer.report.dropped_non_positive,
            normalizer.report.malformed,
        )
        return records

    def load_years(self, years: Iterable[int]) -> List[SaleRecord]:
        """Concatenate records for several years, skipping missing ones."""
        records: List[SaleRecord] = []
        for year in years:
            records.extend(self.load_year(year))
        return records

    def market_snapshots(
        self,
        postcode_prefix: str,
        property_type,
        years: Iterable[int],
        window_months: Optional[int] = None,
        reference_date: date = None,
    ) -> Dict[int, MarketSnapshot]:
        """
        Yearly snapshots for an area and property type.

        Args:
            postcode_prefix: Area prefix, e.g. "S10"
            property_type: PropertyType, code or name
            years: Calendar years to load
            window_months: Optional rolling window in months
            reference_date: End of the rolling window (default: today)

        Returns:
            Snapshots keyed by year; years without sales are absent
        """
        years = tuple(years)
        key = (
            "snapshots",
            normalise_postcode(postcode_prefix),
            property_type_code(property_type),
            years,
            window_months,
            reference_date,
        )
        return self.cache.get_or_load(
            key,
            lambda: aggregate(
                self.load_years(years),
                postcode_prefix,
                property_type,
                window_months=window_months,
                reference_date=reference_date,
            ),
        )

    def road_sales_count(
        self,
        street: str,
        property_type=None,
        months: int = 12,
        reference_date: date = None,
    ) -> int:
        """Sales on a street over the last `months`, across loaded years."""
        reference = reference_date or date.today()
        years = range(reference.year - (months // 12) - 1, reference.year + 1)
        return street_sales_count(
            self.load_years(years), street, property_type, months, reference
        )

    def normalization_reports(
        self, years: Optional[Iterable[int]] = None
    ) -> Dict[int, NormalizationReport]:
        """Copy of the per-year normalization reports, optionally limited to `years`."""
        with self._reports_lock:
            reports = dict(self.reports)
        if years is not None:
            wanted = set(years)
            reports = {year: report for year, report in reports.items() if year in wanted}
        return reports

    def clear_cache(self) -> int:
        """Forget parsed years and aggregates."""
        with self._reports_lock:
            self.reports.clear()
        return self.cache.clear()
