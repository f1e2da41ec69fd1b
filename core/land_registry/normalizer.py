"""
Sale Record Normalizer

Turns raw Price Paid Data rows into SaleRecord instances.

Rows are dropped, never raised on:
- price <= 0 (non-sale transfers and similar market-data noise)
- wrong field count, non-numeric price, unparseable date (malformed)

Price Paid Data column order (no header row):
    0 transaction id, 1 price, 2 date of transfer, 3 postcode,
    4 property type, 5 new build (Y/N), 6 duration (F/L), 7 PAON,
    8 SAON, 9 street, 10 locality, 11 town/city, 12 district,
    13 county, 14 PPD category type, 15 record status (optional)
"""

from __future__ import annotations

import csv
import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Union

from .models import SaleRecord


logger = logging.getLogger(__name__)


MIN_FIELD_COUNT = 15
MAX_FIELD_COUNT = 16

RawRow = Union[str, Sequence[str], Mapping[str, Any]]


@dataclass
class NormalizationReport:
    """Counts of what happened to each row passed through the normalizer."""
    parsed: int = 0
    dropped_non_positive: int = 0
    malformed: int = 0

    @property
    def total(self) -> int:
        return self.parsed + self.dropped_non_positive + self.malformed

    def to_dict(self) -> dict:
        return {
            "parsed": self.parsed,
            "dropped_non_positive": self.dropped_non_positive,
            "malformed": self.malformed,
        }


class MalformedRow(Exception):
    """Internal signal for a row that cannot be parsed."""


class SaleRecordNormalizer:
    """
    Parses raw rows into SaleRecord instances and counts drops.

    One normalizer is used per ingestion run; its report accumulates
    across calls.
    """

    def __init__(self):
        self.report = NormalizationReport()

    def normalize(self, raw: RawRow) -> Optional[SaleRecord]:
        """
        Normalize a single row.

        Args:
            raw: A CSV line, a sequence of column values, or a mapping
                with snake_case field names

        Returns:
            SaleRecord, or None if the row was dropped
        """
        try:
            if isinstance(raw, str):
                fields = self._split_line(raw)
                price = self._parse_price(fields[1])
            elif isinstance(raw, Mapping):
                fields = None
                price = self._parse_price(raw.get("price"))
            else:
                fields = self._check_field_count(list(raw))
                price = self._parse_price(fields[1])
        except MalformedRow as e:
            self.report.malformed += 1
            logger.debug("Dropped malformed sale row: %s", e)
            return None

        if price <= 0:
            self.report.dropped_non_positive += 1
            return None

        try:
            if fields is None:
                record = self._from_mapping(raw, price)
            else:
                record = self._from_fields(fields, price)
        except (MalformedRow, ValueError) as e:
            self.report.malformed += 1
            logger.debug("Dropped malformed sale row: %s", e)
            return None

        self.report.parsed += 1
        return record

    def normalize_many(self, rows: Iterable[RawRow]) -> List[SaleRecord]:
        """Normalize an iterable of rows, keeping only the survivors."""
        records = []
        for raw in rows:
            record = self.normalize(raw)
            if record is not None:
                records.append(record)
        return records

    # =========================================================================
    # Parsing Helpers
    # =========================================================================

    def _split_line(self, line: str) -> List[str]:
        line = line.strip()
        if not line:
            raise MalformedRow("empty line")
        try:
            fields = next(csv.reader([line]))
        except csv.Error as e:
            raise MalformedRow(str(e)) from e
        return self._check_field_count(fields)

    @staticmethod
    def _check_field_count(fields: List[str]) -> List[str]:
        if not MIN_FIELD_COUNT <= len(fields) <= MAX_FIELD_COUNT:
            raise MalformedRow(f"expected 15-16 fields, got {len(fields)}")
        return [str(f).strip() for f in fields]

    @staticmethod
    def _parse_price(value: Any) -> int:
        if isinstance(value, bool):
            raise MalformedRow(f"non-numeric price: {value!r}")
        if isinstance(value, int):
            return value
        try:
            return int(str(value).strip())
        except (TypeError, ValueError) as e:
            raise MalformedRow(f"non-numeric price: {value!r}") from e

    @staticmethod
    def _parse_date(value: Any) -> date:
        # datetime is a date subclass; keep only the calendar day
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, date):
            return value
        text = str(value or "").strip()
        try:
            # PPD publishes "YYYY-MM-DD 00:00"
            return date.fromisoformat(text[:10])
        except ValueError as e:
            raise MalformedRow(f"bad transfer date: {value!r}") from e

    def _from_fields(self, fields: List[str], price: int) -> SaleRecord:
        return SaleRecord(
            transaction_id=fields[0].strip("{}"),
            price=price,
            transfer_date=self._parse_date(fields[2]),
            postcode=fields[3],
            property_type=fields[4],
            new_build=fields[5].upper() == "Y",
            tenure=fields[6],
            paon=fields[7],
            saon=fields[8],
            street=fields[9],
            locality=fields[10],
            town=fields[11],
            district=fields[12],
            county=fields[13],
            ppd_category=fields[14],
            record_status=fields[15] if len(fields) > 15 else "",
        )

    def _from_mapping(self, row: Mapping[str, Any], price: int) -> SaleRecord:
        transfer = row.get("transfer_date", row.get("date_of_transfer"))
        new_build = row.get("new_build", False)
        if isinstance(new_build, str):
            new_build = new_build.strip().upper() in ("Y", "TRUE", "1")
        return SaleRecord(
            transaction_id=str(row.get("transaction_id", "")),
            price=price,
            transfer_date=self._parse_date(transfer),
            postcode=str(row.get("postcode") or "").strip(),
            property_type=str(row.get("property_type") or "").strip(),
            new_build=bool(new_build),
            tenure=str(row.get("tenure", "")),
            paon=str(row.get("paon", "")),
            saon=str(row.get("saon", "")),
            street=str(row.get("street", "")),
            locality=str(row.get("locality", "")),
            town=str(row.get("town", "")),
            district=str(row.get("district", "")),
            county=str(row.get("county", "")),
            ppd_category=str(row.get("ppd_category", "")),
            record_status=str(row.get("record_status", "")),
        )
