"""
Tests for the Sale Record Normalizer.

Rows are dropped and counted, never raised on.
"""

import pytest
from datetime import date, datetime
from pathlib import Path
import sys

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from core.land_registry import SaleRecord, SaleRecordNormalizer, aggregate


# =============================================================================
# Test Fixtures
# =============================================================================

def ppd_line(price="250000", transfer="2023-05-12 00:00", postcode="S10 5PR", ptype="S"):
    """A Price Paid Data CSV line in the published column order."""
    fields = [
        "{A1B2C3D4-0000-0000-0000-000000000001}", price, transfer, postcode, ptype,
        "N", "F", "12", "", "CRIMICAR AVENUE", "", "SHEFFIELD", "SHEFFIELD",
        "SOUTH YORKSHIRE", "A", "A",
    ]
    return ",".join(f'"{f}"' for f in fields)


@pytest.fixture
def normalizer():
    return SaleRecordNormalizer()


# =============================================================================
# Test: Parsing
# =============================================================================

class TestParsing:
    """Valid rows become SaleRecords."""

    def test_csv_line(self, normalizer):
        record = normalizer.normalize(ppd_line())

        assert isinstance(record, SaleRecord)
        assert record.transaction_id == "A1B2C3D4-0000-0000-0000-000000000001"
        assert record.price == 250000
        assert record.transfer_date == date(2023, 5, 12)
        assert record.postcode == "S10 5PR"
        assert record.property_type == "S"
        assert record.paon == "12"
        assert record.street == "CRIMICAR AVENUE"
        assert record.tenure == "F"
        assert record.new_build is False
        assert normalizer.report.parsed == 1

    def test_fifteen_field_line(self, normalizer):
        line = ppd_line().rsplit(",", 1)[0]
        record = normalizer.normalize(line)
        assert record is not None
        assert record.record_status == ""

    def test_sequence_row(self, normalizer):
        row = [
            "T1", "180000", "2022-01-03", "S11 8YB", "T", "Y", "L", "3", "",
            "ECCLESALL ROAD", "", "SHEFFIELD", "SHEFFIELD", "SOUTH YORKSHIRE", "A",
        ]
        record = normalizer.normalize(row)
        assert record.price == 180000
        assert record.new_build is True
        assert record.year == 2022

    def test_mapping_row(self, normalizer):
        record = normalizer.normalize({
            "transaction_id": "M1",
            "price": "320000",
            "transfer_date": "2021-11-30",
            "postcode": "S10 3GH",
            "property_type": "D",
            "street": "TAPTON HILL ROAD",
        })
        assert record.price == 320000
        assert record.transfer_date == date(2021, 11, 30)
        assert record.postcode_district == "S10"

    def test_mapping_row_with_datetime(self, normalizer):
        record = normalizer.normalize({
            "transaction_id": "M2",
            "price": 275000,
            "transfer_date": datetime(2024, 1, 5, 12),
            "postcode": "S10 3GH",
            "property_type": "S",
        })

        assert record.transfer_date == date(2024, 1, 5)
        assert type(record.transfer_date) is date

        snapshots = aggregate(
            [record], "S10", "S", window_months=12, reference_date=date(2024, 3, 1)
        )
        assert snapshots[2024].count == 1

    def test_postcode_kept_verbatim(self, normalizer):
        record = normalizer.normalize(ppd_line(postcode="s10 5pr"))
        assert record.postcode == "s10 5pr"


# =============================================================================
# Test: Dropped Rows
# =============================================================================

class TestDroppedRows:
    """Bad rows are counted in the normalization report."""

    @pytest.mark.parametrize("price", ["0", "-5"])
    def test_non_positive_price_dropped(self, normalizer, price):
        assert normalizer.normalize(ppd_line(price=price)) is None
        assert normalizer.report.dropped_non_positive == 1
        assert normalizer.report.malformed == 0

    def test_header_row_is_malformed(self, normalizer):
        header = ",".join([
            "transaction_id", "price", "date_of_transfer", "postcode",
            "property_type", "new_build", "duration", "paon", "saon", "street",
            "locality", "town", "district", "county", "ppd_category", "record_status",
        ])
        assert normalizer.normalize(header) is None
        assert normalizer.report.malformed == 1

    def test_wrong_field_count_is_malformed(self, normalizer):
        assert normalizer.normalize('"T1","100000","2023-01-01"') is None
        assert normalizer.report.malformed == 1

    def test_bad_date_is_malformed(self, normalizer):
        assert normalizer.normalize(ppd_line(transfer="12/05/2023")) is None
        assert normalizer.report.malformed == 1

    def test_missing_postcode_is_malformed(self, normalizer):
        assert normalizer.normalize(ppd_line(postcode="")) is None
        assert normalizer.report.malformed == 1

    def test_blank_line_is_malformed(self, normalizer):
        assert normalizer.normalize("   \n") is None
        assert normalizer.report.malformed == 1

    def test_normalize_many_counts_everything(self, normalizer):
        rows = [ppd_line(), ppd_line(price="0"), "garbage", ppd_line(price="99000")]
        records = normalizer.normalize_many(rows)

        assert [r.price for r in records] == [250000, 99000]
        assert normalizer.report.to_dict() == {
            "parsed": 2,
            "dropped_non_positive": 1,
            "malformed": 1,
        }
        assert normalizer.report.total == 4


# =============================================================================
# Test: SaleRecord Invariants
# =============================================================================

class TestSaleRecord:
    """SaleRecord validates itself on construction."""

    def test_non_positive_price_raises(self):
        with pytest.raises(ValueError):
            SaleRecord("T1", 0, date(2023, 1, 1), "S10 5PR", "S")

    def test_record_is_immutable(self):
        record = SaleRecord("T1", 100000, date(2023, 1, 1), "S10 5PR", "S")
        with pytest.raises(Exception):
            record.price = 1

    def test_full_address(self):
        record = SaleRecord(
            "T1", 100000, date(2023, 1, 1), "S10 5PR", "F",
            paon="12", saon="FLAT 2", street="CRIMICAR AVENUE", town="SHEFFIELD",
        )
        assert record.full_address == "FLAT 2, 12, CRIMICAR AVENUE, SHEFFIELD, S10 5PR"
