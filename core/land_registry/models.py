"""
Data models for Land Registry Price Paid Data

Defines the immutable sale record produced by the normalizer and the
per-year market snapshot produced by the aggregator.

Data Source: UK Land Registry Price Paid Data (completed sales only)
"""

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Optional


class PropertyType(Enum):
    """
    Property type code as published in Price Paid Data.

    Exact code match only - no cross-type substitution allowed.
    """
    DETACHED = "D"
    SEMI_DETACHED = "S"
    TERRACED = "T"
    FLAT = "F"
    OTHER = "O"

    @property
    def label(self) -> str:
        """Human readable name."""
        return _PROPERTY_TYPE_LABELS[self]

    @classmethod
    def from_string(cls, value: str) -> Optional["PropertyType"]:
        """
        Convert a code or a listing-style name to PropertyType.

        Accepts the single-letter codes ("S") as well as names such as
        "semi-detached", "apartment" or "bungalow".
        """
        if not value:
            return None
        normalised = value.lower().strip().replace("_", "-")
        code = _PROPERTY_TYPE_ALIASES.get(normalised, normalised.upper())
        for member in cls:
            if member.value == code:
                return member
        return None


_PROPERTY_TYPE_LABELS = {
    PropertyType.DETACHED: "Detached",
    PropertyType.SEMI_DETACHED: "Semi-detached",
    PropertyType.TERRACED: "Terraced",
    PropertyType.FLAT: "Flat",
    PropertyType.OTHER: "Other",
}

# Listing portals describe types loosely; map them onto PPD codes.
_PROPERTY_TYPE_ALIASES = {
    "detached": "D",
    "detached house": "D",
    "bungalow": "D",
    "semi-detached": "S",
    "semi detached": "S",
    "semidetached": "S",
    "semi-detached house": "S",
    "house": "S",
    "terraced": "T",
    "terrace": "T",
    "terraced house": "T",
    "end terrace": "T",
    "end of terrace": "T",
    "mid terrace": "T",
    "townhouse": "T",
    "flat": "F",
    "apartment": "F",
    "maisonette": "F",
    "studio": "F",
    "other": "O",
}


def property_type_code(value) -> str:
    """
    Resolve a PropertyType, code or name to the raw PPD code string.

    Unrecognised strings are returned verbatim (uppercased) so that
    records carrying non-standard codes can still be matched exactly.
    """
    if isinstance(value, PropertyType):
        return value.value
    resolved = PropertyType.from_string(value)
    if resolved is not None:
        return resolved.value
    return (value or "").strip().upper()


def normalise_postcode(postcode: str) -> str:
    """Uppercase and strip all whitespace (e.g. 's10 5pr' -> 'S105PR')."""
    if not postcode:
        return ""
    return "".join(postcode.split()).upper()


@dataclass(frozen=True)
class SaleRecord:
    """
    A single completed sale from Price Paid Data.

    Invariants:
        - price is a positive integer in GBP
        - postcode and property_type are non-empty, kept verbatim
        - SaleRecord is immutable (frozen dataclass)
    """

    # Required fields
    transaction_id: str
    price: int
    transfer_date: date
    postcode: str
    property_type: str  # PPD code, verbatim (D/S/T/F/O)

    # Address components
    paon: str = ""  # Primary Addressable Object Name (e.g., house number)
    saon: str = ""  # Secondary Addressable Object Name (e.g., flat number)
    street: str = ""
    locality: str = ""
    town: str = ""
    district: str = ""
    county: str = ""

    # Metadata
    new_build: bool = False
    tenure: str = ""  # F = freehold, L = leasehold
    ppd_category: str = ""
    record_status: str = ""

    def __post_init__(self) -> None:
        """Validate constraints at construction time."""
        if self.price <= 0:
            raise ValueError("price must be positive")
        if not self.postcode:
            raise ValueError("postcode is required")
        if not self.property_type:
            raise ValueError("property_type is required")

    @property
    def year(self) -> int:
        """Calendar year of transfer."""
        return self.transfer_date.year

    @property
    def postcode_district(self) -> str:
        """Extract postcode district (e.g., 'S10' from 'S10 5PR')."""
        parts = self.postcode.upper().split()
        return parts[0] if parts else ""

    @property
    def full_address(self) -> str:
        """Construct full address string."""
        parts = [
            self.saon,
            self.paon,
            self.street,
            self.locality,
            self.town,
            self.postcode,
        ]
        return ", ".join(p for p in parts if p)


@dataclass(frozen=True)
class MarketSnapshot:
    """
    Aggregate over one (postcode prefix, property type, year) key.

    A snapshot only exists when at least one sale matched; absent keys
    mean zero sales.
    """
    year: int
    count: int
    mean_price: int
    median_price: int
    min_price: int
    max_price: int

    def __post_init__(self) -> None:
        if self.count < 1:
            raise ValueError("MarketSnapshot requires count >= 1")

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON output."""
        return {
            "year": self.year,
            "count": self.count,
            "mean_price": self.mean_price,
            "median_price": self.median_price,
            "min_price": self.min_price,
            "max_price": self.max_price,
        }
