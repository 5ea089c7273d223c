"""
UK tax tables and household defaults for the FairShare cost-split engine.

All monetary values in GBP. Tax year 2025/26. Tables are read-only:
bands are frozen dataclasses held in tuples, and every mapping is a
``MappingProxyType``, so nothing here can be mutated after import.
A new tax year means editing this file, not patching it at runtime.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Optional, Tuple

TAX_YEAR = 2025          # 2025 means 2025/26
INF = float("inf")


# ── Table types ─────────────────────────────────────────────────────

@dataclass(frozen=True)
class Band:
    """One slice of a tiered table: taxed at *rate* up to *upper* (exclusive)."""

    upper: float
    rate: float
    name: str = ""


@dataclass(frozen=True)
class IncomeTaxTable:
    personal_allowance: float
    taper_threshold: float       # PA reduces £1 per £2 above this
    bands: Tuple[Band, ...]


@dataclass(frozen=True)
class PropertyTaxTable:
    standard: Tuple[Band, ...]
    additional_surcharge: float              # flat rate on the full price
    ftb: Optional[Tuple[Band, ...]] = None   # first-time-buyer rate table
    ftb_ceiling: float = 0.0                 # ftb table only applies up to here
    ftb_relief: float = 0.0                  # fixed relief off the standard tax


@dataclass(frozen=True)
class RegionDescriptor:
    key: str
    name: str
    code: str                    # tax-region code: EN, SC, WA or NI
    water_cost: float            # baseline monthly water standing charge
    prefixes: Tuple[str, ...]


def _frozen(mapping: dict) -> Mapping:
    return MappingProxyType(dict(mapping))


# ── Income Tax ──────────────────────────────────────────────────────

PERSONAL_ALLOWANCE_BAND = "Personal Allowance"

INCOME_TAX = _frozen({
    "EN": IncomeTaxTable(
        personal_allowance=12_570,
        taper_threshold=100_000,
        bands=(
            Band(50_270, 0.20, "Basic Rate"),
            Band(125_140, 0.40, "Higher Rate"),
            Band(INF, 0.45, "Additional Rate"),
        ),
    ),
    "SC": IncomeTaxTable(
        personal_allowance=12_570,
        taper_threshold=100_000,
        bands=(
            Band(14_876, 0.19, "Starter Rate"),
            Band(26_561, 0.20, "Basic Rate"),
            Band(43_662, 0.21, "Intermediate Rate"),
            Band(75_000, 0.42, "Higher Rate"),
            Band(125_140, 0.45, "Advanced Rate"),
            Band(INF, 0.47, "Top Rate"),
        ),
    ),
})
DEFAULT_INCOME_TAX_REGION = "EN"   # Wales and NI follow the rUK bands

# ── National Insurance (Employee Class 1, UK-wide) ──────────────────

NI_BANDS = (
    Band(12_570, 0.00, "Below Primary Threshold"),
    Band(50_270, 0.08, "Main Rate"),
    Band(INF, 0.02, "Upper Rate"),
)

# ── Property transaction tax (SDLT / LBTT / LTT) ────────────────────

PROPERTY_TAX = _frozen({
    "EN": PropertyTaxTable(
        standard=(
            Band(125_000, 0.00),
            Band(250_000, 0.02),
            Band(925_000, 0.05),
            Band(1_500_000, 0.10),
            Band(INF, 0.12),
        ),
        additional_surcharge=0.03,
        ftb=(
            Band(300_000, 0.00),
            Band(500_000, 0.05),
            Band(INF, 0.05),
        ),
        ftb_ceiling=500_000,
    ),
    "SC": PropertyTaxTable(
        standard=(
            Band(145_000, 0.00),
            Band(250_000, 0.02),
            Band(325_000, 0.05),
            Band(750_000, 0.10),
            Band(INF, 0.12),
        ),
        additional_surcharge=0.04,
        ftb_relief=600,
    ),
    "WA": PropertyTaxTable(
        standard=(
            Band(180_000, 0.00),
            Band(250_000, 0.035),
            Band(400_000, 0.05),
            Band(750_000, 0.075),
            Band(1_500_000, 0.10),
            Band(INF, 0.12),
        ),
        additional_surcharge=0.03,
    ),
})
DEFAULT_PROPERTY_TAX_REGION = "EN"   # NI uses SDLT
SURCHARGE_MIN_PRICE = 40_000

# ── Purchase fees ───────────────────────────────────────────────────

# (price strictly above, fee); first match wins
LEGAL_FEE_STEPS = (
    (1_000_000, 2_500),
    (500_000, 1_800),
)
LEGAL_FEE_BASE = 1_200

# ── Council Tax (monthly estimate per band) ─────────────────────────

BAND_PRICES = _frozen({
    "A": 110, "B": 128, "C": 146, "D": 165,
    "E": 201, "F": 238, "G": 275, "H": 330,
})
HIGH_BANDS = frozenset("EFGH")

# ── Regions and postcode prefixes ───────────────────────────────────

REGIONS = _frozen({
    r.key: r for r in (
        RegionDescriptor("NI", "Northern Ireland", "NI", 0, ("BT",)),
        RegionDescriptor("SCOTLAND", "Scotland", "SC", 18, (
            "AB", "DD", "DG", "EH", "FK", "G", "HS", "IV", "KA", "KW",
            "KY", "ML", "PA", "PH", "TD", "ZE")),
        RegionDescriptor("WALES", "Wales", "WA", 24, (
            "CF", "LD", "LL", "NP", "SA", "SY")),
        RegionDescriptor("SOUTH_WEST", "South West", "EN", 22, (
            "BA", "BH", "BS", "DT", "EX", "PL", "SN", "SP", "TA", "TQ", "TR")),
        RegionDescriptor("SOUTH", "South", "EN", 20, (
            "BN", "CT", "GU", "ME", "OX", "PO", "RG", "RH", "SL", "TN")),
        RegionDescriptor("LONDON", "London", "EN", 18, (
            "E", "EC", "N", "NW", "SE", "SW", "W", "WC", "BR", "CR", "DA",
            "EN", "HA", "IG", "KT", "RM", "SM", "TW", "UB", "WD")),
        RegionDescriptor("EAST", "East of England", "EN", 17, (
            "AL", "CB", "CM", "CO", "EN", "HP", "IP", "LU", "NR", "RM",
            "SG", "SS")),
        RegionDescriptor("MIDLANDS", "Midlands", "EN", 16, (
            "B", "CV", "DE", "DY", "HR", "LE", "LN", "NG", "NN", "ST", "SY",
            "TF", "WR", "WS", "WV")),
        RegionDescriptor("NORTH", "North of England", "EN", 15, (
            "BB", "BD", "BL", "CA", "CH", "CW", "DH", "DL", "DN", "FY", "HD",
            "HG", "HU", "HX", "L", "LA", "LS", "M", "NE", "OL", "PR", "S",
            "SK", "SR", "TS", "WA", "WF", "WN", "YO")),
    )
})


def _build_prefix_index() -> Mapping[str, RegionDescriptor]:
    index = {}
    for region in REGIONS.values():
        for prefix in region.prefixes:
            index.setdefault(prefix, region)
    return MappingProxyType(index)


PREFIX_INDEX = _build_prefix_index()
NORTH_REGION_KEY = "NORTH"

# ── Estimate heuristics ─────────────────────────────────────────────

DEFAULT_WATER_COST = 18          # used when the postcode is unresolved
WATER_PER_OCCUPANT = 12
WATER_PER_EXTRA_BATHROOM = 5

ENERGY_BASE = 40
ENERGY_PER_BEDROOM = 25
ENERGY_PER_BATHROOM = 15
ENERGY_NORTH_FACTOR = 1.10
ENERGY_HIGH_BAND_FACTOR = 1.15

BROADBAND_ESTIMATE = 35

# ── Property price lookup ───────────────────────────────────────────

LAND_REGISTRY_ENDPOINT = "https://landregistry.data.gov.uk/landregistry/query"
LAND_REGISTRY_LIMIT = 10
LOOKUP_TIMEOUT_SECONDS = 10

FALLBACK_BASE_PRICE = 250_000
FALLBACK_LOW_PRICE = 180_000
FALLBACK_HIGH_PRICE = 450_000
FALLBACK_LOW_LETTERS = frozenset("LMBSNG")
FALLBACK_HIGH_LETTERS = frozenset("WE")
FALLBACK_HIGH_AREAS = ("SW", "SE")
FALLBACK_PER_BEDROOM = 35_000
FALLBACK_BASE_BEDROOMS = 2
FALLBACK_MIN_PRICE = 50_000

# ── Household snapshot ──────────────────────────────────────────────

SPLIT_CATEGORIES = (
    "council_tax", "energy", "water", "broadband",
    "groceries", "childcare", "insurance", "other_shared",
)

# category -> snapshot field holding its monthly cost
COST_FIELDS = _frozen({
    "council_tax": "council_tax_cost",
    "energy": "energy_cost",
    "water": "water_bill",
    "broadband": "broadband_cost",
    "groceries": "groceries_cost",
    "childcare": "childcare_cost",
    "insurance": "insurance_cost",
    "other_shared": "other_shared_costs",
})

CATEGORY_LABELS = _frozen({
    "council_tax": "Council tax",
    "energy": "Energy",
    "water": "Water",
    "broadband": "Broadband",
    "groceries": "Groceries",
    "childcare": "Childcare",
    "insurance": "Insurance",
    "other_shared": "Other shared costs",
    "mortgage": "Mortgage",
})

SNAPSHOT_KEY = "fairshare_cache"

_DEFAULTS = {
    "salary_p1": 0.0,
    "salary_p2": 0.0,
    "salary_type": "gross",          # 'gross' (annual) or 'net' (monthly)
    "ratio_p1": 0.5,
    "ratio_p2": 0.5,
    "property_price": 0.0,
    "deposit_percentage": 10.0,
    "deposit_amount": 0.0,
    "deposit_type": "percentage",    # 'percentage' or 'amount'
    "deposit_split_proportional": True,
    "total_equity": 0.0,
    "mortgage_required": 0.0,
    "equity_p1": 0.0,
    "equity_p2": 0.0,
    "mortgage_fees": 0.0,
    "mortgage_interest_rate": 0.0,
    "mortgage_term": 0,
    "monthly_mortgage_payment": 0.0,
    "total_repayment": 0.0,
    "postcode": "",
    "is_north": False,
    "region_code": "EN",             # EN, SC, WA, NI
    "council_tax_band": "",
    "beds": 0,
    "baths": 0,
    "home_type": "first",            # 'first' or 'second'
    "is_first_time_buyer": False,
    "council_tax_cost": 0.0,
    "energy_cost": 0.0,
    "water_bill": 0.0,
    "broadband_cost": 0.0,
    "groceries_cost": 0.0,
    "childcare_cost": 0.0,
    "insurance_cost": 0.0,
    "other_shared_costs": 0.0,
    "split_types": {cat: "yes" for cat in SPLIT_CATEGORIES},
}


def defaults() -> dict:
    """Return a fresh, mutable copy of the initial household snapshot."""
    return copy.deepcopy(_DEFAULTS)


# ── Load-time validation ────────────────────────────────────────────

def _check_bands(label: str, bands: Tuple[Band, ...]) -> None:
    if not bands:
        raise ValueError(f"{label}: empty band table")
    prev = 0.0
    for band in bands:
        if band.upper <= prev:
            raise ValueError(f"{label}: band bounds must be strictly increasing")
        prev = band.upper
    if bands[-1].upper != INF:
        raise ValueError(f"{label}: last band must be unbounded")


def _validate_tables() -> None:
    for code, table in INCOME_TAX.items():
        _check_bands(f"income tax {code}", table.bands)
    _check_bands("national insurance", NI_BANDS)
    for code, table in PROPERTY_TAX.items():
        _check_bands(f"property tax {code}", table.standard)
        if table.ftb is not None:
            _check_bands(f"property tax {code} ftb", table.ftb)
    for cat in SPLIT_CATEGORIES:
        if cat not in COST_FIELDS:
            raise ValueError(f"no cost field for category {cat!r}")
        if cat not in CATEGORY_LABELS:
            raise ValueError(f"no label for category {cat!r}")


_validate_tables()
