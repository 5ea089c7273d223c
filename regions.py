"""
Postcode to region lookup and the regional utility estimates built on it.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Dict, Mapping, Optional

import config as cfg
from config import RegionDescriptor

logger = logging.getLogger(__name__)

_AREA_RE = re.compile(r"^[A-Z]+")


def normalise_postcode(postcode: str) -> str:
    """Uppercase, drop spaces, then put one space before the inward code."""
    compact = re.sub(r"\s+", "", postcode or "").upper()
    if len(compact) > 3:
        return f"{compact[:-3]} {compact[-3:]}"
    return compact


def resolve_region(postcode: str) -> Optional[RegionDescriptor]:
    """Map a postcode to its region via the leading letters (area code).

    Returns ``None`` for empty input, postcodes that do not start with a
    letter, or an area code that is not in the prefix table.
    """
    pc = (postcode or "").strip().upper()
    if not pc:
        return None
    match = _AREA_RE.match(pc)
    if match is None:
        return None
    return cfg.PREFIX_INDEX.get(match.group(0))


def estimate_water_cost(postcode: str, bedrooms: int, bathrooms: int) -> float:
    """Monthly water bill: regional standing charge plus usage.

    Occupants are approximated by bedrooms (at least one). Northern
    Ireland has no separate water bill, so it is always zero there.
    """
    region = resolve_region(postcode)
    if region is not None and region.code == "NI":
        return 0.0
    base = region.water_cost if region is not None else cfg.DEFAULT_WATER_COST
    occupants = max(1, bedrooms)
    return (base
            + cfg.WATER_PER_OCCUPANT * occupants
            + cfg.WATER_PER_EXTRA_BATHROOM * max(0, bathrooms - 1))


def region_update(postcode: str) -> Dict[str, Any]:
    """Partial snapshot for a postcode change."""
    update: Dict[str, Any] = {"postcode": normalise_postcode(postcode)}
    region = resolve_region(postcode)
    if region is None:
        logger.debug("No region for postcode %r", postcode)
        return update
    update["region_code"] = region.code
    update["is_north"] = region.key == cfg.NORTH_REGION_KEY
    logger.debug("Postcode %r resolved to %s (%s)", postcode, region.name, region.code)
    return update


def populate_estimates(state: Mapping[str, Any]) -> Dict[str, Any]:
    """Default monthly utility costs for the household.

    Council tax comes from the band price table, energy scales with
    bedrooms and bathrooms (higher in the North and for bands E-H),
    water from the regional estimate, broadband is a flat figure.
    """
    band = state.get("council_tax_band") or ""
    beds = int(state.get("beds") or 0)
    baths = int(state.get("baths") or 0)

    energy = cfg.ENERGY_BASE + beds * cfg.ENERGY_PER_BEDROOM + baths * cfg.ENERGY_PER_BATHROOM
    if state.get("is_north"):
        energy *= cfg.ENERGY_NORTH_FACTOR
    if band in cfg.HIGH_BANDS:
        energy *= cfg.ENERGY_HIGH_BAND_FACTOR

    water = estimate_water_cost(state.get("postcode") or "", beds, baths)

    return {
        "council_tax_cost": cfg.BAND_PRICES.get(band, 0),
        "energy_cost": round(energy),
        "water_bill": round(water),
        "broadband_cost": cfg.BROADBAND_ESTIMATE,
    }
