"""
Property price estimate for a postcode.

Asks the HM Land Registry price-paid SPARQL endpoint for recent sales at
the postcode and averages them. Any failure falls back to a simple
heuristic; callers always get a price plus a flag saying whether it was
estimated.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

import requests

import config as cfg

logger = logging.getLogger(__name__)

SPARQL_TEMPLATE = """
PREFIX lrppi: <http://landregistry.data.gov.uk/def/ppi/>
PREFIX lrcommon: <http://landregistry.data.gov.uk/def/common/>
SELECT ?amount WHERE {{
    ?addr lrcommon:postcode "{postcode}" .
    ?transx lrppi:propertyAddress ?addr ;
            lrppi:pricePaid ?amount .
}} LIMIT {limit}
"""


class PriceLookupError(Exception):
    """The registry returned nothing usable."""


@dataclass(frozen=True)
class PriceEstimate:
    price: int
    is_estimated: bool


def _round_thousand(value: float) -> int:
    return int(round(value / 1000) * 1000)


def fallback_price(postcode: str, bedrooms: int) -> int:
    """Heuristic price from the postcode's first letter and bedroom count."""
    pc = (postcode or "").strip().upper()
    first = pc[:1]
    base = cfg.FALLBACK_BASE_PRICE
    # SW and SE are London; check them before the cheaper 'S' areas
    if first in cfg.FALLBACK_HIGH_LETTERS or pc.startswith(cfg.FALLBACK_HIGH_AREAS):
        base = cfg.FALLBACK_HIGH_PRICE
    elif first in cfg.FALLBACK_LOW_LETTERS:
        base = cfg.FALLBACK_LOW_PRICE
    base += (bedrooms - cfg.FALLBACK_BASE_BEDROOMS) * cfg.FALLBACK_PER_BEDROOM
    return max(cfg.FALLBACK_MIN_PRICE, _round_thousand(base))


def query_land_registry(postcode: str, session: Optional[requests.Session] = None) -> int:
    """Average recent price paid at *postcode*, rounded to the nearest £1,000.

    Raises
    ------
    requests.RequestException
        Network failure or non-success status.
    PriceLookupError
        No sales recorded, or a response that cannot be read.
    """
    http = session if session is not None else requests
    query = SPARQL_TEMPLATE.format(postcode=postcode.replace('"', ""),
                                   limit=cfg.LAND_REGISTRY_LIMIT)
    response = http.get(
        cfg.LAND_REGISTRY_ENDPOINT,
        params={"query": query},
        headers={"Accept": "application/sparql-results+json"},
        timeout=cfg.LOOKUP_TIMEOUT_SECONDS,
    )
    response.raise_for_status()
    try:
        bindings = response.json()["results"]["bindings"]
        amounts = [int(b["amount"]["value"]) for b in bindings]
    except (ValueError, KeyError, TypeError) as exc:
        raise PriceLookupError(f"unreadable registry response: {exc}") from exc
    if not amounts:
        raise PriceLookupError(f"no sales recorded for {postcode}")
    return _round_thousand(sum(amounts) / len(amounts))


def estimate_property_price(
    postcode: str,
    bedrooms: int = 2,
    session: Optional[requests.Session] = None,
) -> PriceEstimate:
    """One registry lookup, falling back to the heuristic on any failure."""
    try:
        return PriceEstimate(query_land_registry(postcode, session), False)
    except (requests.RequestException, PriceLookupError) as exc:
        logger.warning("Price lookup for %r failed (%s); using heuristic", postcode, exc)
        return PriceEstimate(fallback_price(postcode, bedrooms), True)
