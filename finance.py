"""
Orchestration of the cost-split calculations.

Each function takes a flat household snapshot (a mapping) and returns a
new partial snapshot or summary; nothing here mutates its input or
keeps state between calls, so repeated calls with the same snapshot
give the same answer. Merging results back into the live snapshot is
the caller's job (see ``state.HouseholdStore``).
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from typing import Any, Dict, Mapping

import config as cfg
import tax
from mortgage import amortize

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CostSplit:
    """One cost shared between the two partners; ``p1 + p2 == total``."""

    p1: float
    p2: float
    total: float


def _num(state: Mapping[str, Any], key: str) -> float:
    return float(state.get(key) or 0)


def _upfront_ratio(state: Mapping[str, Any]) -> float:
    return _num(state, "ratio_p1") if state.get("deposit_split_proportional", True) else 0.5


# ─── Income Ratio ─────────────────────────────────────────────────────

def calculate_ratio(state: Mapping[str, Any]) -> Dict[str, float]:
    """Share of costs each partner carries, from relative take-home pay.

    Net salaries are used as given. Gross salaries are first converted
    to monthly take-home pay so both bases are comparable. Two zero
    incomes split evenly.
    """
    salary_type = state.get("salary_type", "gross")
    region = state.get("region_code", "EN")
    logger.debug("Recalculating income ratio from %s salaries", salary_type)

    p1_basis = _num(state, "salary_p1")
    p2_basis = _num(state, "salary_p2")
    if salary_type == "gross":
        p1_basis = tax.take_home(p1_basis, region).monthly_net
        p2_basis = tax.take_home(p2_basis, region).monthly_net

    total = p1_basis + p2_basis
    if total > 0:
        return {"ratio_p1": p1_basis / total, "ratio_p2": p2_basis / total}
    return {"ratio_p1": 0.5, "ratio_p2": 0.5}


# ─── Equity and Upfront Costs ─────────────────────────────────────────

def legal_fees(price: float) -> float:
    """Conveyancing estimate, stepped by purchase price."""
    for above, fee in cfg.LEGAL_FEE_STEPS:
        if price > above:
            return fee
    return cfg.LEGAL_FEE_BASE


def property_tax(state: Mapping[str, Any]) -> float:
    return float(tax.stamp_duty(
        _num(state, "property_price"),
        state.get("region_code", "EN"),
        state.get("home_type", "first"),
        bool(state.get("is_first_time_buyer", False)),
    ))


def calculate_equity_details(state: Mapping[str, Any]) -> Dict[str, Any]:
    """Deposit, mortgage and upfront cash for the current property.

    The deposit can be entered as a percentage of the price or as a
    fixed amount; ``deposit_type`` says which one is authoritative and
    the other is derived from it. A derived percentage is rounded to
    one decimal place and that rounded figure is the one callers see.

    Returns an empty dict when there is no property price yet.
    """
    price = _num(state, "property_price")
    if price <= 0:
        return {}
    logger.debug("Recalculating equity and mortgage for property price £%s", price)

    if state.get("deposit_type", "percentage") == "percentage":
        deposit_pct = _num(state, "deposit_percentage")
        total_equity = price * deposit_pct / 100
        deposit_amount = round(total_equity)
    else:
        deposit_amount = _num(state, "deposit_amount")
        total_equity = deposit_amount
        deposit_pct = deposit_amount / price * 100

    sdlt = property_tax(state)
    fees = legal_fees(price)

    ratio = _upfront_ratio(state)
    equity_p1 = total_equity * ratio
    equity_p2 = total_equity - equity_p1

    mortgage_required = price - total_equity
    mortgage = amortize(mortgage_required,
                        _num(state, "mortgage_interest_rate"),
                        _num(state, "mortgage_term"))

    return {
        "total_equity": total_equity,
        "deposit_percentage": round(deposit_pct, 1),
        "deposit_amount": deposit_amount,
        "mortgage_required": mortgage_required,
        "equity_p1": equity_p1,
        "equity_p2": equity_p2,
        "monthly_mortgage_payment": mortgage.monthly_payment,
        "total_repayment": mortgage.total_repayment,
        "sdlt": sdlt,
        "legal_fees": fees,
        "total_upfront": total_equity + sdlt + fees + _num(state, "mortgage_fees"),
    }


# ─── Summary ──────────────────────────────────────────────────────────

def split_cost(total: float, ratio_p1: float, preference: str = "yes") -> CostSplit:
    """Split *total* by income ratio (``'yes'``) or evenly (``'no'``)."""
    r = ratio_p1 if preference == "yes" else 0.5
    p1 = total * r
    return CostSplit(p1, total - p1, total)


def get_summary(state: Mapping[str, Any]) -> Dict[str, Any]:
    """Full breakdown of upfront and monthly costs for both partners.

    Upfront costs follow the deposit split setting. Each recurring
    category follows its own split preference (income ratio unless set
    to ``'no'``). The mortgage is always split by income ratio.
    """
    price = _num(state, "property_price")
    ratio_p1 = _num(state, "ratio_p1")
    split_types = state.get("split_types") or {}

    sdlt = property_tax(state)
    fees = legal_fees(price)
    total_upfront = _num(state, "total_equity") + sdlt + fees + _num(state, "mortgage_fees")
    upfront = split_cost(total_upfront, _upfront_ratio(state))

    costs: Dict[str, CostSplit] = {}
    for category in cfg.SPLIT_CATEGORIES:
        amount = _num(state, cfg.COST_FIELDS[category])
        costs[category] = split_cost(amount, ratio_p1, split_types.get(category) or "yes")
    costs["mortgage"] = split_cost(_num(state, "monthly_mortgage_payment"), ratio_p1)

    return {
        "upfront": {
            "sdlt": sdlt,
            "legal_fees": fees,
            "total": upfront.total,
            "p1": upfront.p1,
            "p2": upfront.p2,
        },
        "monthly": {
            "costs": {name: asdict(split) for name, split in costs.items()},
            "total": sum(c.total for c in costs.values()),
            "p1": sum(c.p1 for c in costs.values()),
            "p2": sum(c.p2 for c in costs.values()),
        },
    }


def recalculate(state: Mapping[str, Any]) -> Dict[str, Any]:
    """Ratio then equity, as one partial update."""
    update = calculate_ratio(state)
    update.update(calculate_equity_details({**state, **update}))
    return update
