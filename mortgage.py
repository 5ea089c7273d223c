"""
Fixed-rate mortgage amortization.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class MortgageResult:
    monthly_payment: float
    total_repayment: float


def amortize(principal: float, annual_rate_pct: float, term_years: float) -> MortgageResult:
    """Monthly payment and total repayment for a repayment mortgage.

    Uses the standard annuity formula ``P·r·(1+r)^n / ((1+r)^n − 1)``
    with a monthly rate ``r`` and ``n`` monthly payments. Interest-free
    and zero-term loans are not modelled: a non-positive principal, rate
    or term gives zero for both figures.

    Parameters
    ----------
    principal : float
        Amount borrowed.
    annual_rate_pct : float
        Annual interest rate as a percentage, e.g. ``4.5``.
    term_years : float
        Mortgage term in years.
    """
    if principal <= 0 or annual_rate_pct <= 0 or term_years <= 0:
        return MortgageResult(0.0, 0.0)

    r = annual_rate_pct / 100 / 12
    n = term_years * 12
    growth = (1 + r) ** n
    payment = principal * r * growth / (growth - 1)
    return MortgageResult(payment, payment * n)
