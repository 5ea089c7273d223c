"""
UK tax calculation functions for the FairShare cost-split engine.

Income tax, National Insurance and property transaction tax. The
bracket functions accept numpy arrays so a whole range of salaries or
prices can be evaluated at once; scalar inputs work too (promoted
internally). None of these functions raise for zero or negative
inputs: they return zero instead.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Sequence

import numpy as np

import config as cfg

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TakeHome:
    """Monthly take-home pay and the topmost income tax band reached."""

    band_name: str
    monthly_net: float


# ─── Helpers ─────────────────────────────────────────────────────────

def _income_table(region: str) -> cfg.IncomeTaxTable:
    return cfg.INCOME_TAX.get(region, cfg.INCOME_TAX[cfg.DEFAULT_INCOME_TAX_REGION])


def _property_table(region: str) -> cfg.PropertyTaxTable:
    return cfg.PROPERTY_TAX.get(region, cfg.PROPERTY_TAX[cfg.DEFAULT_PROPERTY_TAX_REGION])


def tiered_tax(value: np.ndarray, bands: Sequence[cfg.Band]) -> np.ndarray:
    """Tax *value* by walking ascending brackets.

    Each bracket taxes only the slice of *value* between the previous
    bracket's upper bound and its own. Zero-width brackets contribute
    nothing.

    Parameters
    ----------
    value : array_like
        Amount(s) to tax.
    bands : sequence of Band
        Brackets with strictly increasing upper bounds, last unbounded.

    Returns
    -------
    np.ndarray
        Tax due for each value (unrounded).
    """
    value = np.asarray(value, dtype=float)
    tax = np.zeros_like(value)
    prev_upper = 0.0
    for band in bands:
        width = max(band.upper - prev_upper, 0.0)
        if width == 0.0:
            continue
        in_band = np.clip(value - prev_upper, 0.0, width)
        tax += in_band * band.rate
        prev_upper = band.upper
    return tax


# ─── Personal Allowance ─────────────────────────────────────────────

def personal_allowance(gross_income: np.ndarray, region: str = "EN") -> np.ndarray:
    """Compute personal allowance after the £100k taper.

    For every £2 of income above the taper threshold the allowance drops
    by £1, reaching zero at £125,140.

    Parameters
    ----------
    gross_income : array_like
        Annual gross salary/income.
    region : str
        Tax-region code (``'EN'``, ``'SC'``, ``'WA'``, ``'NI'``).

    Returns
    -------
    np.ndarray
        Personal allowance for each income value.
    """
    gross_income = np.asarray(gross_income, dtype=float)
    table = _income_table(region)
    excess = np.maximum(gross_income - table.taper_threshold, 0.0)
    return np.maximum(table.personal_allowance - excess / 2, 0.0)


def tax_bands(allowance: float, region: str = "EN") -> List[cfg.Band]:
    """Band list for one calculation: a zero-rate allowance band, then the region's bands."""
    table = _income_table(region)
    return [cfg.Band(allowance, 0.0, cfg.PERSONAL_ALLOWANCE_BAND), *table.bands]


# ─── Income Tax ──────────────────────────────────────────────────────

def income_tax(gross_income: np.ndarray, region: str = "EN") -> np.ndarray:
    """Calculate annual income tax.

    Band limits are absolute income levels. The (tapered) personal
    allowance is the first band, so the first taxed band starts where
    the allowance ends. When the allowance is fully withdrawn that
    zero-rate band has no width and taxing starts at £0.

    Parameters
    ----------
    gross_income : array_like
        Annual gross income.
    region : str
        Tax-region code. Anything other than ``'SC'`` uses rUK bands.

    Returns
    -------
    np.ndarray
        Income tax due for each income value.
    """
    gross_income = np.asarray(gross_income, dtype=float)
    table = _income_table(region)
    pa = personal_allowance(gross_income, region)

    tax = np.zeros_like(gross_income)
    prev_upper = pa
    for band in table.bands:
        width = np.maximum(band.upper - prev_upper, 0.0)
        in_band = np.clip(gross_income - prev_upper, 0.0, width)
        tax += in_band * band.rate
        prev_upper = np.maximum(prev_upper, band.upper)
    return tax


# ─── National Insurance ─────────────────────────────────────────────

def national_insurance(gross_income: np.ndarray) -> np.ndarray:
    """Employee Class 1 NI: nothing below the primary threshold, 8% to the
    upper earnings limit, 2% above it. Applies UK-wide."""
    return tiered_tax(gross_income, cfg.NI_BANDS)


# ─── Take-Home Pay ──────────────────────────────────────────────────

def band_name(salary: float, region: str = "EN") -> str:
    """Name of the topmost band *salary* reaches."""
    if salary <= 0:
        return cfg.PERSONAL_ALLOWANCE_BAND
    allowance = float(personal_allowance(salary, region))
    name = cfg.PERSONAL_ALLOWANCE_BAND
    prev_upper = 0.0
    for band in tax_bands(allowance, region):
        if band.upper <= prev_upper:
            continue
        if salary > prev_upper:
            name = band.name
        if salary <= band.upper:
            break
        prev_upper = band.upper
    return name


def take_home(salary: float, region: str = "EN") -> TakeHome:
    """Monthly net pay after income tax and NI.

    Parameters
    ----------
    salary : float
        Annual gross salary.
    region : str
        Tax-region code for income tax. NI is the same everywhere.

    Returns
    -------
    TakeHome
        ``band_name`` of the marginal band and ``monthly_net``. A salary
        of zero or less yields ``("Personal Allowance", 0.0)``.
    """
    if salary <= 0:
        return TakeHome(cfg.PERSONAL_ALLOWANCE_BAND, 0.0)
    it = float(income_tax(salary, region))
    ni = float(national_insurance(salary))
    return TakeHome(band_name(salary, region), (salary - it - ni) / 12)


# ─── Property Transaction Tax ───────────────────────────────────────

def stamp_duty(
    price: np.ndarray,
    region: str = "EN",
    home_type: str = "first",
    is_first_time_buyer: bool = False,
) -> np.ndarray:
    """Property transaction tax (SDLT in England/NI, LBTT in Scotland, LTT in Wales).

    First-time buyers of a main home get the regional relief: England
    uses its reduced table up to the relief ceiling and standard rates
    above it, Scotland takes a fixed amount off the standard tax, Wales
    has no relief. Additional properties at or above the minimum price
    pay a flat surcharge on the full price on top of the tiered tax.

    Parameters
    ----------
    price : array_like
        Purchase price(s).
    region : str
        Tax-region code.
    home_type : str
        ``'first'`` (main home) or ``'second'`` (additional property).
    is_first_time_buyer : bool
        Buyer has never owned a home.

    Returns
    -------
    np.ndarray
        Tax due, floored to whole pounds.
    """
    price = np.asarray(price, dtype=float)
    table = _property_table(region)
    additional = home_type == "second"

    duty = tiered_tax(price, table.standard)
    if is_first_time_buyer and not additional:
        if table.ftb is not None:
            duty = np.where(price <= table.ftb_ceiling, tiered_tax(price, table.ftb), duty)
        elif table.ftb_relief:
            duty = np.maximum(duty - table.ftb_relief, 0.0)

    if additional:
        duty = duty + np.where(price >= cfg.SURCHARGE_MIN_PRICE,
                               price * table.additional_surcharge, 0.0)

    return np.where(price > 0, np.floor(duty), 0.0)


# ─── Checks ──────────────────────────────────────────────────────────

if __name__ == "__main__":
    tests_passed = 0
    tests_failed = 0

    def check(name: str, actual: float, expected: float, tol: float = 1.0) -> None:
        global tests_passed, tests_failed
        passed = abs(actual - expected) <= tol
        status = "PASS" if passed else "FAIL"
        if passed:
            tests_passed += 1
        else:
            tests_failed += 1
        print(f"  [{status}] {name}: expected {expected}, got {actual:.2f}")

    print("=== Income Tax (England) ===")
    check("IT on £30k", float(income_tax(30_000.0)), 3_486.0)
    check("IT on £60k", float(income_tax(60_000.0)), 11_432.0)
    check("Net/month on £30k", take_home(30_000.0).monthly_net, 2_093.3, tol=0.1)

    print("\n=== National Insurance ===")
    check("NI on £60k", float(national_insurance(60_000.0)), 3_210.6, tol=0.01)

    print("\n=== Stamp Duty ===")
    check("SDLT £300k", float(stamp_duty(300_000.0, "EN")), 5_000.0, tol=0.0)
    check("SDLT £300k FTB", float(stamp_duty(300_000.0, "EN", "first", True)), 0.0, tol=0.0)
    check("LBTT £300k", float(stamp_duty(300_000.0, "SC")), 4_600.0, tol=0.0)
    check("SDLT £300k additional", float(stamp_duty(300_000.0, "EN", "second")), 14_000.0, tol=0.0)

    print(f"\n{'='*50}")
    print(f"Results: {tests_passed} passed, {tests_failed} failed")
