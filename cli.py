"""
Terminal wizard and shared display-data computation for the FairShare
household cost splitter.
"""

from __future__ import annotations

import sys
from typing import Any, Dict, List, Optional

import config as cfg
import finance
import tax
import validator
from property_price import estimate_property_price
from regions import normalise_postcode, populate_estimates, region_update, resolve_region
from state import HouseholdStore


# ═══════════════════════════════════════════════════════════════════
# Formatting helpers
# ═══════════════════════════════════════════════════════════════════

def fmt(val: float, decimals: int = 0) -> str:
    """Format number as £X,XXX."""
    if decimals > 0:
        return f"£{val:,.{decimals}f}"
    return f"£{val:,.0f}"


def pct(val: float, decimals: int = 1) -> str:
    return f"{val:.{decimals}f}%"


# ═══════════════════════════════════════════════════════════════════
# Input collection (CLI)
# ═══════════════════════════════════════════════════════════════════

def _strip_currency(s: str) -> str:
    """Remove currency symbols, commas, spaces."""
    return s.replace("£", "").replace(",", "").replace(" ", "")


def _prompt_float(
    label: str,
    default: Any,
    min_val: float | None = None,
    max_val: float | None = None,
    currency: bool = False,
) -> float:
    while True:
        raw = input(f"  {label} [{default}]: ").strip()
        if not raw:
            return float(_strip_currency(str(default))) if currency else float(default)
        try:
            val = float(_strip_currency(raw) if currency else raw.replace("%", ""))
            if min_val is not None and val < min_val:
                print(f"    Must be at least {min_val}")
                continue
            if max_val is not None and val > max_val:
                print(f"    Must be at most {max_val}")
                continue
            return val
        except ValueError:
            print("    Invalid number, try again.")


def _prompt_int(
    label: str,
    default: int,
    min_val: int | None = None,
    max_val: int | None = None,
) -> int:
    while True:
        raw = input(f"  {label} [{default}]: ").strip()
        if not raw:
            return default
        try:
            val = int(float(_strip_currency(raw)))
            if min_val is not None and val < min_val:
                print(f"    Must be at least {min_val}")
                continue
            if max_val is not None and val > max_val:
                print(f"    Must be at most {max_val}")
                continue
            return val
        except ValueError:
            print("    Invalid number, try again.")


def _prompt_choice(label: str, options: list[str], default: str) -> str:
    opts = "/".join(options)
    while True:
        raw = input(f"  {label} ({opts}) [{default}]: ").strip().lower()
        if not raw:
            return default
        if raw in options:
            return raw
        print(f"    Choose from: {opts}")


def _prompt_price(default: float) -> Optional[float]:
    """Property price in pounds, or None when left blank."""
    while True:
        raw = input(f"  Property price (blank to look up) [{fmt(default)}]: ").strip()
        if not raw:
            return None
        try:
            val = float(_strip_currency(raw))
        except ValueError:
            print("    Invalid number, try again.")
            continue
        if val < 1:
            print("    Must be at least 1")
            continue
        return val


def _prompt_postcode(default: str) -> str:
    while True:
        raw = normalise_postcode(input(f"  Postcode [{default}]: ").strip() or default)
        if validator.validate_field("postcode", raw):
            return raw
        print("    Enter a full UK postcode, e.g. SW1A 1AA")


def _report_errors(step: str, store: HouseholdStore) -> bool:
    result = validator.validate_step(step, store.data)
    if not result.is_valid:
        print(f"    Please check: {', '.join(result.errors)}")
    return result.is_valid


def _collect_income(store: HouseholdStore) -> None:
    s = store.data
    while True:
        salary_type = _prompt_choice("Salaries entered as", ["gross", "net"], s["salary_type"])
        unit = "annual gross" if salary_type == "gross" else "monthly net"
        p1 = _prompt_float(f"Your {unit} pay", fmt(s["salary_p1"]), 0, currency=True)
        p2 = _prompt_float(f"Partner's {unit} pay", fmt(s["salary_p2"]), 0, currency=True)
        store.update({"salary_type": salary_type, "salary_p1": p1, "salary_p2": p2})
        if _report_errors("income", store):
            break
    store.update(finance.calculate_ratio(store.data))


def _collect_property(store: HouseholdStore) -> None:
    while True:
        s = store.data
        postcode = _prompt_postcode(s["postcode"] or "SW1A 1AA")
        store.update(region_update(postcode))
        region = resolve_region(postcode)
        if region is not None:
            note = " Heating estimates adjusted." if region.key == cfg.NORTH_REGION_KEY else ""
            print(f"    {region.name} region detected.{note}")

        beds = _prompt_int("Bedrooms", s["beds"] or 2, 0, 20)
        baths = _prompt_int("Bathrooms", s["baths"] or 1, 0, 20)
        store.update({"beds": beds, "baths": baths})

        price = _prompt_price(s["property_price"])
        if price is None and s["property_price"] > 0:
            price = s["property_price"]
        elif price is None:
            print("    Looking up recent sales...")
            estimate = estimate_property_price(postcode, beds)
            price = estimate.price
            label = "estimated" if estimate.is_estimated else "Land Registry average"
            print(f"    Using {fmt(price)} ({label})")

        band = _prompt_choice("Council tax band", list("abcdefgh"),
                              (s["council_tax_band"] or "d").lower()).upper()
        home_type = _prompt_choice("Home type", ["first", "second"], s["home_type"])
        ftb = s["is_first_time_buyer"]
        if home_type == "first":
            ftb = _prompt_choice("First-time buyer?", ["yes", "no"], "yes" if ftb else "no") == "yes"
        store.update({
            "property_price": price,
            "council_tax_band": band,
            "home_type": home_type,
            "is_first_time_buyer": ftb,
        })
        if _report_errors("property", store):
            break
    store.update(finance.calculate_equity_details(store.data))


def _collect_mortgage(store: HouseholdStore) -> None:
    s = store.data
    deposit_type = _prompt_choice("Deposit as", ["percentage", "amount"], s["deposit_type"])
    if deposit_type == "percentage":
        store.update({
            "deposit_type": deposit_type,
            "deposit_percentage": _prompt_float("Deposit %", s["deposit_percentage"], 0, 100),
        })
    else:
        store.update({
            "deposit_type": deposit_type,
            "deposit_amount": _prompt_float("Deposit amount", fmt(s["deposit_amount"]), 0,
                                            s["property_price"], currency=True),
        })
    split = _prompt_choice("Split deposit by income?", ["yes", "no"],
                           "yes" if s["deposit_split_proportional"] else "no")
    store.update({
        "deposit_split_proportional": split == "yes",
        "mortgage_interest_rate": _prompt_float("Mortgage rate %", s["mortgage_interest_rate"] or 4.5, 0, 25),
        "mortgage_term": _prompt_int("Mortgage term (years)", s["mortgage_term"] or 25, 1, 40),
        "mortgage_fees": _prompt_float("Arrangement fees", fmt(s["mortgage_fees"]), 0, currency=True),
    })
    _report_errors("mortgage", store)
    store.update(finance.calculate_equity_details(store.data))


def _collect_costs(store: HouseholdStore) -> None:
    estimates = populate_estimates(store.data)
    s = store.data
    changes: Dict[str, Any] = {}
    split_types: Dict[str, str] = {}
    for cat in cfg.SPLIT_CATEGORIES:
        field = cfg.COST_FIELDS[cat]
        default = s[field] or estimates.get(field, 0)
        changes[field] = _prompt_float(f"{cfg.CATEGORY_LABELS[cat]} per month", fmt(default), 0, currency=True)
        split_types[cat] = _prompt_choice("  split by income?", ["yes", "no"],
                                          s["split_types"].get(cat, "yes"))
    changes["split_types"] = split_types
    store.update(changes)
    _report_errors("utilities", store)
    _report_errors("committed", store)


def collect_inputs(store: HouseholdStore) -> None:
    """Prompt for every household input, recalculating after each step."""
    print("\n  Enter your details (press Enter to keep the value shown):\n")
    _collect_income(store)
    print()
    _collect_property(store)
    print()
    _collect_mortgage(store)
    print()
    _collect_costs(store)
    store.update(finance.recalculate(store.data))


# ═══════════════════════════════════════════════════════════════════
# Shared display-data computation (used by CLI and web app)
# ═══════════════════════════════════════════════════════════════════

def compute_display_data(state: Dict[str, Any]) -> Dict[str, Any]:
    """Extract every figure needed for the output sections."""
    region = state.get("region_code", "EN")
    p1 = tax.take_home(float(state.get("salary_p1") or 0), region)
    p2 = tax.take_home(float(state.get("salary_p2") or 0), region)
    gross = state.get("salary_type", "gross") == "gross"
    summary = finance.get_summary(state)
    return {
        "salary_type": state.get("salary_type", "gross"),
        "salary_p1": state.get("salary_p1", 0),
        "salary_p2": state.get("salary_p2", 0),
        "band_p1": p1.band_name if gross else None,
        "band_p2": p2.band_name if gross else None,
        "net_p1": p1.monthly_net if gross else state.get("salary_p1", 0),
        "net_p2": p2.monthly_net if gross else state.get("salary_p2", 0),
        "ratio_p1": state.get("ratio_p1", 0.5),
        "ratio_p2": state.get("ratio_p2", 0.5),
        "property_price": state.get("property_price", 0),
        "deposit_percentage": state.get("deposit_percentage", 0),
        "total_equity": state.get("total_equity", 0),
        "equity_p1": state.get("equity_p1", 0),
        "equity_p2": state.get("equity_p2", 0),
        "mortgage_required": state.get("mortgage_required", 0),
        "monthly_mortgage_payment": state.get("monthly_mortgage_payment", 0),
        "total_repayment": state.get("total_repayment", 0),
        "mortgage_fees": state.get("mortgage_fees", 0),
        "summary": summary,
    }


# ═══════════════════════════════════════════════════════════════════
# Box-drawing CLI output
# ═══════════════════════════════════════════════════════════════════

W = 78  # box width (characters)
H = "═"


def _box_top(title: str) -> str:
    inner = W - 2
    return (
        f"╔{H * inner}╗\n"
        f"║  {title:<{inner - 2}}║\n"
        f"╠{H * inner}╣"
    )


def _box_line(text: str = "") -> str:
    inner = W - 4
    if len(text) > inner:
        text = text[:inner]
    return f"║  {text:<{inner}}║"


def _box_row(label: str, value: str, lw: int = 38) -> str:
    return _box_line(f"{label:<{lw}}{value}")


def _box_bottom() -> str:
    return f"╚{H * (W - 2)}╝"


def _print_section(title: str, rows: List[str]) -> None:
    """Print a titled box with content rows."""
    print(_box_top(title))
    for r in rows:
        print(r)
    print(_box_bottom())
    print()


# ═══════════════════════════════════════════════════════════════════
# CLI Section Printers
# ═══════════════════════════════════════════════════════════════════

def _print_income(d: Dict[str, Any]) -> None:
    rows = []
    if d["salary_type"] == "gross":
        rows += [
            _box_row("Your gross salary", fmt(d["salary_p1"])),
            _box_row("  Tax band", d["band_p1"]),
            _box_row("Partner's gross salary", fmt(d["salary_p2"])),
            _box_row("  Tax band", d["band_p2"]),
            _box_line(),
        ]
    rows += [
        _box_row("Your take-home (monthly)", fmt(d["net_p1"], 2)),
        _box_row("Partner's take-home (monthly)", fmt(d["net_p2"], 2)),
        _box_line(),
        _box_row("Your share", pct(d["ratio_p1"] * 100)),
        _box_row("Partner's share", pct(d["ratio_p2"] * 100)),
    ]
    _print_section("INCOME RATIO", rows)


def _print_upfront(d: Dict[str, Any]) -> None:
    up = d["summary"]["upfront"]
    rows = [
        _box_row("Property price", fmt(d["property_price"])),
        _box_row("Deposit", f"{fmt(d['total_equity'])} ({pct(d['deposit_percentage'])})"),
        _box_row("Property transaction tax", fmt(up["sdlt"])),
        _box_row("Legal fees", fmt(up["legal_fees"])),
        _box_row("Mortgage fees", fmt(d["mortgage_fees"])),
        _box_line(),
        _box_row("Total upfront", fmt(up["total"])),
        _box_row("  You pay", fmt(up["p1"])),
        _box_row("  Partner pays", fmt(up["p2"])),
    ]
    _print_section("UPFRONT COSTS", rows)


def _print_mortgage(d: Dict[str, Any]) -> None:
    rows = [
        _box_row("Mortgage required", fmt(d["mortgage_required"])),
        _box_row("Monthly payment", fmt(d["monthly_mortgage_payment"], 2)),
        _box_row("Total repayment", fmt(d["total_repayment"], 2)),
    ]
    _print_section("MORTGAGE", rows)


def _print_monthly(d: Dict[str, Any]) -> None:
    monthly = d["summary"]["monthly"]
    rows = [_box_line(f"{'Category':<20}{'Total':>14}{'You':>14}{'Partner':>14}"), _box_line()]
    for name, c in monthly["costs"].items():
        label = cfg.CATEGORY_LABELS.get(name, name)
        rows.append(_box_line(
            f"{label:<20}{fmt(c['total'], 2):>14}{fmt(c['p1'], 2):>14}{fmt(c['p2'], 2):>14}"))
    rows.append(_box_line())
    rows.append(_box_line(
        f"{'TOTAL':<20}{fmt(monthly['total'], 2):>14}"
        f"{fmt(monthly['p1'], 2):>14}{fmt(monthly['p2'], 2):>14}"))
    _print_section("MONTHLY COSTS", rows)


# ═══════════════════════════════════════════════════════════════════
# Main CLI entry point
# ═══════════════════════════════════════════════════════════════════

def run_cli(store: Optional[HouseholdStore] = None) -> None:
    """Run the full CLI workflow."""
    # Ensure box-drawing characters render on Windows
    try:
        sys.stdout.reconfigure(encoding="utf-8")
    except (AttributeError, OSError):
        pass
    store = store if store is not None else HouseholdStore()
    store.hydrate()

    print()
    print("=" * W)
    print("  FairShare: Household Cost Splitter")
    print("=" * W)

    collect_inputs(store)

    d = compute_display_data(store.data)
    print()
    _print_income(d)
    _print_upfront(d)
    _print_mortgage(d)
    _print_monthly(d)


if __name__ == "__main__":
    run_cli()
