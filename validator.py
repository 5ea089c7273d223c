"""
Field and wizard-step validation for household inputs.

Validation is kept apart from the calculations: the calculations accept
anything and return neutral results, while these rules decide whether a
wizard step may be left. Nothing here raises for bad input.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

POSTCODE_RE = re.compile(r"^[A-Z]{1,2}[0-9][A-Z0-9]? [0-9][A-Z]{2}$", re.IGNORECASE)

SCHEMA: Dict[str, Dict[str, Any]] = {
    "salary_p1": {"type": "number", "min": 0, "required": True},
    "salary_p2": {"type": "number", "min": 0, "required": True},
    "postcode": {"type": "string", "required": True, "pattern": POSTCODE_RE},
    "property_price": {"type": "number", "min": 1, "required": True},
    "council_tax_band": {"type": "string", "required": True, "enum": tuple("ABCDEFGH")},
    "deposit_percentage": {"type": "number", "min": 0, "max": 100},
    "deposit_amount": {"type": "number", "min": 0},
    "mortgage_interest_rate": {"type": "number", "min": 0},
    "mortgage_term": {"type": "number", "min": 1},
    "council_tax_cost": {"type": "number", "min": 0},
    "energy_cost": {"type": "number", "min": 0},
    "water_bill": {"type": "number", "min": 0},
    "broadband_cost": {"type": "number", "min": 0},
    "groceries_cost": {"type": "number", "min": 0},
    "childcare_cost": {"type": "number", "min": 0},
    "insurance_cost": {"type": "number", "min": 0},
    "other_shared_costs": {"type": "number", "min": 0},
}

UTILITY_FIELDS = ("council_tax_cost", "energy_cost", "water_bill", "broadband_cost")
COMMITTED_FIELDS = ("groceries_cost", "childcare_cost", "insurance_cost", "other_shared_costs")

STEP_FIELDS = {
    "income": ("salary_p1", "salary_p2", "salary_type"),
    "property": ("postcode", "property_price", "council_tax_band", "beds", "baths",
                 "home_type", "is_first_time_buyer"),
    "mortgage": ("deposit_type", "deposit_percentage", "deposit_amount",
                 "deposit_split_proportional", "mortgage_interest_rate",
                 "mortgage_term", "mortgage_fees"),
    "utilities": UTILITY_FIELDS,
    "committed": COMMITTED_FIELDS + ("split_types",),
}


def step_for_field(name: str) -> Optional[str]:
    """Wizard step that collects *name*, or None for fields no step asks for."""
    for step, names in STEP_FIELDS.items():
        if name in names:
            return step
    return None


@dataclass
class ValidationResult:
    is_valid: bool = True
    errors: List[str] = field(default_factory=list)

    def add_error(self, name: str) -> None:
        self.is_valid = False
        if name not in self.errors:
            self.errors.append(name)


def _to_float(value: Any) -> float:
    if isinstance(value, bool):
        raise ValueError("boolean is not a number")
    return float(value)


def validate_field(name: str, value: Any) -> bool:
    """Check one value against its schema rule. Unknown fields always pass."""
    rule = SCHEMA.get(name)
    if rule is None:
        return True

    if value is None or value == "":
        return not rule.get("required", False)

    if rule["type"] == "number":
        try:
            num = _to_float(value)
        except (TypeError, ValueError):
            return False
        if num != num:  # NaN
            return False
        if "min" in rule and num < rule["min"]:
            return False
        if "max" in rule and num > rule["max"]:
            return False

    if rule["type"] == "string":
        if not isinstance(value, str):
            return False
        if "pattern" in rule and not rule["pattern"].match(value):
            return False

    if "enum" in rule and value not in rule["enum"]:
        return False

    return True


def validate_step(step: str, data: Mapping[str, Any]) -> ValidationResult:
    """Validate the fields of one wizard step, including cross-field rules.

    Steps: ``income``, ``property``, ``mortgage``, ``utilities``,
    ``committed``. Unknown steps are always valid.
    """
    result = ValidationResult()

    def check(*names: str) -> None:
        for name in names:
            if not validate_field(name, data.get(name)):
                result.add_error(name)

    if step == "income":
        check("salary_p1", "salary_p2")
        try:
            combined = _to_float(data.get("salary_p1") or 0) + _to_float(data.get("salary_p2") or 0)
        except (TypeError, ValueError):
            combined = 0.0
        if combined <= 0:
            result.add_error("salary_p1")
            result.add_error("salary_p2")
    elif step == "property":
        check("postcode", "property_price", "council_tax_band")
    elif step == "mortgage":
        if data.get("deposit_type", "percentage") == "percentage":
            check("deposit_percentage")
        else:
            check("deposit_amount")
        check("mortgage_interest_rate", "mortgage_term")
    elif step == "utilities":
        check(*UTILITY_FIELDS)
    elif step == "committed":
        check(*COMMITTED_FIELDS)

    return result
