import pytest

from validator import ValidationResult, step_for_field, validate_field, validate_step


# ---------------------------------------------------------------------------
# Single fields
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("name, value", [
    ("salary_p1", 0),
    ("salary_p1", "45000"),
    ("property_price", 1),
    ("deposit_percentage", 0),
    ("deposit_percentage", 100),
    ("postcode", "SW1A 1AA"),
    ("postcode", "m1 1ae"),
    ("council_tax_band", "H"),
    ("energy_cost", ""),
    ("mortgage_term", None),
    ("unknown_field", object()),
])
def test_valid_fields(name, value):
    assert validate_field(name, value)


@pytest.mark.parametrize("name, value", [
    ("salary_p1", -1),
    ("salary_p1", ""),
    ("salary_p1", None),
    ("salary_p1", "lots"),
    ("salary_p1", True),
    ("salary_p1", float("nan")),
    ("property_price", 0),
    ("deposit_percentage", 100.1),
    ("mortgage_term", 0),
    ("postcode", "SW1A1AA"),
    ("postcode", "12345"),
    ("postcode", 12345),
    ("council_tax_band", "I"),
    ("council_tax_band", "d"),
    ("energy_cost", -5),
])
def test_invalid_fields(name, value):
    assert not validate_field(name, value)


def test_add_error_deduplicates():
    result = ValidationResult()
    result.add_error("postcode")
    result.add_error("postcode")
    assert not result.is_valid
    assert result.errors == ["postcode"]


# ---------------------------------------------------------------------------
# Wizard steps
# ---------------------------------------------------------------------------

def test_income_step_valid():
    assert validate_step("income", {"salary_p1": 40_000, "salary_p2": 0}).is_valid


def test_income_step_needs_some_income():
    result = validate_step("income", {"salary_p1": 0, "salary_p2": 0})
    assert not result.is_valid
    assert result.errors == ["salary_p1", "salary_p2"]


def test_income_step_reports_bad_field_once():
    result = validate_step("income", {"salary_p1": -1, "salary_p2": "x"})
    assert result.errors == ["salary_p1", "salary_p2"]


def test_property_step():
    ok = {"postcode": "EH1 1AD", "property_price": 300_000, "council_tax_band": "D"}
    assert validate_step("property", ok).is_valid

    bad = validate_step("property", {"postcode": "nowhere", "property_price": 0})
    assert bad.errors == ["postcode", "property_price", "council_tax_band"]


def test_mortgage_step_checks_authoritative_deposit_field():
    base = {"mortgage_interest_rate": 4.5, "mortgage_term": 25}
    pct = validate_step("mortgage", {**base, "deposit_percentage": 150, "deposit_amount": -1})
    assert pct.errors == ["deposit_percentage"]

    amount = validate_step("mortgage", {**base, "deposit_type": "amount",
                                        "deposit_percentage": 150, "deposit_amount": -1})
    assert amount.errors == ["deposit_amount"]


def test_mortgage_step_term_must_be_positive():
    result = validate_step("mortgage", {"deposit_percentage": 10, "mortgage_term": 0})
    assert result.errors == ["mortgage_term"]


def test_utilities_step():
    assert validate_step("utilities", {"council_tax_cost": 165, "energy_cost": ""}).is_valid
    assert validate_step("utilities", {"water_bill": -1}).errors == ["water_bill"]


def test_committed_step():
    result = validate_step("committed", {"groceries_cost": 500, "childcare_cost": -10})
    assert result.errors == ["childcare_cost"]


def test_unknown_step_is_valid():
    assert validate_step("summary", {}).is_valid


@pytest.mark.parametrize("name, step", [
    ("salary_p1", "income"),
    ("beds", "property"),
    ("mortgage_fees", "mortgage"),
    ("water_bill", "utilities"),
    ("split_types", "committed"),
    ("ratio_p1", None),
])
def test_step_for_field(name, step):
    assert step_for_field(name) == step
