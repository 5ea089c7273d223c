import pytest

from mortgage import MortgageResult, amortize


def test_standard_repayment_mortgage():
    result = amortize(270_000, 5.0, 25)
    assert result.monthly_payment == pytest.approx(1_578.39, abs=0.01)
    assert result.total_repayment == pytest.approx(473_517.93, abs=1.0)


def test_total_is_payment_times_term():
    result = amortize(180_000, 4.25, 30)
    assert result.total_repayment == result.monthly_payment * 360


def test_total_exceeds_principal():
    result = amortize(200_000, 3.5, 20)
    assert result.total_repayment > 200_000


@pytest.mark.parametrize("principal, rate, term", [
    (0, 5.0, 25),
    (-10_000, 5.0, 25),
    (270_000, 0.0, 25),
    (270_000, -1.0, 25),
    (270_000, 5.0, 0),
])
def test_degenerate_inputs_give_zero(principal, rate, term):
    assert amortize(principal, rate, term) == MortgageResult(0.0, 0.0)


def test_higher_rate_costs_more():
    low = amortize(250_000, 3.0, 25)
    high = amortize(250_000, 6.0, 25)
    assert high.monthly_payment > low.monthly_payment


def test_longer_term_lowers_payment():
    short = amortize(250_000, 4.0, 15)
    long_ = amortize(250_000, 4.0, 35)
    assert long_.monthly_payment < short.monthly_payment
    assert long_.total_repayment > short.total_repayment
