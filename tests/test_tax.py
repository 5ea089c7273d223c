"""
tests/test_tax.py
-----------------
Income tax, National Insurance, take-home pay and property transaction tax.

Run with:
    pytest tests/ -v
"""

import numpy as np
import pytest

import config as cfg
import tax

# ---------------------------------------------------------------------------
# 1. Tiered bracket walk
# ---------------------------------------------------------------------------


class TestTieredTax:
    def test_zero_value_is_untaxed(self):
        assert tax.tiered_tax(0, cfg.PROPERTY_TAX["EN"].standard) == 0

    def test_accumulates_across_brackets(self):
        # 125k at 0% + 125k at 2% + 50k at 5%
        assert tax.tiered_tax(300_000, cfg.PROPERTY_TAX["EN"].standard) == pytest.approx(5_000)

    def test_vectorised_over_values(self):
        out = tax.tiered_tax(np.array([0.0, 125_000.0, 250_000.0]), cfg.PROPERTY_TAX["EN"].standard)
        assert out.tolist() == pytest.approx([0.0, 0.0, 2_500.0])

    def test_zero_width_band_is_skipped(self):
        bands = (cfg.Band(0.0, 0.5), cfg.Band(100.0, 0.1), cfg.Band(cfg.INF, 0.2))
        assert tax.tiered_tax(150.0, bands) == pytest.approx(10.0 + 10.0)


# ---------------------------------------------------------------------------
# 2. Personal allowance and income tax
# ---------------------------------------------------------------------------


class TestIncomeTax:
    @pytest.mark.parametrize("salary, expected", [
        (50_000, 12_570),
        (100_000, 12_570),
        (110_000, 7_570),
        (125_140, 0),
        (200_000, 0),
    ])
    def test_allowance_taper(self, salary, expected):
        assert float(tax.personal_allowance(salary)) == pytest.approx(expected)

    @pytest.mark.parametrize("salary, expected", [
        (10_000, 0.0),
        (30_000, 3_486.0),
        (60_000, 11_432.0),
        (110_000, 32_432.0),      # allowance tapered to 7,570
        (150_000, 51_189.0),      # allowance fully withdrawn
    ])
    def test_england(self, salary, expected):
        assert float(tax.income_tax(salary, "EN")) == pytest.approx(expected)

    def test_scotland_intermediate(self):
        # 2,306 @19% + 11,685 @20% + 3,439 @21%
        assert float(tax.income_tax(30_000, "SC")) == pytest.approx(3_497.33)

    def test_wales_and_ni_use_ruk_bands(self):
        assert float(tax.income_tax(60_000, "WA")) == float(tax.income_tax(60_000, "EN"))
        assert float(tax.income_tax(60_000, "NI")) == float(tax.income_tax(60_000, "EN"))

    def test_tax_bands_prepends_allowance(self):
        bands = tax.tax_bands(12_570, "EN")
        assert bands[0] == cfg.Band(12_570, 0.0, "Personal Allowance")
        assert [b.name for b in bands[1:]] == ["Basic Rate", "Higher Rate", "Additional Rate"]


# ---------------------------------------------------------------------------
# 3. National Insurance
# ---------------------------------------------------------------------------


@pytest.mark.parametrize("salary, expected", [
    (0, 0.0),
    (12_570, 0.0),
    (30_000, 1_394.40),
    (50_270, 3_016.00),
    (60_000, 3_210.60),
])
def test_national_insurance(salary, expected):
    assert float(tax.national_insurance(salary)) == pytest.approx(expected)


def test_national_insurance_ignores_region():
    s = 45_000
    net_en = tax.take_home(s, "EN").monthly_net * 12
    net_sc = tax.take_home(s, "SC").monthly_net * 12
    ni = float(tax.national_insurance(s))
    assert s - net_en - float(tax.income_tax(s, "EN")) == pytest.approx(ni)
    assert s - net_sc - float(tax.income_tax(s, "SC")) == pytest.approx(ni)


# ---------------------------------------------------------------------------
# 4. Take-home pay
# ---------------------------------------------------------------------------


class TestTakeHome:
    def test_basic_rate_30k(self):
        result = tax.take_home(30_000, "EN")
        assert result.band_name == "Basic Rate"
        assert round(result.monthly_net) == 2_093

    @pytest.mark.parametrize("salary", [0, -5_000])
    def test_no_income(self, salary):
        result = tax.take_home(salary, "EN")
        assert result.monthly_net == 0
        assert result.band_name == "Personal Allowance"

    @pytest.mark.parametrize("salary, band", [
        (10_000, "Personal Allowance"),
        (12_570, "Personal Allowance"),
        (12_571, "Basic Rate"),
        (60_000, "Higher Rate"),
        (200_000, "Additional Rate"),
    ])
    def test_band_name_england(self, salary, band):
        assert tax.take_home(salary, "EN").band_name == band

    @pytest.mark.parametrize("salary, band", [
        (14_000, "Starter Rate"),
        (30_000, "Intermediate Rate"),
        (80_000, "Advanced Rate"),
        (150_000, "Top Rate"),
    ])
    def test_band_name_scotland(self, salary, band):
        assert tax.take_home(salary, "SC").band_name == band

    def test_fully_tapered_allowance_not_double_charged(self):
        # 150k: no allowance, so net is salary minus tax from £0 and NI
        expected = (150_000 - 51_189.0 - float(tax.national_insurance(150_000))) / 12
        assert tax.take_home(150_000, "EN").monthly_net == pytest.approx(expected)
        assert tax.take_home(150_000, "EN").band_name == "Additional Rate"

    @pytest.mark.parametrize("region", ["EN", "SC"])
    def test_strictly_increasing_below_taper(self, region):
        salaries = np.linspace(0, 99_000, 400)
        nets = [tax.take_home(float(s), region).monthly_net for s in salaries]
        assert all(b > a for a, b in zip(nets, nets[1:]))


# ---------------------------------------------------------------------------
# 5. Property transaction tax
# ---------------------------------------------------------------------------


class TestStampDuty:
    @pytest.mark.parametrize("price", [0, -100_000])
    def test_non_positive_price(self, price):
        assert float(tax.stamp_duty(price, "EN", "second", False)) == 0

    def test_england_standard(self):
        assert float(tax.stamp_duty(300_000, "EN", "first", False)) == 5_000

    @pytest.mark.parametrize("price, expected", [
        (300_000, 0),
        (400_000, 5_000),
        (500_000, 10_000),
        (500_001, 15_000),      # above the ceiling: standard rates
    ])
    def test_england_first_time_buyer(self, price, expected):
        assert float(tax.stamp_duty(price, "EN", "first", True)) == expected

    def test_scotland_standard(self):
        assert float(tax.stamp_duty(300_000, "SC", "first", False)) == 4_600

    def test_scotland_first_time_buyer_relief(self):
        assert float(tax.stamp_duty(300_000, "SC", "first", True)) == 4_000
        assert float(tax.stamp_duty(100_000, "SC", "first", True)) == 0

    def test_wales_has_no_first_time_buyer_path(self):
        assert float(tax.stamp_duty(300_000, "WA", "first", True)) == 4_950
        assert float(tax.stamp_duty(300_000, "WA", "first", False)) == 4_950

    def test_first_time_buyer_ignored_for_additional_property(self):
        assert float(tax.stamp_duty(300_000, "EN", "second", True)) == 14_000

    @pytest.mark.parametrize("region, expected", [
        ("EN", 5_000 + 9_000),
        ("SC", 4_600 + 12_000),
        ("WA", 4_950 + 9_000),
    ])
    def test_additional_property_surcharge_on_full_price(self, region, expected):
        assert float(tax.stamp_duty(300_000, region, "second", False)) == expected

    def test_surcharge_threshold(self):
        assert float(tax.stamp_duty(39_999, "EN", "second", False)) == 0
        assert float(tax.stamp_duty(40_000, "EN", "second", False)) == 1_200

    def test_floored_to_whole_pounds(self):
        assert float(tax.stamp_duty(250_010, "EN", "first", False)) == 2_500
        assert float(tax.stamp_duty(300_010, "EN", "first", True)) == 0

    def test_unknown_region_uses_england(self):
        assert float(tax.stamp_duty(300_000, "NI", "first", False)) == 5_000
        assert float(tax.stamp_duty(300_000, "XX", "first", False)) == 5_000

    @pytest.mark.parametrize("region", ["EN", "SC", "WA", "NI"])
    @pytest.mark.parametrize("home_type", ["first", "second"])
    @pytest.mark.parametrize("ftb", [True, False])
    def test_monotonic_in_price(self, region, home_type, ftb):
        prices = np.linspace(0, 3_000_000, 3_001)
        duties = tax.stamp_duty(prices, region, home_type, ftb)
        assert np.all(np.diff(duties) >= 0)
