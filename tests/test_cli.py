import itertools

import pytest

import cli
import config as cfg
from property_price import PriceEstimate
from state import HouseholdStore


def answer(monkeypatch, *replies):
    feed = itertools.chain(replies, itertools.repeat(""))
    monkeypatch.setattr("builtins.input", lambda prompt="": next(feed))


@pytest.mark.parametrize("raw, expected", [("£45,000", "45000"), ("1 200", "1200")])
def test_strip_currency(raw, expected):
    assert cli._strip_currency(raw) == expected


def test_fmt_and_pct():
    assert cli.fmt(35_800) == "£35,800"
    assert cli.fmt(2_093.3, 2) == "£2,093.30"
    assert cli.pct(58.391) == "58.4%"


def test_prompt_float_retries_until_in_range(monkeypatch, capsys):
    answer(monkeypatch, "abc", "150", "12.5")
    assert cli._prompt_float("Deposit %", 10, 0, 100) == 12.5
    out = capsys.readouterr().out
    assert "Invalid number" in out
    assert "at most 100" in out


def test_prompt_postcode_normalises(monkeypatch):
    answer(monkeypatch, "nowhere", "eh11ad")
    assert cli._prompt_postcode("SW1A 1AA") == "EH1 1AD"


def test_compute_display_data_net_salaries():
    state = cfg.defaults()
    state.update(salary_type="net", salary_p1=3_000, salary_p2=1_000,
                 ratio_p1=0.75, ratio_p2=0.25)
    d = cli.compute_display_data(state)
    assert d["band_p1"] is None
    assert d["net_p1"] == 3_000
    assert set(d["summary"]) == {"upfront", "monthly"}


def test_run_cli_end_to_end(monkeypatch, capsys):
    answer(
        monkeypatch,
        "", "60000", "40000",                       # income
        "EH1 1AD", "2", "1", "300000", "d", "", "no",   # property
        "", "10", "", "5", "25", "",                # mortgage
    )
    store = HouseholdStore()
    cli.run_cli(store)

    out = capsys.readouterr().out
    assert "Scotland region detected" in out
    assert "£35,800" in out
    assert "£1,578.39" in out

    data = store.data
    assert data["region_code"] == "SC"
    assert data["council_tax_cost"] == 165
    assert data["water_bill"] == 42
    assert data["total_upfront"] == 35_800


def test_prompt_price_retries_on_bad_input(monkeypatch, capsys):
    answer(monkeypatch, "300k", "-5", "£310,000")
    assert cli._prompt_price(0) == 310_000
    out = capsys.readouterr().out
    assert "Invalid number" in out
    assert "at least 1" in out


def test_prompt_price_blank_means_lookup(monkeypatch):
    answer(monkeypatch, "")
    assert cli._prompt_price(250_000) is None


def test_run_cli_recovers_from_bad_price(monkeypatch, capsys):
    answer(
        monkeypatch,
        "", "60000", "40000",
        "EH1 1AD", "2", "1", "300k", "0", "300000", "d", "", "no",
        "", "10", "", "5", "25", "",
    )
    store = HouseholdStore()
    cli.run_cli(store)

    out = capsys.readouterr().out
    assert "Invalid number" in out
    assert "£35,800" in out
    assert store.data["property_price"] == 300_000


def test_run_cli_looks_up_blank_price(monkeypatch, capsys):
    calls = []

    def fake_estimate(postcode, bedrooms):
        calls.append((postcode, bedrooms))
        return PriceEstimate(200_000, True)

    monkeypatch.setattr(cli, "estimate_property_price", fake_estimate)
    answer(
        monkeypatch,
        "", "60000", "40000",
        "M1 1AE", "3", "1", "", "b", "", "no",
    )
    store = HouseholdStore()
    cli.run_cli(store)

    assert calls == [("M1 1AE", 3)]
    assert "Using £200,000 (estimated)" in capsys.readouterr().out
    assert store.data["property_price"] == 200_000
