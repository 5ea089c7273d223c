import pytest

import regions


# ---------------------------------------------------------------------------
# Postcode resolution
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("postcode, key, code", [
    ("EH1 1AD", "SCOTLAND", "SC"),
    ("G1 1AA", "SCOTLAND", "SC"),
    ("CF10 1AA", "WALES", "WA"),
    ("  bt1 1aa", "NI", "NI"),
    ("sw1a 1aa", "LONDON", "EN"),
    ("LS1 1AA", "NORTH", "EN"),
    ("M1 1AE", "NORTH", "EN"),
    ("B1 1AA", "MIDLANDS", "EN"),
    ("BS1 1AA", "SOUTH_WEST", "EN"),
])
def test_resolve_region(postcode, key, code):
    region = regions.resolve_region(postcode)
    assert region is not None
    assert region.key == key
    assert region.code == code


@pytest.mark.parametrize("postcode", ["", "   ", "123 ABC", "QQ1 1AA", "GL1 1AA", None])
def test_unresolved_postcodes(postcode):
    assert regions.resolve_region(postcode) is None


@pytest.mark.parametrize("postcode, key", [
    ("EN1 1AA", "LONDON"),   # also listed under East of England
    ("RM1 1AA", "LONDON"),
    ("SY1 1AA", "WALES"),    # also listed under Midlands
    ("WA1 1AA", "NORTH"),
])
def test_shared_prefixes_resolve_to_first_listed_region(postcode, key):
    assert regions.resolve_region(postcode).key == key


@pytest.mark.parametrize("raw, expected", [
    ("sw1a1aa", "SW1A 1AA"),
    ("eh1  1ad", "EH1 1AD"),
    (" M1 1AE ", "M1 1AE"),
    ("", ""),
    ("ab", "AB"),
])
def test_normalise_postcode(raw, expected):
    assert regions.normalise_postcode(raw) == expected


# ---------------------------------------------------------------------------
# Region update
# ---------------------------------------------------------------------------

def test_region_update_north():
    assert regions.region_update("ls1 1aa") == {
        "postcode": "LS1 1AA",
        "region_code": "EN",
        "is_north": True,
    }


def test_region_update_scotland_is_not_north():
    update = regions.region_update("EH1 1AD")
    assert update["region_code"] == "SC"
    assert update["is_north"] is False


def test_region_update_unresolved_keeps_region():
    assert regions.region_update("QQ1 1AA") == {"postcode": "QQ1 1AA"}


# ---------------------------------------------------------------------------
# Water estimate
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("postcode, beds, baths, expected", [
    ("EH1 1AD", 2, 1, 18 + 24),
    ("CF10 1AA", 3, 2, 24 + 36 + 5),
    ("LS1 1AA", 3, 2, 15 + 36 + 5),
    ("QQ1 1AA", 0, 0, 18 + 12),       # unresolved: default base, one occupant
])
def test_estimate_water_cost(postcode, beds, baths, expected):
    assert regions.estimate_water_cost(postcode, beds, baths) == expected


def test_northern_ireland_has_no_water_bill():
    assert regions.estimate_water_cost("BT1 1AA", 4, 3) == 0


def test_water_cost_grows_with_bathrooms():
    costs = [regions.estimate_water_cost("BS1 1AA", 3, baths) for baths in range(1, 5)]
    assert costs == sorted(costs)
    assert len(set(costs)) == len(costs)


# ---------------------------------------------------------------------------
# Utility estimates
# ---------------------------------------------------------------------------

def test_populate_estimates_band_d_scotland():
    state = {"council_tax_band": "D", "beds": 2, "baths": 1,
             "postcode": "EH1 1AD", "is_north": False}
    assert regions.populate_estimates(state) == {
        "council_tax_cost": 165,
        "energy_cost": 105,
        "water_bill": 42,
        "broadband_cost": 35,
    }


def test_populate_estimates_north_high_band():
    state = {"council_tax_band": "E", "beds": 3, "baths": 2,
             "postcode": "LS1 1AA", "is_north": True}
    est = regions.populate_estimates(state)
    assert est["council_tax_cost"] == 201
    assert est["energy_cost"] == 183     # 145 x 1.10 x 1.15
    assert est["water_bill"] == 56


def test_populate_estimates_without_band_or_postcode():
    est = regions.populate_estimates({})
    assert est["council_tax_cost"] == 0
    assert est["energy_cost"] == 40
    assert est["water_bill"] == 30
