from types import SimpleNamespace

import pytest

from salesboard.domain import fit

SELLER = SimpleNamespace(division="ESG", size="enterprise", state="NY", industry_specialty="Tech")


def _account(**overrides):
    base = dict(id="acc-1", current_division="ESG", size="enterprise", state="NY", industry="Tech")
    base.update(overrides)
    return SimpleNamespace(**base)


def test_full_match_scores_100():
    assert fit.score(SELLER, _account()) == 100


def test_no_match_scores_zero():
    account = _account(current_division="GVC", size="midmarket", state="CA", industry="Retail")
    assert fit.score(SELLER, account) == 0


def test_mixed_division_counts_as_match():
    account = _account(current_division="MIXED", size=None, state=None, industry=None)
    assert fit.score(SELLER, account) == fit.DIVISION_WEIGHT


def test_state_comparison_ignores_case():
    assert fit.geography_points(SELLER, {"state": "ny"}) == fit.GEOGRAPHY_WEIGHT


def test_missing_fields_never_credit():
    empty_seller = SimpleNamespace()
    empty_account = SimpleNamespace()
    assert fit.score(empty_seller, empty_account) == 0
    assert fit.geography_points({"state": None}, {"state": None}) == 0
    assert fit.size_points({"size": None}, {"size": None}) == 0


def test_no_data_size_is_not_a_match():
    seller = {"size": "no_data"}
    assert fit.size_points(seller, {"size": "no_data"}) == 0


def test_dash_specialty_never_matches():
    assert fit.industry_points({"industry_specialty": "-"}, {"industry": "-"}) == 0
    assert fit.industry_points({"industry_specialty": ""}, {"industry": ""}) == 0


def test_country_only_gives_partial_geography():
    seller = {"state": "NY", "country": "USA"}
    account = {"state": "TX", "country": "usa"}
    assert fit.geography_points(seller, account) == fit.COUNTRY_ONLY_POINTS


@pytest.mark.parametrize(
    "account_lat, account_lng, expected",
    [
        (40.7128, -74.0060, 25),  # same point
        (40.7357, -74.1724, 25),  # Newark, ~9 mi
        (41.3083, -72.9279, 15),  # New Haven, ~70 mi
        (42.6526, -73.7562, 10),  # Albany, ~135 mi
        (42.8864, -78.8784, 0),  # Buffalo, ~290 mi and no country match
    ],
)
def test_distance_bands(account_lat, account_lng, expected):
    seller = {"state": "NY", "lat": 40.7128, "lng": -74.0060}
    account = {"state": None, "lat": account_lat, "lng": account_lng}
    assert fit.geography_points(seller, account) == expected


def test_distance_falls_back_to_country():
    seller = {"lat": 40.7128, "lng": -74.0060, "country": "USA"}
    account = {"lat": 34.0522, "lng": -118.2437, "country": "USA"}
    assert fit.geography_points(seller, account) == fit.COUNTRY_ONLY_POINTS


def test_distance_miles_new_york_to_los_angeles():
    miles = fit.distance_miles(40.7128, -74.0060, 34.0522, -118.2437)
    assert 2400 < miles < 2500


def test_bad_coordinates_are_ignored():
    seller = {"lat": "not-a-number", "lng": -74.0}
    account = {"lat": 40.0, "lng": -74.0}
    assert fit.geography_points(seller, account) == 0


def test_score_is_deterministic_and_bounded():
    account = _account(state="CA")
    scores = {fit.score(SELLER, account) for _ in range(5)}
    assert len(scores) == 1
    assert 0 <= scores.pop() <= 100


def test_score_many_keys_by_account_id():
    accounts = [_account(id="a"), _account(id="b", current_division="GDT")]
    assert fit.score_many(SELLER, accounts) == {"a": 100, "b": 60}
