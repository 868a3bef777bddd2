"""
tests/test_predictor.py
Unit tests for engine/predictor.py and engine/polisher.py.
"""

import math
from datetime import date, timedelta

import pytest

from engine.aggregator import AggregateResult
from engine.polisher import (
    format_integer,
    format_number,
    format_percent,
    polish_aggregate,
    polish_all,
    polish_breakdown,
)
from engine.predictor import (
    EMPTY_WINDOW_STATUS,
    predict_all,
    predict_fixture,
    predict_from_aggregates,
    window_status,
)
from engine.records import FixtureDescriptor, MatchRecord


# ---------------------------------------------------------------------------
# Fixtures / sample data
# ---------------------------------------------------------------------------

FIXTURE_DATE = date(2025, 3, 1)


def _make_match(days_before, home, away, hg, ag, hs, as_, hst, ast):
    result = "H" if hg > ag else ("D" if hg == ag else "A")
    return MatchRecord(
        match_date=FIXTURE_DATE - timedelta(days=days_before),
        home_team=home,
        away_team=away,
        home_goals=hg,
        away_goals=ag,
        home_shots=hs,
        away_shots=as_,
        home_sot=hst,
        away_sot=ast,
        result=result,
    )


SAMPLE_MATCHES = [
    _make_match(5, "Arsenal", "Chelsea", 2, 1, 15, 9, 6, 3),
    _make_match(12, "Spurs", "Villa", 1, 1, 12, 12, 4, 4),
    _make_match(19, "Arsenal", "Villa", 3, 0, 18, 6, 8, 2),
    _make_match(26, "Spurs", "Chelsea", 0, 2, 10, 13, 3, 6),
    _make_match(33, "Villa", "Chelsea", 1, 0, 11, 10, 4, 3),
    _make_match(40, "Chelsea", "Arsenal", 1, 2, 14, 12, 5, 5),
    _make_match(0, "Arsenal", "Spurs", 5, 0, 20, 2, 10, 1),     # fixture day, excluded
    _make_match(200, "Arsenal", "Spurs", 6, 0, 25, 1, 12, 0),   # outside window
]

FIXTURE = FixtureDescriptor("E0", "Arsenal", "Chelsea", FIXTURE_DATE)


def _agg(**averages) -> AggregateResult:
    return AggregateResult(averages=averages)


# ---------------------------------------------------------------------------
# predictor tests
# ---------------------------------------------------------------------------

class TestPredictFromAggregates:
    def test_end_to_end_goals_scenario(self):
        league = _agg(home_goals=1.5, away_goals=1.2)
        home = _agg(home_goals=2.0, away_goals=1.0)
        away = _agg(home_goals=1.8, away_goals=0.8)
        pred = predict_from_aggregates(home, away, league)
        home_attack = pred.ratings["home_attack_goals"]
        away_defence = pred.ratings["away_defence_goals"]
        assert home_attack == pytest.approx(1.3333, abs=1e-4)
        assert pred.ratings["expected_home_goals"] == pytest.approx(home_attack * away_defence * 1.5)

    def test_lambda_follows_deviation_band(self):
        league = _agg(home_goals=1.5, away_goals=1.2)
        home = _agg(home_goals=2.0, away_goals=1.0)
        away = _agg(home_goals=1.8, away_goals=0.8)
        pred = predict_from_aggregates(home, away, league)
        assert pred.home_delta == pytest.approx(pred.ratings["form_home_goals"] - 1.5)
        assert pred.home_lambda == pytest.approx(pred.ratings["form_home_goals"] * pred.home_multiplier)
        assert pred.home_distribution.lam == pytest.approx(pred.home_lambda)

    def test_ratings_are_read_only(self):
        league = _agg(home_goals=1.5, away_goals=1.2)
        pred = predict_from_aggregates(league, league, league)
        with pytest.raises(TypeError):
            pred.ratings["home_attack_goals"] = 9.0
        assert pred.to_dict()["home_attack_goals"] == pred.ratings["home_attack_goals"]

    def test_empty_aggregates_degenerate_result(self):
        empty = AggregateResult(averages={})
        pred = predict_from_aggregates(empty, empty, empty)
        assert pred.home_lambda == 0.0
        assert pred.away_lambda == 0.0
        assert pred.home_distribution[0] == 1.0
        assert pred.grid.cell(0, 0) == 1.0
        markets = pred.markets
        assert (markets.home_win, markets.draw, markets.away_win) == (0.0, 1.0, 0.0)
        assert markets.btts_no == 1.0


class TestPredictFixture:
    def test_window_excludes_fixture_day_and_old_matches(self):
        breakdown = predict_fixture(SAMPLE_MATCHES, FIXTURE, 90)
        assert breakdown.match_count == 6
        assert breakdown.league_baseline.totals.games_played == 6

    def test_role_filtered_form(self):
        breakdown = predict_fixture(SAMPLE_MATCHES, FIXTURE, 90)
        assert breakdown.home_form.totals.games_played == 2
        assert breakdown.home_form.get("home_goals") == pytest.approx(2.5)
        assert breakdown.away_form.totals.games_played == 3
        assert breakdown.away_form.get("away_goals") == pytest.approx(1.0)

    def test_outputs_are_finite_and_normalized(self):
        pred = predict_fixture(SAMPLE_MATCHES, FIXTURE, 90).prediction
        for name, value in pred.ratings.items():
            assert math.isfinite(value), name
        markets = pred.markets
        assert markets.home_win + markets.draw + markets.away_win == pytest.approx(1.0, abs=1e-6)
        assert pred.grid.total() == pytest.approx(1.0, abs=1e-6)
        assert len(markets.top_scores) == 3

    def test_status_messages(self):
        assert predict_fixture(SAMPLE_MATCHES, FIXTURE, 90).status == (
            "Using 6 matches from the historical pool."
        )
        assert window_status(0) == EMPTY_WINDOW_STATUS

    def test_zero_matches_in_window(self):
        fixture = FixtureDescriptor("E0", "Arsenal", "Chelsea", date(2030, 1, 1))
        breakdown = predict_fixture(SAMPLE_MATCHES, fixture, 60)
        assert breakdown.match_count == 0
        assert breakdown.status == EMPTY_WINDOW_STATUS
        for agg in (breakdown.home_form, breakdown.away_form, breakdown.league_baseline):
            assert all(v is None for v in agg.averages.values())
            assert agg.totals.games_played == 0
        pred = breakdown.prediction
        assert all(math.isfinite(v) for v in pred.ratings.values())
        assert pred.home_distribution[0] == 1.0

    def test_missing_fixture_date_degrades_silently(self):
        fixture = FixtureDescriptor("E0", "Arsenal", "Chelsea", None)
        breakdown = predict_fixture(SAMPLE_MATCHES, fixture, 90)
        assert breakdown.match_count == 0
        assert breakdown.prediction.markets.draw == 1.0

    def test_prefiltered_window_is_used(self):
        window = tuple(SAMPLE_MATCHES[:2])
        breakdown = predict_fixture(SAMPLE_MATCHES, FIXTURE, 90, window=window)
        assert breakdown.match_count == 2

    def test_to_dict_is_flat(self):
        data = predict_fixture(SAMPLE_MATCHES, FIXTURE, 90).prediction.to_dict()
        for key in ("home_attack_goals", "form_away_goals", "home_lambda", "btts_yes", "grid"):
            assert key in data
        assert len(data["grid"]) == 11
        assert len(data["home_distribution"]) == 11


class TestPredictAll:
    def test_handles_empty_list(self):
        assert predict_all({}, [], 90) == []

    def test_uses_each_fixture_league(self):
        fixtures = [
            FIXTURE,
            FixtureDescriptor("E1", "Leeds", "Burnley", FIXTURE_DATE),
        ]
        results = predict_all({"E0": SAMPLE_MATCHES}, fixtures, 90)
        assert len(results) == 2
        assert results[0].match_count == 6
        assert results[1].match_count == 0

    def test_window_lookup_is_used(self):
        calls = []

        def window_for(fixture, window_days):
            calls.append((fixture.fixture_id, window_days))
            return tuple(SAMPLE_MATCHES[:2])

        results = predict_all({"E0": SAMPLE_MATCHES}, [FIXTURE], 90, window_for=window_for)
        assert calls == [(FIXTURE.fixture_id, 90)]
        assert results[0].match_count == 2

    def test_failing_fixture_is_skipped(self):
        other = FixtureDescriptor("E0", "Spurs", "Villa", FIXTURE_DATE)

        def window_for(fixture, window_days):
            if fixture.home_team == "Spurs":
                raise RuntimeError("boom")
            return tuple(SAMPLE_MATCHES[:3])

        results = predict_all({"E0": SAMPLE_MATCHES}, [other, FIXTURE], 90, window_for=window_for)
        assert [r.fixture for r in results] == [FIXTURE]


# ---------------------------------------------------------------------------
# polisher tests
# ---------------------------------------------------------------------------

class TestFormatting:
    def test_absent_is_na(self):
        assert format_number(None) == "N/A"
        assert format_number(float("nan")) == "N/A"
        assert format_percent(None) == "N/A"

    def test_zero_is_not_na(self):
        assert format_number(0.0) == "0.00"

    def test_number_and_integer(self):
        assert format_number(1.236) == "1.24"
        assert format_integer(None) == "0"
        assert format_integer(4.6) == "5"

    def test_percent(self):
        assert format_percent(0.4567) == "45.7%"


class TestPolish:
    def test_empty_aggregate_table(self):
        text = polish_aggregate("Home Team Form", AggregateResult())
        assert "Home Team Form" in text
        assert "N/A" in text
        assert "Games 0" in text

    def test_breakdown_report(self):
        text = polish_breakdown(predict_fixture(SAMPLE_MATCHES, FIXTURE, 90))
        assert "Arsenal v Chelsea" in text
        assert "Premier League" in text
        assert "BTTS" in text
        assert "9+" in text
        assert "1. " in text

    def test_polish_all_empty(self):
        assert polish_all([]) == "No upcoming fixtures to analyse."
