"""
Regular season builder tests

Covers:
- circle method completeness (every pair exactly once per cycle)
- no team double-booked within a round
- odd rosters: exactly one bye per team per cycle
- legs and home/away swap
- format variants
- estimator agrees with builder on round counts
"""

from collections import Counter
from datetime import datetime, timedelta, timezone
from itertools import combinations

import pytest

from season_engine.services.competition_format import CompetitionFormat, FormatType
from season_engine.services.round_estimator import estimate_regular_season_rounds
from season_engine.services.round_robin import (
    apply_format_variant,
    build_regular_season,
    circle_method_rounds,
    round_robin_legs,
)

START = datetime(2026, 1, 5, tzinfo=timezone.utc)


def _weekly(n):
    return [START + timedelta(days=7 * i) for i in range(n)]


def _pair_counts(rounds):
    return Counter(frozenset(p) for pairs in rounds for p in pairs)


def test_four_teams_exact_rotation():
    rounds = circle_method_rounds([1, 2, 3, 4])
    assert rounds == [
        [(1, 4), (2, 3)],
        [(1, 3), (4, 2)],
        [(1, 2), (3, 4)],
    ]


def test_four_teams_three_rounds_six_matches():
    rounds = circle_method_rounds(["A", "B", "C", "D"])

    assert len(rounds) == 3
    assert all(len(pairs) == 2 for pairs in rounds)
    games = Counter(team for pairs in rounds for p in pairs for team in p)
    assert games == {"A": 3, "B": 3, "C": 3, "D": 3}


def test_five_teams_five_rounds_ten_matches():
    teams = ["A", "B", "C", "D", "E"]
    rounds = circle_method_rounds(teams)

    assert len(rounds) == 5
    assert all(len(pairs) == 2 for pairs in rounds)
    assert sum(len(pairs) for pairs in rounds) == 10


@pytest.mark.parametrize("n", range(2, 12))
def test_every_pair_exactly_once(n):
    teams = list(range(1, n + 1))
    counts = _pair_counts(circle_method_rounds(teams))

    assert set(counts) == {frozenset(p) for p in combinations(teams, 2)}
    assert all(c == 1 for c in counts.values())


@pytest.mark.parametrize("n", range(2, 12))
def test_no_team_twice_in_a_round(n):
    for pairs in circle_method_rounds(list(range(1, n + 1))):
        seen = [team for p in pairs for team in p]
        assert len(seen) == len(set(seen))


@pytest.mark.parametrize("n", [3, 5, 7, 9])
def test_odd_roster_each_team_sits_out_once(n):
    teams = list(range(1, n + 1))
    rounds = circle_method_rounds(teams)

    byes = Counter()
    for pairs in rounds:
        playing = {team for p in pairs for team in p}
        for team in set(teams) - playing:
            byes[team] += 1
    assert byes == {team: 1 for team in teams}


def test_second_leg_swaps_home_and_away():
    rounds = round_robin_legs([1, 2, 3, 4], legs=2)

    assert len(rounds) == 6
    first, second = rounds[:3], rounds[3:]
    assert second == [[(b, a) for a, b in pairs] for pairs in first]
    assert all(c == 2 for c in _pair_counts(rounds).values())


def test_three_legs_alternate():
    rounds = round_robin_legs([1, 2, 3, 4], legs=3)
    assert rounds[0:3] == rounds[6:9]
    assert rounds[3][0] == (4, 1)


def test_variants_on_round_list():
    per_leg = circle_method_rounds([1, 2, 3, 4])

    assert apply_format_variant(FormatType.round_robin_triple_split, per_leg) == per_leg * 3
    assert apply_format_variant(FormatType.semi_round_robins, per_leg) == per_leg[:2]
    assert apply_format_variant(FormatType.extended, per_leg) == per_leg + per_leg[:2]
    assert apply_format_variant(FormatType.multi_level, per_leg) == per_leg


def test_build_straight_round_robin_dates_per_round():
    fmt = CompetitionFormat(format_type=FormatType.straight_round_robin)
    season = build_regular_season(fmt, [1, 2, 3, 4], _weekly(3))

    assert season.max_round == 3
    assert len(season.matches) == 6
    for m in season.matches:
        assert m.scheduled_at == START + timedelta(days=7 * (m.round - 1))
        assert not m.is_placeholder


def test_build_with_too_few_dates_leaves_later_rounds_undated():
    fmt = CompetitionFormat(format_type=FormatType.straight_round_robin)
    season = build_regular_season(fmt, [1, 2, 3, 4], _weekly(1))

    assert {m.scheduled_at for m in season.matches if m.round == 1} == {START}
    assert all(m.scheduled_at is None for m in season.matches if m.round > 1)


@pytest.mark.parametrize(
    "format_type,rounds,matches",
    [
        (FormatType.round_robin_double_split, 6, 12),
        (FormatType.round_robin_quadruple_split, 12, 24),
        (FormatType.semi_round_robins, 2, 4),
        (FormatType.extended, 5, 10),
    ],
)
def test_build_variants_four_teams(format_type, rounds, matches):
    season = build_regular_season(CompetitionFormat(format_type=format_type), [1, 2, 3, 4], [])
    assert season.max_round == rounds
    assert len(season.matches) == matches


def test_elimination_format_builds_bracket_from_roster():
    fmt = CompetitionFormat(format_type=FormatType.single_elimination)
    season = build_regular_season(fmt, [11, 12, 13, 14], _weekly(2))

    round_one = [(m.team_a_id, m.team_b_id) for m in season.matches if m.round == 1]
    assert round_one == [(11, 14), (12, 13)]
    assert season.max_round == 2
    assert [m.is_placeholder for m in season.matches if m.round == 2] == [True]


@pytest.mark.parametrize(
    "format_type",
    [
        FormatType.straight_round_robin,
        FormatType.round_robin_double_split,
        FormatType.round_robin_triple_split,
        FormatType.semi_round_robins,
        FormatType.extended,
        FormatType.multi_level,
    ],
)
@pytest.mark.parametrize("n", [2, 3, 4, 5, 8])
@pytest.mark.parametrize("legs", [1, 2])
def test_estimate_matches_built_rounds(format_type, n, legs):
    fmt = CompetitionFormat(format_type=format_type, legs=legs)
    season = build_regular_season(fmt, list(range(1, n + 1)), [])
    assert season.max_round == estimate_regular_season_rounds(fmt, n)
