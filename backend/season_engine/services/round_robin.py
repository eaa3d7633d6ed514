"""
Regular Season Builder: circle-method round robin and its format variants.

Circle method on the roster (bye sentinel appended for odd counts):
- n-1 rounds for the padded length n
- round r pairs position i with position n-1-i, i in [0, n/2)
- pairs touching the bye are dropped (that team sits out the round)
- after each round: keep position 0, move the last position to index 1

Format variants applied to the per-leg round list:
- straight_round_robin / multi_level: legs cycles back to back
- round_robin_{double,triple,quadruple}_split: whole leg list 2/3/4 times
- semi_round_robins: first ceil(total/2) rounds
- extended: all rounds, then the first ceil(total/2) again
- single/double_elimination: bracket skeleton from roster order

Even-numbered legs swap team A/B (home-and-away).
"""

import logging
import math
from dataclasses import dataclass
from typing import List, Sequence, Tuple

from season_engine.services.bracket import build_double_elimination, build_single_elimination
from season_engine.services.competition_format import CompetitionFormat, FormatType
from season_engine.services.generated_match import GeneratedMatch
from season_engine.services.schedule_dates import date_for_round

logger = logging.getLogger(__name__)

Pairing = Tuple[int, int]

_BYE = object()

SPLIT_REPEATS = {
    FormatType.round_robin_double_split: 2,
    FormatType.round_robin_triple_split: 3,
    FormatType.round_robin_quadruple_split: 4,
}


@dataclass
class RegularSeason:
    matches: List[GeneratedMatch]
    max_round: int


def circle_method_rounds(team_ids: Sequence[int]) -> List[List[Pairing]]:
    """
    One full round-robin cycle in roster order.

    Returns a list of rounds, each a list of (team_a, team_b) pairings. Every
    unordered pair of teams appears exactly once.
    """
    positions: List[object] = list(team_ids)
    if len(positions) % 2 == 1:
        positions.append(_BYE)

    n = len(positions)
    half = n // 2
    rounds: List[List[Pairing]] = []

    for _ in range(n - 1):
        pairs: List[Pairing] = []
        for i in range(half):
            a, b = positions[i], positions[n - 1 - i]
            if a is _BYE or b is _BYE:
                continue
            pairs.append((a, b))
        rounds.append(pairs)

        # Rotate: keep 0, move last to second, shift others
        positions = [positions[0]] + [positions[-1]] + positions[1:-1]

    return rounds


def round_robin_legs(team_ids: Sequence[int], legs: int) -> List[List[Pairing]]:
    """Full cycle repeated per leg; even-numbered legs reverse each pairing."""
    base = circle_method_rounds(team_ids)
    rounds: List[List[Pairing]] = []
    for leg in range(1, max(1, legs) + 1):
        if leg % 2 == 0:
            rounds.extend([[(b, a) for a, b in pairs] for pairs in base])
        else:
            rounds.extend([list(pairs) for pairs in base])
    return rounds


def apply_format_variant(format_type: FormatType, per_leg: List[List[Pairing]]) -> List[List[Pairing]]:
    if format_type in SPLIT_REPEATS:
        return per_leg * SPLIT_REPEATS[format_type]
    if format_type == FormatType.semi_round_robins:
        return per_leg[: int(math.ceil(len(per_leg) / 2))]
    if format_type == FormatType.extended:
        return per_leg + per_leg[: int(math.ceil(len(per_leg) / 2))]
    return per_leg


def build_regular_season(
    fmt: CompetitionFormat, team_ids: Sequence[int], dates: Sequence
) -> RegularSeason:
    """Generate the regular season, stamping each round with its allocated date."""
    if fmt.format_type in (FormatType.single_elimination, FormatType.double_elimination):
        if fmt.format_type == FormatType.double_elimination:
            matches = build_double_elimination(team_ids, dates, 1)
        else:
            matches = build_single_elimination(team_ids, dates, 1)
        return RegularSeason(matches=matches, max_round=max((m.round for m in matches), default=0))

    rounds = apply_format_variant(fmt.format_type, round_robin_legs(team_ids, fmt.legs))

    matches: List[GeneratedMatch] = []
    for round_number, pairs in enumerate(rounds, start=1):
        scheduled_at = date_for_round(dates, round_number)
        for team_a, team_b in pairs:
            matches.append(
                GeneratedMatch(round=round_number, team_a_id=team_a, team_b_id=team_b, scheduled_at=scheduled_at)
            )

    logger.debug(
        "Regular season: format=%s legs=%s teams=%s rounds=%s matches=%s",
        fmt.format_type.value,
        fmt.legs,
        len(team_ids),
        len(rounds),
        len(matches),
    )
    return RegularSeason(matches=matches, max_round=len(rounds))
