"""
Knockout Bracket Skeletons

Round 1 is seeded in standard order (seed 1 v seed N, 2 v N-1, ...) after
padding the seed list with byes up to the next power of two. A bye pairing
produces no match; the seeded team advances without a recorded game.

Later rounds are placeholders with both team slots None. Advancement wiring
(which earlier match feeds which slot) is not modeled here.

Double elimination is a simplified skeleton, not a full topology:
- winners bracket = the single-elimination skeleton
- losers bracket = same number of rounds, max(1, size/4) placeholders each
- one grand-final placeholder
"""

from typing import List, Optional, Sequence, Tuple

from season_engine.services.competition_format import PlayoffType
from season_engine.services.generated_match import GeneratedMatch
from season_engine.services.round_estimator import elimination_rounds, next_pow2
from season_engine.services.schedule_dates import date_for_round


def bracket_pairings(seeded_team_ids: Sequence[int]) -> List[Tuple[Optional[int], Optional[int]]]:
    """
    Round-1 seed pairings for a bracket padded to the next power of two.

    Returns bracket_size/2 pairs in seed order; a bye slot is None.
    """
    size = next_pow2(len(seeded_team_ids))
    seeds: List[Optional[int]] = list(seeded_team_ids) + [None] * (size - len(seeded_team_ids))
    return [(seeds[i], seeds[size - 1 - i]) for i in range(size // 2)]


def build_single_elimination(
    seeded_team_ids: Sequence[int], dates: Sequence, starting_round: int
) -> List[GeneratedMatch]:
    size = next_pow2(len(seeded_team_ids))
    total_rounds = elimination_rounds(len(seeded_team_ids))

    matches: List[GeneratedMatch] = []

    # Round 1: known seeds, byes skipped
    scheduled_at = date_for_round(dates, starting_round)
    for team_a, team_b in bracket_pairings(seeded_team_ids):
        if team_a is None or team_b is None:
            continue
        matches.append(GeneratedMatch(round=starting_round, team_a_id=team_a, team_b_id=team_b, scheduled_at=scheduled_at))

    # Rounds 2..N: participants TBD
    for offset in range(2, total_rounds + 1):
        round_number = starting_round + offset - 1
        matches.extend(_placeholders(round_number, size // 2**offset, dates))

    return matches


def build_double_elimination(
    seeded_team_ids: Sequence[int], dates: Sequence, starting_round: int
) -> List[GeneratedMatch]:
    matches = build_single_elimination(seeded_team_ids, dates, starting_round)

    size = next_pow2(len(seeded_team_ids))
    winners_rounds = elimination_rounds(len(seeded_team_ids))
    losers_per_round = max(1, size // 4)

    round_number = starting_round + winners_rounds
    for _ in range(winners_rounds):
        matches.extend(_placeholders(round_number, losers_per_round, dates))
        round_number += 1

    # Grand final
    matches.extend(_placeholders(round_number, 1, dates))
    return matches


def build_playoffs(
    playoff_type: PlayoffType, seeded_team_ids: Sequence[int], dates: Sequence, starting_round: int
) -> List[GeneratedMatch]:
    if playoff_type == PlayoffType.double_elimination:
        return build_double_elimination(seeded_team_ids, dates, starting_round)
    return build_single_elimination(seeded_team_ids, dates, starting_round)


def _placeholders(round_number: int, count: int, dates: Sequence) -> List[GeneratedMatch]:
    scheduled_at = date_for_round(dates, round_number)
    return [
        GeneratedMatch(round=round_number, team_a_id=None, team_b_id=None, scheduled_at=scheduled_at)
        for _ in range(count)
    ]
