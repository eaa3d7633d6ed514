"""
Round Count Estimation

Sizes the calendar ahead of pairing generation. These counts are estimates
used to allocate dates only; the builders decide the actual rounds.
"""

import math

from season_engine.services.competition_format import CompetitionFormat, FormatType, PlayoffType


def next_pow2(n: int) -> int:
    """Smallest power of two >= n (1 for n <= 1)."""
    p = 1
    while p < n:
        p *= 2
    return p


def elimination_rounds(team_count: int) -> int:
    """Rounds in a single-elimination bracket: log2(bracket size)."""
    return int(math.ceil(math.log2(next_pow2(team_count))))


def round_robin_rounds(team_count: int) -> int:
    """
    Rounds in one circle-method cycle.
    Even n: n-1 rounds. Odd n: n rounds (one bye per round).
    """
    if team_count % 2 == 0:
        return team_count - 1
    return team_count


def estimate_regular_season_rounds(fmt: CompetitionFormat, team_count: int) -> int:
    base = round_robin_rounds(team_count) * max(1, fmt.legs)
    format_type = fmt.format_type

    if format_type == FormatType.round_robin_double_split:
        return base * 2
    if format_type == FormatType.round_robin_triple_split:
        return base * 3
    if format_type == FormatType.round_robin_quadruple_split:
        return base * 4
    if format_type == FormatType.semi_round_robins:
        return int(math.ceil(base / 2))
    if format_type == FormatType.extended:
        return base + int(math.ceil(base / 2))
    if format_type == FormatType.single_elimination:
        return elimination_rounds(team_count)
    if format_type == FormatType.double_elimination:
        # Skeleton estimate (winners + losers), not an exact losers-bracket model
        return elimination_rounds(team_count) * 2
    # straight_round_robin and multi_level (no separate model yet)
    return base


def estimate_playoff_rounds(fmt: CompetitionFormat) -> int:
    if not fmt.playoffs_enabled:
        return 0
    rounds = elimination_rounds(fmt.playoffs.team_count)
    if fmt.playoffs.type == PlayoffType.double_elimination:
        return rounds * 2
    return rounds


def estimate_total_rounds(fmt: CompetitionFormat, team_count: int) -> int:
    """Regular season rounds plus playoff rounds (when playoffs are enabled)."""
    return estimate_regular_season_rounds(fmt, team_count) + estimate_playoff_rounds(fmt)
