"""
Schedule Date Allocation

One timestamp per round. Caller-supplied custom dates win outright (no
ordering validation); otherwise rounds are spaced from the start date by the
configured cadence.
"""

from datetime import datetime, timedelta, timezone
from typing import List, Optional, Sequence

from season_engine.services.competition_format import CompetitionFormat


def allocate_round_dates(
    fmt: CompetitionFormat, rounds_needed: int, now: Optional[datetime] = None
) -> List[datetime]:
    """
    Return round dates for rounds 1..rounds_needed (index 0 = round 1).

    With custom dates the list may be shorter than rounds_needed; the missing
    rounds are dateless (see date_for_round).
    """
    if rounds_needed <= 0:
        return []

    schedule = fmt.schedule
    if schedule.custom_dates:
        return list(schedule.custom_dates[:rounds_needed])

    start = schedule.start_date or now or datetime.now(timezone.utc)
    step = timedelta(days=schedule.cadence_days)
    return [start + step * i for i in range(rounds_needed)]


def date_for_round(dates: Sequence[datetime], round_number: int) -> Optional[datetime]:
    """Date for a 1-based round, or None (TBD) when the round has no allocated date."""
    if round_number < 1 or round_number > len(dates):
        return None
    return dates[round_number - 1]
