"""
Season match operations outside automatic generation.

Direct creation and import are how manually seeded playoffs get into a
season. Result recording is the only path that marks a match Completed,
which is what standings count.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime, time, timezone
from typing import Dict, List, Optional, Sequence

from sqlmodel import Session

from season_engine.models.match import Match, MatchStatus
from season_engine.services.match_store import SqlSeasonStore

logger = logging.getLogger(__name__)

IMPORT_REPLACE = "replace"
IMPORT_APPEND = "append"

UNDATED_KEY = "TBD"


class MatchNotFoundError(LookupError):
    pass


class MatchResultError(ValueError):
    """Raised when a submitted result is inconsistent with the match."""

    pass


class MatchInputError(ValueError):
    pass


@dataclass
class MatchInput:
    round: Optional[int]
    team_a_id: Optional[int]
    team_b_id: Optional[int]
    scheduled_at: Optional[datetime] = None


def _season_league_id(store: SqlSeasonStore, season_id: int) -> int:
    season = store.get_season(season_id)
    if season.league_id is None:
        raise MatchInputError(f"Season {season_id} is not attached to a league")
    return season.league_id


def _validate_input(m: MatchInput, roster_ids: set) -> None:
    if m.round is not None and m.round < 1:
        raise MatchInputError(f"Invalid round {m.round}")
    for team_id in (m.team_a_id, m.team_b_id):
        if team_id is not None and team_id not in roster_ids:
            raise MatchInputError(f"Team {team_id} is not in this season")
    if m.team_a_id is not None and m.team_a_id == m.team_b_id:
        raise MatchInputError("A team cannot play itself")


def list_season_matches(
    session: Session,
    season_id: int,
    round: Optional[int] = None,
    status: Optional[MatchStatus] = None,
    team_id: Optional[int] = None,
) -> List[Match]:
    store = SqlSeasonStore(session)
    store.get_season(season_id)
    return store.list_season_matches(season_id, round=round, status=status, team_id=team_id)


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; they were written as UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def season_match_calendar(
    session: Session, season_id: int, date_from: Optional[date] = None, date_to: Optional[date] = None
) -> List[Dict]:
    """
    Season matches grouped by day: [{"date": "YYYY-MM-DD" | "TBD", "matches": [...]}].

    Dated matches outside [date_from, date_to] (inclusive, UTC days) are
    dropped; undated matches are always kept under "TBD".
    """
    lower = datetime.combine(date_from, time.min, tzinfo=timezone.utc) if date_from else None
    upper = datetime.combine(date_to, time.max, tzinfo=timezone.utc) if date_to else None

    days: Dict[str, List[Match]] = {}
    for m in list_season_matches(session, season_id):
        if m.scheduled_at is None:
            key = UNDATED_KEY
        else:
            when = _as_utc(m.scheduled_at)
            if lower and when < lower:
                continue
            if upper and when > upper:
                continue
            key = when.date().isoformat()
        days.setdefault(key, []).append(m)

    # ISO dates sort chronologically; "TBD" sorts after digits
    return [{"date": key, "matches": days[key]} for key in sorted(days)]


def create_match(session: Session, season_id: int, match: MatchInput) -> Match:
    """Create one Scheduled match directly (manual fixtures, manual playoffs)."""
    store = SqlSeasonStore(session)
    league_id = _season_league_id(store, season_id)
    _validate_input(match, {t.id for t in store.list_season_teams(season_id)})

    row = store.create_season_match(
        league_id=league_id,
        season_id=season_id,
        round=match.round,
        team_a_id=match.team_a_id,
        team_b_id=match.team_b_id,
        scheduled_at=match.scheduled_at,
    )
    session.commit()
    session.refresh(row)
    return row


def import_matches(session: Session, season_id: int, matches: Sequence[MatchInput], mode: str = IMPORT_APPEND) -> Dict:
    """
    Bulk import.

    replace: wipe the season's matches then insert, in one transaction
             -> {"created": n, "replaced": removed}
    append:  insert only -> {"created": n}
    """
    if mode not in (IMPORT_REPLACE, IMPORT_APPEND):
        raise MatchInputError(f"mode must be '{IMPORT_REPLACE}' or '{IMPORT_APPEND}', got {mode!r}")

    store = SqlSeasonStore(session)
    league_id = _season_league_id(store, season_id)
    roster_ids = {t.id for t in store.list_season_teams(season_id)}
    for m in matches:
        _validate_input(m, roster_ids)

    try:
        replaced = store.delete_all_season_matches(season_id) if mode == IMPORT_REPLACE else None
        created = store.create_season_matches(league_id, season_id, matches)
        session.commit()
    except Exception:
        session.rollback()
        logger.exception("Match import failed for season %s, transaction rolled back", season_id)
        raise

    if replaced is not None:
        logger.warning("Season %s match import replaced %s match(es)", season_id, replaced)
        return {"created": created, "replaced": replaced}
    return {"created": created}


def record_match_result(
    session: Session,
    match_id: int,
    winner_team_id: Optional[int],
    score_team_a: Optional[int] = None,
    score_team_b: Optional[int] = None,
) -> Match:
    """
    Mark a match Completed with its outcome. winner_team_id None records a draw.

    Placeholder matches (a team slot still empty) cannot take a result.
    """
    match = session.get(Match, match_id)
    if not match:
        raise MatchNotFoundError(f"Match {match_id} not found")

    if match.team_a_id is None or match.team_b_id is None:
        raise MatchResultError("Both teams must be set before a result can be recorded")
    if winner_team_id is not None and winner_team_id not in (match.team_a_id, match.team_b_id):
        raise MatchResultError(f"Winner {winner_team_id} did not play in match {match_id}")
    if match.status in (MatchStatus.voided.value, MatchStatus.archived.value):
        raise MatchResultError(f"Cannot record a result on a {match.status} match")

    match.winner_team_id = winner_team_id
    match.score_team_a = score_team_a
    match.score_team_b = score_team_b
    match.status = MatchStatus.completed.value
    session.add(match)
    session.commit()
    session.refresh(match)
    return match


def update_season_match(
    session: Session,
    season_id: int,
    match_id: int,
    scheduled_at: Optional[datetime] = None,
    status: Optional[MatchStatus] = None,
) -> Match:
    """
    Reschedule a match or move it through its lifecycle.

    None leaves a field unchanged. This is how an undated round (e.g. a
    double-elimination grand final) gets its date without a destructive
    re-import.
    """
    SqlSeasonStore(session).get_season(season_id)

    match = session.get(Match, match_id)
    if not match or match.season_id != season_id:
        raise MatchNotFoundError(f"Match {match_id} not found in season {season_id}")

    if scheduled_at is not None:
        match.scheduled_at = scheduled_at
    if status is not None:
        match.status = MatchStatus(status).value
    session.add(match)
    session.commit()
    session.refresh(match)
    logger.info(
        "Season %s match %s updated: scheduled_at=%s status=%s", season_id, match_id, match.scheduled_at, match.status
    )
    return match
