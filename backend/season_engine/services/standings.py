"""
Season Standings

Record per team from completed matches only:
- winner_team_id is None  -> draw
- winner_team_id == team  -> win
- otherwise               -> loss
points = 3*wins + 1*draws

Sort orders (deterministic):
- points (default): points desc, wins desc, name asc
- wins:             wins desc, points desc, name asc
- name:             name asc

Ranks are assigned sequentially after sorting (1, 2, 3, ...). Tied teams do
NOT share a rank.
"""

from dataclasses import asdict, dataclass, field
from typing import Dict, Iterable, List, Sequence, Tuple

from sqlmodel import Session

from season_engine.models.match import MatchStatus
from season_engine.services.match_store import SqlSeasonStore

SORT_POINTS = "points"
SORT_WINS = "wins"
SORT_NAME = "name"
SORT_OPTIONS = (SORT_POINTS, SORT_WINS, SORT_NAME)

POINTS_PER_WIN = 3
POINTS_PER_DRAW = 1


@dataclass
class TeamRecord:
    wins: int = 0
    losses: int = 0
    draws: int = 0

    @property
    def points(self) -> int:
        return self.wins * POINTS_PER_WIN + self.draws * POINTS_PER_DRAW


@dataclass
class StandingsRow:
    rank: int
    team_id: int
    name: str
    wins: int
    losses: int
    draws: int
    points: int

    def to_dict(self) -> Dict:
        return asdict(self)


@dataclass
class SeasonStandings:
    season_id: int
    sort_by: str
    rows: List[StandingsRow] = field(default_factory=list)
    completed_matches: int = 0

    def to_dict(self) -> Dict:
        return {
            "season_id": self.season_id,
            "sort_by": self.sort_by,
            "rows": [r.to_dict() for r in self.rows],
        }


def _is_completed(match) -> bool:
    return (match.status or "") == MatchStatus.completed.value


def compute_team_record(team_id: int, matches: Iterable) -> TeamRecord:
    """Win/loss/draw for one team over the matches it played."""
    record = TeamRecord()
    for m in matches:
        if not _is_completed(m):
            continue
        if team_id not in (m.team_a_id, m.team_b_id):
            continue
        if m.winner_team_id is None:
            record.draws += 1
        elif m.winner_team_id == team_id:
            record.wins += 1
        else:
            record.losses += 1
    return record


def _name_key(name: str) -> Tuple[str, str]:
    return (name.casefold(), name)


def _sort_key(sort_by: str):
    if sort_by == SORT_NAME:
        return lambda r: _name_key(r.name)
    if sort_by == SORT_WINS:
        return lambda r: (-r.wins, -r.points, _name_key(r.name))
    return lambda r: (-r.points, -r.wins, _name_key(r.name))


def rank_standings(rows: List[StandingsRow], sort_by: str = SORT_POINTS) -> List[StandingsRow]:
    """Sort rows and assign sequential ranks starting at 1."""
    ordered = sorted(rows, key=_sort_key(sort_by))
    for idx, row in enumerate(ordered, start=1):
        row.rank = idx
    return ordered


def compute_standings(
    teams: Sequence[Tuple[int, str]], matches: Sequence, sort_by: str = SORT_POINTS
) -> List[StandingsRow]:
    """
    Ranked table for (team_id, name) pairs over a season's matches.

    Non-completed matches are ignored, so callers may pass the full season.
    """
    rows: List[StandingsRow] = []
    for team_id, name in teams:
        record = compute_team_record(team_id, matches)
        rows.append(
            StandingsRow(
                rank=0,  # filled after sorting
                team_id=team_id,
                name=name,
                wins=record.wins,
                losses=record.losses,
                draws=record.draws,
                points=record.points,
            )
        )
    return rank_standings(rows, sort_by)


def normalize_sort_by(sort_by) -> str:
    value = str(sort_by or SORT_POINTS).lower()
    return value if value in SORT_OPTIONS else SORT_POINTS


def compute_season_standings(session: Session, season_id: int, sort_by: str = SORT_POINTS) -> SeasonStandings:
    """
    Read-only standings for a season.

    Raises:
        SeasonNotFoundError: season does not exist
    """
    store = SqlSeasonStore(session)
    season = store.get_season(season_id)
    sort_by = normalize_sort_by(sort_by)

    teams = store.list_season_teams(season.id)
    completed = store.list_completed_matches(season.id)

    rows = compute_standings([(t.id, t.name) for t in teams], completed, sort_by)
    return SeasonStandings(season_id=season.id, sort_by=sort_by, rows=rows, completed_matches=len(completed))
