"""
Match Store

Narrow repository seam between the scheduling engine and the database. The
generators only see plain values; everything that touches Season/Team/Match
rows goes through here.

SqlSeasonStore never commits. The caller owns the transaction boundary.
"""

from datetime import datetime
from typing import List, Optional, Protocol, Sequence

from sqlalchemy import delete
from sqlmodel import Session, col, func, or_, select

from season_engine.models.match import Match, MatchStatus
from season_engine.models.season import Season
from season_engine.models.team import Team


class SeasonNotFoundError(LookupError):
    """Raised when a season id does not resolve to a row."""

    pass


class MatchStore(Protocol):
    def delete_all_season_matches(self, season_id: int) -> int: ...

    def create_season_match(
        self,
        league_id: int,
        season_id: int,
        round: Optional[int],
        team_a_id: Optional[int],
        team_b_id: Optional[int],
        scheduled_at: Optional[datetime],
        status: MatchStatus = MatchStatus.scheduled,
    ) -> Match: ...

    def list_season_matches(
        self,
        season_id: int,
        round: Optional[int] = None,
        status: Optional[MatchStatus] = None,
        team_id: Optional[int] = None,
    ) -> List[Match]: ...

    def list_completed_matches(self, season_id: int) -> List[Match]: ...


class RosterProvider(Protocol):
    def list_season_teams(self, season_id: int) -> List[Team]: ...


class SqlSeasonStore:
    """MatchStore + RosterProvider backed by a SQLModel session."""

    def __init__(self, session: Session):
        self.session = session

    def get_season(self, season_id: int) -> Season:
        season = self.session.get(Season, season_id)
        if not season:
            raise SeasonNotFoundError(f"Season {season_id} not found")
        return season

    def list_season_teams(self, season_id: int) -> List[Team]:
        """Teams in roster order: roster_position ascending (nulls last), then id."""
        teams = self.session.exec(select(Team).where(Team.season_id == season_id)).all()

        def sort_key(team: Team):
            return (
                (team.roster_position is None, team.roster_position if team.roster_position is not None else 0),
                team.id,
            )

        return sorted(teams, key=sort_key)

    def count_season_matches(self, season_id: int) -> int:
        return self.session.exec(select(func.count(Match.id)).where(Match.season_id == season_id)).one()

    def delete_all_season_matches(self, season_id: int) -> int:
        """Delete every match of the season; returns the number removed."""
        existing = self.count_season_matches(season_id)
        self.session.execute(delete(Match).where(Match.season_id == season_id))
        self.session.flush()
        return existing

    def create_season_match(
        self,
        league_id: int,
        season_id: int,
        round: Optional[int],
        team_a_id: Optional[int],
        team_b_id: Optional[int],
        scheduled_at: Optional[datetime],
        status: MatchStatus = MatchStatus.scheduled,
    ) -> Match:
        match = Match(
            league_id=league_id,
            season_id=season_id,
            round=round,
            team_a_id=team_a_id,
            team_b_id=team_b_id,
            scheduled_at=scheduled_at,
            status=status.value,
        )
        self.session.add(match)
        return match

    def create_season_matches(self, league_id: int, season_id: int, generated: Sequence) -> int:
        """Bulk-add generated matches (anything with round/team_a_id/team_b_id/scheduled_at)."""
        for m in generated:
            self.create_season_match(
                league_id=league_id,
                season_id=season_id,
                round=m.round,
                team_a_id=m.team_a_id,
                team_b_id=m.team_b_id,
                scheduled_at=m.scheduled_at,
            )
        self.session.flush()
        return len(generated)

    def list_season_matches(
        self,
        season_id: int,
        round: Optional[int] = None,
        status: Optional[MatchStatus] = None,
        team_id: Optional[int] = None,
    ) -> List[Match]:
        """Season matches ordered by round (nulls last), scheduled_at, id. team_id matches either slot."""
        query = select(Match).where(Match.season_id == season_id)
        if round is not None:
            query = query.where(Match.round == round)
        if status is not None:
            query = query.where(Match.status == MatchStatus(status).value)
        if team_id is not None:
            query = query.where(or_(Match.team_a_id == team_id, Match.team_b_id == team_id))
        query = query.order_by(
            col(Match.round).is_(None),
            col(Match.round),
            col(Match.scheduled_at),
            col(Match.id),
        )
        return list(self.session.exec(query).all())

    def list_completed_matches(self, season_id: int) -> List[Match]:
        return self.list_season_matches(season_id, status=MatchStatus.completed)
