from datetime import datetime, timezone
from enum import Enum
from typing import TYPE_CHECKING, Optional

from sqlalchemy import String
from sqlmodel import Column, Field, Relationship, SQLModel

if TYPE_CHECKING:
    from season_engine.models.season import Season
    from season_engine.models.team import Team


class MatchStatus(str, Enum):
    scheduled = "Scheduled"
    in_progress = "InProgress"
    awaiting_result = "AwaitingResult"
    completed = "Completed"
    voided = "Voided"
    under_review = "UnderReview"
    archived = "Archived"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Match(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    league_id: int = Field(foreign_key="league.id")
    season_id: int = Field(foreign_key="season.id", index=True)
    round: Optional[int] = Field(default=None, index=True)

    # Null team slots are unresolved knockout placeholders
    team_a_id: Optional[int] = Field(default=None, foreign_key="team.id")
    team_b_id: Optional[int] = Field(default=None, foreign_key="team.id")

    scheduled_at: Optional[datetime] = Field(default=None)  # null = date TBD
    status: str = Field(default=MatchStatus.scheduled.value, sa_column=Column(String, nullable=False))  # MatchStatus value

    # Result fields (written by result recording, never by schedule generation)
    winner_team_id: Optional[int] = Field(default=None, foreign_key="team.id")  # null on a completed match = draw
    score_team_a: Optional[int] = Field(default=None)
    score_team_b: Optional[int] = Field(default=None)

    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow, sa_column_kwargs={"onupdate": _utcnow})

    # Relationships
    season: "Season" = Relationship(back_populates="matches")
    team_a: Optional["Team"] = Relationship(
        back_populates="matches_as_team_a", sa_relationship_kwargs={"foreign_keys": "Match.team_a_id"}
    )
    team_b: Optional["Team"] = Relationship(
        back_populates="matches_as_team_b", sa_relationship_kwargs={"foreign_keys": "Match.team_b_id"}
    )
