from datetime import datetime, timezone
from typing import TYPE_CHECKING, List, Optional

from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:
    from season_engine.models.match import Match
    from season_engine.models.season import Season


class Team(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    season_id: int = Field(foreign_key="season.id", index=True)
    name: str
    roster_position: Optional[int] = Field(default=None)  # caller-supplied roster order (nulls last, then id)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    # Relationships
    season: "Season" = Relationship(back_populates="teams")
    matches_as_team_a: List["Match"] = Relationship(
        back_populates="team_a", sa_relationship_kwargs={"foreign_keys": "Match.team_a_id"}
    )
    matches_as_team_b: List["Match"] = Relationship(
        back_populates="team_b", sa_relationship_kwargs={"foreign_keys": "Match.team_b_id"}
    )
