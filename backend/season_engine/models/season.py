from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from sqlalchemy import JSON
from sqlmodel import Column, Field, Relationship, SQLModel

if TYPE_CHECKING:
    from season_engine.models.league import League
    from season_engine.models.match import Match
    from season_engine.models.team import Team


class Season(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    league_id: Optional[int] = Field(default=None, foreign_key="league.id")
    name: str

    # Free-form season settings; "competition" (or legacy "schedule") holds the
    # competition config consumed by the schedule generator.
    settings_json: Optional[Dict[str, Any]] = Field(default=None, sa_column=Column(JSON, nullable=True))
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    # Relationships
    league: Optional["League"] = Relationship(back_populates="seasons")
    teams: List["Team"] = Relationship(back_populates="season")
    matches: List["Match"] = Relationship(back_populates="season")

    def competition_settings(self) -> Optional[Dict[str, Any]]:
        """Competition config from settings, falling back to the legacy "schedule" key."""
        settings = self.settings_json or {}
        return settings.get("competition") or settings.get("schedule") or None
