from season_engine.models.league import League
from season_engine.models.match import Match, MatchStatus
from season_engine.models.season import Season
from season_engine.models.team import Team

__all__ = [
    "League",
    "Season",
    "Team",
    "Match",
    "MatchStatus",
]
