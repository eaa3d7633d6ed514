"""
Playoff Seeding

Resolves the ordered list of teams entering the playoff bracket.

- record / points / points_for: top N of the standings (sorted by points).
  Standings that fail to load, or a season with no completed match yet,
  fall back to roster order truncated to N.
- manual: roster order truncated to N, returned as a suggestion with a
  warning. The generator never builds a bracket for manual seeding; a
  commissioner creates the matches through direct creation or import.
- anything else: roster-order fallback, with a warning.

N = max(2, configured playoff teams), capped by the number of teams.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

from sqlmodel import Session

from season_engine.services.competition_format import (
    STANDINGS_SEEDING_MODES,
    PlayoffConfig,
    ScheduleWarning,
    resolve_competition_format,
)
from season_engine.services.match_store import SqlSeasonStore
from season_engine.services.standings import SORT_POINTS, SeasonStandings, compute_season_standings

logger = logging.getLogger(__name__)

SOURCE_STANDINGS = "standings"
SOURCE_ROSTER = "roster"


class StandingsUnavailable(Exception):
    """Standings exist but cannot be used for seeding yet."""

    pass


@dataclass
class PlayoffSeeding:
    team_ids: List[int]
    source: str
    warnings: List[ScheduleWarning] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "team_ids": list(self.team_ids),
            "source": self.source,
            "warnings": [w.to_dict() for w in self.warnings],
        }


def _fallback_warning(reason) -> ScheduleWarning:
    return ScheduleWarning(
        code="SEEDING_FALLBACK",
        message=f"Standings unavailable for seeding ({reason}); using roster order",
    )


def seed_playoffs(
    playoffs: PlayoffConfig,
    roster_team_ids: Sequence[int],
    standings_loader: Callable[[], SeasonStandings],
) -> PlayoffSeeding:
    """Order the playoff field; never raises on a standings failure."""
    count = playoffs.team_count
    warnings: List[ScheduleWarning] = []

    if playoffs.is_manual:
        warnings.append(
            ScheduleWarning(
                code="MANUAL_SEEDING_SUGGESTION",
                message="Manual seeding: roster order is only a suggestion; create playoff matches directly",
            )
        )
    elif playoffs.seeding in STANDINGS_SEEDING_MODES:
        try:
            standings = standings_loader()
            if standings.completed_matches == 0:
                raise StandingsUnavailable("no completed matches yet")
            ids = [row.team_id for row in standings.rows][:count]
            if len(ids) >= 2:
                return PlayoffSeeding(team_ids=ids, source=SOURCE_STANDINGS)
            raise StandingsUnavailable(f"only {len(ids)} ranked team(s)")
        except StandingsUnavailable as e:
            logger.warning("Playoff seeding: %s; using roster order", e)
            warnings.append(_fallback_warning(e))
        except Exception as e:
            logger.warning("Playoff seeding: standings failed to load; using roster order", exc_info=True)
            warnings.append(_fallback_warning(e))
    else:
        logger.warning("Playoff seeding: unknown seeding mode %r; using roster order", playoffs.seeding)
        warnings.append(
            ScheduleWarning(
                code="UNKNOWN_SEEDING_MODE",
                message=f"Unknown seeding mode {playoffs.seeding!r}; using roster order",
            )
        )

    return PlayoffSeeding(team_ids=list(roster_team_ids)[:count], source=SOURCE_ROSTER, warnings=warnings)


def seed_season_playoffs(
    session: Session, season_id: int, competition: Optional[Mapping[str, Any]] = None
) -> PlayoffSeeding:
    """
    Playoff seeding for a stored season, without generating a bracket.

    Uses the given competition config, or the season's stored settings.

    Raises:
        SeasonNotFoundError: season does not exist
        CompetitionConfigError: no competition config, or it fails to parse
    """
    store = SqlSeasonStore(session)
    season = store.get_season(season_id)

    resolved = resolve_competition_format(competition if competition is not None else season.competition_settings())
    playoffs = resolved.format.playoffs or PlayoffConfig()

    roster = [t.id for t in store.list_season_teams(season.id)]
    seeding = seed_playoffs(
        playoffs,
        roster,
        lambda: compute_season_standings(session, season.id, SORT_POINTS),
    )
    seeding.warnings = resolved.warnings + seeding.warnings
    return seeding
