"""
Schedule Orchestrator Service - Generate Season Schedule

Orchestrates the complete season generation pipeline:
0. Validate (season, league, competition config, >= 2 teams)
1. Estimate rounds and allocate round dates
2. Clear existing season matches (if regenerate)
3. Build regular season pairings
4. Seed and build playoffs (if enabled and seeding is not manual)
5. Persist generated matches

Steps 2-5 run in one transaction under the per-season lock: a failure rolls
back the wipe together with the partial insert, and concurrent rebuilds of the
same season run one after the other (last writer wins).

Regenerating is a full destructive rebuild. Identical inputs give the same
(round, team_a, team_b, scheduled_at) multiset with new match ids.
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional

from sqlmodel import Session

from season_engine.services.bracket import build_playoffs
from season_engine.services.competition_format import ScheduleWarning, resolve_competition_format
from season_engine.services.generated_match import GeneratedMatch
from season_engine.services.match_store import SqlSeasonStore
from season_engine.services.playoff_seeding import seed_playoffs
from season_engine.services.round_estimator import estimate_total_rounds
from season_engine.services.round_robin import build_regular_season
from season_engine.services.schedule_dates import allocate_round_dates
from season_engine.services.season_lock import season_lock
from season_engine.services.standings import SORT_POINTS, compute_season_standings

logger = logging.getLogger(__name__)

MIN_TEAMS = 2


class ScheduleGenerationError(ValueError):
    """Caller error: generation rejected before any write."""

    pass


class ScheduleBuildFailed(RuntimeError):
    """Write phase failed; the transaction was rolled back."""

    pass


# ============================================================================
# Response Models
# ============================================================================


class ScheduleGenerationResult:
    """Result of one schedule generation run"""

    def __init__(self):
        self.season_id: Optional[int] = None
        self.created = 0
        self.cleared = 0
        self.regular_season_rounds = 0
        self.playoff_matches = 0
        self.warnings: List[ScheduleWarning] = []
        self.applied_defaults: List[str] = []
        self.failed_step: Optional[str] = None

    @property
    def destructive(self) -> bool:
        """True when prior matches (and any results tied to them) were deleted."""
        return self.cleared > 0

    def to_dict(self) -> Dict[str, Any]:
        result = {
            "season_id": self.season_id,
            "created": self.created,
            "cleared": self.cleared,
            "destructive": self.destructive,
            "regular_season_rounds": self.regular_season_rounds,
            "playoff_matches": self.playoff_matches,
            "warnings": [w.to_dict() for w in self.warnings],
            "applied_defaults": list(self.applied_defaults),
        }
        if self.failed_step:
            result["failed_step"] = self.failed_step
        return result


# ============================================================================
# Main Orchestrator Function
# ============================================================================


def generate_schedule(
    session: Session,
    season_id: int,
    regenerate: bool = True,
    competition: Optional[Mapping[str, Any]] = None,
    now: Optional[datetime] = None,
) -> ScheduleGenerationResult:
    """
    Generate and persist the full season schedule.

    Args:
        session: Database session (committed on success, rolled back on failure)
        season_id: Season to generate for
        regenerate: Delete all existing season matches first
        competition: Competition config overriding the season's stored settings
        now: Start date used when the config has none (defaults to current UTC time)

    Returns:
        ScheduleGenerationResult (created, cleared, warnings, applied_defaults)

    Raises:
        SeasonNotFoundError: season does not exist
        CompetitionConfigError: config missing or unparseable
        ScheduleGenerationError: fewer than 2 teams, or season not attached to a league
        ScheduleBuildFailed: persistence failed (nothing written)
    """
    result = ScheduleGenerationResult()
    result.season_id = season_id
    store = SqlSeasonStore(session)

    # ====================================================================
    # Step 0: Validate (caller errors, nothing written yet)
    # ====================================================================
    season = store.get_season(season_id)
    if season.league_id is None:
        raise ScheduleGenerationError(f"Season {season_id} is not attached to a league")

    resolved = resolve_competition_format(competition if competition is not None else season.competition_settings())
    fmt = resolved.format
    result.applied_defaults = list(resolved.applied_defaults)
    result.warnings.extend(resolved.warnings)

    team_ids = [t.id for t in store.list_season_teams(season_id)]
    if len(team_ids) < MIN_TEAMS:
        raise ScheduleGenerationError(
            f"Need at least {MIN_TEAMS} teams to generate matches, season {season_id} has {len(team_ids)}"
        )

    # ====================================================================
    # Step 1: Rounds + dates
    # ====================================================================
    total_rounds = estimate_total_rounds(fmt, len(team_ids))
    dates = allocate_round_dates(fmt, total_rounds, now=now)

    with season_lock(session, season_id):
        try:
            # ============================================================
            # Step 2: Clear existing
            # ============================================================
            result.failed_step = "CLEAR_EXISTING"
            if regenerate:
                result.cleared = store.delete_all_season_matches(season_id)

            # ============================================================
            # Step 3: Regular season
            # ============================================================
            result.failed_step = "BUILD_REGULAR_SEASON"
            regular = build_regular_season(fmt, team_ids, dates)
            result.regular_season_rounds = regular.max_round

            # ============================================================
            # Step 4: Playoffs (optional)
            # ============================================================
            result.failed_step = "BUILD_PLAYOFFS"
            playoffs: List[GeneratedMatch] = []
            if fmt.playoffs_enabled:
                if fmt.playoffs.is_manual:
                    result.warnings.append(
                        ScheduleWarning(
                            code="PLAYOFFS_MANUAL_SEEDING",
                            message="Manual playoff seeding: playoff matches must be created or imported directly",
                        )
                    )
                else:
                    seeding = seed_playoffs(
                        fmt.playoffs,
                        team_ids,
                        lambda: compute_season_standings(session, season_id, SORT_POINTS),
                    )
                    result.warnings.extend(seeding.warnings)
                    playoffs = build_playoffs(fmt.playoffs.type, seeding.team_ids, dates, regular.max_round + 1)
            result.playoff_matches = len(playoffs)

            all_matches = regular.matches + playoffs
            undated_rounds = sorted({m.round for m in all_matches if m.scheduled_at is None})
            if undated_rounds:
                result.warnings.append(
                    ScheduleWarning(
                        code="ROUNDS_WITHOUT_DATE",
                        message=f"No date available for round(s) {undated_rounds}; scheduled_at left empty",
                    )
                )

            # ============================================================
            # Step 5: Persist - single commit
            # ============================================================
            result.failed_step = "PERSIST"
            result.created = store.create_season_matches(season.league_id, season_id, all_matches)

            session.commit()
            result.failed_step = None
        except Exception as e:
            session.rollback()
            logger.exception("Schedule generation failed for season %s, transaction rolled back", season_id)
            raise ScheduleBuildFailed(
                f"Schedule generation failed at step {result.failed_step}: {str(e)}"
            ) from e

    if result.destructive:
        logger.warning(
            "Season %s regenerated: %s prior match(es) and their results deleted", season_id, result.cleared
        )
    for warning in result.warnings:
        logger.info("Season %s schedule warning %s: %s", season_id, warning.code, warning.message)
    logger.info(
        "Season %s schedule generated: format=%s created=%s cleared=%s",
        season_id,
        fmt.format_type.value,
        result.created,
        result.cleared,
    )
    return result
