"""
Season Schedule API Routes
Schedule generation, standings, playoff seeding and season match listing.
"""

from datetime import date, datetime
from typing import Any, Dict, List, Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, ConfigDict, Field
from sqlmodel import Session

from season_engine.database import get_session
from season_engine.models.match import MatchStatus
from season_engine.services.competition_format import CompetitionConfigError
from season_engine.services.match_service import (
    IMPORT_APPEND,
    MatchInput,
    MatchInputError,
    MatchNotFoundError,
    create_match,
    import_matches,
    list_season_matches,
    season_match_calendar,
    update_season_match,
)
from season_engine.services.match_store import SeasonNotFoundError
from season_engine.services.playoff_seeding import seed_season_playoffs
from season_engine.services.schedule_orchestrator import (
    ScheduleBuildFailed,
    ScheduleGenerationError,
    generate_schedule,
)
from season_engine.services.standings import compute_season_standings

router = APIRouter()


# ============================================================================
# Request/Response Models
# ============================================================================


class WarningResponse(BaseModel):
    code: str
    message: str


class GenerateScheduleRequest(BaseModel):
    regenerate: bool = True
    competition: Optional[Dict[str, Any]] = None


class GenerateScheduleResponse(BaseModel):
    season_id: int
    created: int
    cleared: int
    # True when prior matches and any results on them were deleted
    destructive: bool
    regular_season_rounds: int
    playoff_matches: int
    warnings: List[WarningResponse] = []
    applied_defaults: List[str] = []


class StandingsRowResponse(BaseModel):
    rank: int
    team_id: int
    name: str
    wins: int
    losses: int
    draws: int
    points: int


class StandingsResponse(BaseModel):
    season_id: int
    sort_by: str
    rows: List[StandingsRowResponse]


class SeedPlayoffsRequest(BaseModel):
    competition: Optional[Dict[str, Any]] = None


class SeedPlayoffsResponse(BaseModel):
    team_ids: List[int]
    source: str
    warnings: List[WarningResponse] = []


class SeasonMatchResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    season_id: int
    league_id: int
    round: Optional[int] = None
    team_a_id: Optional[int] = None
    team_b_id: Optional[int] = None
    scheduled_at: Optional[datetime] = None
    status: str
    winner_team_id: Optional[int] = None
    score_team_a: Optional[int] = None
    score_team_b: Optional[int] = None


class CalendarDayResponse(BaseModel):
    date: str
    matches: List[SeasonMatchResponse]


class MatchCreateRequest(BaseModel):
    round: Optional[int] = Field(default=None, ge=1)
    team_a_id: Optional[int] = None
    team_b_id: Optional[int] = None
    scheduled_at: Optional[datetime] = None

    def to_input(self) -> MatchInput:
        return MatchInput(
            round=self.round,
            team_a_id=self.team_a_id,
            team_b_id=self.team_b_id,
            scheduled_at=self.scheduled_at,
        )


class MatchUpdateRequest(BaseModel):
    scheduled_at: Optional[datetime] = None
    status: Optional[MatchStatus] = None


class MatchImportRequest(BaseModel):
    mode: Literal["replace", "append"] = IMPORT_APPEND
    matches: List[MatchCreateRequest]


class MatchImportResponse(BaseModel):
    created: int
    replaced: Optional[int] = None


# ============================================================================
# Schedule / Standings / Seeding
# ============================================================================


@router.post("/seasons/{season_id}/schedule/generate", response_model=GenerateScheduleResponse)
def generate_season_schedule(
    season_id: int,
    request: Optional[GenerateScheduleRequest] = None,
    session: Session = Depends(get_session),
):
    """
    Generate the season schedule from its competition settings.

    WARNING: regenerate=true (the default) deletes every existing match of the
    season first, including recorded results. A response with cleared > 0
    (destructive=true) means prior schedule state is gone.
    """
    request = request or GenerateScheduleRequest()
    try:
        result = generate_schedule(
            session,
            season_id,
            regenerate=request.regenerate,
            competition=request.competition,
        )
    except SeasonNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except (CompetitionConfigError, ScheduleGenerationError) as e:
        raise HTTPException(status_code=400, detail=str(e))
    except ScheduleBuildFailed as e:
        raise HTTPException(status_code=500, detail=str(e))

    return result.to_dict()


@router.get("/seasons/{season_id}/standings", response_model=StandingsResponse)
def get_season_standings(
    season_id: int,
    sort_by: Literal["points", "wins", "name"] = Query(default="points"),
    session: Session = Depends(get_session),
):
    """Ranked standings from completed matches. Tied teams get distinct, sequential ranks."""
    try:
        standings = compute_season_standings(session, season_id, sort_by)
    except SeasonNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return standings.to_dict()


@router.post("/seasons/{season_id}/playoffs/seed", response_model=SeedPlayoffsResponse)
def seed_season_playoffs_route(
    season_id: int,
    request: Optional[SeedPlayoffsRequest] = None,
    session: Session = Depends(get_session),
):
    """Playoff field in seed order, without generating any matches."""
    request = request or SeedPlayoffsRequest()
    try:
        seeding = seed_season_playoffs(session, season_id, competition=request.competition)
    except SeasonNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except CompetitionConfigError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return seeding.to_dict()


# ============================================================================
# Season Matches
# ============================================================================


@router.get("/seasons/{season_id}/matches", response_model=List[SeasonMatchResponse])
def get_season_matches(
    season_id: int,
    round: Optional[int] = Query(default=None, ge=1),
    status: Optional[MatchStatus] = Query(default=None),
    team_id: Optional[int] = Query(default=None),
    session: Session = Depends(get_session),
):
    """Season matches ordered by round (unrounded last), scheduled_at, id."""
    try:
        return list_season_matches(session, season_id, round=round, status=status, team_id=team_id)
    except SeasonNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.get("/seasons/{season_id}/matches/calendar", response_model=List[CalendarDayResponse])
def get_season_match_calendar(
    season_id: int,
    date_from: Optional[date] = Query(default=None, alias="from"),
    date_to: Optional[date] = Query(default=None, alias="to"),
    session: Session = Depends(get_session),
):
    try:
        return season_match_calendar(session, season_id, date_from=date_from, date_to=date_to)
    except SeasonNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.post("/seasons/{season_id}/matches", response_model=SeasonMatchResponse, status_code=201)
def create_season_match(season_id: int, request: MatchCreateRequest, session: Session = Depends(get_session)):
    """Create one match directly (manual fixtures and manually seeded playoffs)."""
    try:
        return create_match(session, season_id, request.to_input())
    except SeasonNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except MatchInputError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/seasons/{season_id}/matches/import", response_model=MatchImportResponse)
def import_season_matches(season_id: int, request: MatchImportRequest, session: Session = Depends(get_session)):
    """
    Bulk import matches.

    mode=replace deletes every existing season match (and its result) first.
    """
    try:
        return import_matches(session, season_id, [m.to_input() for m in request.matches], mode=request.mode)
    except SeasonNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except MatchInputError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.patch("/seasons/{season_id}/matches/{match_id}", response_model=SeasonMatchResponse)
def update_season_match_route(
    season_id: int, match_id: int, request: MatchUpdateRequest, session: Session = Depends(get_session)
):
    """Reschedule a match or change its status; omitted fields stay as they are."""
    try:
        return update_season_match(
            session, season_id, match_id, scheduled_at=request.scheduled_at, status=request.status
        )
    except (SeasonNotFoundError, MatchNotFoundError) as e:
        raise HTTPException(status_code=404, detail=str(e))
