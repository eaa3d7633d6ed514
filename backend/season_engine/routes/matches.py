"""
Match result recording. Completed matches feed season standings.
"""
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, ConfigDict, Field
from sqlmodel import Session

from season_engine.database import get_session
from season_engine.services.match_service import MatchNotFoundError, MatchResultError, record_match_result

router = APIRouter()


class MatchResultRequest(BaseModel):
    winner_team_id: Optional[int] = None  # null = draw
    score_team_a: Optional[int] = Field(default=None, ge=0)
    score_team_b: Optional[int] = Field(default=None, ge=0)


class MatchResultResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    season_id: int
    round: Optional[int] = None
    team_a_id: Optional[int] = None
    team_b_id: Optional[int] = None
    scheduled_at: Optional[datetime] = None
    status: str
    winner_team_id: Optional[int] = None
    score_team_a: Optional[int] = None
    score_team_b: Optional[int] = None


@router.patch("/matches/{match_id}/result", response_model=MatchResultResponse)
def update_match_result(match_id: int, payload: MatchResultRequest, session: Session = Depends(get_session)):
    """Record a final result; the match becomes Completed."""
    try:
        return record_match_result(
            session,
            match_id,
            winner_team_id=payload.winner_team_id,
            score_team_a=payload.score_team_a,
            score_team_b=payload.score_team_b,
        )
    except MatchNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except MatchResultError as e:
        raise HTTPException(status_code=422, detail=str(e))
