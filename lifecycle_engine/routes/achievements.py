"""
Achievement routes: evaluation after a client action, and the client's
earned/progress summary.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from lifecycle_engine.database import get_db
from lifecycle_engine.schemas import (
    EvaluateAchievementsRequest, EvaluateAchievementsResponse, ClientAchievementsResponse,
)
from lifecycle_engine.services.achievement_engine import evaluate_achievements, get_client_achievements

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/achievements", tags=["Achievements"])


@router.post("/check", response_model=EvaluateAchievementsResponse)
def check_achievements(data: EvaluateAchievementsRequest, db: Session = Depends(get_db)):
    """Evaluate all active achievements for a client and award any newly met."""
    try:
        return evaluate_achievements(db, data.client_id, data.action_type)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        logger.error(f"Error in check-achievements: {e}")
        raise HTTPException(status_code=500, detail=f"Error checking achievements: {str(e)}")


@router.get("/{client_id}", response_model=ClientAchievementsResponse)
def client_achievements(client_id: int, db: Session = Depends(get_db)):
    """Earned achievements and open progress for a client."""
    try:
        return get_client_achievements(db, client_id)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
