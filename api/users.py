"""
User API Endpoints

Responsibilities:
1. Player statistics (/user-stats)
"""
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
import logging

from database import get_db
from schemas import UserStatsResponse
from core.sql_repository import SqlGameRepository
from services.stats_service import get_user_stats

router = APIRouter(prefix="/api/users", tags=["users"])
logger = logging.getLogger(__name__)


@router.get("/{user_id}/stats", response_model=UserStatsResponse)
def user_stats(user_id: str, db: Session = Depends(get_db)):
    """
    Statistics of one player across every channel

    Returns:
        - correct_answers
        - times_failed
        - percentage_correct (100 for a player with no answers yet)
    """
    try:
        return UserStatsResponse(**get_user_stats(SqlGameRepository(db), user_id))

    except Exception as e:
        logger.error(f"Failed to get user stats: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal error")
