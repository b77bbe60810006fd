"""
Answer API Endpoints

Every message posted in a registered channel is forwarded here by the chat
layer. The response tells the chat layer what to post and how to react:
- valid=True: react positively
- valid=False: react negatively and post message unless silent
- cycle_complete=True: the catalog direction was reversed
"""
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
import logging

from database import get_db, get_settings
from schemas import AnswerSubmit, OutcomeResponse
from core.catalog import get_catalog
from core.channel_manager import ChannelManager
from core.exceptions import ChannelNotRegistered, PersistenceFailure
from core.game_engine import GameEngine
from core.sql_repository import SqlGameRepository
from services.text_service import normalize_answer

router = APIRouter(prefix="/api/channels", tags=["answers"])
logger = logging.getLogger(__name__)


def get_game_engine(db: Session = Depends(get_db)) -> GameEngine:
    """FastAPI dependency: an engine bound to the request's session"""
    settings = get_settings()
    return GameEngine(
        SqlGameRepository(db),
        get_catalog(),
        similarity_threshold=settings.similarity_threshold,
        disallow_same_player_twice=settings.disallow_same_player_twice,
    )


@router.post("/{channel_id}/answers", response_model=OutcomeResponse)
def submit_answer(
    channel_id: str,
    answer: AnswerSubmit,
    db: Session = Depends(get_db),
    engine: GameEngine = Depends(get_game_engine)
):
    """
    Submit one answer

    Preconditions:
    - the channel must be the registered channel of the guild

    Flow:
    1. Check the registration
    2. Normalize the message (lower case, no punctuation)
    3. Let GameEngine validate it and update the game

    Errors:
        404: channel not registered for this guild (ignore the message)
        503: storage failure (the answer had no effect)
    """
    try:
        # 1. registered channel?
        if not ChannelManager.is_registered_channel(db, channel_id, answer.guild_id):
            raise ChannelNotRegistered(channel_id)

        # 2. normalize
        text = normalize_answer(answer.content)

        # 3. validate and update
        outcome = engine.submit_answer(channel_id, answer.user_id, text)

        logger.info(
            "Answer from %s in channel %s: %s",
            answer.user_id,
            channel_id,
            "valid" if outcome.valid else outcome.reason
        )

        return OutcomeResponse(
            valid=outcome.valid,
            message=outcome.message,
            silent=outcome.silent,
            cycle_complete=outcome.cycle_complete,
            reason=outcome.reason,
            song=outcome.song
        )

    except ChannelNotRegistered:
        raise HTTPException(status_code=404, detail="Channel not registered")
    except PersistenceFailure as e:
        logger.error(f"Storage failure while submitting answer: {e}", exc_info=True)
        raise HTTPException(status_code=503, detail="Game storage unavailable")
    except Exception as e:
        logger.error(f"Failed to submit answer: {e}", exc_info=True)
        db.rollback()
        raise HTTPException(status_code=500, detail="Internal error")
