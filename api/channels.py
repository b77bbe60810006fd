"""
Channel API Endpoints

Responsibilities:
1. Register the game channel of a guild (/setchannel)
2. Channel summary (score, high score, progress)
"""
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
import logging

from database import get_db
from schemas import ChannelRegister, ChannelResponse
from core.channel_manager import ChannelManager
from core.exceptions import ChannelNotRegistered

router = APIRouter(prefix="/api/channels", tags=["channels"])
logger = logging.getLogger(__name__)


def _channel_response(db: Session, channel_id: str) -> ChannelResponse:
    channel = ChannelManager.get_channel(db, channel_id)
    response = ChannelResponse.model_validate(channel)
    response.used_songs = ChannelManager.get_used_song_count(db, channel_id)
    return response


@router.post("", response_model=ChannelResponse, status_code=201)
def register_channel(data: ChannelRegister, db: Session = Depends(get_db)):
    """
    Register the channel the bot listens in (clears previous data)

    Flow:
    1. Remove the guild's previous channel and its songs
    2. Create a fresh game in the new channel
    3. Return the channel summary
    """
    try:
        ChannelManager.register_channel_for_guild(db, data.guild_id, data.channel_id)
        return _channel_response(db, data.channel_id)

    except Exception as e:
        logger.error(f"Failed to register channel: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal error")


@router.get("/{channel_id}", response_model=ChannelResponse)
def get_channel(channel_id: str, db: Session = Depends(get_db)):
    """
    Channel summary

    Returns:
        - score / high_score
        - stage, subsection and entries so far
        - highest_album: album reached by the best run
        - rounds_completed: full cycles behind the best run
    """
    try:
        return _channel_response(db, channel_id)

    except ChannelNotRegistered:
        raise HTTPException(status_code=404, detail="Channel not registered")
    except Exception as e:
        logger.error(f"Failed to get channel: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal error")
