from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from game_hub.schemas.game_engine import Player, utc_now


class RoomStatus(str, Enum):
    WAITING = "waiting"
    PLAYING = "playing"
    FINISHED = "finished"


class LobbyMessageType(str, Enum):
    PLAYER_JOINED = "player_joined"
    PLAYER_LEFT = "player_left"
    PLAYER_READY_CHANGED = "player_ready_changed"
    GAME_CREATED = "game_created"
    GAME_STARTED = "game_started"
    GAME_ENDED = "game_ended"
    GAME_DELETED = "game_deleted"
    MOVE_MADE = "move_made"


class GameRoom(BaseModel):
    id: str
    name: str
    game_type: str
    players: list[Player] = []
    max_players: int
    status: RoomStatus = RoomStatus.WAITING
    is_private: bool = False
    created: datetime = Field(default_factory=utc_now)
    last_activity: datetime = Field(default_factory=utc_now)
    finished_at: datetime | None = None


class LobbyMessage(BaseModel):
    """Message broadcast by the room directory to its subscribers."""

    type: LobbyMessageType
    data: dict[str, Any] = {}
    timestamp: datetime = Field(default_factory=utc_now)
    sender: str | None = None
