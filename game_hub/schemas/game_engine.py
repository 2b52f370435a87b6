from datetime import datetime, timezone
from enum import Enum
from typing import Generic, Literal, TypeVar

from pydantic import BaseModel, Field

# Rules payload and move payload types, fixed per game
DataT = TypeVar("DataT")
MoveT = TypeVar("MoveT")


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


# Game lifecycle
class GameStatus(str, Enum):
    WAITING = "waiting"
    PLAYING = "playing"
    PAUSED = "paused"  # Reserved, no transition enters it
    FINISHED = "finished"


class EndReason(str, Enum):
    COMPLETED = "completed"
    ABANDONED = "abandoned"
    TIMEOUT = "timeout"


# Roster entries supplied by the identity provider / room directory
class Player(BaseModel):
    id: str
    name: str
    avatar: str | None = None
    is_host: bool | None = None
    is_ready: bool | None = None


class GameMove(BaseModel, Generic[MoveT]):
    """A single move record. sequence and timestamp are set by the engine at commit."""

    id: str
    player_id: str
    type: str = "game_move"
    data: MoveT
    sequence: int = 0
    timestamp: datetime | None = None


class GameConfig(BaseModel):
    id: str
    name: str
    display_name: str
    description: str
    min_players: int = Field(..., ge=1)
    max_players: int = Field(..., ge=1)
    estimated_duration: str = Field(..., description="e.g. '5-10 minutes'")
    difficulty: Literal["easy", "medium", "hard"]
    category: Literal["board", "card", "arcade", "puzzle"]
    thumbnail: str = ""
    rules: str | None = None


# Envelope shared by every game; data holds the rules payload
class GameState(BaseModel, Generic[DataT, MoveT]):
    game_id: str
    players: list[Player]
    current_player: str | None = None
    status: GameStatus = GameStatus.WAITING
    winner: str | None = None
    end_reason: EndReason | None = None
    end_details: str | None = None
    data: DataT
    moves: list[GameMove[MoveT]] = []
    timestamp: datetime = Field(default_factory=utc_now)


class GameResult(BaseModel):
    """Summary of a finished game, attached to the game_ended event."""

    game_id: str
    game_type: str
    players: list[Player]
    winner: str | None = None
    duration_seconds: float
    move_count: int
    end_reason: EndReason
    details: str | None = None
    timestamp: datetime = Field(default_factory=utc_now)


class SavedGame(BaseModel, Generic[DataT, MoveT]):
    """Structured encoding of a whole game instance for save/restore."""

    state: GameState[DataT, MoveT]
    moves: list[GameMove[MoveT]]
    players: list[Player]
    current_player_index: int = Field(..., ge=0)
    is_started: bool
    is_finished: bool
    started_at: datetime | None = None
