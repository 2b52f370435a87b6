"""Game event types - emitted by a match controller on every state transition.

Events are the only signal subscribers get about a game, enabling:
- Persisting and broadcasting state (room directory)
- Re-rendering (presentation layer)
- Action replay / audit logging
"""

from datetime import datetime
from typing import Annotated, Literal

from pydantic import BaseModel, Field

from game_hub.schemas.game_engine import (
    EndReason,
    GameMove,
    GameResult,
    GameState,
    Player,
    utc_now,
)


class GameEvent(BaseModel):
    """Base class for all game events."""

    event_type: str
    game_id: str
    seq: int = 0  # Sequence number assigned by the controller
    timestamp: datetime = Field(default_factory=utc_now)


class GameStarted(GameEvent):
    """Game has transitioned from WAITING to PLAYING."""

    event_type: Literal["game_started"] = "game_started"
    state: GameState = Field(..., description="Snapshot right after the start")


class MoveMade(GameEvent):
    """A move was committed to the history."""

    event_type: Literal["move_made"] = "move_made"
    move: GameMove = Field(..., description="The committed move, with sequence and timestamp")
    state: GameState


class GameEnded(GameEvent):
    """The game has finished."""

    event_type: Literal["game_ended"] = "game_ended"
    winner_id: str | None = None
    reason: EndReason
    details: str | None = Field(None, description="Human-readable outcome, e.g. 'Connected 4 pieces!'")
    result: GameResult
    state: GameState


class PlayerJoined(GameEvent):
    event_type: Literal["player_joined"] = "player_joined"
    player: Player


class PlayerLeft(GameEvent):
    event_type: Literal["player_left"] = "player_left"
    player: Player


class PlayerReadyChanged(GameEvent):
    """A seated player toggled their ready flag."""

    event_type: Literal["player_ready_changed"] = "player_ready_changed"
    player_id: str
    ready: bool


# Union of all event types for type checking
AnyGameEvent = Annotated[
    GameStarted | MoveMade | GameEnded | PlayerJoined | PlayerLeft | PlayerReadyChanged,
    Field(discriminator="event_type"),
]
