"""
Rules engine contract.

Every turn-based game plugged into a MatchController implements this
interface. The controller owns the lifecycle (roster, turn pointer, history,
termination); the rules engine only answers game-specific questions about
its own payload.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Generic

from pydantic import BaseModel

from game_hub.schemas.game_engine import (
    DataT,
    GameConfig,
    GameMove,
    GameState,
    MoveT,
    Player,
)


@dataclass
class Termination:
    """Returned by evaluate_termination to tell the controller whether the game is over."""
    is_game_over: bool = False
    winner_id: str | None = None
    reason: str | None = None

    @classmethod
    def ongoing(cls) -> "Termination":
        return cls(is_game_over=False)


class RulesEngine(ABC, Generic[DataT, MoveT]):
    """
    Pure game rules. No lifecycle, no turn order, no notifications.

    Hooks receive the payload explicitly; implementations keep no per-game
    state so one instance could serve several controllers.
    """

    # Pydantic types of the rules payload and of GameMove.data
    data_model: type[BaseModel]
    move_model: type[BaseModel]

    @property
    @abstractmethod
    def config(self) -> GameConfig:
        """Static description of the game, including the player count range."""
        ...

    @abstractmethod
    def initial_data(self) -> DataT:
        """Create the rules payload for a fresh game."""
        ...

    @abstractmethod
    def is_legal(self, data: DataT, move: GameMove[MoveT], seat: int) -> bool:
        """
        Whether the move is allowed on the current payload.
        seat is the mover's 0-based roster index. Must not mutate data.
        """
        ...

    @abstractmethod
    def apply(self, data: DataT, move: GameMove[MoveT], seat: int) -> bool:
        """
        Mutate data to reflect the move.
        Returns False if the move could not be applied after all; data must
        then be left unchanged.
        """
        ...

    @abstractmethod
    def evaluate_termination(self, data: DataT, players: list[Player]) -> Termination:
        """Decide whether the last applied move ended the game."""
        ...

    @abstractmethod
    def player_view(self, state: GameState[DataT, MoveT], player_id: str) -> BaseModel:
        """
        Return the per-player projection of the state.
        For fully-open-information games this only adds convenience fields.
        """
        ...
