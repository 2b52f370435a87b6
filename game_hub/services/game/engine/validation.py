"""Validation layer for move attempts.

Separates the checks from the commit logic in the controller:
- validate_move() checks phase, turn ownership and rules legality
- ValidationResult carries an error code instead of raising
"""

import logging
from dataclasses import dataclass

from game_hub.schemas.game_engine import GameMove, GameState, GameStatus

from .rules import RulesEngine

logger = logging.getLogger(__name__)


@dataclass
class ValidationResult:
    """Result of validating a move before it is applied."""

    is_valid: bool = True
    error_code: str | None = None
    error_message: str | None = None

    @classmethod
    def ok(cls) -> "ValidationResult":
        """Create a successful validation result."""
        return cls(is_valid=True)

    @classmethod
    def error(cls, code: str, message: str) -> "ValidationResult":
        """Create a validation failure with error details."""
        return cls(
            is_valid=False,
            error_code=code,
            error_message=message,
        )


def validate_move(
    rules: RulesEngine,
    state: GameState,
    move: GameMove,
    player_id: str,
) -> ValidationResult:
    """Validate a move attempt without mutating anything.

    Checks:
    - Game phase allows moves (started, not finished)
    - The move is attributed to the submitting player
    - It's the submitting player's turn
    - The rules engine accepts the move

    Args:
        rules: Rules engine of the game.
        state: Current game state (the live envelope, read only).
        move: The move to validate.
        player_id: The player submitting the move.

    Returns:
        ValidationResult indicating success or failure with error details.
    """
    logger.debug(
        "Validating move: game=%s, player=%s, status=%s",
        state.game_id,
        player_id,
        state.status.value,
    )

    if state.status == GameStatus.WAITING:
        return ValidationResult.error(
            "GAME_NOT_STARTED",
            "Game has not started yet",
        )

    if state.status == GameStatus.FINISHED:
        return ValidationResult.error(
            "GAME_FINISHED",
            "Game has already finished",
        )

    if state.status != GameStatus.PLAYING:
        return ValidationResult.error(
            "GAME_NOT_ACTIVE",
            f"Game is {state.status.value}",
        )

    if move.player_id != player_id:
        return ValidationResult.error(
            "PLAYER_MISMATCH",
            "Move belongs to a different player",
        )

    if state.current_player != player_id:
        return ValidationResult.error(
            "NOT_YOUR_TURN",
            "It's not your turn",
        )

    seat = next((i for i, p in enumerate(state.players) if p.id == player_id), -1)
    if seat == -1 or not rules.is_legal(state.data, move, seat):
        return ValidationResult.error(
            "ILLEGAL_MOVE",
            f"Move {move.data!r} is not legal",
        )

    return ValidationResult.ok()
