"""Move construction - turns raw client payloads into typed GameMove records."""

import uuid

from pydantic import BaseModel, ValidationError

from game_hub.schemas.game_engine import GameMove


def build_move_data(payload: dict, move_model: type[BaseModel]) -> BaseModel:
    """Build the game-specific move data from a raw payload dict.

    Args:
        payload: Dict with move-specific fields, e.g. {"kind": "drop", "column": 3}.
        move_model: The pydantic type the game expects as GameMove.data.

    Returns:
        The validated move data.

    Raises:
        ValueError: If the payload does not match move_model.
    """
    if not isinstance(payload, dict):
        raise ValueError(f"Move payload must be a dict, got {type(payload).__name__}")
    try:
        return move_model.model_validate(payload)
    except ValidationError as e:
        raise ValueError(f"Invalid {move_model.__name__} payload: {e}") from e


def build_move(
    player_id: str,
    payload: dict,
    move_model: type[BaseModel],
    move_type: str = "game_move",
) -> GameMove:
    """Build an uncommitted GameMove with a fresh id.

    sequence and timestamp are left at their defaults; the controller assigns
    them when the move is committed.

    Raises:
        ValueError: If the payload does not match move_model.
    """
    data = build_move_data(payload, move_model)
    return GameMove[move_model](
        id=uuid.uuid4().hex,
        player_id=player_id,
        type=move_type,
        data=data,
    )
