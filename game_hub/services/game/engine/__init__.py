"""Game engine module - the lifecycle shared by every turn-based game.

This module provides:
- RulesEngine contract that concrete games implement
- MatchController that runs a match of any RulesEngine
- Event types and a synchronous dispatcher for notifications
- ValidationResult pattern for rejected moves

Usage:
    from game_hub.services.game.engine import MatchController, build_move

    controller = MatchController(rules, room_id, players)
    controller.events.subscribe("game_ended", on_game_ended)
    controller.start()

    if not controller.attempt_move(build_move(player_id, payload, rules.move_model), player_id):
        # Rejected: wrong turn, illegal move, game not running...
        ...
"""

# Move construction
from .actions import build_move, build_move_data

# Lifecycle
from .controller import MatchController

# Notifications
from .dispatcher import ALL_EVENTS, EventDispatcher
from .events import (
    AnyGameEvent,
    GameEnded,
    GameEvent,
    GameStarted,
    MoveMade,
    PlayerJoined,
    PlayerLeft,
    PlayerReadyChanged,
)

# Rules contract
from .rules import RulesEngine, Termination

# Validation
from .validation import ValidationResult, validate_move

__all__ = [
    # Moves
    "build_move",
    "build_move_data",
    # Lifecycle
    "MatchController",
    # Notifications
    "ALL_EVENTS",
    "EventDispatcher",
    "AnyGameEvent",
    "GameEvent",
    "GameStarted",
    "MoveMade",
    "GameEnded",
    "PlayerJoined",
    "PlayerLeft",
    "PlayerReadyChanged",
    # Rules
    "RulesEngine",
    "Termination",
    # Validation
    "ValidationResult",
    "validate_move",
]
