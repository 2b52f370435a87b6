"""Game service module.

Provides:
- Generic match lifecycle (engine/)
- Concrete rule sets (connect4/)
- Game-type registry (registry.py)
"""

# Re-exports for convenience
from .connect4 import Connect4Rules
from .engine import (
    EventDispatcher,
    MatchController,
    RulesEngine,
    Termination,
    build_move,
)
from .registry import GameRegistry, build_default_registry

__all__ = [
    # Registry
    "GameRegistry",
    "build_default_registry",
    # Engine
    "EventDispatcher",
    "MatchController",
    "RulesEngine",
    "Termination",
    "build_move",
    # Games
    "Connect4Rules",
]
