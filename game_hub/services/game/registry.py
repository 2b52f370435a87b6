"""Registry of playable game types.

Built once by the orchestrator at start-up and handed to whatever needs to
create matches; there is no module-level instance.
"""

import logging
from collections.abc import Callable

from game_hub.schemas.game_engine import GameConfig, Player

from .connect4 import Connect4Rules
from .engine import EventDispatcher, MatchController, RulesEngine

logger = logging.getLogger(__name__)

RulesFactory = Callable[[], RulesEngine]


class GameRegistry:
    """Maps game type ids to rules factories."""

    def __init__(self) -> None:
        self._factories: dict[str, RulesFactory] = {}
        self._configs: dict[str, GameConfig] = {}

    def register(self, factory: RulesFactory) -> GameConfig:
        """Register a game type. The id is taken from the rules' config.

        Raises:
            ValueError: If a game with the same id is already registered.
        """
        config = factory().config
        if config.id in self._factories:
            raise ValueError(f"Game type already registered: {config.id}")
        self._factories[config.id] = factory
        self._configs[config.id] = config
        logger.info("Registered game: %s (%s)", config.display_name, config.id)
        return config

    def get(self, game_type: str) -> GameConfig | None:
        return self._configs.get(game_type)

    def available_games(self) -> list[GameConfig]:
        return list(self._configs.values())

    def create_game(
        self,
        game_type: str,
        game_id: str,
        players: list[Player],
        dispatcher: EventDispatcher | None = None,
    ) -> MatchController:
        """Build a fresh match controller for game_type.

        Raises:
            ValueError: If game_type is not registered.
        """
        factory = self._factories.get(game_type)
        if factory is None:
            raise ValueError(
                f"Unknown game: {game_type}. Available: {list(self._factories.keys())}"
            )
        return MatchController(factory(), game_id, players, dispatcher=dispatcher)

    def __contains__(self, game_type: object) -> bool:
        return game_type in self._factories

    def __len__(self) -> int:
        return len(self._factories)


def build_default_registry() -> GameRegistry:
    """Registry with every built-in game."""
    registry = GameRegistry()
    registry.register(Connect4Rules)
    return registry
