"""Shared fixtures for game engine tests."""

from typing import Literal

import pytest
from pydantic import BaseModel

from game_hub.config import Settings
from game_hub.schemas.connect4 import COLS, ROWS, DropPiece
from game_hub.schemas.game_engine import GameConfig, GameMove, GameState, Player
from game_hub.services.game.connect4 import Connect4Rules
from game_hub.services.game.engine import (
    ALL_EVENTS,
    MatchController,
    RulesEngine,
    Termination,
    build_move,
)
from game_hub.services.game.registry import build_default_registry
from game_hub.services.room.service import RoomService

# Fixed ids for deterministic testing
PLAYER_1_ID = "player-1"
PLAYER_2_ID = "player-2"
PLAYER_3_ID = "player-3"
PLAYER_4_ID = "player-4"
GAME_ID = "room-0001"

# Row patterns of a full board without any line of four
PATTERN_P = [1, 1, 2, 2, 1, 1, 2]
PATTERN_Q = [2, 2, 1, 1, 2, 2, 1]
DRAW_BOARD = [PATTERN_P, PATTERN_Q, PATTERN_P, PATTERN_Q, PATTERN_P, PATTERN_Q]

# Drop order (players alternate, player 1 first) that builds DRAW_BOARD
DRAW_COLUMNS = [2] + [0] * 6 + [1] * 6 + [4] * 6 + [5] * 6 + [2] * 5 + [3] * 6 + [6] * 6

# Twelve alternating drops that never line up four
NO_WIN_COLUMNS = [0, 1, 2, 3, 4, 5, 6, 0, 1, 2, 3, 4]


def create_player(player_id: str, name: str) -> Player:
    """Helper to create a player."""
    return Player(id=player_id, name=name)


def drop_move(player_id: str, column: int) -> GameMove:
    """Helper to create an uncommitted Connect 4 move."""
    return build_move(player_id, {"column": column}, DropPiece)


def drop(controller: MatchController, player_id: str, column: int) -> bool:
    """Submit a drop on behalf of player_id."""
    return controller.attempt_move(drop_move(player_id, column), player_id)


def play_columns(controller: MatchController, columns: list[int]) -> None:
    """Drop into each column in turn as whoever is to move; every drop must succeed."""
    for column in columns:
        player_id = controller.get_state().current_player
        assert drop(controller, player_id, column), f"drop into column {column} rejected"


def column_has_no_gaps(board: list[list[int]], column: int) -> bool:
    """True if every occupied cell in the column sits on an occupied cell or the floor."""
    for row in range(ROWS - 1):
        if board[row][column] != 0 and board[row + 1][column] == 0:
            return False
    return True


class EventRecorder:
    """Subscribes to every event of a dispatcher and keeps them in order."""

    def __init__(self, controller: MatchController):
        self.events = []
        controller.events.subscribe(ALL_EVENTS, self.events.append)

    @property
    def types(self) -> list[str]:
        return [e.event_type for e in self.events]

    def of_type(self, event_type: str) -> list:
        return [e for e in self.events if e.event_type == event_type]


# ── Minimal second game for exercising the generic controller ────────


class TallyData(BaseModel):
    total: int = 0
    target: int = 10
    last_seat: int | None = None


class AddAmount(BaseModel):
    kind: Literal["add"] = "add"
    amount: int


TALLY_CONFIG = GameConfig(
    id="tally",
    name="tally",
    display_name="Tally",
    description="Add 1-3 to a shared total; whoever reaches the target wins.",
    min_players=2,
    max_players=4,
    estimated_duration="1-2 minutes",
    difficulty="easy",
    category="puzzle",
)


class TallyRules(RulesEngine[TallyData, AddAmount]):
    data_model = TallyData
    move_model = AddAmount

    def __init__(self, reject_apply: bool = False):
        self.reject_apply = reject_apply

    @property
    def config(self) -> GameConfig:
        return TALLY_CONFIG

    def initial_data(self) -> TallyData:
        return TallyData()

    def is_legal(self, data: TallyData, move: GameMove[AddAmount], seat: int) -> bool:
        return 1 <= move.data.amount <= 3

    def apply(self, data: TallyData, move: GameMove[AddAmount], seat: int) -> bool:
        if self.reject_apply:
            return False
        data.total += move.data.amount
        data.last_seat = seat
        return True

    def evaluate_termination(self, data: TallyData, players: list[Player]) -> Termination:
        if data.total >= data.target:
            return Termination(
                is_game_over=True,
                winner_id=players[data.last_seat].id,
                reason="Reached the target",
            )
        return Termination.ongoing()

    def player_view(self, state: GameState, player_id: str) -> TallyData:
        return state.data.model_copy()


def add_move(player_id: str, amount: int) -> GameMove:
    return build_move(player_id, {"amount": amount}, AddAmount)


# ── Fixtures ─────────────────────────────────────────────────────────


@pytest.fixture
def alice() -> Player:
    return create_player(PLAYER_1_ID, "Alice")


@pytest.fixture
def bob() -> Player:
    return create_player(PLAYER_2_ID, "Bob")


@pytest.fixture
def carol() -> Player:
    return create_player(PLAYER_3_ID, "Carol")


@pytest.fixture
def rules() -> Connect4Rules:
    return Connect4Rules()


@pytest.fixture
def connect4_not_started(rules: Connect4Rules, alice: Player, bob: Player) -> MatchController:
    """Two-player Connect 4 match in WAITING status."""
    return MatchController(rules, GAME_ID, [alice, bob])


@pytest.fixture
def connect4_game(connect4_not_started: MatchController) -> MatchController:
    """Two-player Connect 4 match in PLAYING status, Alice to move."""
    assert connect4_not_started.start()
    return connect4_not_started


@pytest.fixture
def tally_three_players(alice: Player, bob: Player, carol: Player) -> MatchController:
    """Three-player tally match in PLAYING status, Alice to move."""
    controller = MatchController(TallyRules(), GAME_ID, [alice, bob, carol])
    assert controller.start()
    return controller


@pytest.fixture
def settings() -> Settings:
    return Settings(GAME_RESULT_GRACE_SECONDS=30, DEFAULT_GAME_TYPE="connect4")


@pytest.fixture
def room_service(settings: Settings, alice: Player, bob: Player, carol: Player) -> RoomService:
    """Room service with Alice, Bob and Carol online."""
    service = RoomService(build_default_registry(), settings=settings)
    for player in (alice, bob, carol):
        service.add_player(player)
    return service


@pytest.fixture
def empty_board() -> list[list[int]]:
    return [[0] * COLS for _ in range(ROWS)]
