"""Match controller - the lifecycle shared by every turn-based game.

The controller owns the envelope (roster, turn pointer, status, history,
timestamps) and delegates game-specific questions to a RulesEngine. All
public mutators return a bool and never raise for rule violations; every
successful mutation is announced through the controller's EventDispatcher.

Usage:
    controller = MatchController(Connect4Rules(), room_id, players)
    controller.events.subscribe("move_made", on_move)
    controller.start()
    controller.attempt_move(build_move(player_id, {"column": 3}, DropPiece), player_id)

Calls for one instance must be serialized by the owner; the controller does
no locking of its own.
"""

import logging
from datetime import datetime
from typing import Generic

from pydantic import BaseModel, ValidationError

from game_hub.schemas.game_engine import (
    DataT,
    EndReason,
    GameConfig,
    GameMove,
    GameResult,
    GameState,
    GameStatus,
    MoveT,
    Player,
    SavedGame,
    utc_now,
)

from .dispatcher import EventDispatcher
from .events import (
    GameEnded,
    GameEvent,
    GameStarted,
    MoveMade,
    PlayerJoined,
    PlayerLeft,
    PlayerReadyChanged,
)
from .rules import RulesEngine
from .validation import validate_move

logger = logging.getLogger(__name__)


class MatchController(Generic[DataT, MoveT]):
    """Runs one match of any RulesEngine from WAITING through FINISHED."""

    def __init__(
        self,
        rules: RulesEngine[DataT, MoveT],
        game_id: str,
        players: list[Player],
        dispatcher: EventDispatcher | None = None,
    ):
        self._rules = rules
        self._game_id = game_id
        self._state_type = GameState[rules.data_model, rules.move_model]
        self._move_type = GameMove[rules.move_model]
        self._saved_type = SavedGame[rules.data_model, rules.move_model]

        self._players: list[Player] = [p.model_copy() for p in players]
        self._current_player_index = 0
        self._moves: list[GameMove[MoveT]] = []
        self._is_started = False
        self._is_finished = False
        self._started_at: datetime | None = None
        self._event_seq = 0

        self.events = dispatcher or EventDispatcher()

        self._state = self._state_type(
            game_id=game_id,
            players=self._roster_copy(),
            current_player=self._players[0].id if self._players else None,
            status=GameStatus.WAITING,
            data=rules.initial_data(),
        )
        logger.debug(
            "Created %s match %s with %d players",
            rules.config.id,
            game_id,
            len(self._players),
        )

    # ── Properties ───────────────────────────────────────────────────

    @property
    def game_id(self) -> str:
        return self._game_id

    @property
    def config(self) -> GameConfig:
        return self._rules.config

    @property
    def rules(self) -> RulesEngine[DataT, MoveT]:
        return self._rules

    @property
    def is_started(self) -> bool:
        return self._is_started

    @property
    def is_finished(self) -> bool:
        return self._is_finished

    # ── Lifecycle ────────────────────────────────────────────────────

    def start(self) -> bool:
        """Move from WAITING to PLAYING if the roster allows it."""
        if not self.can_start():
            logger.warning(
                "Cannot start game %s: started=%s, players=%d, min=%d",
                self._game_id,
                self._is_started,
                len(self._players),
                self.config.min_players,
            )
            return False

        now = utc_now()
        self._is_started = True
        self._started_at = now
        self._current_player_index = 0
        self._state.current_player = self._players[0].id
        self._state.status = GameStatus.PLAYING
        self._state.timestamp = now

        logger.info(
            "Game started: game=%s, type=%s, first_player=%s",
            self._game_id,
            self.config.id,
            self._state.current_player,
        )
        self._emit(GameStarted(game_id=self._game_id, state=self.get_state()))
        return True

    def add_player(self, player: Player) -> bool:
        """Seat a player before the game starts."""
        if self._is_started or self._is_finished:
            logger.warning("Cannot add player %s: game %s already started", player.id, self._game_id)
            return False
        if len(self._players) >= self.config.max_players:
            logger.warning("Cannot add player %s: game %s is full", player.id, self._game_id)
            return False
        if self.has_player(player.id):
            logger.warning("Player %s already seated in game %s", player.id, self._game_id)
            return False

        self._players.append(player.model_copy())
        self._sync_roster()
        logger.info("Player joined game %s: %s (%s)", self._game_id, player.name, player.id)
        self._emit(PlayerJoined(game_id=self._game_id, player=player.model_copy()))
        return True

    def remove_player(self, player_id: str) -> bool:
        """Unseat a player; ends a running game as abandoned on roster underflow."""
        if self._is_finished:
            return False
        index = self._seat_of(player_id)
        if index == -1:
            return False

        removed = self._players.pop(index)
        if self._current_player_index >= index:
            self._current_player_index = max(0, self._current_player_index - 1)
        self._sync_roster()
        self._state.timestamp = utc_now()

        logger.info("Player left game %s: %s (%s)", self._game_id, removed.name, removed.id)
        self._emit(PlayerLeft(game_id=self._game_id, player=removed))

        if self._is_started and len(self._players) < self.config.min_players:
            logger.info(
                "Game %s abandoned: %d players left, min=%d",
                self._game_id,
                len(self._players),
                self.config.min_players,
            )
            self._end_game(EndReason.ABANDONED)
        return True

    def set_player_ready(self, player_id: str, ready: bool) -> bool:
        """Update a seated player's ready flag (roster metadata only)."""
        if self._is_finished:
            return False
        index = self._seat_of(player_id)
        if index == -1:
            return False

        self._players[index].is_ready = ready
        self._sync_roster()
        logger.debug("Player %s ready=%s in game %s", player_id, ready, self._game_id)
        self._emit(PlayerReadyChanged(game_id=self._game_id, player_id=player_id, ready=ready))
        return True

    def attempt_move(self, move: GameMove | dict, player_id: str) -> bool:
        """Validate, apply and commit a move.

        On any rejection the state is left untouched and nothing is emitted.
        The caller's move object is never modified; a committed copy with
        sequence and timestamp goes into the history. A plain dict in the
        GameMove shape is accepted too; anything else is rejected.
        """
        raw = move.model_dump() if isinstance(move, BaseModel) else move
        try:
            move = self._move_type.model_validate(raw)
        except ValidationError as e:
            logger.warning("Rejected malformed move in game %s: %s", self._game_id, e)
            return False

        validation = validate_move(self._rules, self._state, move, player_id)
        if not validation.is_valid:
            logger.warning(
                "Move rejected: code=%s, message=%s, game=%s, player=%s",
                validation.error_code,
                validation.error_message,
                self._game_id,
                player_id,
            )
            return False

        seat = self._seat_of(player_id)
        data = self._state.data.model_copy(deep=True)
        if not self._rules.apply(data, move, seat):
            logger.warning(
                "Move rejected at apply: game=%s, player=%s, move=%r",
                self._game_id,
                player_id,
                move.data,
            )
            return False

        now = utc_now()
        committed = move.model_copy(update={"sequence": self._next_sequence(), "timestamp": now})
        self._moves.append(committed)
        self._state.data = data
        self._state.moves = [m.model_copy(deep=True) for m in self._moves]

        termination = self._rules.evaluate_termination(self._state.data, self._roster_copy())
        if not termination.is_game_over:
            self._next_player()
        self._state.timestamp = now

        # A finishing move ends the game before move_made is emitted
        if termination.is_game_over:
            self._end_game(EndReason.COMPLETED, termination.winner_id, termination.reason)

        logger.debug(
            "Move committed: game=%s, seq=%d, player=%s, data=%r",
            self._game_id,
            committed.sequence,
            player_id,
            committed.data,
        )
        self._emit(
            MoveMade(
                game_id=self._game_id,
                move=committed.model_copy(deep=True),
                state=self.get_state(),
            )
        )
        return True

    def end_game(
        self,
        reason: EndReason,
        winner_id: str | None = None,
        details: str | None = None,
    ) -> bool:
        """Force a running game to finish, e.g. on timeout."""
        if not self._is_started or self._is_finished:
            return False
        if winner_id is not None and not self.has_player(winner_id):
            logger.warning("Cannot end game %s: winner %s not seated", self._game_id, winner_id)
            return False
        self._end_game(reason, winner_id, details)
        return True

    # ── Read-only accessors ──────────────────────────────────────────

    def get_state(self) -> GameState[DataT, MoveT]:
        return self._state.model_copy(deep=True)

    def get_moves(self) -> list[GameMove[MoveT]]:
        return [m.model_copy(deep=True) for m in self._moves]

    def get_players(self) -> list[Player]:
        return self._roster_copy()

    def get_current_player(self) -> Player | None:
        if 0 <= self._current_player_index < len(self._players):
            return self._players[self._current_player_index].model_copy()
        return None

    def has_player(self, player_id: str) -> bool:
        return self._seat_of(player_id) != -1

    def is_player_turn(self, player_id: str) -> bool:
        return self._state.current_player == player_id

    def can_start(self) -> bool:
        return (
            not self._is_started
            and self.config.min_players <= len(self._players) <= self.config.max_players
        )

    def get_player_view(self, player_id: str) -> BaseModel:
        return self._rules.player_view(self.get_state(), player_id)

    # ── Save / restore ───────────────────────────────────────────────

    def serialize(self) -> str:
        saved = self._saved_type(
            state=self._state,
            moves=self._moves,
            players=self._players,
            current_player_index=self._current_player_index,
            is_started=self._is_started,
            is_finished=self._is_finished,
            started_at=self._started_at,
        )
        return saved.model_dump_json()

    def restore(self, data: str | bytes) -> bool:
        """Replace this instance's state with a serialized one.

        Returns False and leaves the instance untouched if data cannot be
        parsed into a consistent saved game.
        """
        try:
            saved = self._saved_type.model_validate_json(data)
        except (ValueError, TypeError) as e:
            logger.warning("Failed to restore game %s: %s", self._game_id, e)
            return False

        problem = _check_saved_game(saved)
        if problem:
            logger.warning("Failed to restore game %s: %s", self._game_id, problem)
            return False

        self._game_id = saved.state.game_id
        self._state = saved.state
        self._moves = saved.moves
        self._players = saved.players
        self._current_player_index = saved.current_player_index
        self._is_started = saved.is_started
        self._is_finished = saved.is_finished
        self._started_at = saved.started_at
        logger.info(
            "Game restored: game=%s, status=%s, moves=%d",
            self._game_id,
            self._state.status.value,
            len(self._moves),
        )
        return True

    # ── Internals ────────────────────────────────────────────────────

    def _seat_of(self, player_id: str) -> int:
        return next((i for i, p in enumerate(self._players) if p.id == player_id), -1)

    def _roster_copy(self) -> list[Player]:
        return [p.model_copy() for p in self._players]

    def _sync_roster(self) -> None:
        self._state.players = self._roster_copy()
        if self._players:
            self._current_player_index = min(self._current_player_index, len(self._players) - 1)
            self._state.current_player = self._players[self._current_player_index].id
        else:
            self._current_player_index = 0
            self._state.current_player = None

    def _next_sequence(self) -> int:
        sequence = len(self._moves)
        if self._moves and self._moves[-1].sequence != sequence - 1:
            raise RuntimeError(
                f"Move history of game {self._game_id} is corrupted: "
                f"last sequence {self._moves[-1].sequence}, expected {sequence - 1}"
            )
        return sequence

    def _next_player(self) -> None:
        self._current_player_index = (self._current_player_index + 1) % len(self._players)
        self._state.current_player = self._players[self._current_player_index].id

    def _end_game(
        self,
        reason: EndReason,
        winner_id: str | None = None,
        details: str | None = None,
    ) -> None:
        now = utc_now()
        self._is_finished = True
        self._state.status = GameStatus.FINISHED
        self._state.winner = winner_id
        self._state.end_reason = reason
        self._state.end_details = details
        self._state.timestamp = now

        started_at = self._started_at or now
        result = GameResult(
            game_id=self._game_id,
            game_type=self.config.id,
            players=self._roster_copy(),
            winner=winner_id,
            duration_seconds=(now - started_at).total_seconds(),
            move_count=len(self._moves),
            end_reason=reason,
            details=details,
            timestamp=now,
        )
        logger.info(
            "Game ended: game=%s, reason=%s, winner=%s, moves=%d",
            self._game_id,
            reason.value,
            winner_id,
            len(self._moves),
        )
        self._emit(
            GameEnded(
                game_id=self._game_id,
                winner_id=winner_id,
                reason=reason,
                details=details,
                result=result,
                state=self.get_state(),
            )
        )

    def _emit(self, event: GameEvent) -> None:
        event.seq = self._event_seq
        self._event_seq += 1
        self.events.publish(event.event_type, event)


def _check_saved_game(saved: SavedGame) -> str | None:
    """Return a description of the first inconsistency in a saved game, if any."""
    for index, move in enumerate(saved.moves):
        if move.sequence != index:
            return f"move {move.id} has sequence {move.sequence}, expected {index}"
    if len(saved.state.moves) != len(saved.moves):
        return "state history and move list differ in length"
    if saved.is_finished and not saved.is_started:
        return "finished game was never started"
    if saved.is_finished != (saved.state.status == GameStatus.FINISHED):
        return f"status {saved.state.status.value} disagrees with is_finished={saved.is_finished}"
    if saved.is_started == (saved.state.status == GameStatus.WAITING):
        return f"status {saved.state.status.value} disagrees with is_started={saved.is_started}"
    if [p.id for p in saved.state.players] != [p.id for p in saved.players]:
        return "state roster and player list differ"
    if saved.players and saved.current_player_index >= len(saved.players):
        return f"turn pointer {saved.current_player_index} outside roster of {len(saved.players)}"
    if saved.state.status in (GameStatus.WAITING, GameStatus.PLAYING):
        expected = saved.players[saved.current_player_index].id if saved.players else None
        if saved.state.current_player != expected:
            return (
                f"current player {saved.state.current_player} does not match "
                f"turn pointer {saved.current_player_index}"
            )
    if saved.state.status == GameStatus.PLAYING and not any(
        p.id == saved.state.current_player for p in saved.players
    ):
        return f"current player {saved.state.current_player} is not seated"
    return None
