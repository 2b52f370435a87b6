"""Room service for managing game rooms and the matches played in them."""

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any

from game_hub.config import Settings, get_settings
from game_hub.schemas.game_engine import GameConfig, Player, utc_now
from game_hub.schemas.room import GameRoom, LobbyMessage, LobbyMessageType, RoomStatus
from game_hub.services.game.engine import (
    EventDispatcher,
    GameEnded,
    MatchController,
    MoveMade,
    build_move,
)
from game_hub.services.game.registry import GameRegistry

logger = logging.getLogger(__name__)

BROADCAST = "broadcast"


@dataclass
class CreateRoomResult:
    """Result of create_room operation."""

    success: bool
    room_id: str | None = None
    room: GameRoom | None = None
    error_code: str | None = None
    error_message: str | None = None


@dataclass
class JoinRoomResult:
    """Result of join_room operation."""

    success: bool
    room: GameRoom | None = None
    error_code: str | None = None
    error_message: str | None = None


class RoomService:
    """In-memory room directory.

    Tracks online players, rooms and the match running in each room. Every
    change is announced as a LobbyMessage on the "broadcast" event of
    self.events; delivering those to clients is left to the transport.
    """

    def __init__(self, registry: GameRegistry, settings: Settings | None = None):
        self._registry = registry
        self._settings = settings or get_settings()
        self._rooms: dict[str, GameRoom] = {}
        self._games: dict[str, MatchController] = {}
        self._players: dict[str, Player] = {}
        self.events = EventDispatcher()

    # ── Lobby presence ───────────────────────────────────────────────

    def add_player(self, player: Player) -> None:
        self._players[player.id] = player
        self._broadcast(LobbyMessageType.PLAYER_JOINED, {"player": player}, sender=player.id)
        logger.info("Player joined lobby: %s (%s)", player.name, player.id)

    def remove_player(self, player_id: str) -> bool:
        player = self._players.get(player_id)
        if player is None:
            return False

        for room_id in [r.id for r in self._rooms.values() if _seat_of(r, player_id) != -1]:
            self.leave_room(player_id, room_id)

        del self._players[player_id]
        self._broadcast(
            LobbyMessageType.PLAYER_LEFT,
            {"player_id": player_id, "player_name": player.name},
        )
        logger.info("Player left lobby: %s (%s)", player.name, player_id)
        return True

    # ── Rooms ────────────────────────────────────────────────────────

    def create_room(
        self,
        host_id: str,
        game_type: str | None = None,
        room_name: str | None = None,
        is_private: bool = False,
    ) -> CreateRoomResult:
        """Create a room hosted by an online player.

        Args:
            host_id: The player creating the room; seated as host and ready.
            game_type: Registered game type, defaults to DEFAULT_GAME_TYPE.
            room_name: Display name, defaults to "<host>'s <game>".
            is_private: Private rooms are not listed by get_public_rooms().

        Returns:
            CreateRoomResult with the room on success, or error info on failure.
        """
        game_type = game_type or self._settings.DEFAULT_GAME_TYPE
        config = self._registry.get(game_type)
        if config is None:
            logger.warning("create_room failed: unknown game type %s", game_type)
            return CreateRoomResult(
                success=False,
                error_code="UNKNOWN_GAME_TYPE",
                error_message=f"Unknown game type: {game_type}",
            )

        host = self._players.get(host_id)
        if host is None:
            logger.warning("create_room failed: player %s not in lobby", host_id)
            return CreateRoomResult(
                success=False,
                error_code="PLAYER_NOT_FOUND",
                error_message="Player not found",
            )

        room_id = uuid.uuid4().hex[:8]
        while room_id in self._rooms:
            room_id = uuid.uuid4().hex[:8]

        room = GameRoom(
            id=room_id,
            name=room_name or f"{host.name}'s {config.display_name}",
            game_type=game_type,
            players=[host.model_copy(update={"is_host": True, "is_ready": True})],
            max_players=config.max_players,
            is_private=is_private,
        )
        self._rooms[room_id] = room

        self._broadcast(LobbyMessageType.GAME_CREATED, {"room": room}, sender=host_id)
        logger.info("Room created: room_id=%s, name=%s, host=%s", room_id, room.name, host_id)
        return CreateRoomResult(success=True, room_id=room_id, room=room.model_copy(deep=True))

    def join_room(self, player_id: str, room_id: str) -> JoinRoomResult:
        """Seat an online player in a waiting room."""
        player = self._players.get(player_id)
        if player is None:
            return JoinRoomResult(
                success=False,
                error_code="PLAYER_NOT_FOUND",
                error_message="Player not found",
            )

        room = self._rooms.get(room_id)
        if room is None:
            logger.warning("join_room failed: room %s not found", room_id)
            return JoinRoomResult(
                success=False,
                error_code="ROOM_NOT_FOUND",
                error_message="Room not found",
            )

        if room.status != RoomStatus.WAITING:
            logger.info("Cannot join room %s - game already started", room_id)
            return JoinRoomResult(
                success=False,
                error_code="GAME_ALREADY_STARTED",
                error_message="Game already in progress",
            )

        if len(room.players) >= room.max_players:
            logger.info("Cannot join room %s - room is full", room_id)
            return JoinRoomResult(
                success=False,
                error_code="ROOM_FULL",
                error_message="Room is full",
            )

        if _seat_of(room, player_id) != -1:
            logger.info("Player %s already in room %s", player_id, room_id)
            return JoinRoomResult(
                success=False,
                error_code="ALREADY_IN_ROOM",
                error_message="Already in this room",
            )

        room.players.append(player.model_copy(update={"is_host": False, "is_ready": False}))
        room.last_activity = utc_now()

        self._broadcast(
            LobbyMessageType.PLAYER_JOINED,
            {"room": room, "player": player},
            sender=player_id,
        )
        logger.info("Player %s joined room %s at seat %d", player_id, room_id, len(room.players) - 1)
        return JoinRoomResult(success=True, room=room.model_copy(deep=True))

    def leave_room(self, player_id: str, room_id: str) -> bool:
        """Remove a player from a room.

        The host role passes to the next seated player, an empty room is
        deleted, and a match in progress loses the player (which may end it
        as abandoned).
        """
        room = self._rooms.get(room_id)
        if room is None:
            return False
        index = _seat_of(room, player_id)
        if index == -1:
            return False

        leaving = room.players.pop(index)
        room.last_activity = utc_now()
        if leaving.is_host and room.players:
            room.players[0].is_host = True

        game = self._games.get(room_id)
        if game is not None and not game.is_finished:
            game.remove_player(player_id)

        self._broadcast(
            LobbyMessageType.PLAYER_LEFT,
            {"room": room, "player_id": player_id, "player_name": leaving.name},
        )
        logger.info("Player %s left room %s", player_id, room_id)

        if not room.players:
            self._delete_room(room_id)
        return True

    def set_player_ready(self, player_id: str, room_id: str, ready: bool) -> bool:
        """Set a seated player's ready flag; starts the game once everyone is ready."""
        room = self._rooms.get(room_id)
        if room is None:
            return False
        if room.status != RoomStatus.WAITING:
            logger.info("Ignoring ready change in room %s - game already started", room_id)
            return False
        index = _seat_of(room, player_id)
        if index == -1:
            return False

        room.players[index].is_ready = ready
        room.last_activity = utc_now()

        self._broadcast(
            LobbyMessageType.PLAYER_READY_CHANGED,
            {"room": room, "player_id": player_id, "ready": ready},
            sender=player_id,
        )
        logger.debug("Player %s ready=%s in room %s", player_id, ready, room_id)

        if self._can_start_game(room):
            self.start_game(room_id)
        return True

    # ── Matches ──────────────────────────────────────────────────────

    def start_game(self, room_id: str) -> bool:
        """Create the room's match and start it once every seated player is ready."""
        room = self._rooms.get(room_id)
        if room is None:
            return False
        if not self._can_start_game(room):
            logger.info("Cannot start game in room %s - not all players ready", room_id)
            return False

        game = self._registry.create_game(room.game_type, room_id, room.players)
        game.events.subscribe("move_made", lambda event: self._on_move_made(room_id, event))
        game.events.subscribe("game_ended", lambda event: self._on_game_ended(room_id, event))

        if not game.start():
            logger.warning("Game in room %s refused to start", room_id)
            return False

        self._games[room_id] = game
        room.status = RoomStatus.PLAYING
        room.last_activity = utc_now()
        self._broadcast(
            LobbyMessageType.GAME_STARTED,
            {"room_id": room_id, "game_state": game.get_state()},
        )
        logger.info("Started game in room %s (%s)", room_id, room.game_type)
        return True

    def make_move(self, player_id: str, room_id: str, move_data: dict[str, Any]) -> bool:
        """Build a move from a client payload and submit it to the room's match."""
        game = self._games.get(room_id)
        if game is None:
            return False
        try:
            move = build_move(player_id, move_data, game.rules.move_model)
        except ValueError as e:
            logger.warning("Rejected move payload from %s in room %s: %s", player_id, room_id, e)
            return False
        return game.attempt_move(move, player_id)

    def purge_finished(self, now: datetime | None = None) -> list[str]:
        """Discard rooms whose match finished more than the grace period ago.

        Returns:
            Ids of the deleted rooms.
        """
        now = now or utc_now()
        grace = timedelta(seconds=self._settings.GAME_RESULT_GRACE_SECONDS)
        expired = [
            room.id
            for room in self._rooms.values()
            if room.status == RoomStatus.FINISHED
            and room.finished_at is not None
            and now - room.finished_at >= grace
        ]
        for room_id in expired:
            self._delete_room(room_id)
        if expired:
            logger.info("Purged %d finished rooms", len(expired))
        return expired

    # ── Queries ──────────────────────────────────────────────────────

    def get_public_rooms(self) -> list[GameRoom]:
        """Waiting public rooms, most recently active first."""
        rooms = [
            room.model_copy(deep=True)
            for room in self._rooms.values()
            if not room.is_private and room.status == RoomStatus.WAITING
        ]
        return sorted(rooms, key=lambda room: room.last_activity, reverse=True)

    def get_room(self, room_id: str) -> GameRoom | None:
        room = self._rooms.get(room_id)
        return room.model_copy(deep=True) if room else None

    def get_game(self, room_id: str) -> MatchController | None:
        return self._games.get(room_id)

    def get_online_players(self) -> list[Player]:
        return list(self._players.values())

    def get_available_games(self) -> list[GameConfig]:
        return self._registry.available_games()

    def get_stats(self) -> dict[str, int]:
        return {
            "total_players": len(self._players),
            "active_rooms": len(self._rooms),
            "games_in_progress": sum(
                1 for room in self._rooms.values() if room.status == RoomStatus.PLAYING
            ),
            "registered_games": len(self._registry),
        }

    # ── Internals ────────────────────────────────────────────────────

    def _can_start_game(self, room: GameRoom) -> bool:
        config = self._registry.get(room.game_type)
        if config is None:
            return False
        return (
            room.status == RoomStatus.WAITING
            and len(room.players) >= config.min_players
            and all(p.is_ready for p in room.players)
        )

    def _on_move_made(self, room_id: str, event: MoveMade) -> None:
        self._broadcast(
            LobbyMessageType.MOVE_MADE,
            {"room_id": room_id, "move": event.move, "game_state": event.state},
            sender=event.move.player_id,
        )

    def _on_game_ended(self, room_id: str, event: GameEnded) -> None:
        room = self._rooms.get(room_id)
        if room is not None:
            room.status = RoomStatus.FINISHED
            room.finished_at = utc_now()
        self._broadcast(
            LobbyMessageType.GAME_ENDED,
            {"room_id": room_id, "result": event.result},
        )

    def _delete_room(self, room_id: str) -> None:
        self._rooms.pop(room_id, None)
        self._games.pop(room_id, None)
        self._broadcast(LobbyMessageType.GAME_DELETED, {"room_id": room_id})
        logger.info("Deleted room %s", room_id)

    def _broadcast(
        self,
        message_type: LobbyMessageType,
        data: dict[str, Any],
        sender: str | None = None,
    ) -> None:
        message = LobbyMessage(type=message_type, data=data, sender=sender)
        self.events.publish(BROADCAST, message)


def _seat_of(room: GameRoom, player_id: str) -> int:
    return next((i for i, p in enumerate(room.players) if p.id == player_id), -1)
