"""Tests for event dispatch and event sequencing.

Critical scenarios tested:
- Synchronous delivery in registration order
- A failing subscriber neither aborts the mutation nor starves other subscribers
- Controller events carry sequential seq numbers
- Event payload structure
"""

from game_hub.schemas.game_engine import EndReason, GameStatus
from game_hub.services.game.engine import (
    ALL_EVENTS,
    EventDispatcher,
    GameEnded,
    GameStarted,
    MatchController,
    MoveMade,
    PlayerReadyChanged,
)

from .conftest import (
    PLAYER_1_ID,
    PLAYER_2_ID,
    EventRecorder,
    drop,
    play_columns,
)


class TestEventDispatcher:
    """Test the pub/sub primitive."""

    def test_handlers_called_in_order(self):
        dispatcher = EventDispatcher()
        calls = []
        dispatcher.subscribe("tick", lambda p: calls.append(("first", p)))
        dispatcher.subscribe("tick", lambda p: calls.append(("second", p)))

        delivered = dispatcher.publish("tick", 1)

        assert delivered == 2
        assert calls == [("first", 1), ("second", 1)]

    def test_only_matching_type_receives(self):
        dispatcher = EventDispatcher()
        calls = []
        dispatcher.subscribe("tick", calls.append)
        dispatcher.publish("tock", 1)
        assert calls == []

    def test_wildcard_receives_everything(self):
        dispatcher = EventDispatcher()
        calls = []
        dispatcher.subscribe_all(calls.append)
        dispatcher.publish("tick", 1)
        dispatcher.publish("tock", 2)
        assert calls == [1, 2]

    def test_duplicate_subscription_ignored(self):
        dispatcher = EventDispatcher()
        calls = []
        dispatcher.subscribe("tick", calls.append)
        dispatcher.subscribe("tick", calls.append)
        dispatcher.publish("tick", 1)
        assert calls == [1]
        assert dispatcher.listener_count("tick") == 1

    def test_unsubscribe(self):
        dispatcher = EventDispatcher()
        calls = []
        dispatcher.subscribe("tick", calls.append)
        dispatcher.unsubscribe("tick", calls.append)
        dispatcher.publish("tick", 1)
        assert calls == []
        assert dispatcher.event_types() == []

    def test_failing_handler_isolated(self, caplog):
        dispatcher = EventDispatcher()
        calls = []

        def broken(_payload):
            raise RuntimeError("subscriber crashed")

        dispatcher.subscribe("tick", broken)
        dispatcher.subscribe("tick", calls.append)

        delivered = dispatcher.publish("tick", 1)

        assert delivered == 1
        assert calls == [1]
        assert "Handler error for event tick" in caplog.text

    def test_clear(self):
        dispatcher = EventDispatcher()
        dispatcher.subscribe("tick", print)
        dispatcher.subscribe("tock", print)
        dispatcher.clear("tick")
        assert dispatcher.event_types() == ["tock"]
        dispatcher.clear()
        assert dispatcher.event_types() == []


class TestSubscriberIsolation:
    """Test that subscriber failures cannot corrupt a mutation."""

    def test_move_commits_despite_failing_subscriber(self, connect4_game: MatchController):
        received = []

        def broken(_event):
            raise ValueError("persistence down")

        connect4_game.events.subscribe("move_made", broken)
        connect4_game.events.subscribe("move_made", received.append)

        assert drop(connect4_game, PLAYER_1_ID, 3)

        assert len(connect4_game.get_moves()) == 1
        assert connect4_game.is_player_turn(PLAYER_2_ID)
        assert len(received) == 1

    def test_game_end_survives_failing_subscriber(self, connect4_game: MatchController):
        def broken(_event):
            raise RuntimeError("broadcast failed")

        connect4_game.events.subscribe(ALL_EVENTS, broken)
        play_columns(connect4_game, [0, 0, 1, 1, 2, 2, 3])

        assert connect4_game.get_state().status == GameStatus.FINISHED


class TestEventSequencing:
    """Test that events have proper sequence numbers."""

    def test_events_have_sequential_seq_numbers(self, connect4_not_started: MatchController):
        recorder = EventRecorder(connect4_not_started)
        connect4_not_started.start()
        play_columns(connect4_not_started, [0, 0, 1, 1, 2, 2, 3])

        assert [e.seq for e in recorder.events] == list(range(len(recorder.events)))
        assert recorder.types[0] == "game_started"
        assert recorder.types[-2:] == ["game_ended", "move_made"]

    def test_rejected_moves_emit_nothing(self, connect4_game: MatchController):
        recorder = EventRecorder(connect4_game)
        drop(connect4_game, PLAYER_2_ID, 0)
        drop(connect4_game, PLAYER_1_ID, 9)
        assert recorder.events == []


class TestEventTypes:
    """Test event type structures."""

    def test_game_started_event_structure(self, connect4_not_started: MatchController):
        recorder = EventRecorder(connect4_not_started)
        connect4_not_started.start()

        event = recorder.events[0]
        assert isinstance(event, GameStarted)
        assert event.game_id == connect4_not_started.game_id
        assert [p.id for p in event.state.players] == [PLAYER_1_ID, PLAYER_2_ID]

    def test_move_made_event_structure(self, connect4_game: MatchController):
        recorder = EventRecorder(connect4_game)
        drop(connect4_game, PLAYER_1_ID, 3)

        event = recorder.events[0]
        assert isinstance(event, MoveMade)
        assert event.move.player_id == PLAYER_1_ID
        assert event.move.sequence == 0
        assert event.move.data.column == 3
        assert event.state.current_player == PLAYER_2_ID

    def test_game_ended_event_structure(self, connect4_game: MatchController):
        recorder = EventRecorder(connect4_game)
        play_columns(connect4_game, [0, 0, 1, 1, 2, 2, 3])

        event = recorder.of_type("game_ended")[0]
        assert isinstance(event, GameEnded)
        assert event.winner_id == PLAYER_1_ID
        assert event.reason == EndReason.COMPLETED
        assert event.result.game_type == "connect4"
        assert event.result.move_count == 7
        assert event.result.duration_seconds >= 0
        assert event.state.status == GameStatus.FINISHED

    def test_ready_change_has_its_own_event_type(self, connect4_not_started: MatchController):
        recorder = EventRecorder(connect4_not_started)
        connect4_not_started.set_player_ready(PLAYER_1_ID, True)

        event = recorder.events[0]
        assert isinstance(event, PlayerReadyChanged)
        assert event.event_type == "player_ready_changed"
        assert event.player_id == PLAYER_1_ID
        assert event.ready is True
        assert recorder.of_type("player_left") == []

    def test_event_snapshot_is_detached(self, connect4_game: MatchController):
        recorder = EventRecorder(connect4_game)
        drop(connect4_game, PLAYER_1_ID, 3)
        recorder.events[0].state.data.board[5][3] = 2
        assert connect4_game.get_state().data.board[5][3] == 1

    def test_finishing_move_snapshot_is_final(self, connect4_game: MatchController):
        """A subscriber saving state on move_made sees the finished game."""
        recorder = EventRecorder(connect4_game)
        play_columns(connect4_game, [0, 0, 1, 1, 2, 2, 3])

        event = recorder.events[-1]
        assert isinstance(event, MoveMade)
        assert event.move.sequence == 6
        assert event.state.status == GameStatus.FINISHED
        assert event.state.winner == PLAYER_1_ID
        assert len(event.state.data.winning_cells) == 4
        assert recorder.of_type("game_ended")[0].seq < event.seq
