"""
Connect 4 rules engine.

Two players drop pieces into a 6x7 grid; pieces stack from the bottom.
First to line up four (horizontal, vertical or diagonal) wins; a full
board without a line is a draw.
"""

import logging

from game_hub.schemas.connect4 import (
    COLS,
    CONNECT_COUNT,
    EMPTY,
    ROWS,
    Connect4Cell,
    Connect4Data,
    Connect4PlayerView,
    DropPiece,
)
from game_hub.schemas.game_engine import GameConfig, GameMove, GameState, Player
from game_hub.services.game.engine.rules import RulesEngine, Termination

from .board import (
    available_columns,
    create_board,
    find_winning_line,
    is_board_full,
    landing_row,
)

logger = logging.getLogger(__name__)

WIN_REASON = f"Connected {CONNECT_COUNT} pieces!"
DRAW_REASON = "Board is full - it's a draw!"

CONNECT4_RULES_TEXT = """
# Connect 4 Rules

## Objective
Be the first player to connect 4 of your pieces in a row - horizontally, vertically, or diagonally.

## How to Play
1. Players take turns dropping colored pieces into columns
2. Pieces fall to the lowest available position in the chosen column
3. First player to get 4 pieces in a row wins!
4. If the board fills up with no winner, it's a draw
""".strip()

CONNECT4_CONFIG = GameConfig(
    id="connect4",
    name="connect4",
    display_name="Connect 4",
    description="Drop pieces to connect 4 in a row - horizontally, vertically, or diagonally!",
    min_players=2,
    max_players=2,
    estimated_duration="5-10 minutes",
    difficulty="easy",
    category="board",
    thumbnail="🔴",
    rules=CONNECT4_RULES_TEXT,
)


class Connect4Rules(RulesEngine[Connect4Data, DropPiece]):
    data_model = Connect4Data
    move_model = DropPiece

    @property
    def config(self) -> GameConfig:
        return CONNECT4_CONFIG

    def initial_data(self) -> Connect4Data:
        return Connect4Data(board=create_board(ROWS, COLS), rows=ROWS, cols=COLS)

    def is_legal(self, data: Connect4Data, move: GameMove[DropPiece], seat: int) -> bool:
        column = move.data.column
        if column < 0 or column >= data.cols:
            return False
        return data.board[0][column] == EMPTY

    def apply(self, data: Connect4Data, move: GameMove[DropPiece], seat: int) -> bool:
        if seat < 0:
            return False
        column = move.data.column
        if column < 0 or column >= data.cols:
            return False

        row = landing_row(data.board, column)
        if row == -1:
            logger.warning("Column %d is full, cannot drop", column)
            return False

        piece = seat + 1
        data.board[row][column] = piece
        data.last_move = Connect4Cell(row=row, col=column, player=piece)
        data.move_count += 1
        logger.debug("Dropped piece %d at row=%d, col=%d", piece, row, column)
        return True

    def evaluate_termination(self, data: Connect4Data, players: list[Player]) -> Termination:
        """Check the last drop for a win, then the board for a draw.

        Records the winning cells on data when a line is found.
        """
        if data.last_move is None:
            return Termination.ongoing()

        winning_cells = find_winning_line(data.board, data.last_move)
        if winning_cells:
            data.winning_cells = winning_cells
            seat = data.last_move.player - 1
            winner_id = players[seat].id if 0 <= seat < len(players) else None
            logger.info(
                "Connect 4 won: piece=%d, cells=%s",
                data.last_move.player,
                [(c.row, c.col) for c in winning_cells],
            )
            return Termination(is_game_over=True, winner_id=winner_id, reason=WIN_REASON)

        if is_board_full(data.board):
            logger.info("Connect 4 drawn after %d moves", data.move_count)
            return Termination(is_game_over=True, reason=DRAW_REASON)

        return Termination.ongoing()

    def player_view(
        self, state: GameState[Connect4Data, DropPiece], player_id: str
    ) -> Connect4PlayerView:
        data = state.data
        seat = next((i for i, p in enumerate(state.players) if p.id == player_id), -1)
        current = next((p for p in state.players if p.id == state.current_player), None)
        return Connect4PlayerView(
            board=[list(row) for row in data.board],
            is_your_turn=state.current_player == player_id,
            player_number=seat + 1,
            current_player=current.name if current else "",
            move_count=data.move_count,
            last_move=data.last_move,
            winning_cells=list(data.winning_cells),
            available_columns=available_columns(data.board),
        )
