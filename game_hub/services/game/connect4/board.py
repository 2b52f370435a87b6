"""Connect 4 board geometry - pure functions over a row-major grid.

Row 0 is the top of the board; pieces fall towards row ROWS - 1.
"""

from game_hub.schemas.connect4 import COLS, CONNECT_COUNT, EMPTY, ROWS, Connect4Cell

# Line directions as (d_row, d_col), in the order they are searched
HORIZONTAL = (0, 1)
VERTICAL = (1, 0)
DIAGONAL_DOWN_RIGHT = (1, 1)
DIAGONAL_DOWN_LEFT = (1, -1)
DIRECTIONS = (HORIZONTAL, VERTICAL, DIAGONAL_DOWN_RIGHT, DIAGONAL_DOWN_LEFT)


def create_board(rows: int = ROWS, cols: int = COLS) -> list[list[int]]:
    return [[EMPTY] * cols for _ in range(rows)]


def is_valid_position(board: list[list[int]], row: int, col: int) -> bool:
    return 0 <= row < len(board) and 0 <= col < len(board[0])


def landing_row(board: list[list[int]], col: int) -> int:
    """Row a piece dropped into col would land on, or -1 if the column is full."""
    for row in range(len(board) - 1, -1, -1):
        if board[row][col] == EMPTY:
            return row
    return -1


def available_columns(board: list[list[int]]) -> list[int]:
    """Columns whose top cell is still empty."""
    return [col for col in range(len(board[0])) if board[0][col] == EMPTY]


def is_board_full(board: list[list[int]]) -> bool:
    return not available_columns(board)


def collect_line(
    board: list[list[int]],
    row: int,
    col: int,
    d_row: int,
    d_col: int,
    player: int,
) -> list[Connect4Cell]:
    """Run of player's cells through (row, col) along one axis, in board order.

    Walks outward in both the positive and negative direction and stops at
    the board edge or at the first cell not owned by player. The anchor cell
    is always included.
    """
    cells = [Connect4Cell(row=row, col=col, player=player)]

    r, c = row + d_row, col + d_col
    while is_valid_position(board, r, c) and board[r][c] == player:
        cells.append(Connect4Cell(row=r, col=c, player=player))
        r, c = r + d_row, c + d_col

    r, c = row - d_row, col - d_col
    while is_valid_position(board, r, c) and board[r][c] == player:
        cells.insert(0, Connect4Cell(row=r, col=c, player=player))
        r, c = r - d_row, c - d_col

    return cells


def find_winning_line(
    board: list[list[int]],
    anchor: Connect4Cell,
    connect_count: int = CONNECT_COUNT,
) -> list[Connect4Cell]:
    """Winning run through the anchor cell, or an empty list.

    Only lines through the anchor can have been completed by the move that
    placed it. When several directions win at once, the first one in
    DIRECTIONS is returned.
    """
    for d_row, d_col in DIRECTIONS:
        cells = collect_line(board, anchor.row, anchor.col, d_row, d_col, anchor.player)
        if len(cells) >= connect_count:
            return cells
    return []
