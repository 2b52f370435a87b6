from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

# Board geometry
ROWS = 6
COLS = 7
CONNECT_COUNT = 4

# Cell values: 0 is empty, otherwise the 1-based seat number of the owner
EMPTY = 0
PIECES = (EMPTY, 1, 2)


class Connect4Cell(BaseModel):
    model_config = ConfigDict(frozen=True)

    row: int
    col: int
    player: int


class Connect4Data(BaseModel):
    """Rules payload. Row 0 is the top of the board, row ROWS - 1 the bottom."""

    board: list[list[int]]
    rows: int = ROWS
    cols: int = COLS
    last_move: Connect4Cell | None = None
    winning_cells: list[Connect4Cell] = []
    move_count: int = 0

    @model_validator(mode="after")
    def check_board(self) -> "Connect4Data":
        """Reject boards that are not a ROWS x COLS grid of settled pieces."""
        if self.rows != ROWS or self.cols != COLS:
            raise ValueError(f"Board must be {ROWS}x{COLS}, got {self.rows}x{self.cols}")
        if len(self.board) != self.rows or any(len(row) != self.cols for row in self.board):
            raise ValueError(f"Board grid does not match {self.rows}x{self.cols}")

        for row in range(self.rows):
            for col in range(self.cols):
                cell = self.board[row][col]
                if cell not in PIECES:
                    raise ValueError(f"Invalid cell value {cell} at row={row}, col={col}")
                if cell != EMPTY and row + 1 < self.rows and self.board[row + 1][col] == EMPTY:
                    raise ValueError(f"Floating piece at row={row}, col={col}")

        if self.last_move is not None:
            r, c = self.last_move.row, self.last_move.col
            on_board = 0 <= r < self.rows and 0 <= c < self.cols
            if not on_board or self.board[r][c] != self.last_move.player:
                raise ValueError("last_move does not match the board")
        return self


class DropPiece(BaseModel):
    """Drop a piece into a column."""

    kind: Literal["drop"] = "drop"
    column: int = Field(..., description="Target column (0-based)")


class Connect4PlayerView(BaseModel):
    board: list[list[int]]
    is_your_turn: bool
    player_number: int = Field(..., description="1-based seat number, 0 for spectators")
    current_player: str = Field(..., description="Display name of the player to move")
    move_count: int
    last_move: Connect4Cell | None = None
    winning_cells: list[Connect4Cell] = []
    available_columns: list[int]
