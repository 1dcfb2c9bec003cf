from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, List, NamedTuple

import numpy as np

if TYPE_CHECKING:
    from .pieces import Tetromino


BOARD_WIDTH = 10
BOARD_HEIGHT = 20


@dataclass(frozen=True)
class Cell:
    """A single board cell. Empty cells carry the empty-string color."""

    filled: bool = False
    color: str = ""

    def __post_init__(self) -> None:
        if self.filled != bool(self.color):
            raise ValueError(
                f"Cell color must be set exactly when filled (filled={self.filled}, color={self.color!r})"
            )


EMPTY_CELL = Cell()

Board = List[List[Cell]]


class ClearResult(NamedTuple):
    new_board: Board
    lines_cleared: int


def _empty_row() -> List[Cell]:
    return [EMPTY_CELL for _ in range(BOARD_WIDTH)]


def create_empty_board() -> Board:
    return [_empty_row() for _ in range(BOARD_HEIGHT)]


def validate_board(board: Board) -> None:
    if len(board) != BOARD_HEIGHT:
        raise ValueError(f"Board must have {BOARD_HEIGHT} rows, got {len(board)}")
    for y, row in enumerate(board):
        if len(row) != BOARD_WIDTH:
            raise ValueError(f"Board row {y} must have {BOARD_WIDTH} cells, got {len(row)}")


def check_collision(board: Board, piece: "Tetromino", dx: int = 0, dy: int = 0) -> bool:
    """Return True if `piece` shifted by (dx, dy) would leave the board or overlap.

    Rows above the board (y < 0) are allowed so freshly spawned pieces can
    descend into view.
    """
    validate_board(board)
    for x, y in piece.cells(dx, dy):
        if x < 0 or x >= BOARD_WIDTH:
            return True
        if y >= BOARD_HEIGHT:
            return True
        if y >= 0 and board[y][x].filled:
            return True
    return False


def merge_tetromino(board: Board, piece: "Tetromino") -> Board:
    """Return a copy of `board` with the piece's cells locked in."""
    validate_board(board)
    new_board = [list(row) for row in board]
    locked = Cell(filled=True, color=piece.color)
    for x, y in piece.cells():
        # Out-of-bounds cells are dropped
        if 0 <= x < BOARD_WIDTH and 0 <= y < BOARD_HEIGHT:
            new_board[y][x] = locked
    return new_board


def clear_lines(board: Board) -> ClearResult:
    validate_board(board)
    remaining = [list(row) for row in board if not all(cell.filled for cell in row)]
    num = BOARD_HEIGHT - len(remaining)
    if num == 0:
        return ClearResult(new_board=remaining, lines_cleared=0)
    # Remove full rows and add empty rows at the top
    new_board = [_empty_row() for _ in range(num)] + remaining
    return ClearResult(new_board=new_board, lines_cleared=num)


def board_to_array(board: Board) -> np.ndarray:
    """Occupancy grid (1 filled, 0 empty) as an int8 array of shape (height, width)."""
    return np.array([[1 if cell.filled else 0 for cell in row] for row in board], dtype=np.int8)


def get_max_height(grid: np.ndarray) -> int:
    # y=0 is top; find first non-empty from top
    non_empty_rows = np.where(np.any(grid != 0, axis=1))[0]
    if non_empty_rows.size == 0:
        return 0
    return int(grid.shape[0] - non_empty_rows[0])


def count_holes(grid: np.ndarray) -> int:
    holes = 0
    for x in range(grid.shape[1]):
        column = grid[:, x]
        seen_block = False
        for cell in column:
            if cell != 0:
                seen_block = True
            elif seen_block:
                holes += 1
    return holes


def get_bumpiness(grid: np.ndarray) -> int:
    h = grid.shape[0]
    heights: List[int] = []
    for x in range(grid.shape[1]):
        filled = np.flatnonzero(grid[:, x])
        heights.append(int(h - filled[0]) if filled.size else 0)
    return sum(abs(heights[i] - heights[i + 1]) for i in range(len(heights) - 1))
