from __future__ import annotations

import random
from dataclasses import dataclass
from enum import IntEnum
from typing import Dict, List, NamedTuple, Optional, Tuple

import numpy as np

from .board import BOARD_WIDTH


class TetrominoType(IntEnum):
    I = 1
    O = 2
    T = 3
    S = 4
    Z = 5
    J = 6
    L = 7


Shape = np.ndarray


class Position(NamedTuple):
    x: int
    y: int


class CatalogEntry(NamedTuple):
    shape: Shape
    color: str


def _frozen(rows: List[List[int]]) -> Shape:
    shape = np.array(rows, dtype=np.int8)
    shape.flags.writeable = False
    return shape


# Square bounding boxes with the top row occupied, so spawning at y=0 shows
# the piece immediately.
TETROMINOES: Dict[TetrominoType, CatalogEntry] = {
    TetrominoType.I: CatalogEntry(
        _frozen([[1, 1, 1, 1], [0, 0, 0, 0], [0, 0, 0, 0], [0, 0, 0, 0]]), "#00f0f0"
    ),
    TetrominoType.O: CatalogEntry(_frozen([[1, 1], [1, 1]]), "#f0f000"),
    TetrominoType.T: CatalogEntry(_frozen([[1, 1, 1], [0, 1, 0], [0, 0, 0]]), "#a000f0"),
    TetrominoType.S: CatalogEntry(_frozen([[0, 1, 1], [1, 1, 0], [0, 0, 0]]), "#00f000"),
    TetrominoType.Z: CatalogEntry(_frozen([[1, 1, 0], [0, 1, 1], [0, 0, 0]]), "#f00000"),
    TetrominoType.J: CatalogEntry(_frozen([[1, 0, 0], [1, 1, 1], [0, 0, 0]]), "#0000f0"),
    TetrominoType.L: CatalogEntry(_frozen([[0, 0, 1], [1, 1, 1], [0, 0, 0]]), "#f0a000"),
}


def validate_shape(shape: Shape) -> None:
    if shape.ndim != 2 or shape.size == 0:
        raise ValueError(f"Shape must be a non-empty 2D matrix, got dimensions {shape.shape}")
    if not np.isin(shape, (0, 1)).all():
        raise ValueError("Shape must contain only 0 and 1")


@dataclass(eq=False)
class Tetromino:
    """A falling piece: its own shape copy plus the top-left board offset."""

    type: TetrominoType
    shape: Shape
    color: str
    position: Position

    def __post_init__(self) -> None:
        self.shape = np.asarray(self.shape, dtype=np.int8)
        validate_shape(self.shape)
        self.position = Position(*self.position)

    def cells(self, dx: int = 0, dy: int = 0) -> List[Tuple[int, int]]:
        """Absolute (x, y) board coordinates of the occupied cells, shifted by (dx, dy)."""
        origin_x = self.position.x + dx
        origin_y = self.position.y + dy
        rows, cols = np.nonzero(self.shape)
        return [(origin_x + int(c), origin_y + int(r)) for r, c in zip(rows, cols)]

    def moved(self, dx: int, dy: int) -> "Tetromino":
        return Tetromino(
            self.type,
            self.shape.copy(),
            self.color,
            Position(self.position.x + dx, self.position.y + dy),
        )

    def rotated(self) -> "Tetromino":
        return Tetromino(self.type, rotate_tetromino(self), self.color, self.position)

    @property
    def width(self) -> int:
        return int(self.shape.shape[1])

    @property
    def height(self) -> int:
        return int(self.shape.shape[0])


def spawn_tetromino(kind: TetrominoType) -> Tetromino:
    entry = TETROMINOES[kind]
    shape = entry.shape.copy()
    x = (BOARD_WIDTH - shape.shape[1]) // 2
    return Tetromino(type=kind, shape=shape, color=entry.color, position=Position(x, 0))


def get_random_tetromino(rng: Optional[random.Random] = None) -> Tetromino:
    chooser = rng or random
    kind = chooser.choice(list(TetrominoType))
    return spawn_tetromino(kind)


def rotate_tetromino(piece: Tetromino) -> Shape:
    """Shape of `piece` rotated 90 degrees clockwise.

    An R x C shape becomes C x R with ``out[c][R - 1 - r] == in[r][c]``. The
    result is a fresh array and the piece is left untouched.
    """
    return np.rot90(piece.shape, 1, axes=(1, 0)).copy()
