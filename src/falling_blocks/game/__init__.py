"""Game module for Falling Blocks.

Exports the rules engine and the session that drives it:
- Board helpers: empty board, collision, merge, line clearing
- Piece catalog, factory and rotation
- ScoringRules and the score/level/speed curve
- TetrisGame: lock, clear, score and spawn sequencing
"""

from .board import (
    BOARD_HEIGHT,
    BOARD_WIDTH,
    EMPTY_CELL,
    Board,
    Cell,
    ClearResult,
    board_to_array,
    check_collision,
    clear_lines,
    create_empty_board,
    merge_tetromino,
)
from .pieces import (
    TETROMINOES,
    CatalogEntry,
    Position,
    Tetromino,
    TetrominoType,
    get_random_tetromino,
    rotate_tetromino,
    spawn_tetromino,
)
from .rules import ScoringRules, calculate_level, calculate_score, get_drop_speed
from .core import Action, GameConfig, StepResult, TetrisGame

__all__ = [
    "BOARD_HEIGHT",
    "BOARD_WIDTH",
    "EMPTY_CELL",
    "Board",
    "Cell",
    "ClearResult",
    "board_to_array",
    "check_collision",
    "clear_lines",
    "create_empty_board",
    "merge_tetromino",
    "TETROMINOES",
    "CatalogEntry",
    "Position",
    "Tetromino",
    "TetrominoType",
    "get_random_tetromino",
    "rotate_tetromino",
    "spawn_tetromino",
    "ScoringRules",
    "calculate_level",
    "calculate_score",
    "get_drop_speed",
    "Action",
    "GameConfig",
    "StepResult",
    "TetrisGame",
]
