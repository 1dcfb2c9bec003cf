from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from enum import IntEnum
from typing import Optional

import numpy as np

from .board import (
    BOARD_HEIGHT,
    BOARD_WIDTH,
    Board,
    check_collision,
    clear_lines,
    create_empty_board,
    merge_tetromino,
)
from .pieces import TETROMINOES, Position, Tetromino, TetrominoType, get_random_tetromino
from .rules import ScoringRules

logger = logging.getLogger(__name__)


class Action(IntEnum):
    LEFT = 0
    RIGHT = 1
    ROTATE_CW = 2
    SOFT_DROP = 3
    HARD_DROP = 4
    NONE = 5


@dataclass
class GameConfig:
    random_seed: Optional[int] = None


@dataclass
class StepResult:
    lines_cleared: int = 0
    score_delta: int = 0
    locked: bool = False
    game_over: bool = False


# Locked cells only keep their color; map it back to the piece code.
_COLOR_CODES = {entry.color: int(kind) for kind, entry in TETROMINOES.items()}
UNKNOWN_CODE = len(TetrominoType) + 1


class TetrisGame:
    """Single-player session: owns the board and drives lock, clear, score and spawn.

    Every board/piece update goes through the pure engine functions and the
    session simply replaces its references with their results.
    """

    board: Board
    score: int
    lines_cleared_total: int
    level: int
    drop_speed_ms: int
    pieces_placed: int
    game_over: bool

    def __init__(self, config: Optional[GameConfig] = None, rules: Optional[ScoringRules] = None) -> None:
        self.config = config or GameConfig()
        self.rules = rules or ScoringRules()
        self.rng = random.Random(self.config.random_seed)
        self.current_piece: Optional[Tetromino] = None
        self.next_piece: Optional[Tetromino] = None
        self.reset()

    def reset(self, seed: Optional[int] = None) -> None:
        if seed is not None:
            self.rng.seed(seed)
        self.board = create_empty_board()
        self.score = 0
        self.lines_cleared_total = 0
        self.level = self.rules.level_for_lines(0)
        self.drop_speed_ms = self.rules.drop_speed_ms(self.level)
        self.pieces_placed = 0
        self.game_over = False
        self.next_piece = get_random_tetromino(self.rng)
        self._spawn_piece()

    def _spawn_piece(self) -> None:
        assert self.next_piece is not None
        self.current_piece = self.next_piece
        self.next_piece = get_random_tetromino(self.rng)
        # Immediate collision check: if overlaps, game over
        if check_collision(self.board, self.current_piece, 0, 0):
            self.game_over = True
            logger.info("Game over: score=%d lines=%d level=%d", self.score, self.lines_cleared_total, self.level)

    def _move(self, dx: int, dy: int) -> bool:
        if self.current_piece is None:
            return False
        if check_collision(self.board, self.current_piece, dx, dy):
            return False
        self.current_piece = self.current_piece.moved(dx, dy)
        return True

    def _rotate(self) -> bool:
        if self.current_piece is None:
            return False
        rotated = self.current_piece.rotated()
        if check_collision(self.board, rotated, 0, 0):
            return False
        self.current_piece = rotated
        return True

    def _lock_piece(self) -> StepResult:
        assert self.current_piece is not None
        self.board = merge_tetromino(self.board, self.current_piece)
        self.board, lines = clear_lines(self.board)
        # Score with the level in force before this clear
        gained = self.rules.score_for_lines(lines, self.level)
        self.score += gained
        self.lines_cleared_total += lines
        self.pieces_placed += 1
        logger.debug("Locked %s at %s, cleared %d line(s)", self.current_piece.type.name,
                     tuple(self.current_piece.position), lines)

        new_level = self.rules.level_for_lines(self.lines_cleared_total)
        if new_level != self.level:
            logger.info("Level up: %d -> %d", self.level, new_level)
            self.level = new_level
            self.drop_speed_ms = self.rules.drop_speed_ms(new_level)

        self._spawn_piece()
        return StepResult(lines_cleared=lines, score_delta=gained, locked=True, game_over=self.game_over)

    def ghost_position(self) -> Optional[Position]:
        """Lowest legal position of the current piece straight below it."""
        if self.current_piece is None:
            return None
        dy = 0
        while not check_collision(self.board, self.current_piece, 0, dy + 1):
            dy += 1
        return Position(self.current_piece.position.x, self.current_piece.position.y + dy)

    def soft_drop(self) -> StepResult:
        if self.game_over:
            return StepResult(game_over=True)
        if self._move(0, 1):
            return StepResult()
        return self._lock_piece()

    def hard_drop(self) -> StepResult:
        if self.game_over:
            return StepResult(game_over=True)
        ghost = self.ghost_position()
        assert self.current_piece is not None and ghost is not None
        self.current_piece = self.current_piece.moved(0, ghost.y - self.current_piece.position.y)
        return self._lock_piece()

    def tick(self) -> StepResult:
        """Gravity step, called by the owning timer every `drop_speed_ms`."""
        return self.step(Action.SOFT_DROP)

    def can_apply(self, action: Action) -> bool:
        if self.game_over or self.current_piece is None:
            return False
        if action == Action.LEFT:
            return not check_collision(self.board, self.current_piece, -1, 0)
        if action == Action.RIGHT:
            return not check_collision(self.board, self.current_piece, 1, 0)
        if action == Action.ROTATE_CW:
            return not check_collision(self.board, self.current_piece.rotated(), 0, 0)
        return True

    def step(self, action: Action) -> StepResult:
        if self.game_over:
            return StepResult(game_over=True)

        if action == Action.LEFT:
            self._move(-1, 0)
        elif action == Action.RIGHT:
            self._move(1, 0)
        elif action == Action.ROTATE_CW:
            self._rotate()
        elif action == Action.SOFT_DROP:
            return self.soft_drop()
        elif action == Action.HARD_DROP:
            return self.hard_drop()
        elif action == Action.NONE:
            pass
        else:
            raise ValueError(f"Unknown action: {action!r}")
        return StepResult()

    def get_state(self) -> np.ndarray:
        """Grid of piece codes: locked cells positive, the falling piece negative."""
        state = np.zeros((BOARD_HEIGHT, BOARD_WIDTH), dtype=np.int8)
        for y, row in enumerate(self.board):
            for x, cell in enumerate(row):
                if cell.filled:
                    state[y, x] = color_code(cell.color)
        if self.current_piece is not None and not self.game_over:
            for x, y in self.current_piece.cells():
                if 0 <= y < BOARD_HEIGHT and 0 <= x < BOARD_WIDTH:
                    # Use negative to indicate falling piece overlay
                    state[y, x] = -int(self.current_piece.type)
        return state

    def get_stats(self) -> dict:
        return {
            "score": self.score,
            "lines_cleared": self.lines_cleared_total,
            "level": self.level,
            "drop_speed_ms": self.drop_speed_ms,
            "pieces_placed": self.pieces_placed,
            "game_over": self.game_over,
            "avg_lines_per_piece": self.lines_cleared_total / max(1, self.pieces_placed),
        }


def color_code(color: str) -> int:
    return _COLOR_CODES.get(color, UNKNOWN_CODE)
