import logging

import numpy as np
import pytest

from falling_blocks.game import (
    BOARD_HEIGHT,
    BOARD_WIDTH,
    Action,
    Cell,
    GameConfig,
    Position,
    StepResult,
    TetrisGame,
    TetrominoType,
    create_empty_board,
    spawn_tetromino,
)

GREY = Cell(filled=True, color="#808080")


def bottom_row_with_gap(gap):
    board = create_empty_board()
    board[BOARD_HEIGHT - 1] = [Cell() if x in gap else GREY for x in range(BOARD_WIDTH)]
    return board


def filled_count(board):
    return sum(cell.filled for row in board for cell in row)


def test_new_game_state():
    game = TetrisGame(GameConfig(random_seed=1))
    assert game.score == 0
    assert game.level == 1
    assert game.drop_speed_ms == 1000
    assert game.lines_cleared_total == 0
    assert game.game_over is False
    assert game.current_piece is not None and game.current_piece.position.y == 0
    assert game.next_piece is not None
    assert filled_count(game.board) == 0


def test_same_seed_same_pieces():
    a = TetrisGame(GameConfig(random_seed=42))
    b = TetrisGame(GameConfig(random_seed=42))
    seq_a, seq_b = [], []
    for _ in range(5):
        seq_a.append(a.current_piece.type)
        seq_b.append(b.current_piece.type)
        a.step(Action.HARD_DROP)
        b.step(Action.HARD_DROP)
    assert seq_a == seq_b


def test_moves_respect_walls():
    game = TetrisGame(GameConfig(random_seed=0))
    game.current_piece = spawn_tetromino(TetrominoType.O).moved(-4, 0)
    assert game.can_apply(Action.LEFT) is False
    game.step(Action.LEFT)
    assert game.current_piece.position == Position(0, 0)
    assert game.can_apply(Action.RIGHT) is True
    game.step(Action.RIGHT)
    assert game.current_piece.position == Position(1, 0)


def test_rotation_applies_when_legal():
    game = TetrisGame(GameConfig(random_seed=0))
    game.current_piece = spawn_tetromino(TetrominoType.T).moved(0, 5)
    before = game.current_piece.shape.copy()
    game.step(Action.ROTATE_CW)
    np.testing.assert_array_equal(game.current_piece.shape, np.rot90(before, -1))


def test_rotation_blocked_by_wall():
    game = TetrisGame(GameConfig(random_seed=0))
    # Vertical I hugging the left wall; the next rotation lays it out past x=0
    vertical = spawn_tetromino(TetrominoType.I).rotated()
    game.current_piece = vertical.moved(-vertical.position.x - 3, 5)
    assert sorted({x for x, _ in game.current_piece.cells()}) == [0]
    shape = game.current_piece.shape.copy()
    assert game.can_apply(Action.ROTATE_CW) is False
    game.step(Action.ROTATE_CW)
    np.testing.assert_array_equal(game.current_piece.shape, shape)


def test_tick_moves_piece_down():
    game = TetrisGame(GameConfig(random_seed=0))
    y = game.current_piece.position.y
    result = game.tick()
    assert result.locked is False
    assert game.current_piece.position.y == y + 1


def test_ghost_position_on_empty_board():
    game = TetrisGame(GameConfig(random_seed=0))
    game.current_piece = spawn_tetromino(TetrominoType.O)
    assert game.ghost_position() == Position(4, BOARD_HEIGHT - 2)


def test_hard_drop_locks_piece():
    game = TetrisGame(GameConfig(random_seed=0))
    game.current_piece = spawn_tetromino(TetrominoType.O)
    upcoming = game.next_piece
    result = game.step(Action.HARD_DROP)
    assert result.locked is True
    assert result.lines_cleared == 0
    assert game.board[BOARD_HEIGHT - 1][4].filled
    assert game.board[BOARD_HEIGHT - 2][5].filled
    assert filled_count(game.board) == 4
    assert game.pieces_placed == 1
    assert game.current_piece is upcoming


def test_soft_drop_locks_on_floor():
    game = TetrisGame(GameConfig(random_seed=0))
    game.current_piece = spawn_tetromino(TetrominoType.O).moved(0, BOARD_HEIGHT - 2)
    result = game.step(Action.SOFT_DROP)
    assert result.locked is True
    assert filled_count(game.board) == 4


def test_line_clear_scores_and_compacts():
    game = TetrisGame(GameConfig(random_seed=0))
    game.board = bottom_row_with_gap({0, 1, 2, 3})
    game.current_piece = spawn_tetromino(TetrominoType.I).moved(-3, 0)
    result = game.step(Action.HARD_DROP)
    assert result.lines_cleared == 1
    assert result.score_delta == 100
    assert game.score == 100
    assert game.lines_cleared_total == 1
    assert filled_count(game.board) == 0
    assert len(game.board) == BOARD_HEIGHT


def test_level_up_changes_speed(caplog):
    game = TetrisGame(GameConfig(random_seed=0))
    game.lines_cleared_total = 9
    game.board = bottom_row_with_gap({0, 1, 2, 3})
    game.current_piece = spawn_tetromino(TetrominoType.I).moved(-3, 0)
    with caplog.at_level(logging.INFO, logger="falling_blocks.game.core"):
        result = game.step(Action.HARD_DROP)
    # Scored at the level in force before the clear
    assert result.score_delta == 100
    assert game.level == 2
    assert game.drop_speed_ms == 900
    assert "Level up" in caplog.text


def test_level_multiplier_applies():
    game = TetrisGame(GameConfig(random_seed=0))
    game.lines_cleared_total = 25
    game.level = 3
    game.board = bottom_row_with_gap({0, 1, 2, 3})
    game.current_piece = spawn_tetromino(TetrominoType.I).moved(-3, 0)
    result = game.step(Action.HARD_DROP)
    assert result.score_delta == 300


def test_game_over_when_spawn_blocked():
    game = TetrisGame(GameConfig(random_seed=0))
    board = create_empty_board()
    board[0] = [GREY if 3 <= x <= 6 else Cell() for x in range(BOARD_WIDTH)]
    game.board = board
    game.current_piece = spawn_tetromino(TetrominoType.O).moved(-4, 5)
    result = game.step(Action.HARD_DROP)
    assert result.game_over is True
    assert game.game_over is True

    snapshot = [list(row) for row in game.board]
    after = game.step(Action.LEFT)
    assert after.game_over is True
    assert game.board == snapshot
    assert game.can_apply(Action.SOFT_DROP) is False


def test_direct_drops_ignored_after_game_over():
    game = TetrisGame(GameConfig(random_seed=0))
    board = create_empty_board()
    board[0] = [GREY if 3 <= x <= 6 else Cell() for x in range(BOARD_WIDTH)]
    game.board = board
    game.current_piece = spawn_tetromino(TetrominoType.O).moved(-4, 5)
    game.hard_drop()
    assert game.game_over is True

    snapshot = [list(row) for row in game.board]
    blocked = game.current_piece
    placed = game.pieces_placed

    assert game.hard_drop() == StepResult(game_over=True)
    assert game.soft_drop() == StepResult(game_over=True)
    assert game.tick().game_over is True
    assert game.board == snapshot
    assert filled_count(game.board) == 8
    assert game.current_piece is blocked
    assert game.current_piece.position.y == 0
    assert game.pieces_placed == placed


def test_reset_restarts_session():
    game = TetrisGame(GameConfig(random_seed=0))
    for _ in range(3):
        game.step(Action.HARD_DROP)
    game.reset(seed=5)
    assert game.score == 0
    assert game.pieces_placed == 0
    assert filled_count(game.board) == 0
    first = game.current_piece.type
    game.reset(seed=5)
    assert game.current_piece.type == first


def test_get_state_overlays_falling_piece():
    game = TetrisGame(GameConfig(random_seed=0))
    game.current_piece = spawn_tetromino(TetrominoType.O)
    game.step(Action.HARD_DROP)
    game.current_piece = spawn_tetromino(TetrominoType.T)
    state = game.get_state()
    assert state.shape == (BOARD_HEIGHT, BOARD_WIDTH)
    assert state[BOARD_HEIGHT - 1, 4] == int(TetrominoType.O)
    assert state[0, 3] == -int(TetrominoType.T)
    assert state[1, 4] == -int(TetrominoType.T)
    assert state[1, 3] == 0


def test_unknown_action_rejected():
    game = TetrisGame(GameConfig(random_seed=0))
    with pytest.raises(ValueError):
        game.step(99)


def test_stats():
    game = TetrisGame(GameConfig(random_seed=0))
    game.step(Action.HARD_DROP)
    stats = game.get_stats()
    assert stats["pieces_placed"] == 1
    assert stats["level"] == 1
    assert stats["drop_speed_ms"] == 1000
