from __future__ import annotations

from typing import Any, Dict, Optional, Tuple

import numpy as np
import gymnasium as gym
from gymnasium import spaces

from falling_blocks.game import (
    BOARD_HEIGHT,
    BOARD_WIDTH,
    TETROMINOES,
    Action,
    GameConfig,
    TetrisGame,
    TetrominoType,
    board_to_array,
)
from falling_blocks.game.board import count_holes, get_bumpiness, get_max_height
from falling_blocks.game.core import UNKNOWN_CODE


def _compute_action_mask(game: TetrisGame) -> np.ndarray:
    return np.array([game.can_apply(action) for action in Action], dtype=np.bool_)


def _hex_to_rgb(color: str) -> Tuple[int, int, int]:
    value = color.lstrip("#")
    return int(value[0:2], 16), int(value[2:4], 16), int(value[4:6], 16)


def _board_features(game: TetrisGame) -> Dict[str, int]:
    grid = board_to_array(game.board)
    return {
        "holes": count_holes(grid),
        "bumpiness": get_bumpiness(grid),
        "max_height": get_max_height(grid),
    }


class FallingBlocksEnv(gym.Env):
    metadata = {"render_modes": ["rgb_array"], "render_fps": 30}

    def __init__(self, config: Optional[GameConfig] = None, render_mode: Optional[str] = None,
                 reward_weights: Optional[Dict[str, float]] = None,
                 step_penalty: float = 0.0,
                 terminal_penalty: float = -10.0,
                 max_episode_steps: int = 10000) -> None:
        super().__init__()
        self.game = TetrisGame(config)
        self.render_mode = render_mode

        # Reward shaping parameters
        self.step_penalty = float(step_penalty)
        self.terminal_penalty = float(terminal_penalty)
        self.max_episode_steps = int(max_episode_steps)
        self.reward_weights: Dict[str, float] = {
            # Positive components
            "score": 0.01,           # reward per engine score point
            "lock": 0.1,             # reward per locked piece
            # Negative components (penalize increases)
            "holes": 0.5,
            "bumpiness": 0.05,
            "height": 0.1,
        }
        if reward_weights:
            self.reward_weights.update({k: float(v) for k, v in reward_weights.items()})

        n_types = len(TetrominoType)
        self.observation_space = spaces.Dict(
            {
                "board": spaces.Box(low=-n_types, high=UNKNOWN_CODE, shape=(BOARD_HEIGHT, BOARD_WIDTH), dtype=np.int8),
                "next_piece": spaces.Discrete(n_types + 1),
                "level": spaces.Box(low=1, high=np.iinfo(np.int32).max, shape=(1,), dtype=np.int32),
            }
        )
        self.action_space = spaces.Discrete(len(Action))

        self._last_obs: Optional[Dict[str, Any]] = None
        self._steps = 0

    def _get_obs(self) -> Dict[str, Any]:
        next_piece = self.game.next_piece
        obs: Dict[str, Any] = {
            "board": self.game.get_state(),
            "next_piece": int(next_piece.type) if next_piece is not None else 0,
            "level": np.array([self.game.level], dtype=np.int32),
        }
        return obs

    def _get_info(self) -> Dict[str, Any]:
        info: Dict[str, Any] = {
            "action_mask": _compute_action_mask(self.game),
            "score": self.game.score,
            "level": self.game.level,
            "lines_cleared_total": self.game.lines_cleared_total,
            "drop_speed_ms": self.game.drop_speed_ms,
            "steps": self._steps,
        }
        return info

    def get_action_mask(self) -> np.ndarray:
        return _compute_action_mask(self.game)

    def reset(self, *, seed: Optional[int] = None, options: Optional[dict] = None) -> Tuple[Dict[str, Any], Dict[str, Any]]:
        super().reset(seed=seed)
        self.game.reset(seed)
        self._steps = 0
        obs = self._get_obs()
        info = self._get_info()
        self._last_obs = obs
        return obs, info

    def step(self, action: int):
        action = Action(int(action))

        features_before = _board_features(self.game)
        result = self.game.step(action)
        features_after = _board_features(self.game)

        reward_components: Dict[str, float] = {
            "score": self.reward_weights["score"] * float(result.score_delta),
            "step": self.step_penalty,
        }
        if result.locked:
            reward_components["lock"] = self.reward_weights["lock"]
            for key in ("holes", "bumpiness"):
                reward_components[key] = -self.reward_weights[key] * float(
                    max(0, features_after[key] - features_before[key]))
            reward_components["height"] = -self.reward_weights["height"] * float(
                max(0, features_after["max_height"] - features_before["max_height"]))

        terminated = bool(self.game.game_over)
        self._steps += 1
        truncated = self._steps >= self.max_episode_steps and not terminated
        if terminated:
            reward_components["terminal"] = self.terminal_penalty

        reward = float(sum(reward_components.values()))

        obs = self._get_obs()
        info = self._get_info()
        info["reward_components"] = reward_components
        info["lines_cleared"] = result.lines_cleared
        info["engine_score_delta"] = float(result.score_delta)
        self._last_obs = obs
        return obs, reward, terminated, truncated, info

    def render(self) -> Optional[np.ndarray]:
        if self.render_mode != "rgb_array":
            return None
        grid = self._last_obs["board"] if self._last_obs is not None else self.game.get_state()
        cell = 12
        h, w = grid.shape
        img = np.zeros((h * cell, w * cell, 3), dtype=np.uint8)
        for y in range(h):
            for x in range(w):
                code = abs(int(grid[y, x]))
                if code == 0:
                    color = (30, 30, 36)
                elif code == UNKNOWN_CODE:
                    color = (200, 200, 200)
                else:
                    color = _hex_to_rgb(TETROMINOES[TetrominoType(code)].color)
                img[y * cell : (y + 1) * cell, x * cell : (x + 1) * cell, :] = color
        return img

    def close(self) -> None:
        pass
