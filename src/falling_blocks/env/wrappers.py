from __future__ import annotations

import numpy as np
import gymnasium as gym

from .tetris_env import _compute_action_mask


class ResampleInvalidActionWrapper(gym.Wrapper):
    """If an action would be rejected by the engine, resample among legal ones.

    Movement and rotation into a wall or the stack are no-ops in the game, so
    this keeps random or untrained agents from burning steps on them.
    """

    def step(self, action):  # type: ignore[override]
        mask = self.get_action_mask()
        if 0 <= int(action) < mask.shape[0] and not bool(mask[int(action)]):
            valid_idxs = np.flatnonzero(mask)
            if valid_idxs.size > 0:
                action = int(self.np_random.choice(valid_idxs))
        return self.env.step(action)

    def get_action_mask(self) -> np.ndarray:
        return _compute_action_mask(self.env.unwrapped.game)
