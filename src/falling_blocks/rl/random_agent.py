from __future__ import annotations

import argparse
import logging
from typing import Dict, List, Optional

import gymnasium as gym

import falling_blocks.env  # noqa: F401
from falling_blocks.env.wrappers import ResampleInvalidActionWrapper

logger = logging.getLogger(__name__)


def run_random(episodes: int = 1, seed: Optional[int] = None, max_steps: int = 2000) -> List[Dict[str, float]]:
    env = ResampleInvalidActionWrapper(gym.make("FallingBlocks-10x20-v0", max_episode_steps=max_steps))
    results: List[Dict[str, float]] = []
    try:
        for episode in range(episodes):
            episode_seed = None if seed is None else seed + episode
            obs, info = env.reset(seed=episode_seed)
            env.action_space.seed(episode_seed)
            total_reward = 0.0
            done = False
            while not done:
                action = env.action_space.sample()
                obs, reward, terminated, truncated, info = env.step(action)
                total_reward += float(reward)
                done = terminated or truncated
            summary = {
                "episode": episode,
                "reward": total_reward,
                "score": info["score"],
                "lines": info["lines_cleared_total"],
                "level": info["level"],
                "steps": info["steps"],
            }
            logger.info("Episode %d finished: %s", episode, summary)
            results.append(summary)
    finally:
        env.close()
    return results


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Play Falling Blocks with a random agent")
    p.add_argument("--episodes", type=int, default=1)
    p.add_argument("--seed", type=int, default=None)
    p.add_argument("--max-steps", type=int, default=2000)
    p.add_argument("--log-level", default="WARNING", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    return p


def main(argv: Optional[List[str]] = None) -> None:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=args.log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    for r in run_random(args.episodes, args.seed, args.max_steps):
        print(
            f"episode {r['episode']}: score {r['score']} lines {r['lines']} "
            f"level {r['level']} steps {r['steps']} reward {r['reward']:.2f}"
        )


if __name__ == "__main__":  # pragma: no cover
    main()
