"""Evaluate a trained model or a baseline policy through the tick runner.

Usage:
    # Random baseline in the default arena
    python scripts/evaluate.py

    # Trained model on the road layout
    python scripts/evaluate.py evaluation.model_path=models/local_42/final_model env.layout=road

    # Constant-direction baseline, 100 episodes
    python scripts/evaluate.py evaluation.baseline=constant evaluation.n_episodes=100
"""

import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import logging
from collections import Counter

import hydra
import numpy as np
from omegaconf import DictConfig

from envs.actions import ControlMode
from envs.runner import EpisodeRunner
from training.baselines import BASELINES
from training.utils import make_nav_env

logger = logging.getLogger(__name__)


def load_policy(cfg: DictConfig):
    if cfg.evaluation.model_path:
        from stable_baselines3 import PPO
        return PPO.load(cfg.evaluation.model_path)

    name = cfg.evaluation.baseline
    if name not in BASELINES:
        raise ValueError(f"Unknown baseline '{name}', expected one of {sorted(BASELINES)}")
    if name == "random":
        return BASELINES[name](seed=cfg.seed)
    return BASELINES[name]()


def summarize(summaries) -> dict:
    """Outcome rates and reward statistics over finished episodes."""
    n = len(summaries)
    counts = Counter(s.termination_cause.value for s in summaries)
    rewards = np.array([s.cumulative_reward for s in summaries], dtype=np.float64)
    lengths = np.array([s.episode_length for s in summaries], dtype=np.float64)
    return {
        "episodes": n,
        "goal_rate": counts["goal"] / n if n else 0.0,
        "obstacle_rate": counts["obstacle"] / n if n else 0.0,
        "timeout_rate": counts["timeout"] / n if n else 0.0,
        "reward_mean": float(rewards.mean()) if n else 0.0,
        "reward_std": float(rewards.std()) if n else 0.0,
        "length_mean": float(lengths.mean()) if n else 0.0,
    }


@hydra.main(version_base=None, config_path="../conf", config_name="config")
def main(cfg: DictConfig):
    env = make_nav_env(cfg)
    runner = EpisodeRunner(
        env,
        policy=load_policy(cfg),
        control_mode=ControlMode.POLICY_DRIVEN,
        deterministic=cfg.evaluation.deterministic,
    )
    runner.start(seed=cfg.seed)
    summaries = runner.run_episodes(
        cfg.evaluation.n_episodes, max_ticks=cfg.evaluation.max_ticks,
    )

    stats = summarize(summaries)
    for key, value in stats.items():
        logger.info("%-14s %s", key, f"{value:.4f}" if isinstance(value, float) else value)

    env.close()


if __name__ == "__main__":
    main()
