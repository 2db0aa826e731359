"""Smoke tests for the training pipeline.

These tests verify that training starts, runs a few steps, and produces
valid outputs. They do NOT test convergence (that requires longer runs).
"""

import numpy as np
import pytest
from omegaconf import OmegaConf
from stable_baselines3 import PPO

from envs.navigation_env import ArenaNavigationEnv
from training.tracking import NavigationMetricsCallback
from training.utils import make_nav_env, make_obstacle_map, make_vec_env, setup_reproducibility


def _make_test_cfg(layout="open", layout_kwargs=None):
    """Create a minimal Hydra-like config for testing."""
    return OmegaConf.create({
        "seed": 42,
        "total_timesteps": 256,
        "n_envs": 2,
        "experiment_group": "test",
        "env": {
            "arena_width": 20.0,
            "arena_depth": 20.0,
            "layout": layout,
            "layout_kwargs": layout_kwargs or {},
            "physics": {
                "move_speed": 20.0,
                "dt": 0.02,
                "agent_radius": 0.5,
                "target_radius": 0.5,
            },
            "episode": {
                "max_steps": 50,
                "timeout_penalty": -10.0,
                "distance_reward_scale": 0.01,
            },
        },
        "algorithm": {
            "learning_rate": 3e-4,
            "n_steps": 64,
            "batch_size": 32,
            "n_epochs": 1,
            "gamma": 0.99,
        },
        "wandb": {
            "entity": None,
            "project": "test",
            "mode": "disabled",
            "sync_tensorboard": False,
            "save_code": False,
            "tags": ["test"],
            "log_frequency": 32,
        },
    })


class TestTrainingSmoke:
    """Smoke tests for the training pipeline."""

    def test_make_nav_env(self):
        cfg = _make_test_cfg()
        env = make_nav_env(cfg)
        obs, info = env.reset(seed=42)
        assert isinstance(env, ArenaNavigationEnv)
        assert obs.shape == (2,)
        assert env.config.max_steps == 50
        assert env.config.step_penalty == -0.001

    @pytest.mark.parametrize("layout, kwargs", [
        ("open", {}),
        ("scattered", {"n_obstacles": 4, "seed": 0}),
        ("road", {}),
    ])
    def test_layouts_from_config(self, layout, kwargs):
        cfg = _make_test_cfg(layout, kwargs)
        obstacle_map = make_obstacle_map(cfg)
        assert obstacle_map.bounds.width == 20.0
        env = make_nav_env(cfg, obstacle_map=obstacle_map, seed=0)
        obs, _, _, _, _ = env.step(env.action_space.sample())
        assert obs.shape == (2,)

    def test_vec_env_shares_obstacle_map(self):
        cfg = _make_test_cfg("scattered", {"seed": 1})
        vec_env = make_vec_env(cfg, n_envs=2, seed=0)
        maps = vec_env.get_attr("obstacle_map")
        assert maps[0] is maps[1]
        obs = vec_env.reset()
        assert obs.shape == (2, 2)
        vec_env.close()

    def test_ppo_learns_a_few_steps(self):
        cfg = _make_test_cfg()
        setup_reproducibility(cfg.seed)
        vec_env = make_vec_env(cfg, n_envs=cfg.n_envs, seed=cfg.seed)
        algo_cfg = OmegaConf.to_container(cfg.algorithm, resolve=True)
        model = PPO("MlpPolicy", vec_env, seed=cfg.seed, verbose=0, device="cpu", **algo_cfg)
        callback = NavigationMetricsCallback(log_frequency=cfg.wandb.log_frequency)
        model.learn(total_timesteps=cfg.total_timesteps, callback=callback)

        action, _ = model.predict(np.zeros(2, dtype=np.float32), deterministic=True)
        assert action.shape == (2,)
        # 50-step budget over 256 steps in 2 envs: some episodes must have ended
        assert len(callback.causes) > 0
        vec_env.close()


class TestNavigationMetricsCallback:

    def test_rates(self):
        cb = NavigationMetricsCallback()
        assert cb.rates() == {"goal": 0.0, "obstacle": 0.0, "timeout": 0.0}
        for cause in ("goal", "goal", "obstacle", "timeout"):
            cb.record_metrics({
                "termination_cause": cause,
                "cumulative_reward": 1.0,
                "episode_length": 10,
            })
        rates = cb.rates()
        assert rates["goal"] == pytest.approx(0.5)
        assert rates["obstacle"] == pytest.approx(0.25)
        assert rates["timeout"] == pytest.approx(0.25)

    def test_window(self):
        cb = NavigationMetricsCallback(window=2)
        for cause in ("goal", "timeout", "timeout"):
            cb.record_metrics({"termination_cause": cause})
        assert cb.rates()["goal"] == 0.0
