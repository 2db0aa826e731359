"""Training utilities: reproducibility, environment factory, etc."""

import os

import torch
from omegaconf import OmegaConf
from stable_baselines3.common.utils import set_random_seed
from stable_baselines3.common.vec_env import DummyVecEnv, VecMonitor

from envs.config import EpisodeConfig
from envs.layouts import make_layout
from envs.navigation_env import ArenaNavigationEnv


def setup_reproducibility(seed: int, use_cuda: bool = False):
    """Full reproducibility setup. Call BEFORE creating envs or models."""
    os.environ["PYTHONHASHSEED"] = str(seed)
    set_random_seed(seed, using_cuda=use_cuda)

    if use_cuda and torch.cuda.is_available():
        torch.use_deterministic_algorithms(True)
        os.environ["CUBLAS_WORKSPACE_CONFIG"] = ":4096:8"
        torch.backends.cuda.matmul.allow_tf32 = False
        torch.backends.cudnn.allow_tf32 = False


def make_obstacle_map(cfg):
    """Build the (shared, read-only) obstacle map from ``cfg.env``."""
    layout_kwargs = OmegaConf.to_container(cfg.env.layout_kwargs, resolve=True) or {}
    return make_layout(
        cfg.env.layout,
        width=cfg.env.arena_width,
        depth=cfg.env.arena_depth,
        **layout_kwargs,
    )


def make_nav_env(cfg, obstacle_map=None, seed=None, reporter=None):
    """Create an ArenaNavigationEnv from Hydra config."""
    if obstacle_map is None:
        obstacle_map = make_obstacle_map(cfg)
    env = ArenaNavigationEnv(
        obstacle_map=obstacle_map,
        config=EpisodeConfig.from_cfg(cfg.env.episode),
        move_speed=cfg.env.physics.move_speed,
        dt=cfg.env.physics.dt,
        agent_radius=cfg.env.physics.agent_radius,
        target_radius=cfg.env.physics.target_radius,
        reporter=reporter,
        seed=seed,
    )
    if seed is not None:
        env.reset(seed=seed)
    return env


def make_vec_env(cfg, n_envs, seed=42):
    """Create vectorized training environment.

    All sub-environments share one obstacle map; each owns its own episode
    state and spawn sampler.
    """
    obstacle_map = make_obstacle_map(cfg)

    def _make_env(env_seed):
        def _init():
            env = make_nav_env(cfg, obstacle_map=obstacle_map)
            env.reset(seed=env_seed)
            return env
        return _init

    envs = DummyVecEnv([_make_env(seed + i) for i in range(n_envs)])
    envs = VecMonitor(envs)
    return envs
