"""Main training entry point with Hydra config management.

Usage:
    # Default training (PPO in the open arena)
    python scripts/train.py

    # Override from CLI
    python scripts/train.py env.layout=scattered env.episode.max_steps=500 seed=123

    # Log to wandb
    python scripts/train.py wandb.mode=online

    # Multi-run hyperparameter sweep
    python scripts/train.py --multirun algorithm.learning_rate=1e-3,3e-4 seed=0,1,2
"""

import sys
import os

# Add project root to path so imports work regardless of working directory
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import logging

import hydra
import torch
from omegaconf import DictConfig, OmegaConf
from stable_baselines3 import PPO
from stable_baselines3.common.callbacks import CallbackList, EvalCallback

from training.tracking import (
    HParamCallback,
    NavigationMetricsCallback,
    init_tracking,
)
from training.utils import make_nav_env, make_vec_env, setup_reproducibility

logger = logging.getLogger(__name__)


@hydra.main(version_base=None, config_path="../conf", config_name="config")
def main(cfg: DictConfig):
    logger.info("Training config:\n%s", OmegaConf.to_yaml(cfg))

    # Setup reproducibility
    use_cuda = torch.cuda.is_available()
    setup_reproducibility(cfg.seed, use_cuda=use_cuda)
    device = "cuda" if use_cuda else "cpu"
    logger.info("Device: %s", device)

    # Init tracking
    run = init_tracking(cfg)
    run_id = run.id if run is not None else f"local_{cfg.seed}"

    # Per-episode reward lines from the training envs are too chatty
    logging.getLogger("envs.episode").setLevel(logging.WARNING)

    train_env = make_vec_env(cfg, n_envs=cfg.n_envs, seed=cfg.seed)
    eval_env = make_nav_env(cfg, seed=cfg.seed + 10_000)

    # Build PPO config from Hydra
    algo_cfg = OmegaConf.to_container(cfg.algorithm, resolve=True)

    # Convert net_arch list properly for SB3
    policy_kwargs = algo_cfg.pop("policy_kwargs", {})
    if "net_arch" in policy_kwargs:
        policy_kwargs["net_arch"] = list(policy_kwargs["net_arch"])
    policy_kwargs["activation_fn"] = torch.nn.Tanh

    model = PPO(
        "MlpPolicy",
        train_env,
        tensorboard_log=f"runs/{run_id}",
        seed=cfg.seed,
        verbose=1,
        device=device,
        policy_kwargs=policy_kwargs,
        **algo_cfg,
    )

    callbacks = [
        NavigationMetricsCallback(log_frequency=cfg.wandb.log_frequency),
        HParamCallback(),
        EvalCallback(
            eval_env,
            eval_freq=max(cfg.eval_freq // cfg.n_envs, 1),
            n_eval_episodes=cfg.n_eval_episodes,
            best_model_save_path=f"models/{run_id}/best",
            log_path=f"models/{run_id}/eval_logs",
            deterministic=True,
        ),
    ]

    # Add wandb callback if tracking is active
    if run is not None:
        from wandb.integration.sb3 import WandbCallback
        callbacks.append(
            WandbCallback(
                model_save_path=f"models/{run_id}",
                model_save_freq=cfg.save_freq,
                verbose=2,
            ),
        )

    logger.info("Starting training: %d timesteps, seed=%d", cfg.total_timesteps, cfg.seed)
    model.learn(
        total_timesteps=cfg.total_timesteps,
        callback=CallbackList(callbacks),
        progress_bar=True,
    )

    model.save(f"models/{run_id}/final_model")
    logger.info("Model saved to models/%s/final_model", run_id)

    train_env.close()
    eval_env.close()
    if run is not None:
        run.finish()

    logger.info("Training complete.")


if __name__ == "__main__":
    main()
