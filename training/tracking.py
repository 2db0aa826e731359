"""Experiment tracking: wandb + TensorBoard integration with navigation metrics.

SB3 logs natively to TensorBoard. With sync_tensorboard=True, wandb mirrors
everything automatically. Custom callbacks log episode outcomes (goal,
obstacle, timeout) read from the env's ``episode_metrics`` info entry.
"""

from collections import deque

import numpy as np
from omegaconf import DictConfig, OmegaConf
from stable_baselines3.common.callbacks import BaseCallback
from stable_baselines3.common.logger import HParam

CAUSES = ("goal", "obstacle", "timeout")


def init_tracking(cfg: DictConfig):
    """Initialize wandb run with Hydra config as hyperparameters.

    Returns wandb run object, or None if wandb is disabled.
    """
    if cfg.wandb.mode == "disabled":
        return None

    import wandb

    run = wandb.init(
        project=cfg.wandb.project,
        entity=cfg.wandb.entity or None,
        name=f"PPO_{cfg.env.layout}_seed{cfg.seed}",
        group=cfg.experiment_group,
        tags=list(cfg.wandb.tags) + [f"seed_{cfg.seed}"],
        config=OmegaConf.to_container(cfg, resolve=True),
        sync_tensorboard=cfg.wandb.sync_tensorboard,
        save_code=cfg.wandb.save_code,
        mode=cfg.wandb.mode,
    )
    return run


class NavigationMetricsCallback(BaseCallback):
    """Log episode outcome rates and returns to TensorBoard/wandb.

    Keeps the last ``window`` finished episodes across all vectorized envs.
    Logs every log_frequency steps to avoid overhead.
    """

    def __init__(self, log_frequency: int = 1024, window: int = 100, verbose: int = 0):
        super().__init__(verbose)
        self.log_frequency = log_frequency
        self.causes = deque(maxlen=window)
        self.episode_rewards = deque(maxlen=window)
        self.episode_lengths = deque(maxlen=window)

    def record_metrics(self, metrics: dict):
        self.causes.append(metrics.get("termination_cause", "none"))
        self.episode_rewards.append(metrics.get("cumulative_reward", 0.0))
        self.episode_lengths.append(metrics.get("episode_length", 0))

    def rates(self) -> dict:
        """Fraction of recent episodes ending with each cause."""
        if not self.causes:
            return {cause: 0.0 for cause in CAUSES}
        n = len(self.causes)
        return {cause: sum(c == cause for c in self.causes) / n for cause in CAUSES}

    def _on_step(self) -> bool:
        for info in self.locals.get("infos", []):
            if "episode_metrics" in info:
                self.record_metrics(info["episode_metrics"])

        if self.n_calls % self.log_frequency == 0 and len(self.causes) > 0:
            for cause, rate in self.rates().items():
                self.logger.record(f"navigation/{cause}_rate", rate)
            self.logger.record(
                "navigation/episode_reward_mean", np.mean(self.episode_rewards),
            )
            self.logger.record(
                "navigation/episode_length_mean", np.mean(self.episode_lengths),
            )

        return True


class HParamCallback(BaseCallback):
    """Log hyperparameters to TensorBoard HPARAMS tab."""

    def _on_training_start(self) -> None:
        hparam_dict = {
            "algorithm": self.model.__class__.__name__,
            "learning_rate": self.model.learning_rate,
            "gamma": self.model.gamma,
            "n_steps": self.model.n_steps,
            "batch_size": self.model.batch_size,
            "ent_coef": self.model.ent_coef,
        }
        metric_dict = {
            "rollout/ep_rew_mean": 0,
            "navigation/goal_rate": 0,
        }
        self.logger.record(
            "hparams",
            HParam(hparam_dict, metric_dict),
            exclude=("stdout", "log", "json", "csv"),
        )

    def _on_step(self) -> bool:
        return True
