"""Tests for EpisodeConfig defaults and validation."""

import pytest
from omegaconf import OmegaConf

from envs.config import EpisodeConfig


class TestEpisodeConfig:

    def test_defaults(self):
        cfg = EpisodeConfig()
        assert cfg.spawn_margin == 2.0
        assert cfg.check_radius == 0.5
        assert cfg.max_spawn_tries == 100
        assert cfg.step_penalty == -0.001
        assert cfg.distance_reward_scale == 0.01
        assert cfg.idle_velocity_threshold == 0.1
        assert cfg.idle_penalty == -0.001
        assert cfg.timeout_penalty == -10.0
        assert cfg.min_target_separation == 5.0
        assert cfg.goal_bonus == 10.0
        assert cfg.obstacle_penalty == -10.0

    def test_zero_max_steps_allowed(self):
        assert EpisodeConfig(max_steps=0).max_steps == 0

    @pytest.mark.parametrize("kwargs", [
        {"max_steps": -1},
        {"check_radius": -0.1},
        {"spawn_margin": -1.0},
        {"max_spawn_tries": 0},
        {"min_target_separation": -5.0},
        {"idle_velocity_threshold": -0.1},
    ])
    def test_invalid_values_rejected(self, kwargs):
        with pytest.raises(ValueError):
            EpisodeConfig(**kwargs)

    def test_frozen(self):
        cfg = EpisodeConfig()
        with pytest.raises(Exception):
            cfg.max_steps = 5

    def test_from_omegaconf(self):
        node = OmegaConf.create({"max_steps": 250, "goal_bonus": 5.0})
        cfg = EpisodeConfig.from_cfg(node)
        assert cfg.max_steps == 250
        assert cfg.goal_bonus == 5.0
        assert cfg.obstacle_penalty == -10.0

    def test_from_cfg_none(self):
        assert EpisodeConfig.from_cfg(None) == EpisodeConfig()

    def test_from_cfg_unknown_key(self):
        with pytest.raises(ValueError, match="Unknown"):
            EpisodeConfig.from_cfg({"max_step": 10})

    def test_from_cfg_validates(self):
        with pytest.raises(ValueError):
            EpisodeConfig.from_cfg({"check_radius": -1.0})
