"""Episode configuration for the arena navigation task.

All values are plain numbers with the defaults of the car/target
scene. Invalid combinations are rejected when the config is
built, never at tick time.
"""

from __future__ import annotations

from dataclasses import dataclass, fields


@dataclass(frozen=True)
class EpisodeConfig:
    """Spawn, reward and termination settings for one agent.

    Args:
        spawn_margin: Distance kept from the arena edge when sampling spawns.
        check_radius: Radius of the free disc required around a spawn point.
        max_spawn_tries: Rejection-sampling attempts before falling back.
        step_penalty: Constant reward added every tick (negative).
        distance_reward_scale: Weight on the per-tick distance delta.
        idle_velocity_threshold: Speed below which the idle penalty applies.
        idle_penalty: Reward added on idle ticks (negative).
        timeout_penalty: Terminal reward when the step budget runs out.
        max_steps: Step budget per episode. 0 disables the timeout.
        min_target_separation: Minimum agent-target distance at spawn.
        goal_bonus: Terminal reward for touching the target.
        obstacle_penalty: Terminal reward for touching an obstacle or wall.
    """

    spawn_margin: float = 2.0
    check_radius: float = 0.5
    max_spawn_tries: int = 100
    step_penalty: float = -0.001
    distance_reward_scale: float = 0.01
    idle_velocity_threshold: float = 0.1
    idle_penalty: float = -0.001
    timeout_penalty: float = -10.0
    max_steps: int = 1000
    min_target_separation: float = 5.0
    goal_bonus: float = 10.0
    obstacle_penalty: float = -10.0

    def __post_init__(self):
        if self.max_steps < 0:
            raise ValueError(f"max_steps must be >= 0, got {self.max_steps}")
        if self.check_radius < 0:
            raise ValueError(f"check_radius must be >= 0, got {self.check_radius}")
        if self.spawn_margin < 0:
            raise ValueError(f"spawn_margin must be >= 0, got {self.spawn_margin}")
        if self.max_spawn_tries < 1:
            raise ValueError(
                f"max_spawn_tries must be >= 1, got {self.max_spawn_tries}"
            )
        if self.min_target_separation < 0:
            raise ValueError(
                f"min_target_separation must be >= 0, got {self.min_target_separation}"
            )
        if self.idle_velocity_threshold < 0:
            raise ValueError(
                "idle_velocity_threshold must be >= 0, "
                f"got {self.idle_velocity_threshold}"
            )

    @classmethod
    def from_cfg(cls, cfg) -> "EpisodeConfig":
        """Build from a mapping or OmegaConf node (e.g. ``cfg.env.episode``)."""
        if cfg is None:
            return cls()
        if hasattr(cfg, "items"):
            values = {str(k): v for k, v in cfg.items()}
        else:
            values = dict(cfg)

        known = {f.name for f in fields(cls)}
        unknown = sorted(set(values) - known)
        if unknown:
            raise ValueError(f"Unknown episode config keys: {unknown}")

        return cls(**values)
