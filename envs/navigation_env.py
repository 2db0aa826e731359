"""Gymnasium environment for arena target navigation.

Single agent, continuous 2D action, velocity-only observation:

    action: [a0, a1] in [-1, 1]   -> clamped, normalized, times move_speed
    obs:    [vx, vz]              (own planar velocity only)

One ``step`` is one tick of the episode loop:
    action mapper -> physics step -> observation -> reward -> termination

Episodes end on touching the target (terminated, +goal_bonus), touching an
obstacle or wall (terminated, obstacle_penalty), or running out of steps
(truncated, timeout_penalty). The state machine resets itself the moment an
episode ends; the observation returned on that step is the terminal one,
measured before the reset. Calling ``reset()`` afterwards (as SB3 does)
samples a fresh episode again.
"""

from __future__ import annotations

import gymnasium as gym
import numpy as np
from gymnasium import spaces

from envs.actions import map_action
from envs.arena import ObstacleMap
from envs.config import EpisodeConfig
from envs.dynamics import PhysicsBackend, PointMassBody
from envs.episode import EpisodeStateMachine
from envs.layouts import create_open_layout
from envs.observations import OBS_DIM, ObservationEncoder
from envs.spawn import SpawnSampler
from envs.state import TerminationCause, planar_distance


class ArenaNavigationEnv(gym.Env):
    """Reach the target, avoid obstacles, inside a bounded arena.

    Args:
        obstacle_map: Arena and obstacles. Defaults to an open 20x20 arena.
            Safe to share between environments.
        config: Episode configuration (spawn, reward, step budget).
        move_speed: Speed of a unit motion command.
        dt: Physics timestep.
        agent_radius: Agent disc radius.
        target_radius: Target disc radius.
        physics: Custom physics backend. Built from the arguments above when None.
        reporter: Episode-end sink forwarded to the state machine.
        seed: Seed for the spawn sampler.
    """

    metadata = {"render_modes": []}

    def __init__(
        self,
        obstacle_map: ObstacleMap | None = None,
        config: EpisodeConfig | None = None,
        move_speed: float = 20.0,
        dt: float = 0.02,
        agent_radius: float = 0.5,
        target_radius: float = 0.5,
        physics: PhysicsBackend | None = None,
        reporter=None,
        seed: int | None = None,
    ):
        super().__init__()

        self.obstacle_map = obstacle_map or create_open_layout()
        self.config = config or EpisodeConfig()

        if physics is None:
            physics = PointMassBody(
                self.obstacle_map,
                move_speed=move_speed,
                dt=dt,
                agent_radius=agent_radius,
                target_radius=target_radius,
            )
        self.physics = physics

        self.sampler = SpawnSampler(seed=seed)
        self.encoder = ObservationEncoder()
        self.state_machine = EpisodeStateMachine(
            self.obstacle_map,
            config=self.config,
            sampler=self.sampler,
            reporter=reporter,
            on_reset=self._place_bodies,
        )

        self.action_space = spaces.Box(
            low=-1.0, high=1.0, shape=(2,), dtype=np.float32,
        )
        self.observation_space = spaces.Box(
            low=-np.inf, high=np.inf, shape=(OBS_DIM,), dtype=np.float32,
        )

        self.last_command = np.zeros(2)

    def _place_bodies(self, agent_position: np.ndarray, target_position: np.ndarray):
        self.physics.place_agent(agent_position)
        self.physics.place_target(target_position)

    def reset(self, seed: int | None = None, options: dict | None = None):
        """Start a new episode with freshly sampled agent and target spawns."""
        super().reset(seed=seed)
        if seed is not None:
            self.sampler.rng = self.np_random

        self.state_machine.reset()
        self.last_command = np.zeros(2)
        obs = self.encoder.encode(self.state_machine.agent_state)
        return obs, self._get_info()

    def step(self, action):
        """Advance one tick with the policy's raw action."""
        self.last_command = map_action(action)
        self.physics.set_motion_command(self.last_command)
        self.physics.step()

        position, velocity = self.physics.get_kinematic_state()
        tags = self.physics.drain_collisions()
        self.state_machine.update_kinematics(position, velocity)

        obs = self.encoder.encode(self.state_machine.agent_state)
        # Positions of the tick itself, not of the next episode's spawn
        info = self._get_info()
        result = self.state_machine.tick(tags)

        terminated = result.cause in (TerminationCause.GOAL, TerminationCause.OBSTACLE)
        truncated = result.cause is TerminationCause.TIMEOUT

        info["step"] = result.context.step_index
        info["cumulative_reward"] = result.context.cumulative_reward
        info["collisions"] = tags
        info["reward_terms"] = result.terms.as_dict()
        info["termination_cause"] = result.cause.value
        if result.ended:
            info["episode_metrics"] = {
                "cumulative_reward": result.summary.cumulative_reward,
                "termination_cause": result.summary.termination_cause.value,
                "episode_length": result.summary.episode_length,
                "goal_reached": result.cause is TerminationCause.GOAL,
            }

        return obs, float(result.reward), terminated, truncated, info

    def _get_info(self) -> dict:
        sm = self.state_machine
        return {
            "agent_position": sm.agent_state.position.copy(),
            "target_position": sm.target_state.position.copy(),
            "distance": planar_distance(
                sm.agent_state.position, sm.target_state.position,
            ),
            "step": sm.context.step_index,
            "cumulative_reward": sm.context.cumulative_reward,
        }
