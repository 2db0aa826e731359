"""Episode state machine: termination, terminal reward and episode reset.

States: Active, or Ended(cause) with cause in {GOAL, OBSTACLE, TIMEOUT}.
Transitions are checked in priority order each tick, first match wins:

  1. "target" collision                 -> GOAL      (+goal_bonus)
  2. "obstacle" / "wall" collision      -> OBSTACLE  (obstacle_penalty)
  3. step_index >= max_steps - 1        -> TIMEOUT   (timeout_penalty)
     (only when max_steps > 0)
  4. otherwise stay Active, step_index += 1

Any other collision tag is ignored. Entering Ended reports the episode
(cumulative reward, cause, length) to the reporting sink and immediately
resets: agent spawn first, then the target away from the new agent spawn,
velocity zeroed, counters cleared, previous distance recomputed. The new
context is built completely before it replaces the old one.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Callable, Iterable

import numpy as np

from envs.arena import OBSTACLE_TAG, TARGET_TAG, WALL_TAG, ObstacleMap
from envs.config import EpisodeConfig
from envs.rewards import RewardShaper
from envs.spawn import SpawnSampler
from envs.state import (
    AgentState,
    EpisodeContext,
    EpisodeSummary,
    RewardTerms,
    TargetState,
    TerminationCause,
    planar_distance,
)

logger = logging.getLogger(__name__)

GOAL_TAGS = frozenset({TARGET_TAG})
OBSTACLE_TAGS = frozenset({OBSTACLE_TAG, WALL_TAG})


def log_episode_summary(summary: EpisodeSummary) -> None:
    """Default reporting sink."""
    logger.info(
        "Episode ended with net reward: %.4f (cause=%s, length=%d)",
        summary.cumulative_reward,
        summary.termination_cause.value,
        summary.episode_length,
    )


def resolve_termination(
    context: EpisodeContext,
    collision_tags: Iterable[str] = (),
) -> TerminationCause:
    """Decide how (and whether) the episode ends on this tick."""
    tags = {str(tag).lower() for tag in collision_tags}
    if tags & GOAL_TAGS:
        return TerminationCause.GOAL
    if tags & OBSTACLE_TAGS:
        return TerminationCause.OBSTACLE
    if context.max_steps > 0 and context.step_index >= context.max_steps - 1:
        return TerminationCause.TIMEOUT
    return TerminationCause.NONE


@dataclass(frozen=True)
class TickResult:
    """Outcome of one tick.

    ``context`` is the context the tick finished with: for a terminating tick
    it carries the cause and the final cumulative reward, even though the
    machine itself has already moved on to a fresh episode.
    """

    reward: float
    terms: RewardTerms
    context: EpisodeContext
    summary: EpisodeSummary | None = None

    @property
    def cause(self) -> TerminationCause:
        return self.context.termination_cause

    @property
    def ended(self) -> bool:
        return self.summary is not None


class EpisodeStateMachine:
    """Owns the episode lifecycle of one agent.

    Args:
        obstacle_map: Arena bounds and the occupancy test (read-only).
        config: Episode configuration.
        sampler: Spawn sampler (seeded source of randomness).
        shaper: Reward shaper. Built from ``config`` when omitted.
        reporter: Called with an ``EpisodeSummary`` on every episode end.
        on_reset: Called with ``(agent_position, target_position)`` after a
            reset is committed, e.g. to teleport the physics bodies.
    """

    def __init__(
        self,
        obstacle_map: ObstacleMap,
        config: EpisodeConfig | None = None,
        sampler: SpawnSampler | None = None,
        shaper: RewardShaper | None = None,
        reporter: Callable[[EpisodeSummary], None] | None = None,
        on_reset: Callable[[np.ndarray, np.ndarray], None] | None = None,
    ):
        self.obstacle_map = obstacle_map
        self.config = config or EpisodeConfig()
        self.sampler = sampler or SpawnSampler()
        self.shaper = shaper or RewardShaper(self.config)
        self.reporter = reporter or log_episode_summary
        self.on_reset = on_reset

        bounds = obstacle_map.bounds
        inset = 2.0 * self.config.spawn_margin
        if inset > bounds.width or inset > bounds.depth:
            raise ValueError(
                f"spawn_margin {self.config.spawn_margin} leaves no spawn area in a "
                f"{bounds.width} x {bounds.depth} arena"
            )

        self.agent_state = AgentState()
        self.target_state = TargetState()
        self.context = EpisodeContext(max_steps=self.config.max_steps)
        self.episodes_completed = 0
        self.last_summary: EpisodeSummary | None = None

    def _sample_spawns(self) -> tuple[np.ndarray, np.ndarray]:
        cfg = self.config
        bounds = self.obstacle_map.bounds
        test = self.obstacle_map.is_occupied
        agent_pos = self.sampler.sample_position(
            bounds, cfg.spawn_margin, cfg.check_radius, test, cfg.max_spawn_tries,
        )
        target_pos = self.sampler.sample_target_position(
            bounds, cfg.spawn_margin, cfg.check_radius, test, cfg.max_spawn_tries,
            agent_position=agent_pos,
            min_separation=cfg.min_target_separation,
        )
        return agent_pos, target_pos

    def reset(self) -> EpisodeContext:
        """Start a new Active episode from freshly sampled spawns."""
        agent_pos, target_pos = self._sample_spawns()
        new_context = EpisodeContext(
            step_index=0,
            max_steps=self.config.max_steps,
            cumulative_reward=0.0,
            prev_distance_to_target=planar_distance(agent_pos, target_pos),
            termination_cause=TerminationCause.NONE,
        )

        self.agent_state.position = agent_pos
        self.agent_state.velocity = np.zeros(2)
        self.target_state.position = target_pos
        self.context = new_context

        if self.on_reset is not None:
            self.on_reset(agent_pos.copy(), target_pos.copy())
        return self.context

    def update_kinematics(self, position, velocity) -> None:
        """Copy the physics-reported state into the agent record."""
        self.agent_state.position = np.asarray(position, dtype=np.float64)[:2].copy()
        if velocity is None:
            self.agent_state.velocity = None
        else:
            self.agent_state.velocity = np.asarray(velocity, dtype=np.float64)[:2].copy()

    def tick(self, collision_tags: Iterable[str] = ()) -> TickResult:
        """Evaluate reward and termination for the tick that just ran.

        Call ``update_kinematics`` with the post-physics state first.
        """
        context = self.context
        cause = resolve_termination(context, collision_tags)
        reward, context, terms = self.shaper.compute_step_reward(
            context, self.agent_state, self.target_state, cause,
        )

        if cause is TerminationCause.NONE:
            self.context = replace(context, step_index=context.step_index + 1)
            return TickResult(reward=reward, terms=terms, context=self.context)

        final = replace(context, termination_cause=cause)
        summary = EpisodeSummary(
            cumulative_reward=final.cumulative_reward,
            termination_cause=cause,
            episode_length=final.step_index + 1,
        )
        self.episodes_completed += 1
        self.last_summary = summary
        self.reporter(summary)
        self.reset()
        return TickResult(reward=reward, terms=terms, context=final, summary=summary)
