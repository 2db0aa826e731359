"""Per-step reward shaping for the navigation task.

Step reward (applied in this order every tick):
    r = step_penalty                                   (constant, negative)
      + scale * (d_prev - d_curr)                      (progress toward target)
      + idle_penalty * I(|v| < idle_velocity_threshold)
      + terminal_bonus(cause)                          (goal / obstacle / timeout)

The terminal bonus is not exclusive with the shaping terms: a terminating
tick still pays the step, progress and idle terms. The termination cause
itself is decided by the episode state machine and handed in here.
"""

from __future__ import annotations

from dataclasses import replace

from envs.config import EpisodeConfig
from envs.state import (
    AgentState,
    EpisodeContext,
    RewardTerms,
    TargetState,
    TerminationCause,
    planar_distance,
)


class RewardShaper:
    """Computes the scalar reward of one tick from independent terms.

    Args:
        config: Episode configuration holding the reward weights.
    """

    def __init__(self, config: EpisodeConfig | None = None):
        self.config = config or EpisodeConfig()

    def terminal_bonus(self, cause: TerminationCause) -> float:
        if cause is TerminationCause.GOAL:
            return self.config.goal_bonus
        if cause is TerminationCause.OBSTACLE:
            return self.config.obstacle_penalty
        if cause is TerminationCause.TIMEOUT:
            return self.config.timeout_penalty
        return 0.0

    def shaping_terms(
        self,
        context: EpisodeContext,
        agent_state: AgentState,
        target_state: TargetState,
        cause: TerminationCause = TerminationCause.NONE,
    ) -> tuple[RewardTerms, float]:
        """Reward terms for this tick plus the distance just measured."""
        d_curr = planar_distance(agent_state.position, target_state.position)
        progress = (
            context.prev_distance_to_target - d_curr
        ) * self.config.distance_reward_scale

        # No velocity source, no idle term
        idle = 0.0
        if (
            agent_state.velocity is not None
            and agent_state.speed < self.config.idle_velocity_threshold
        ):
            idle = self.config.idle_penalty

        terms = RewardTerms(
            step_penalty=self.config.step_penalty,
            progress_reward=progress,
            idle_penalty=idle,
            terminal_bonus=self.terminal_bonus(cause),
        )
        return terms, d_curr

    def compute_step_reward(
        self,
        context: EpisodeContext,
        agent_state: AgentState,
        target_state: TargetState,
        cause: TerminationCause = TerminationCause.NONE,
    ) -> tuple[float, EpisodeContext, RewardTerms]:
        """Compute the tick reward and the context carrying it forward.

        Args:
            context: Context at the start of the tick.
            agent_state: Kinematic state after the physics update.
            target_state: Current target.
            cause: Termination resolved for this tick (NONE while active).

        Returns:
            (reward, updated_context, terms). The updated context has the new
            ``prev_distance_to_target`` and the reward added to
            ``cumulative_reward``; its step index and cause are untouched.
        """
        terms, d_curr = self.shaping_terms(context, agent_state, target_state, cause)
        reward = terms.total
        updated = replace(
            context,
            prev_distance_to_target=d_curr,
            cumulative_reward=context.cumulative_reward + reward,
        )
        return reward, updated, terms
