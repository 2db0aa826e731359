"""Collision-free spawn sampling for the agent and the target.

Bounded-retry rejection sampling: draw uniformly inside the arena shrunk by a
margin, keep the first candidate whose ``check_radius`` disc is free. When
every try is rejected the sampler fails open (arena center for the agent,
last candidate for the target) and logs a warning, so a rare unlucky draw
never stops a training run.
"""

from __future__ import annotations

import logging
from typing import Callable

import numpy as np

from envs.arena import ArenaBounds

logger = logging.getLogger(__name__)

ObstacleTest = Callable[[np.ndarray, float], bool]


class SpawnSampler:
    """Rejection sampler over the free area of an arena.

    The random source is owned by the sampler and can be reseeded, so two
    samplers built with the same seed produce the same spawn sequence.

    Args:
        rng: Generator to draw from. Takes precedence over ``seed``.
        seed: Seed for a fresh ``np.random.default_rng`` when ``rng`` is None.
    """

    def __init__(self, rng: np.random.Generator | None = None, seed: int | None = None):
        self.rng = rng if rng is not None else np.random.default_rng(seed)
        self.exhausted_count = 0

    def reseed(self, seed: int | None):
        self.rng = np.random.default_rng(seed)

    def _draw(self, region: ArenaBounds) -> np.ndarray:
        x = self.rng.uniform(region.min_x, region.max_x)
        z = self.rng.uniform(region.min_z, region.max_z)
        return np.array([x, z])

    def _sample_free(self, bounds, margin, check_radius, obstacle_test, max_tries):
        """First free candidate, or None when all ``max_tries`` are rejected."""
        if max_tries < 1:
            raise ValueError(f"max_tries must be >= 1, got {max_tries}")
        region = bounds.shrink(margin)
        for _ in range(max_tries):
            candidate = self._draw(region)
            if not obstacle_test(candidate, check_radius):
                return candidate
        return None

    def sample_position(
        self,
        bounds: ArenaBounds,
        margin: float,
        check_radius: float,
        obstacle_test: ObstacleTest,
        max_tries: int,
    ) -> np.ndarray:
        """Sample a planar position whose ``check_radius`` disc is obstacle-free.

        Args:
            bounds: Arena rectangle.
            margin: Inset applied to every side of ``bounds`` before drawing.
            check_radius: Radius handed to ``obstacle_test``.
            obstacle_test: ``(position, radius) -> bool``, True when occupied.
            max_tries: Number of candidates to draw before falling back.

        Returns:
            ``[x, z]`` array. The arena center if all tries were rejected.
        """
        candidate = self._sample_free(
            bounds, margin, check_radius, obstacle_test, max_tries,
        )
        if candidate is not None:
            return candidate

        self.exhausted_count += 1
        logger.warning(
            "Failed to find a free spawn position after %d tries, "
            "falling back to arena center",
            max_tries,
        )
        return bounds.center

    def sample_target_position(
        self,
        bounds: ArenaBounds,
        margin: float,
        check_radius: float,
        obstacle_test: ObstacleTest,
        max_tries: int,
        agent_position: np.ndarray,
        min_separation: float = 5.0,
    ) -> np.ndarray:
        """Sample a free position at least ``min_separation`` from the agent.

        Each candidate is drawn like ``sample_position`` (arena center when
        no free spot turns up). If ``max_tries`` candidates all sit too close,
        the last one is accepted anyway. A search counts and warns at most
        once, however many of its candidates fell back.
        """
        if max_tries < 1:
            raise ValueError(f"max_tries must be >= 1, got {max_tries}")
        agent_position = np.asarray(agent_position, dtype=np.float64)
        candidate = None
        used_center = 0
        for _ in range(max_tries):
            candidate = self._sample_free(
                bounds, margin, check_radius, obstacle_test, max_tries,
            )
            if candidate is None:
                used_center += 1
                candidate = bounds.center
            if np.hypot(*(candidate - agent_position)) >= min_separation:
                if used_center:
                    self.exhausted_count += 1
                    logger.warning(
                        "Target search fell back to arena center for %d of its "
                        "candidates (%d tries each)",
                        used_center,
                        max_tries,
                    )
                return candidate

        self.exhausted_count += 1
        logger.warning(
            "Failed to place target %.2f away from the agent after %d tries, "
            "keeping the last candidate (%d arena center fallbacks)",
            min_separation,
            max_tries,
            used_center,
        )
        return candidate
