"""Arena geometry: bounds, static obstacles and the occupancy test.

Positions are planar world coordinates ``(x, z)``. The vertical axis is
never touched here; bodies keep whatever height they were given.

Obstacles are static for the whole training run, so an ``ObstacleMap`` can be
shared read-only between any number of environments.
"""

from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np

OBSTACLE_TAG = "obstacle"
WALL_TAG = "wall"
TARGET_TAG = "target"


@dataclass(frozen=True)
class ArenaBounds:
    """Axis-aligned rectangle {min_x, max_x, min_z, max_z}."""

    min_x: float
    max_x: float
    min_z: float
    max_z: float

    def __post_init__(self):
        if self.min_x > self.max_x or self.min_z > self.max_z:
            raise ValueError(
                f"Degenerate arena bounds: x=[{self.min_x}, {self.max_x}], "
                f"z=[{self.min_z}, {self.max_z}]"
            )

    @classmethod
    def centered(cls, width: float, depth: float) -> "ArenaBounds":
        return cls(-width / 2.0, width / 2.0, -depth / 2.0, depth / 2.0)

    @property
    def width(self) -> float:
        return self.max_x - self.min_x

    @property
    def depth(self) -> float:
        return self.max_z - self.min_z

    @property
    def center(self) -> np.ndarray:
        return np.array(
            [(self.min_x + self.max_x) / 2.0, (self.min_z + self.max_z) / 2.0]
        )

    def shrink(self, margin: float) -> "ArenaBounds":
        """Bounds moved inward by ``margin`` on every side."""
        return ArenaBounds(
            self.min_x + margin,
            self.max_x - margin,
            self.min_z + margin,
            self.max_z - margin,
        )

    def contains(self, position, tol: float = 0.0) -> bool:
        x, z = position[0], position[1]
        return (
            self.min_x - tol <= x <= self.max_x + tol
            and self.min_z - tol <= z <= self.max_z + tol
        )


@dataclass(frozen=True)
class CircleObstacle:
    """Round obstacle (pillar, tree, cone)."""

    x: float
    z: float
    radius: float
    tag: str = OBSTACLE_TAG

    def overlaps(self, position, radius: float) -> bool:
        dist = np.hypot(position[0] - self.x, position[1] - self.z)
        return bool(dist <= self.radius + radius)


@dataclass(frozen=True)
class BoxObstacle:
    """Axis-aligned box given by center and half extents. Used for walls."""

    x: float
    z: float
    half_x: float
    half_z: float
    tag: str = WALL_TAG

    def overlaps(self, position, radius: float) -> bool:
        # Closest point on the box to the disc center
        cx = np.clip(position[0], self.x - self.half_x, self.x + self.half_x)
        cz = np.clip(position[1], self.z - self.half_z, self.z + self.half_z)
        dist = np.hypot(position[0] - cx, position[1] - cz)
        return bool(dist <= radius)


@dataclass(frozen=True)
class ObstacleMap:
    """Static obstacle set with the occupancy test used by spawning and physics.

    Args:
        bounds: Arena rectangle.
        obstacles: Circles and boxes inside (or on the edge of) the arena.
    """

    bounds: ArenaBounds
    obstacles: tuple = field(default_factory=tuple)

    def __post_init__(self):
        # Freeze whatever sequence was passed in
        object.__setattr__(self, "obstacles", tuple(self.obstacles))

    def is_occupied(self, position, radius: float) -> bool:
        """True if a disc of ``radius`` at ``position`` touches any obstacle."""
        return any(obs.overlaps(position, radius) for obs in self.obstacles)

    def contacts(self, position, radius: float) -> list[str]:
        """Collision tags of every obstacle the disc touches, in map order."""
        return [obs.tag for obs in self.obstacles if obs.overlaps(position, radius)]

    def __len__(self) -> int:
        return len(self.obstacles)


def perimeter_walls(bounds: ArenaBounds, thickness: float = 0.1) -> list[BoxObstacle]:
    """Four wall boxes lying just inside the arena edge."""
    half_t = thickness / 2.0
    cx, cz = bounds.center
    half_w = bounds.width / 2.0
    half_d = bounds.depth / 2.0
    return [
        BoxObstacle(bounds.min_x + half_t, cz, half_t, half_d),
        BoxObstacle(bounds.max_x - half_t, cz, half_t, half_d),
        BoxObstacle(cx, bounds.min_z + half_t, half_w, half_t),
        BoxObstacle(cx, bounds.max_z - half_t, half_w, half_t),
    ]
