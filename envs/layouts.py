"""Arena layouts for training and evaluation.

Layout types:
- Open: empty arena bounded by perimeter walls
- Scattered: random round obstacles (seeded, non-overlapping)
- Road: two opposite lanes with wall boxes along each lane side,
  dropped in the middle of the arena

Each factory returns an ``ObstacleMap``. Layouts are generated once and then
shared read-only by every environment that trains on them.
"""

from __future__ import annotations

import numpy as np

from envs.arena import (
    ArenaBounds,
    BoxObstacle,
    CircleObstacle,
    ObstacleMap,
    perimeter_walls,
)


def create_open_layout(width: float = 20.0, depth: float = 20.0) -> ObstacleMap:
    """Empty arena, walls only."""
    bounds = ArenaBounds.centered(width, depth)
    return ObstacleMap(bounds, perimeter_walls(bounds))


def create_scattered_layout(
    width: float = 20.0,
    depth: float = 20.0,
    n_obstacles: int = 6,
    radius_range: tuple[float, float] = (0.5, 1.5),
    margin: float = 1.0,
    seed: int | None = None,
) -> ObstacleMap:
    """Arena with ``n_obstacles`` random circles.

    Circles keep ``margin`` from the walls and from each other. Uses rejection
    sampling with a maximum number of attempts; a circle that cannot be
    placed is skipped, so fewer than ``n_obstacles`` may come back in
    crowded arenas.

    Returns:
        ObstacleMap with perimeter walls followed by the circles.
    """
    rng = np.random.default_rng(seed)
    bounds = ArenaBounds.centered(width, depth)
    r_min, r_max = radius_range
    circles: list[CircleObstacle] = []

    for _ in range(n_obstacles):
        for _attempt in range(500):
            radius = rng.uniform(r_min, r_max)
            x_range = width / 2.0 - radius - margin
            z_range = depth / 2.0 - radius - margin
            if x_range <= 0 or z_range <= 0:
                continue

            ox = rng.uniform(-x_range, x_range)
            oz = rng.uniform(-z_range, z_range)

            overlap = False
            for existing in circles:
                dist = np.hypot(ox - existing.x, oz - existing.z)
                if dist < radius + existing.radius + margin:
                    overlap = True
                    break

            if not overlap:
                circles.append(CircleObstacle(float(ox), float(oz), float(radius)))
                break

    return ObstacleMap(bounds, [*perimeter_walls(bounds), *circles])


def create_road_layout(
    width: float = 20.0,
    depth: float = 20.0,
    lane_width: float = 3.0,
    lane_spacing: float = 3.0,
    lane_length: float = 10.0,
    wall_thickness: float = 0.1,
) -> ObstacleMap:
    """Two-lane road running along +z through the arena center.

    Lanes sit ``lane_spacing`` apart (center to center). Each lane has a
    wall box on both sides, so the shared middle line carries two walls.
    """
    bounds = ArenaBounds.centered(width, depth)
    half_t = wall_thickness / 2.0
    half_len = lane_length / 2.0
    walls = []
    for lane_x in (lane_spacing / 2.0, -lane_spacing / 2.0):
        for side in (-1.0, 1.0):
            wall_x = lane_x + side * lane_width / 2.0
            walls.append(BoxObstacle(wall_x, 0.0, half_t, half_len))

    return ObstacleMap(bounds, [*perimeter_walls(bounds), *walls])


LAYOUTS = {
    "open": create_open_layout,
    "scattered": create_scattered_layout,
    "road": create_road_layout,
}


def make_layout(name: str, **kwargs) -> ObstacleMap:
    """Build a layout by name ('open', 'scattered', 'road')."""
    if name not in LAYOUTS:
        raise ValueError(f"Unknown layout '{name}', expected one of {sorted(LAYOUTS)}")
    return LAYOUTS[name](**kwargs)
