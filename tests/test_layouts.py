"""Tests for arena geometry and layouts."""

import numpy as np
import pytest

from envs.arena import (
    OBSTACLE_TAG,
    WALL_TAG,
    ArenaBounds,
    BoxObstacle,
    CircleObstacle,
    ObstacleMap,
)
from envs.layouts import (
    create_open_layout,
    create_road_layout,
    create_scattered_layout,
    make_layout,
)


class TestArenaBounds:

    def test_centered(self):
        b = ArenaBounds.centered(20.0, 10.0)
        assert (b.min_x, b.max_x, b.min_z, b.max_z) == (-10.0, 10.0, -5.0, 5.0)
        np.testing.assert_allclose(b.center, [0.0, 0.0])

    def test_center_offset(self):
        np.testing.assert_allclose(ArenaBounds(2.0, 6.0, -4.0, 0.0).center, [4.0, -2.0])

    def test_shrink(self):
        b = ArenaBounds.centered(20.0, 20.0).shrink(2.0)
        assert (b.min_x, b.max_x, b.min_z, b.max_z) == (-8.0, 8.0, -8.0, 8.0)

    def test_degenerate_rejected(self):
        with pytest.raises(ValueError):
            ArenaBounds(1.0, 0.0, 0.0, 1.0)
        with pytest.raises(ValueError):
            ArenaBounds.centered(2.0, 2.0).shrink(1.5)

    def test_contains(self):
        b = ArenaBounds.centered(4.0, 4.0)
        assert b.contains([0.0, 0.0])
        assert b.contains([2.0, -2.0])
        assert not b.contains([2.1, 0.0])


class TestObstacles:

    def test_circle_overlap(self):
        c = CircleObstacle(0.0, 0.0, 1.0)
        assert c.overlaps([1.4, 0.0], 0.5)
        assert not c.overlaps([1.6, 0.0], 0.5)
        assert c.tag == OBSTACLE_TAG

    def test_box_overlap(self):
        box = BoxObstacle(0.0, 0.0, 0.05, 5.0)
        assert box.overlaps([0.4, 0.0], 0.5)
        assert not box.overlaps([0.6, 0.0], 0.5)
        # Beyond the end of the wall
        assert not box.overlaps([0.0, 5.6], 0.5)
        assert box.tag == WALL_TAG

    def test_map_occupancy_and_contacts(self):
        m = ObstacleMap(
            ArenaBounds.centered(10.0, 10.0),
            [CircleObstacle(2.0, 0.0, 0.5), BoxObstacle(-2.0, 0.0, 0.1, 1.0)],
        )
        assert m.is_occupied([2.0, 0.8], 0.5)
        assert not m.is_occupied([0.0, 0.0], 0.5)
        assert m.contacts([2.0, 0.8], 0.5) == [OBSTACLE_TAG]
        assert m.contacts([-1.5, 0.0], 0.5) == [WALL_TAG]
        assert m.contacts([0.0, 0.0], 0.5) == []
        assert isinstance(m.obstacles, tuple)
        assert len(m) == 2


class TestLayouts:

    def test_open_layout_walls_only(self):
        m = create_open_layout(20.0, 20.0)
        assert len(m) == 4
        assert all(o.tag == WALL_TAG for o in m.obstacles)
        assert not m.is_occupied([0.0, 0.0], 0.5)
        assert m.is_occupied([9.8, 0.0], 0.5)
        assert m.is_occupied([0.0, -9.8], 0.5)

    def test_scattered_count_and_bounds(self):
        m = create_scattered_layout(n_obstacles=6, seed=42)
        circles = [o for o in m.obstacles if isinstance(o, CircleObstacle)]
        assert len(circles) == 6
        for c in circles:
            assert c.x - c.radius >= -10.0
            assert c.x + c.radius <= 10.0
            assert c.z - c.radius >= -10.0
            assert c.z + c.radius <= 10.0

    def test_scattered_no_overlap(self):
        m = create_scattered_layout(n_obstacles=8, margin=0.5, seed=7)
        circles = [o for o in m.obstacles if isinstance(o, CircleObstacle)]
        for i, a in enumerate(circles):
            for b in circles[i + 1:]:
                assert np.hypot(a.x - b.x, a.z - b.z) >= a.radius + b.radius + 0.5

    def test_scattered_seeded(self):
        assert create_scattered_layout(seed=1) == create_scattered_layout(seed=1)

    def test_road_lane_walls(self):
        m = create_road_layout(lane_width=3.0, lane_spacing=3.0, lane_length=10.0)
        lane_walls = [o for o in m.obstacles[4:]]
        assert len(lane_walls) == 4
        xs = sorted(w.x for w in lane_walls)
        np.testing.assert_allclose(xs, [-3.0, 0.0, 0.0, 3.0])
        # Middle of a lane is free, the divider is not
        assert not m.is_occupied([1.5, 0.0], 0.5)
        assert m.is_occupied([0.3, 2.0], 0.5)
        # Past the lane ends the road is open
        assert not m.is_occupied([0.0, 7.0], 0.5)

    def test_make_layout(self):
        assert len(make_layout("open")) == 4
        with pytest.raises(ValueError):
            make_layout("maze")
