"""Unit tests for the point-mass physics collaborator."""

import numpy as np
import pytest

from envs.arena import ArenaBounds, CircleObstacle, ObstacleMap
from envs.dynamics import PointMassBody, integrate
from envs.layouts import create_open_layout


class TestIntegrate:

    bounds = ArenaBounds.centered(20.0, 20.0)

    def test_straight_line(self):
        pos, clipped = integrate(np.zeros(2), np.array([1.0, 0.0]), 1.0, self.bounds, 0.5)
        np.testing.assert_allclose(pos, [1.0, 0.0])
        assert clipped is False

    def test_diagonal(self):
        pos, _ = integrate(np.array([1.0, 1.0]), np.array([2.0, -4.0]), 0.5, self.bounds, 0.5)
        np.testing.assert_allclose(pos, [2.0, -1.0])

    def test_clipped_at_boundary(self):
        pos, clipped = integrate(np.array([9.0, 0.0]), np.array([10.0, 0.0]), 1.0, self.bounds, 0.5)
        np.testing.assert_allclose(pos, [9.5, 0.0])
        assert clipped is True


class TestPointMassBody:

    def make_body(self, obstacles=(), **kwargs):
        bounds = ArenaBounds.centered(20.0, 20.0)
        return PointMassBody(ObstacleMap(bounds, obstacles), **kwargs)

    def test_velocity_follows_command(self):
        body = self.make_body(move_speed=20.0, dt=0.02)
        body.place_agent(np.array([0.0, 0.0]))
        body.set_motion_command(np.array([1.0, 0.0]))
        body.step()
        position, velocity = body.get_kinematic_state()
        np.testing.assert_allclose(velocity, [20.0, 0.0])
        np.testing.assert_allclose(position, [0.4, 0.0])

    def test_zero_command_stays_put(self):
        body = self.make_body()
        body.place_agent(np.array([3.0, -2.0]))
        body.set_motion_command(np.zeros(2))
        body.step()
        position, velocity = body.get_kinematic_state()
        np.testing.assert_allclose(position, [3.0, -2.0])
        np.testing.assert_allclose(velocity, [0.0, 0.0])

    def test_target_contact(self):
        body = self.make_body(agent_radius=0.5, target_radius=0.5)
        body.place_agent(np.array([0.0, 0.0]))
        body.place_target(np.array([1.2, 0.0]))
        body.set_motion_command(np.array([1.0, 0.0]))
        body.step()
        assert body.drain_collisions() == ["target"]

    def test_obstacle_contact(self):
        body = self.make_body(obstacles=[CircleObstacle(1.5, 0.0, 0.5)])
        body.place_agent(np.array([0.0, 0.0]))
        body.place_target(np.array([-8.0, 0.0]))
        body.set_motion_command(np.array([1.0, 0.0]))
        body.step()
        body.step()
        assert "obstacle" in body.drain_collisions()

    def test_wall_contact(self):
        body = PointMassBody(create_open_layout(20.0, 20.0))
        body.place_agent(np.array([-9.2, 0.0]))
        body.place_target(np.array([5.0, 0.0]))
        body.set_motion_command(np.array([-1.0, 0.0]))
        body.step()
        assert body.drain_collisions() == ["wall"]
        assert body.wall_contact is True

    def test_drain_clears_queue(self):
        body = self.make_body()
        body.place_agent(np.array([0.0, 0.0]))
        body.place_target(np.array([0.5, 0.0]))
        body.step()
        assert body.drain_collisions() == ["target"]
        assert body.drain_collisions() == []

    def test_place_agent_zeroes_motion(self):
        body = self.make_body()
        body.place_agent(np.array([0.0, 0.0]))
        body.place_target(np.array([8.0, 8.0]))
        body.set_motion_command(np.array([0.0, 1.0]))
        body.step()
        body.place_agent(np.array([2.0, 2.0]))
        position, velocity = body.get_kinematic_state()
        np.testing.assert_allclose(position, [2.0, 2.0])
        np.testing.assert_allclose(velocity, [0.0, 0.0])
        np.testing.assert_allclose(body.command, [0.0, 0.0])

    def test_state_is_copied(self):
        body = self.make_body()
        body.place_agent(np.array([1.0, 1.0]))
        position, _ = body.get_kinematic_state()
        position[0] = 99.0
        assert body.position[0] == pytest.approx(1.0)
