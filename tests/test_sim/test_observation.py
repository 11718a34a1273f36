# Tests for policy observation construction

import math

import pytest
import numpy as np
from hybrid_drive.core.types import Pose
from hybrid_drive.sim.observation import ObservationBuilder


class TestObservationBuilder:

    @pytest.fixture
    def builder(self):
        return ObservationBuilder()

    def test_shape_and_dtype(self, builder, origin_pose):
        obs = builder.build(origin_pose, 0.0, np.array([0.0, 0.0, 10.0]))
        assert obs.shape == (builder.dimension,)
        assert obs.dtype == np.float32

    def test_goal_straight_ahead(self, builder, origin_pose):
        obs = builder.build(origin_pose, 0.0, np.array([0.0, 0.0, 25.0]))
        assert np.allclose(obs, [0.0, 0.0, 1.0, 0.5, 0.25])

    def test_goal_in_vehicle_frame(self, builder):
        """Goal at world +z is on the right when facing -x."""
        pose = Pose(yaw=-math.pi / 2)
        obs = builder.build(pose, 0.0, np.array([0.0, 0.0, 10.0]))
        assert obs[0] == pytest.approx(1.0, abs=1e-6)
        assert obs[2] == pytest.approx(0.0, abs=1e-6)

    def test_no_goal(self, builder, origin_pose):
        obs = builder.build(origin_pose, 0.0, None)
        assert np.allclose(obs[:4], [0.0, 0.0, 0.0, 1.0])

    def test_clamped_ranges(self, builder, origin_pose):
        obs = builder.build(origin_pose, 100.0, np.array([0.0, 0.0, 500.0]))
        assert obs[3] == 1.0
        assert obs[4] == 1.0

        obs = builder.build(origin_pose, -50.0, None)
        assert obs[4] == 0.0
