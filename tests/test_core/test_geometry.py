# Tests for scene geometry

import math

import pytest
import numpy as np
from hybrid_drive.core.geometry import StaticScene


FORWARD = np.array([0.0, 0.0, 1.0])
ORIGIN = np.array([0.0, 0.5, 0.0])


class TestCylinderCast:

    def test_head_on_hit(self, post_ahead_scene):
        """Sweep stops when sphere touches the post surface."""
        hit = post_ahead_scene.sphere_cast(ORIGIN, FORWARD, 20.0, 1.0)

        assert hit is not None
        assert hit.distance == pytest.approx(8.0)
        assert np.allclose(hit.point, [0.0, 0.5, 9.0])

    def test_thin_ray(self, post_ahead_scene):
        """Zero radius behaves like a ray cast."""
        hit = post_ahead_scene.sphere_cast(ORIGIN, FORWARD, 20.0, 0.0)
        assert hit.distance == pytest.approx(9.0)

    def test_out_of_range(self, post_ahead_scene):
        """Nothing within max_distance means no hit."""
        assert post_ahead_scene.sphere_cast(ORIGIN, FORWARD, 5.0, 1.0) is None

    def test_miss_to_the_side(self, post_ahead_scene):
        direction = np.array([1.0, 0.0, 0.0])
        assert post_ahead_scene.sphere_cast(ORIGIN, direction, 20.0, 1.0) is None

    def test_start_inside_is_ignored(self):
        """Obstacles overlapping the sphere at the start are skipped."""
        scene = StaticScene()
        scene.add_cylinder(0.0, 0.5, 1.0)
        assert scene.sphere_cast(ORIGIN, FORWARD, 20.0, 1.0) is None

    def test_unnormalized_direction(self, post_ahead_scene):
        hit = post_ahead_scene.sphere_cast(ORIGIN, FORWARD * 5.0, 20.0, 1.0)
        assert hit.distance == pytest.approx(8.0)


class TestWallCast:

    @pytest.fixture
    def side_wall_scene(self):
        """Wall along x=5, 0.2 m thick."""
        scene = StaticScene()
        scene.add_wall((5.0, -20.0), (5.0, 20.0), thickness=0.2)
        return scene

    def test_perpendicular_hit(self, side_wall_scene):
        direction = np.array([1.0, 0.0, 0.0])
        hit = side_wall_scene.sphere_cast(ORIGIN, direction, 20.0, 1.0)

        assert hit.distance == pytest.approx(5.0 - 0.1 - 1.0)
        assert np.allclose(hit.point, [4.9, 0.5, 0.0])

    def test_oblique_hit(self, side_wall_scene):
        angle = math.radians(60)
        direction = np.array([math.sin(angle), 0.0, math.cos(angle)])
        hit = side_wall_scene.sphere_cast(ORIGIN, direction, 20.0, 1.0)

        assert hit.distance == pytest.approx(3.9 / math.sin(angle))
        assert hit.point[0] == pytest.approx(4.9)

    def test_end_cap_hit(self):
        """Sweeping at the end of a wall hits its rounded cap."""
        scene = StaticScene()
        scene.add_wall((-5.0, 10.0), (0.0, 10.0), thickness=0.0)
        hit = scene.sphere_cast(ORIGIN, np.array([0.0, 0.0, 1.0]), 20.0, 1.0)

        assert hit is not None
        assert hit.distance == pytest.approx(9.0)

    def test_parallel_sweep_misses(self, side_wall_scene):
        assert side_wall_scene.sphere_cast(ORIGIN, FORWARD, 20.0, 1.0) is None


class TestSceneQueries:

    def test_nearest_obstacle_wins(self):
        scene = StaticScene()
        scene.add_cylinder(0.0, 15.0, 1.0)
        scene.add_cylinder(0.0, 6.0, 1.0)
        hit = scene.sphere_cast(ORIGIN, FORWARD, 20.0, 1.0)
        assert hit.distance == pytest.approx(4.0)

    def test_layer_mask_filters(self):
        """Obstacles outside the mask are invisible."""
        scene = StaticScene()
        scene.add_cylinder(0.0, 10.0, 1.0, layer=3)

        assert scene.sphere_cast(ORIGIN, FORWARD, 20.0, 1.0, layer_mask=1 << 0) is None
        assert scene.sphere_cast(ORIGIN, FORWARD, 20.0, 1.0, layer_mask=1 << 3) is not None

    def test_clearance(self, post_ahead_scene):
        assert post_ahead_scene.clearance(np.zeros(3)) == pytest.approx(9.0)

    def test_empty_clearance(self, empty_scene):
        assert math.isinf(empty_scene.clearance(np.zeros(3)))

    def test_room_encloses(self):
        """Every horizontal sweep from inside a room hits a wall."""
        scene = StaticScene()
        scene.add_room(10.0, 10.0)
        for angle in np.linspace(0, 2 * math.pi, 8, endpoint=False):
            direction = np.array([math.sin(angle), 0.0, math.cos(angle)])
            assert scene.sphere_cast(ORIGIN, direction, 50.0, 0.5) is not None
