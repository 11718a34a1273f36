# Tests for the discrete state controller

import math

import pytest
from hybrid_drive.config import FSMConfig
from hybrid_drive.control.fsm import DiscreteStateController
from hybrid_drive.core.types import ControllerState


CRUISE = 10.0   # well above the stuck threshold


class TestTransitions:

    @pytest.fixture
    def fsm(self, fsm_config):
        return DiscreteStateController(fsm_config)

    def test_initial_state(self, fsm):
        assert fsm.state is ControllerState.NAVIGATE
        assert fsm.stuck_timer == 0.0

    def test_clear_road_navigates(self, fsm):
        out = fsm.evaluate(math.inf, 0.0, CRUISE, 0.02)

        assert out.state is ControllerState.NAVIGATE
        assert out.speed_multiplier == 1.0
        assert out.steer_boost == 0.0

    def test_avoid_obstacle(self, fsm):
        """distance 4 with avoid 6 and collision 1 -> avoid, 0.6 speed."""
        out = fsm.evaluate(4.0, 0.0, CRUISE, 0.02)

        assert out.state is ControllerState.AVOID_OBSTACLE
        assert out.speed_multiplier == 0.6

    def test_avoid_steers_away_from_right(self, fsm):
        """Obstacle at local x=+3 pushes steering left."""
        out = fsm.evaluate(4.0, 3.0, CRUISE, 0.02)
        assert out.steer_boost == pytest.approx(-0.6)

    def test_avoid_steers_away_from_left(self, fsm):
        out = fsm.evaluate(4.0, -3.0, CRUISE, 0.02)
        assert out.steer_boost == pytest.approx(0.6)

    def test_avoid_centred_obstacle_no_bias(self, fsm):
        out = fsm.evaluate(4.0, 0.0, CRUISE, 0.02)
        assert out.steer_boost == 0.0

    def test_avoid_boundary_inclusive(self, fsm):
        assert fsm.evaluate(6.0, 1.0, CRUISE, 0.02).state is ControllerState.AVOID_OBSTACLE

    def test_collision_recovers(self, fsm):
        out = fsm.evaluate(1.0, 2.0, CRUISE, 0.02)

        assert out.state is ControllerState.RECOVER
        assert out.speed_multiplier == 0.2
        assert out.steer_boost == 0.0

    def test_back_to_navigate(self, fsm):
        """No hysteresis on proximity: clearing the obstacle returns to navigate."""
        fsm.evaluate(4.0, 1.0, CRUISE, 0.02)
        out = fsm.evaluate(50.0, 1.0, CRUISE, 0.02)
        assert out.state is ControllerState.NAVIGATE


class TestStuckTimer:

    def test_timer_accumulates_when_slow(self, fsm_config):
        fsm = DiscreteStateController(fsm_config)
        fsm.evaluate(math.inf, 0.0, 0.1, 0.5)
        fsm.evaluate(math.inf, 0.0, -0.1, 0.5)
        assert fsm.stuck_timer == pytest.approx(1.0)

    def test_timer_resets_when_moving(self, fsm_config):
        fsm = DiscreteStateController(fsm_config)
        fsm.evaluate(math.inf, 0.0, 0.0, 1.0)
        fsm.evaluate(math.inf, 0.0, CRUISE, 1.0)
        assert fsm.stuck_timer == 0.0

    def test_reverse_speed_counts_as_moving(self, fsm_config):
        """Stuck check uses the speed magnitude."""
        fsm = DiscreteStateController(fsm_config)
        fsm.evaluate(math.inf, 0.0, -CRUISE, 1.0)
        assert fsm.stuck_timer == 0.0

    def test_stuck_triggers_recover(self, fsm_config):
        fsm = DiscreteStateController(fsm_config)
        states = [fsm.evaluate(math.inf, 0.0, 0.0, 0.5).state for _ in range(3)]

        assert states[:2] == [ControllerState.NAVIGATE, ControllerState.NAVIGATE]
        assert states[2] is ControllerState.RECOVER

    def test_stuck_outranks_proximity(self):
        """Stuck for 2.0 s with threshold 1.5 s and distance 50 -> recover."""
        fsm = DiscreteStateController(FSMConfig(avoid_distance=6.0, stuck_time_threshold=1.5))
        out = fsm.evaluate(50.0, 0.0, 0.0, 2.0)

        assert fsm.stuck_timer == pytest.approx(2.0)
        assert out.state is ControllerState.RECOVER

    def test_stuck_outranks_avoid(self, fsm_config):
        fsm = DiscreteStateController(fsm_config)
        out = fsm.evaluate(4.0, 3.0, 0.0, 2.0)

        assert out.state is ControllerState.RECOVER
        assert out.steer_boost == 0.0


class TestResetAndIdle:

    def test_reset_restores_initial_state(self, fsm_config):
        """After reset: timer 0, state navigate, regardless of history."""
        fsm = DiscreteStateController(fsm_config)
        for _ in range(10):
            fsm.evaluate(0.5, 1.0, 0.0, 0.5)
        assert fsm.state is ControllerState.RECOVER

        fsm.reset()

        assert fsm.state is ControllerState.NAVIGATE
        assert fsm.stuck_timer == 0.0

    def test_force_idle(self, fsm_config):
        """Idle is only reachable by forcing it; outputs zero."""
        fsm = DiscreteStateController(fsm_config)
        fsm.force_idle()

        out = fsm.output()
        assert out.state is ControllerState.IDLE
        assert out.speed_multiplier == 0.0
        assert out.steer_boost == 0.0

    def test_evaluate_never_enters_idle(self, fsm_config):
        fsm = DiscreteStateController(fsm_config, initial_state=ControllerState.IDLE)
        out = fsm.evaluate(math.inf, 0.0, CRUISE, 0.02)
        assert out.state is ControllerState.NAVIGATE

    def test_idempotent_without_elapsed_time(self, fsm_config):
        """dt=0 twice with the same inputs gives the same output."""
        fsm = DiscreteStateController(fsm_config)
        first = fsm.evaluate(4.0, 3.0, 0.0, 0.0)
        second = fsm.evaluate(4.0, 3.0, 0.0, 0.0)

        assert first == second
        assert fsm.stuck_timer == 0.0
