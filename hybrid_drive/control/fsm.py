# Discrete driving-regime state machine

import logging
from typing import Optional

from ..config import FSMConfig
from ..core.math_utils import sign
from ..core.types import ControllerOutput, ControllerState


logger = logging.getLogger(__name__)


# (speed_multiplier, steer_boost magnitude) per state
STATE_OUTPUTS = {
    ControllerState.NAVIGATE: (1.0, 0.0),
    ControllerState.AVOID_OBSTACLE: (0.6, 0.6),
    ControllerState.RECOVER: (0.2, 0.0),
    ControllerState.IDLE: (0.0, 0.0),
}


class DiscreteStateController:
    """Small deterministic FSM choosing a coarse driving regime.

    Owns the only cross-tick state in the arbitration core: the current
    state and a stuck timer. One instance per vehicle.
    """

    def __init__(
        self,
        config: Optional[FSMConfig] = None,
        initial_state: ControllerState = ControllerState.NAVIGATE,
    ):
        self.config = config or FSMConfig()
        self.initial_state = initial_state
        self.state = initial_state
        self.stuck_timer = 0.0

    def reset(self, state: Optional[ControllerState] = None) -> None:
        """Zero the stuck timer and return to the initial (or given) state."""
        self.state = self.initial_state if state is None else state
        self.stuck_timer = 0.0

    def force_idle(self) -> None:
        self.reset(ControllerState.IDLE)

    def next_state(self, nearest_distance: float) -> ControllerState:
        """Transition from the stuck timer and obstacle distance only.

        First match wins: stuck, collision, avoid, navigate.
        """
        cfg = self.config
        if self.stuck_timer >= cfg.stuck_time_threshold:
            return ControllerState.RECOVER
        if nearest_distance <= cfg.collision_distance:
            return ControllerState.RECOVER
        if nearest_distance <= cfg.avoid_distance:
            return ControllerState.AVOID_OBSTACLE
        return ControllerState.NAVIGATE

    def output(self, nearest_local_x: float = 0.0) -> ControllerOutput:
        speed, boost = STATE_OUTPUTS[self.state]
        if self.state is ControllerState.AVOID_OBSTACLE:
            boost = -sign(nearest_local_x) * boost
        return ControllerOutput(state=self.state, speed_multiplier=speed, steer_boost=boost)

    def evaluate(
        self,
        nearest_distance: float,
        nearest_local_x: float,
        forward_speed: float,
        dt: float,
    ) -> ControllerOutput:
        """Advance one tick.

        Args:
            nearest_distance: Nearest obstacle distance (inf if none)
            nearest_local_x: Obstacle lateral offset, positive to the right
            forward_speed: Signed speed along the vehicle heading (m/s)
            dt: Tick duration (s)

        Returns:
            ControllerOutput for the new state
        """
        if abs(forward_speed) < self.config.stuck_speed_threshold:
            self.stuck_timer += dt
        else:
            self.stuck_timer = 0.0

        new_state = self.next_state(nearest_distance)
        if new_state is not self.state:
            logger.debug(
                f"{self.state.value} -> {new_state.value} "
                f"(distance={nearest_distance:.2f}, stuck={self.stuck_timer:.2f}s)"
            )
        self.state = new_state

        return self.output(nearest_local_x)
