# Command arbitration
# Fuses learned policy, FSM and fuzzy outputs into one command per tick

import logging
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from ..config import ArbiterConfig, ArbitrationConfig
from ..core.interfaces import Actuator
from ..core.math_utils import clamp, clamp01
from ..core.types import (
    ArbitrationMode,
    ControllerOutput,
    FusedCommand,
    FuzzyOutput,
    PolicyAction,
    Pose,
    ProximityReading,
)
from ..perception.proximity import ProximitySensor
from .fsm import DiscreteStateController
from .fuzzy import FuzzyInferenceEngine


logger = logging.getLogger(__name__)


# Blend weights
POLICY_THROTTLE_WEIGHT = 0.7
FUZZY_THROTTLE_WEIGHT = 0.2
STATE_THROTTLE_WEIGHT = 0.2
FUZZY_STEER_WEIGHT = 0.6


def _policy_only(policy, fuzzy, controller, allow_reverse):
    return FusedCommand(
        throttle=clamp(policy.throttle, -1.0, 1.0),
        steer=clamp(policy.steer, -1.0, 1.0),
    )


def _state_only(policy, fuzzy, controller, allow_reverse):
    return FusedCommand(
        throttle=clamp01(controller.speed_multiplier),
        steer=clamp(controller.steer_boost, -1.0, 1.0),
    )


def _fuzzy_only(policy, fuzzy, controller, allow_reverse):
    return FusedCommand(
        throttle=clamp01(fuzzy.throttle_multiplier),
        steer=clamp(fuzzy.steer_correction, -1.0, 1.0),
    )


def _blended(policy, fuzzy, controller, allow_reverse):
    # Policy dominates; FSM and fuzzy terms are additive correctives
    # Without reverse the policy throttle is floored before blending, not after
    low = -1.0 if allow_reverse else 0.0
    policy_steer = clamp(policy.steer, -1.0, 1.0)
    policy_throttle = clamp(policy.throttle, low, 1.0)

    steer = policy_steer + controller.steer_boost + FUZZY_STEER_WEIGHT * fuzzy.steer_correction
    throttle = (
        POLICY_THROTTLE_WEIGHT * policy_throttle
        + FUZZY_THROTTLE_WEIGHT * fuzzy.throttle_multiplier
        + STATE_THROTTLE_WEIGHT * controller.speed_multiplier
    )
    return FusedCommand(
        throttle=clamp(throttle, low, 1.0),
        steer=clamp(steer, -1.0, 1.0),
    )


FUSION_RULES: Dict[ArbitrationMode, Callable[..., FusedCommand]] = {
    ArbitrationMode.POLICY_ONLY: _policy_only,
    ArbitrationMode.STATE_ONLY: _state_only,
    ArbitrationMode.FUZZY_ONLY: _fuzzy_only,
    ArbitrationMode.BLENDED: _blended,
}
_missing_rules = set(ArbitrationMode) - set(FUSION_RULES)
if _missing_rules:
    raise RuntimeError(f"No fusion rule for arbitration modes: {sorted(m.value for m in _missing_rules)}")


def fuse(
    policy: PolicyAction,
    fuzzy: FuzzyOutput,
    controller: ControllerOutput,
    mode: ArbitrationMode,
    allow_reverse: bool = False,
) -> FusedCommand:
    """Select or blend the three sources into one command.

    Args:
        policy: Learned policy action (clamped here, never rejected)
        fuzzy: Fuzzy engine output
        controller: State controller output
        mode: Arbitration mode
        allow_reverse: Whether BLENDED may produce negative throttle

    Returns:
        FusedCommand with steer in [-1, 1]

    Raises:
        ValueError: If mode is not an ArbitrationMode
    """
    try:
        rule = FUSION_RULES[ArbitrationMode(mode)]
    except ValueError:
        raise ValueError(f"Unknown arbitration mode: {mode!r}") from None
    return rule(policy, fuzzy, controller, allow_reverse)


@dataclass(frozen=True, eq=False)
class ArbitrationTick:
    """Everything that went into and came out of one tick.

    Compared by identity.
    """
    reading: ProximityReading
    fuzzy: FuzzyOutput
    controller: ControllerOutput
    policy: PolicyAction
    command: FusedCommand
    mode: ArbitrationMode


class CommandArbiter:
    """Top-level per-vehicle arbitration.

    Every tick runs, in order: proximity sensor, fuzzy engine, state
    controller, fusion, actuator. All three sub-components are always
    evaluated regardless of mode, so switching modes never sees stale
    state.
    """

    def __init__(
        self,
        sensor: ProximitySensor,
        fuzzy: FuzzyInferenceEngine,
        controller: DiscreteStateController,
        actuator: Actuator,
        config: Optional[ArbiterConfig] = None,
    ):
        config = config or ArbiterConfig()
        self.sensor = sensor
        self.fuzzy = fuzzy
        self.controller = controller
        self.actuator = actuator
        self.mode = ArbitrationMode(config.arbitration_mode)
        self.allow_reverse_in_blend = config.allow_reverse_in_blend
        self.last_tick: Optional[ArbitrationTick] = None

    def tick(
        self,
        pose: Pose,
        forward_speed: float,
        dt: float,
        policy_action: PolicyAction,
    ) -> FusedCommand:
        """Run one full arbitration pass and drive the actuator.

        Args:
            pose: Current vehicle pose
            forward_speed: Signed speed along the heading (m/s)
            dt: Tick duration (s)
            policy_action: This tick's learned policy action

        Returns:
            The command sent to the actuator
        """
        reading = self.sensor.sense(pose)
        fuzzy_out = self.fuzzy.compute(reading, pose)

        local_x = pose.to_local(reading.nearest_point)[0] if reading.has_obstacle else 0.0
        controller_out = self.controller.evaluate(
            reading.nearest_distance,
            local_x,
            forward_speed,
            dt,
        )

        command = fuse(
            policy_action,
            fuzzy_out,
            controller_out,
            self.mode,
            self.allow_reverse_in_blend,
        )
        self.actuator.set_inputs(command.throttle, command.steer)

        self.last_tick = ArbitrationTick(
            reading=reading,
            fuzzy=fuzzy_out,
            controller=controller_out,
            policy=policy_action,
            command=command,
            mode=self.mode,
        )
        return command

    def stop(self) -> None:
        self.actuator.stop_completely()

    def reset(self) -> None:
        """Reset controller state and bring the vehicle to a full stop."""
        self.controller.reset()
        self.last_tick = None
        self.actuator.stop_completely()
        logger.debug("Arbiter reset")


def build_arbiter(environment, actuator: Actuator, config=None) -> CommandArbiter:
    """Wire sensor, fuzzy engine, controller and arbiter from one config.

    Args:
        environment: EnvironmentQuery used by the proximity sensor
        actuator: Actuator receiving the fused command
        config: ArbitrationConfig (defaults if None)

    Returns:
        Ready-to-tick CommandArbiter
    """
    config = config or ArbitrationConfig()
    sensor = ProximitySensor(environment, config.sensor)
    fuzzy = FuzzyInferenceEngine(config.fuzzy, probe_length=config.sensor.probe_length)
    controller = DiscreteStateController(config.fsm)
    return CommandArbiter(sensor, fuzzy, controller, actuator, config.arbiter)
