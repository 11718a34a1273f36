# Episode runner
# Drives one vehicle through the arbiter and records per-tick telemetry

import logging
from dataclasses import dataclass
from typing import Dict, Hashable, List, Optional, Tuple

import numpy as np

from ..control.arbiter import CommandArbiter
from ..core.geometry import StaticScene
from ..core.interfaces import PolicySource
from ..core.types import ControllerState
from .checkpoints import CheckpointTracker
from .observation import ObservationBuilder
from .vehicle import KinematicVehicle


logger = logging.getLogger(__name__)


STATE_CODES = {state: i for i, state in enumerate(ControllerState)}


@dataclass
class EpisodeRecord:
    """Per-tick telemetry of one episode.

    Arrays are indexed by tick.
    """
    positions: np.ndarray      # (steps, 3)
    speeds: np.ndarray         # (steps,)
    distances: np.ndarray      # (steps,) nearest obstacle, inf if none
    states: np.ndarray         # (steps,) index into ControllerState
    policy_actions: np.ndarray # (steps, 2) steer, throttle
    commands: np.ndarray       # (steps, 2) throttle, steer
    collisions: int = 0
    checkpoints_passed: int = 0
    wrong_checkpoints: int = 0

    @property
    def length(self) -> int:
        return len(self.speeds)

    def state_fractions(self) -> Dict[str, float]:
        """Share of ticks spent in each controller state."""
        if self.length == 0:
            return {state.value: 0.0 for state in ControllerState}
        return {
            state.value: float(np.mean(self.states == code))
            for state, code in STATE_CODES.items()
        }

    def summary(self) -> Dict[str, float]:
        finite = self.distances[np.isfinite(self.distances)]
        return {
            "length": self.length,
            "mean_speed": float(np.mean(self.speeds)) if self.length else 0.0,
            "min_obstacle_distance": float(np.min(finite)) if finite.size else float("inf"),
            "collisions": self.collisions,
            "checkpoints_passed": self.checkpoints_passed,
            "wrong_checkpoints": self.wrong_checkpoints,
            **{f"frac_{k}": v for k, v in self.state_fractions().items()},
        }

    def rows(self) -> List[Dict[str, float]]:
        """Flatten to one dict per tick, for CSV export."""
        states = list(ControllerState)
        return [
            {
                "x": float(self.positions[t, 0]),
                "z": float(self.positions[t, 2]),
                "speed": float(self.speeds[t]),
                "nearest_distance": float(self.distances[t]),
                "state": states[int(self.states[t])].value,
                "policy_steer": float(self.policy_actions[t, 0]),
                "policy_throttle": float(self.policy_actions[t, 1]),
                "throttle": float(self.commands[t, 0]),
                "steer": float(self.commands[t, 1]),
            }
            for t in range(self.length)
        ]


def run_episode(
    arbiter: CommandArbiter,
    vehicle: KinematicVehicle,
    policy: PolicySource,
    scene: StaticScene,
    tracker: Optional[CheckpointTracker] = None,
    start: Tuple[float, float, float] = (0.0, 0.0, 0.0),
    num_steps: int = 1000,
    dt: float = 0.02,
    vehicle_id: Hashable = 0,
    observation_builder: Optional[ObservationBuilder] = None,
) -> EpisodeRecord:
    """Run one episode of fixed length.

    Touching an obstacle counts as a collision: the vehicle is put back
    at the start, the arbiter and checkpoint progress are reset, and the
    episode carries on.

    Args:
        arbiter: Wired CommandArbiter whose actuator is vehicle
        vehicle: Vehicle being driven
        policy: Source of learned actions
        scene: Obstacles, also used for collision checks
        tracker: Optional checkpoint tracker supplying goals
        start: (x, z, yaw) start pose
        num_steps: Ticks to run
        dt: Tick duration (s)
        vehicle_id: Key for the tracker
        observation_builder: Builds policy observations

    Returns:
        EpisodeRecord with telemetry for every tick
    """
    builder = observation_builder or ObservationBuilder()

    positions = np.zeros((num_steps, 3), dtype=np.float32)
    speeds = np.zeros(num_steps, dtype=np.float32)
    distances = np.zeros(num_steps, dtype=np.float32)
    states = np.zeros(num_steps, dtype=np.int64)
    policy_actions = np.zeros((num_steps, 2), dtype=np.float32)
    commands = np.zeros((num_steps, 2), dtype=np.float32)

    def restart():
        vehicle.reset(x=start[0], z=start[1], yaw=start[2])
        arbiter.reset()
        if tracker is not None:
            tracker.reset(vehicle_id)

    restart()
    collisions = 0
    passed = 0
    wrong = 0

    for step in range(num_steps):
        pose = vehicle.pose
        goal = tracker.next_goal(vehicle_id) if tracker is not None else None
        obs = builder.build(pose, vehicle.forward_speed, goal)

        action = policy.act(obs)
        command = arbiter.tick(pose, vehicle.forward_speed, dt, action)
        vehicle.step(dt)

        tick = arbiter.last_tick
        positions[step] = vehicle.state.position
        speeds[step] = vehicle.forward_speed
        distances[step] = tick.reading.nearest_distance
        states[step] = STATE_CODES[tick.controller.state]
        policy_actions[step] = action.to_array()
        commands[step] = (command.throttle, command.steer)

        if tracker is not None:
            tracker.update(vehicle.state.position, vehicle_id)
            for event in tracker.poll_events():
                if event.correct:
                    passed += 1
                else:
                    wrong += 1

        if scene.clearance(vehicle.state.position) <= vehicle.params.body_radius:
            collisions += 1
            logger.debug(f"Collision at step {step}, position {vehicle.state.position}")
            restart()

    return EpisodeRecord(
        positions=positions,
        speeds=speeds,
        distances=distances,
        states=states,
        policy_actions=policy_actions,
        commands=commands,
        collisions=collisions,
        checkpoints_passed=passed,
        wrong_checkpoints=wrong,
    )


def make_demo_scene() -> Tuple[StaticScene, CheckpointTracker, Tuple[float, float, float]]:
    """Walled rectangular course with a few posts and a checkpoint loop.

    Returns:
        (scene, tracker, start pose as (x, z, yaw))
    """
    scene = StaticScene()
    scene.add_room(half_width=20.0, half_depth=30.0)
    # Central divider makes the course a loop
    scene.add_wall((0.0, -15.0), (0.0, 15.0), thickness=1.0)
    scene.add_cylinder(-10.0, 5.0, 0.8)
    scene.add_cylinder(11.0, -8.0, 0.8)
    scene.add_cylinder(-9.0, -18.0, 0.8)

    tracker = CheckpointTracker(
        [(-10.0, 20.0), (10.0, 22.0), (10.0, -22.0), (-10.0, -22.0)],
        radius=4.0,
    )
    start = (-10.0, -10.0, 0.0)
    return scene, tracker, start
