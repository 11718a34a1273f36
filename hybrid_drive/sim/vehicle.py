# Kinematic vehicle
# Stand-in actuator for demos and tests, not a dynamics model

import math
from dataclasses import dataclass, field

import numpy as np

from ..core.math_utils import clamp, normalize_angle
from ..core.types import Pose


@dataclass(frozen=True)
class VehicleParams:
    max_speed: float = 20.0              # m/s
    max_reverse_speed: float = 5.0       # m/s
    max_acceleration: float = 8.0        # m/s² at full throttle
    drag: float = 0.4                    # 1/s, linear speed damping
    wheelbase: float = 2.5               # meters
    max_steering_angle: float = 30.0     # degrees
    body_radius: float = 1.0             # meters, for collision checks


@dataclass
class VehicleState:
    position: np.ndarray = field(default_factory=lambda: np.zeros(3))
    yaw: float = 0.0
    speed: float = 0.0      # signed, along heading

    @property
    def pose(self) -> Pose:
        return Pose(position=self.position.copy(), yaw=self.yaw)


class KinematicVehicle:
    """Bicycle-kinematics car driven by (throttle, steer) in [-1, 1]."""

    def __init__(self, params: VehicleParams = None):
        self.params = params or VehicleParams()
        self.state = VehicleState()
        self.throttle = 0.0
        self.steer = 0.0

    @property
    def pose(self) -> Pose:
        return self.state.pose

    @property
    def forward_speed(self) -> float:
        return self.state.speed

    def reset(self, x: float = 0.0, z: float = 0.0, yaw: float = 0.0, speed: float = 0.0) -> None:
        self.state = VehicleState(position=np.array([x, 0.0, z]), yaw=yaw, speed=speed)
        self.throttle = 0.0
        self.steer = 0.0

    def set_inputs(self, throttle: float, steer: float) -> None:
        self.throttle = clamp(throttle, -1.0, 1.0)
        self.steer = clamp(steer, -1.0, 1.0)

    def stop_completely(self) -> None:
        self.state.speed = 0.0
        self.throttle = 0.0
        self.steer = 0.0

    def step(self, dt: float) -> None:
        """Integrate one time step with the current inputs."""
        p = self.params
        s = self.state

        accel = self.throttle * p.max_acceleration - p.drag * s.speed
        s.speed = clamp(s.speed + accel * dt, -p.max_reverse_speed, p.max_speed)

        steer_angle = math.radians(p.max_steering_angle) * self.steer
        yaw_rate = s.speed / p.wheelbase * math.tan(steer_angle)
        s.yaw = normalize_angle(s.yaw + yaw_rate * dt)

        heading = np.array([math.sin(s.yaw), 0.0, math.cos(s.yaw)])
        s.position = s.position + heading * s.speed * dt
