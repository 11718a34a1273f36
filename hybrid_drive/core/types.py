# Core type definitions
# FORBIDDEN: torch, logging, any I/O

from dataclasses import dataclass, field
from enum import Enum
import math
import numpy as np


UP = np.array([0.0, 1.0, 0.0])


class ArbitrationMode(str, Enum):
    """Which source decides the final command."""
    POLICY_ONLY = "policy_only"
    STATE_ONLY = "state_only"
    FUZZY_ONLY = "fuzzy_only"
    BLENDED = "blended"


class ControllerState(str, Enum):
    IDLE = "idle"
    NAVIGATE = "navigate"
    AVOID_OBSTACLE = "avoid_obstacle"
    RECOVER = "recover"


@dataclass(frozen=True, eq=False)
class Pose:
    """Vehicle pose on the ground plane.

    Vertical axis is +y. At yaw 0 the vehicle faces +z and its right
    side is +x. Positive yaw turns the vehicle to the right.

    Compared by identity; position is an array.
    """
    position: np.ndarray = field(default_factory=lambda: np.zeros(3))
    yaw: float = 0.0              # radians

    @property
    def forward(self) -> np.ndarray:
        return np.array([math.sin(self.yaw), 0.0, math.cos(self.yaw)])

    @property
    def right(self) -> np.ndarray:
        return np.array([math.cos(self.yaw), 0.0, -math.sin(self.yaw)])

    def to_local(self, point: np.ndarray) -> np.ndarray:
        """World point -> vehicle frame (x right, y up, z forward)."""
        offset = np.asarray(point, dtype=np.float64) - self.position
        return np.array([
            float(np.dot(offset, self.right)),
            float(offset[1]),
            float(np.dot(offset, self.forward)),
        ])

    def direction_to_local(self, direction: np.ndarray) -> np.ndarray:
        """World direction -> vehicle frame, ignoring translation."""
        direction = np.asarray(direction, dtype=np.float64)
        return np.array([
            float(np.dot(direction, self.right)),
            float(direction[1]),
            float(np.dot(direction, self.forward)),
        ])


@dataclass(frozen=True, eq=False)
class ProbeHit:
    """Result of a single sphere sweep."""
    distance: float
    point: np.ndarray


@dataclass(frozen=True, eq=False)
class ProximityReading:
    """Nearest obstacle seen by the probe fan.

    nearest_distance is +inf when no probe hit anything. Compared by
    identity, like Pose.
    """
    nearest_distance: float = math.inf
    nearest_point: np.ndarray = field(default_factory=lambda: np.zeros(3))
    forward_alignment: float = 0.0

    @property
    def has_obstacle(self) -> bool:
        return math.isfinite(self.nearest_distance)

    @classmethod
    def clear(cls) -> "ProximityReading":
        return cls()


@dataclass(frozen=True)
class FuzzyOutput:
    throttle_multiplier: float = 1.0
    steer_correction: float = 0.0

    @classmethod
    def neutral(cls) -> "FuzzyOutput":
        return cls(1.0, 0.0)


@dataclass(frozen=True)
class FuzzyMemberships:
    """Membership degrees behind the last fuzzy output (diagnostics only)."""
    near: float = 0.0
    medium: float = 0.0
    far: float = 1.0
    angle_weight: float = 0.0


@dataclass(frozen=True)
class ControllerOutput:
    state: ControllerState = ControllerState.NAVIGATE
    speed_multiplier: float = 1.0
    steer_boost: float = 0.0


@dataclass(frozen=True)
class PolicyAction:
    """Action produced by the learned policy, steer first."""
    steer: float = 0.0
    throttle: float = 0.0

    def to_array(self) -> np.ndarray:
        return np.array([self.steer, self.throttle], dtype=np.float32)

    @classmethod
    def from_array(cls, arr: np.ndarray) -> "PolicyAction":
        arr = np.asarray(arr).reshape(-1)
        assert arr.shape == (2,), f"Expected shape (2,), got {arr.shape}"
        return cls(steer=float(arr[0]), throttle=float(arr[1]))


@dataclass(frozen=True)
class FusedCommand:
    """Final command handed to the actuator for one tick."""
    throttle: float = 0.0
    steer: float = 0.0
