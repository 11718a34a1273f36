# Policy observation construction
# FORBIDDEN: torch, models.*

import numpy as np
from typing import Optional

from ..core.math_utils import clamp, clamp01, normalize
from ..core.types import Pose


class ObservationBuilder:
    """Build the policy observation vector.

    Layout (5 values):
        [0:3] unit direction to the next goal in the vehicle frame
        [3]   goal distance / goal_distance_scale, clamped to [0, 1]
        [4]   (forward_speed + speed_offset) / speed_scale, clamped to [0, 1]

    With no goal the direction is zero and the distance slot reads 1.
    """

    def __init__(
        self,
        goal_distance_scale: float = 50.0,
        speed_offset: float = 10.0,
        speed_scale: float = 40.0,
    ):
        self.goal_distance_scale = goal_distance_scale
        self.speed_offset = speed_offset
        self.speed_scale = speed_scale

    @property
    def dimension(self) -> int:
        return 5

    def build(self, pose: Pose, forward_speed: float, goal: Optional[np.ndarray]) -> np.ndarray:
        if goal is not None:
            offset = np.asarray(goal, dtype=np.float64) - pose.position
            local_dir = pose.direction_to_local(normalize(offset))
            distance = clamp01(float(np.linalg.norm(offset)) / self.goal_distance_scale)
        else:
            local_dir = np.zeros(3)
            distance = 1.0

        speed = clamp((forward_speed + self.speed_offset) / self.speed_scale, 0.0, 1.0)

        return np.concatenate([local_dir, [distance, speed]]).astype(np.float32)
