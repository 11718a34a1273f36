# Proximity sensor adapter
# FORBIDDEN: torch, models.*, sim.*

import math
from typing import List, Optional

import numpy as np

from ..config import SensorConfig
from ..core.interfaces import EnvironmentQuery
from ..core.math_utils import clamp01, fan_angles, normalize
from ..core.types import Pose, ProximityReading, UP


class ProximitySensor:
    """Reduce a fan of sphere-sweep probes to the nearest obstacle.

    Probes are spread evenly about the vertical axis, from
    -max_probe_angle to +max_probe_angle relative to the vehicle heading.
    Hits at or below min_distance_considered are treated as self hits
    and ignored.
    """

    def __init__(self, environment: EnvironmentQuery, config: Optional[SensorConfig] = None):
        self.environment = environment
        self.config = config or SensorConfig()
        self._angles = fan_angles(
            self.config.rays_per_side,
            math.radians(self.config.max_probe_angle),
        )
        self.last_reading = ProximityReading.clear()

    @property
    def num_probes(self) -> int:
        return len(self._angles)

    def probe_directions(self, pose: Pose) -> List[np.ndarray]:
        """World-space unit direction of every probe, left to right."""
        return [
            np.array([math.sin(pose.yaw + a), 0.0, math.cos(pose.yaw + a)])
            for a in self._angles
        ]

    def origin(self, pose: Pose) -> np.ndarray:
        return np.asarray(pose.position, dtype=np.float64) + UP * self.config.origin_height

    def sense(self, pose: Pose) -> ProximityReading:
        """Cast all probes from pose and keep the closest valid hit.

        Args:
            pose: Current vehicle pose

        Returns:
            ProximityReading, with nearest_distance=inf when nothing was hit
        """
        cfg = self.config
        origin = self.origin(pose)

        nearest = math.inf
        nearest_point = np.zeros(3)
        alignment = 0.0

        for direction in self.probe_directions(pose):
            hit = self.environment.sphere_cast(
                origin,
                direction,
                cfg.probe_length,
                cfg.probe_radius,
                cfg.layer_mask,
            )
            if hit is None:
                continue
            if cfg.min_distance_considered < hit.distance < nearest:
                nearest = hit.distance
                nearest_point = np.asarray(hit.point, dtype=np.float64)
                to_hit = normalize(nearest_point - origin)
                # Behind the vehicle reads the same as fully sideways
                alignment = clamp01(float(np.dot(pose.forward, to_hit)))

        self.last_reading = ProximityReading(
            nearest_distance=nearest,
            nearest_point=nearest_point,
            forward_alignment=alignment,
        )
        return self.last_reading
