# Fuzzy obstacle avoidance
# FORBIDDEN: torch, models.*, sim.*

from typing import Optional

from ..config import FuzzyConfig
from ..core.math_utils import clamp01, lerp, sign
from ..core.types import FuzzyMemberships, FuzzyOutput, Pose, ProximityReading


# Defuzzification weights
NEAR_THROTTLE_WEIGHT = 1.0
MEDIUM_THROTTLE_WEIGHT = 0.45
NEAR_STEER_WEIGHT = 1.0
MEDIUM_STEER_WEIGHT = 0.4


def shoulder_near(x: float, threshold: float) -> float:
    """Left shoulder: 1 up to 0.6*threshold, 0 from 1.6*threshold."""
    a = threshold * 0.6
    c = threshold * 1.6
    if x <= a:
        return 1.0
    if x >= c:
        return 0.0
    return clamp01((c - x) / (c - a))


def triangular(x: float, a: float, b: float, c: float) -> float:
    """Triangle with feet at a and c and peak 1.0 at b."""
    if x <= a or x >= c:
        return 0.0
    if x == b:
        return 1.0
    if x < b:
        return (x - a) / (b - a)
    return (c - x) / (c - b)


class FuzzyInferenceEngine:
    """Map the nearest obstacle to a throttle multiplier and steer correction.

    Two distance sets drive the output: "near" (left shoulder around
    near_threshold) and "medium" (triangle spanning near to medium
    thresholds). Their degrees are combined additively, so an obstacle
    that is partly near and partly medium compounds caution. Steering
    is damped for obstacles off to the side, down to side_steer_weight.

    compute() is pure with respect to its inputs. The most recent result
    is kept in last_output / last_memberships for external readout.
    """

    def __init__(self, config: Optional[FuzzyConfig] = None, probe_length: float = 20.0):
        self.config = config or FuzzyConfig()
        self.probe_length = probe_length
        self.last_output = FuzzyOutput.neutral()
        self.last_memberships = FuzzyMemberships()

    def memberships(self, distance: float, forward_alignment: float = 0.0) -> FuzzyMemberships:
        cfg = self.config
        near = shoulder_near(distance, cfg.near_threshold)
        medium = triangular(
            distance,
            cfg.near_threshold * 0.8,
            (cfg.near_threshold + cfg.medium_threshold) * 0.5,
            cfg.medium_threshold * 1.05,
        )
        far_start = cfg.medium_threshold * 0.9
        far_span = self.probe_length - far_start
        if far_span > 0:
            far = clamp01((distance - far_start) / far_span)
        else:
            # Probe ends before the far ramp starts
            far = 1.0 if distance >= far_start else 0.0
        return FuzzyMemberships(
            near=near,
            medium=medium,
            far=far,
            angle_weight=lerp(cfg.side_steer_weight, 1.0, forward_alignment),
        )

    def compute(self, reading: ProximityReading, pose: Pose) -> FuzzyOutput:
        """Run inference for one proximity reading.

        Args:
            reading: Nearest obstacle from the proximity sensor
            pose: Vehicle pose, used to find which side the obstacle is on

        Returns:
            FuzzyOutput; exactly (1.0, 0.0) when no obstacle was seen
        """
        if not reading.has_obstacle:
            self.last_output = FuzzyOutput.neutral()
            self.last_memberships = FuzzyMemberships()
            return self.last_output

        cfg = self.config
        m = self.memberships(reading.nearest_distance, reading.forward_alignment)

        reduction = clamp01(NEAR_THROTTLE_WEIGHT * m.near + MEDIUM_THROTTLE_WEIGHT * m.medium)
        throttle = lerp(1.0, cfg.min_throttle_multiplier, reduction)

        strength = clamp01(NEAR_STEER_WEIGHT * m.near + MEDIUM_STEER_WEIGHT * m.medium)
        strength *= m.angle_weight

        local_x = pose.to_local(reading.nearest_point)[0]
        steer = -sign(local_x) * strength * cfg.steer_strength

        self.last_output = FuzzyOutput(throttle_multiplier=throttle, steer_correction=steer)
        self.last_memberships = m
        return self.last_output
