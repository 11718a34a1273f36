# Mathematical utilities
# FORBIDDEN: torch, logging, any I/O

import numpy as np
from typing import List


def clamp(value: float, min_val: float, max_val: float) -> float:
    """Clamp value to range.

    Args:
        value: Value to clamp
        min_val: Minimum allowed value
        max_val: Maximum allowed value

    Returns:
        Clamped value
    """
    return max(min_val, min(max_val, value))


def clamp01(value: float) -> float:
    return clamp(value, 0.0, 1.0)


def lerp(a: float, b: float, t: float) -> float:
    """Linear interpolation from a to b, t clamped to [0, 1]."""
    t = clamp01(t)
    return a + (b - a) * t


def sign(value: float) -> float:
    """Sign with sign(0) == 0."""
    if value > 0.0:
        return 1.0
    if value < 0.0:
        return -1.0
    return 0.0


def normalize_angle(angle: float) -> float:
    """Normalize angle to [-pi, pi] range.

    Args:
        angle: Angle in radians

    Returns:
        Normalized angle in [-pi, pi]
    """
    while angle > np.pi:
        angle -= 2 * np.pi
    while angle < -np.pi:
        angle += 2 * np.pi
    return angle


def normalize(vector: np.ndarray, eps: float = 1e-9) -> np.ndarray:
    """Unit vector, or zeros for a degenerate input."""
    vector = np.asarray(vector, dtype=np.float64)
    norm = float(np.linalg.norm(vector))
    if norm < eps:
        return np.zeros_like(vector)
    return vector / norm


def fan_angles(rays_per_side: int, max_angle: float) -> List[float]:
    """Evenly spaced probe angles from -max_angle to +max_angle.

    Args:
        rays_per_side: Probes on each side of the centre probe
        max_angle: Half spread of the fan (radians)

    Returns:
        2 * rays_per_side + 1 angles, centre probe straight ahead
    """
    total = 2 * rays_per_side + 1
    if total == 1:
        return [0.0]
    return [
        lerp(-max_angle, max_angle, i / (total - 1))
        for i in range(total)
    ]
