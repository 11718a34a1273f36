# Scene geometry and sphere sweeps
# FORBIDDEN: torch, logging, any I/O
# Planar obstacles only; good enough for probe tests and the demo scene

import math
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

import numpy as np

from .interfaces import ALL_LAYERS
from .types import ProbeHit


def _xz(v: np.ndarray) -> np.ndarray:
    v = np.asarray(v, dtype=np.float64)
    return np.array([v[0], v[2]])


def _ray_circle(
    origin: np.ndarray,
    direction: np.ndarray,
    center: np.ndarray,
    radius: float,
) -> Optional[float]:
    """Entry distance of a 2D unit ray into a circle.

    Returns None when the ray misses or starts inside the circle.
    """
    m = origin - center
    b = float(np.dot(m, direction))
    c = float(np.dot(m, m)) - radius * radius
    if c <= 0.0:
        return None
    disc = b * b - c
    if disc < 0.0:
        return None
    t = -b - math.sqrt(disc)
    if t < 0.0:
        return None
    return t


def _closest_on_segment(p: np.ndarray, a: np.ndarray, b: np.ndarray) -> np.ndarray:
    ab = b - a
    denom = float(np.dot(ab, ab))
    if denom == 0.0:
        return a.copy()
    t = min(1.0, max(0.0, float(np.dot(p - a, ab)) / denom))
    return a + t * ab


def _ray_capsule(
    origin: np.ndarray,
    direction: np.ndarray,
    a: np.ndarray,
    b: np.ndarray,
    radius: float,
) -> Optional[float]:
    """Entry distance of a 2D unit ray into a capsule around segment ab."""
    if np.linalg.norm(origin - _closest_on_segment(origin, a, b)) <= radius:
        return None

    candidates = []
    for end in (a, b):
        t = _ray_circle(origin, direction, end, radius)
        if t is not None:
            candidates.append(t)

    length = float(np.linalg.norm(b - a))
    if length > 0.0:
        u = (b - a) / length
        n = np.array([-u[1], u[0]])
        dn = float(np.dot(direction, n))
        if abs(dn) > 1e-12:
            for side in (1.0, -1.0):
                t = (side * radius - float(np.dot(origin - a, n))) / dn
                if t < 0.0:
                    continue
                along = float(np.dot(origin + t * direction - a, u))
                if 0.0 <= along <= length:
                    candidates.append(t)

    if not candidates:
        return None
    return min(candidates)


@dataclass
class Cylinder:
    """Vertical post of unbounded height."""
    center: Tuple[float, float]    # (x, z)
    radius: float
    layer: int = 0

    def cast(self, origin: np.ndarray, direction: np.ndarray, probe_radius: float):
        c = np.asarray(self.center, dtype=np.float64)
        t = _ray_circle(origin, direction, c, self.radius + probe_radius)
        if t is None:
            return None
        sweep_center = origin + t * direction
        contact = c + self.radius * _unit(sweep_center - c)
        return t, contact

    def distance_to(self, point: np.ndarray) -> float:
        return float(np.linalg.norm(point - np.asarray(self.center))) - self.radius


@dataclass
class Wall:
    """Vertical slab along a segment in the ground plane."""
    start: Tuple[float, float]     # (x, z)
    end: Tuple[float, float]
    thickness: float = 0.2
    layer: int = 0

    def cast(self, origin: np.ndarray, direction: np.ndarray, probe_radius: float):
        a = np.asarray(self.start, dtype=np.float64)
        b = np.asarray(self.end, dtype=np.float64)
        half = 0.5 * self.thickness
        t = _ray_capsule(origin, direction, a, b, half + probe_radius)
        if t is None:
            return None
        sweep_center = origin + t * direction
        q = _closest_on_segment(sweep_center, a, b)
        contact = q + half * _unit(sweep_center - q)
        return t, contact

    def distance_to(self, point: np.ndarray) -> float:
        a = np.asarray(self.start, dtype=np.float64)
        b = np.asarray(self.end, dtype=np.float64)
        q = _closest_on_segment(point, a, b)
        return float(np.linalg.norm(point - q)) - 0.5 * self.thickness


def _unit(v: np.ndarray) -> np.ndarray:
    n = float(np.linalg.norm(v))
    if n == 0.0:
        return np.zeros_like(v)
    return v / n


@dataclass
class StaticScene:
    """In-memory obstacle set answering sphere sweeps.

    Sweeps are horizontal: the vertical component of the cast direction
    is dropped and hit points are reported at the origin's height.
    Obstacles overlapping the sphere at the start of the sweep are
    ignored, matching common physics engine behaviour.
    """
    obstacles: List[object] = field(default_factory=list)

    def add_cylinder(self, x: float, z: float, radius: float, layer: int = 0) -> Cylinder:
        obstacle = Cylinder(center=(x, z), radius=radius, layer=layer)
        self.obstacles.append(obstacle)
        return obstacle

    def add_wall(
        self,
        start: Tuple[float, float],
        end: Tuple[float, float],
        thickness: float = 0.2,
        layer: int = 0,
    ) -> Wall:
        obstacle = Wall(start=start, end=end, thickness=thickness, layer=layer)
        self.obstacles.append(obstacle)
        return obstacle

    def add_room(self, half_width: float, half_depth: float, thickness: float = 0.2, layer: int = 0) -> None:
        """Four walls enclosing a rectangle centred on the origin."""
        corners = [
            (-half_width, -half_depth),
            (half_width, -half_depth),
            (half_width, half_depth),
            (-half_width, half_depth),
        ]
        for i in range(4):
            self.add_wall(corners[i], corners[(i + 1) % 4], thickness, layer)

    def sphere_cast(
        self,
        origin: np.ndarray,
        direction: np.ndarray,
        max_distance: float,
        radius: float,
        layer_mask: int = ALL_LAYERS,
    ) -> Optional[ProbeHit]:
        """Sweep a sphere and return the first obstacle it touches.

        Args:
            origin: Sweep start, world space
            direction: Sweep direction (need not be unit length)
            max_distance: Sweep length
            radius: Sphere radius
            layer_mask: Bit mask of obstacle layers to test

        Returns:
            ProbeHit or None if nothing is touched within max_distance
        """
        origin = np.asarray(origin, dtype=np.float64)
        o2 = _xz(origin)
        d2 = _unit(_xz(direction))
        if not d2.any():
            return None

        best_t = math.inf
        best_contact = None
        for obstacle in self.obstacles:
            if not (1 << obstacle.layer) & layer_mask:
                continue
            result = obstacle.cast(o2, d2, radius)
            if result is None:
                continue
            t, contact = result
            if t <= max_distance and t < best_t:
                best_t = t
                best_contact = contact

        if best_contact is None:
            return None

        point = np.array([best_contact[0], origin[1], best_contact[1]])
        return ProbeHit(distance=float(best_t), point=point)

    def clearance(self, position: np.ndarray, layer_mask: int = ALL_LAYERS) -> float:
        """Planar distance from position to the nearest obstacle surface."""
        p = _xz(position)
        distances = [
            obstacle.distance_to(p)
            for obstacle in self.obstacles
            if (1 << obstacle.layer) & layer_mask
        ]
        return min(distances) if distances else math.inf
