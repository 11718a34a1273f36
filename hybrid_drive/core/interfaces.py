# Collaborator interfaces
# FORBIDDEN: torch, logging, any I/O

from typing import Optional, Hashable, Protocol, runtime_checkable
import numpy as np

from .types import ProbeHit, PolicyAction


ALL_LAYERS = -1


@runtime_checkable
class EnvironmentQuery(Protocol):
    """Read-only geometry query used by the proximity sensor."""

    def sphere_cast(
        self,
        origin: np.ndarray,
        direction: np.ndarray,
        max_distance: float,
        radius: float,
        layer_mask: int = ALL_LAYERS,
    ) -> Optional[ProbeHit]:
        ...


@runtime_checkable
class Actuator(Protocol):
    """Receives the final command. No acknowledgement."""

    def set_inputs(self, throttle: float, steer: float) -> None:
        ...

    def stop_completely(self) -> None:
        ...


@runtime_checkable
class PolicySource(Protocol):
    """Black box producing (steer, throttle) from an observation."""

    def act(self, observation: np.ndarray) -> PolicyAction:
        ...


@runtime_checkable
class GoalTracker(Protocol):
    """Supplies the next target position for a vehicle, if any."""

    def next_goal(self, vehicle_id: Hashable) -> Optional[np.ndarray]:
        ...
