# Checkpoint tracking
# Events are queued and polled by the caller; no callbacks

from collections import deque
from dataclasses import dataclass
from typing import Deque, Dict, Hashable, List, Optional, Sequence, Set

import numpy as np


@dataclass(frozen=True)
class CheckpointEvent:
    vehicle_id: Hashable
    index: int
    correct: bool


class CheckpointTracker:
    """Ordered lap of checkpoints, tracked independently per vehicle.

    Passing the expected checkpoint advances the vehicle's target (wrapping
    around the lap); passing any other one is recorded as a wrong
    checkpoint and leaves the target unchanged.
    """

    def __init__(self, positions: Sequence[Sequence[float]], radius: float = 2.0):
        self.positions = [self._to_3d(p) for p in positions]
        self.radius = radius
        self._next: Dict[Hashable, int] = {}
        self._inside: Dict[Hashable, Set[int]] = {}
        self._events: Deque[CheckpointEvent] = deque()

    @staticmethod
    def _to_3d(p: Sequence[float]) -> np.ndarray:
        p = np.asarray(p, dtype=np.float64)
        if p.shape == (2,):
            return np.array([p[0], 0.0, p[1]])
        return p

    def __len__(self) -> int:
        return len(self.positions)

    def reset(self, vehicle_id: Hashable = 0) -> None:
        self._next[vehicle_id] = 0
        self._inside[vehicle_id] = set()

    def next_index(self, vehicle_id: Hashable = 0) -> int:
        return self._next.setdefault(vehicle_id, 0)

    def next_goal(self, vehicle_id: Hashable = 0) -> Optional[np.ndarray]:
        if not self.positions:
            return None
        return self.positions[self.next_index(vehicle_id)].copy()

    def pass_checkpoint(self, index: int, vehicle_id: Hashable = 0) -> bool:
        """Register vehicle_id driving through checkpoint index.

        Returns:
            True if it was the expected checkpoint
        """
        expected = self.next_index(vehicle_id)
        correct = index == expected
        if correct:
            self._next[vehicle_id] = (expected + 1) % len(self.positions)
        self._events.append(CheckpointEvent(vehicle_id=vehicle_id, index=index, correct=correct))
        return correct

    def update(self, position: np.ndarray, vehicle_id: Hashable = 0) -> None:
        """Trigger checkpoints the vehicle has just entered."""
        inside = self._inside.setdefault(vehicle_id, set())
        position = np.asarray(position, dtype=np.float64)
        for i, cp in enumerate(self.positions):
            planar = np.array([position[0] - cp[0], position[2] - cp[2]])
            is_inside = float(np.linalg.norm(planar)) <= self.radius
            if is_inside and i not in inside:
                inside.add(i)
                self.pass_checkpoint(i, vehicle_id)
            elif not is_inside:
                inside.discard(i)

    def poll_events(self) -> List[CheckpointEvent]:
        events = list(self._events)
        self._events.clear()
        return events
