# Core module - Pure functions, no side effects
# FORBIDDEN: torch, logging, pathlib, any I/O

from .types import (
    ArbitrationMode,
    ControllerState,
    Pose,
    ProbeHit,
    ProximityReading,
    FuzzyOutput,
    ControllerOutput,
    PolicyAction,
    FusedCommand,
)
from .math_utils import clamp, clamp01, lerp, sign
from .geometry import StaticScene
