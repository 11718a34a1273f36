# Control module - Fuzzy engine, state machine, arbitration
# FORBIDDEN: torch, models.*, sim.*

from .fuzzy import FuzzyInferenceEngine
from .fsm import DiscreteStateController
from .arbiter import CommandArbiter, fuse, build_arbiter
