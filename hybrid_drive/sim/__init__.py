# Simulation module - External collaborators for running the core

from .vehicle import KinematicVehicle, VehicleParams
from .checkpoints import CheckpointTracker, CheckpointEvent
from .observation import ObservationBuilder
from .runner import run_episode, make_demo_scene, EpisodeRecord
