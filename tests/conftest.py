# Pytest configuration and fixtures

import pytest
import numpy as np
import torch
from pathlib import Path
import tempfile
import yaml

from hybrid_drive.config import ArbitrationConfig, FuzzyConfig, FSMConfig, SensorConfig
from hybrid_drive.core.geometry import StaticScene
from hybrid_drive.core.types import Pose


class RecordingActuator:
    """Actuator that remembers every command it was given."""

    def __init__(self):
        self.commands = []
        self.stops = 0

    def set_inputs(self, throttle, steer):
        self.commands.append((throttle, steer))

    def stop_completely(self):
        self.stops += 1


@pytest.fixture
def seed():
    """Fixed seed for reproducibility."""
    return 42


@pytest.fixture
def set_seed(seed):
    """Set all random seeds."""
    np.random.seed(seed)
    torch.manual_seed(seed)


@pytest.fixture
def device():
    """Get test device (CPU for CI)."""
    return torch.device("cpu")


@pytest.fixture
def sensor_config():
    return SensorConfig()


@pytest.fixture
def fuzzy_config():
    return FuzzyConfig()


@pytest.fixture
def fsm_config():
    return FSMConfig()


@pytest.fixture
def origin_pose():
    """Vehicle at the origin facing +z."""
    return Pose(position=np.zeros(3), yaw=0.0)


@pytest.fixture
def empty_scene():
    return StaticScene()


@pytest.fixture
def post_ahead_scene():
    """Single post 10 m straight ahead of the origin."""
    scene = StaticScene()
    scene.add_cylinder(0.0, 10.0, 1.0)
    return scene


@pytest.fixture
def actuator():
    return RecordingActuator()


@pytest.fixture
def actuator_factory():
    """Build fresh recording actuators on demand."""
    return RecordingActuator


@pytest.fixture
def config():
    """Standard test configuration."""
    return {
        "sensor": {
            "rays_per_side": 6,
            "max_probe_angle": 70.0,
            "probe_length": 20.0,
            "probe_radius": 1.0,
            "min_distance_considered": 0.2,
        },
        "fuzzy": {
            "near_threshold": 6.0,
            "medium_threshold": 12.0,
            "min_throttle_multiplier": 0.25,
            "steer_strength": 0.9,
            "side_steer_weight": 0.3,
        },
        "fsm": {
            "avoid_distance": 6.0,
            "collision_distance": 1.0,
            "stuck_speed_threshold": 0.5,
            "stuck_time_threshold": 1.5,
        },
        "arbiter": {
            "arbitration_mode": "blended",
            "allow_reverse_in_blend": False,
        },
        "policy": {
            "hidden_dims": [32, 32],
            "activation": "tanh",
        },
        "sim": {
            "num_steps": 100,
            "dt": 0.02,
        },
        "logging": {
            "level": "WARNING",
        },
    }


@pytest.fixture
def arbitration_config(config):
    return ArbitrationConfig.from_dict(config)


@pytest.fixture
def temp_dir():
    """Create temporary directory for test outputs."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def config_file(config, temp_dir):
    """Create temporary config file."""
    config_path = temp_dir / "config.yaml"
    with open(config_path, "w") as f:
        yaml.dump(config, f)
    return config_path
