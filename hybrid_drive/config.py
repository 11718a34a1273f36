# Configuration loading and validation
# Static per-session settings; validated once, never at tick time

from dataclasses import dataclass, field, asdict, fields
from pathlib import Path
from typing import Any, Dict, List
import math

import yaml

from .core.types import ArbitrationMode


class ConfigError(ValueError):
    """Raised when a configuration violates an invariant."""

    def __init__(self, errors: List[str]):
        self.errors = list(errors)
        lines = "\n".join(f"  - {e}" for e in self.errors)
        super().__init__(f"Invalid configuration:\n{lines}")


@dataclass(frozen=True)
class SensorConfig:
    rays_per_side: int = 6
    max_probe_angle: float = 70.0         # degrees
    probe_length: float = 20.0            # meters
    probe_radius: float = 1.0             # meters
    min_distance_considered: float = 0.2  # meters, rejects self hits
    origin_height: float = 0.5            # meters above pose
    layer_mask: int = -1


@dataclass(frozen=True)
class FuzzyConfig:
    near_threshold: float = 6.0
    medium_threshold: float = 12.0
    min_throttle_multiplier: float = 0.25
    steer_strength: float = 0.9
    side_steer_weight: float = 0.3


@dataclass(frozen=True)
class FSMConfig:
    avoid_distance: float = 6.0
    collision_distance: float = 1.0
    stuck_speed_threshold: float = 0.5    # m/s
    stuck_time_threshold: float = 1.5     # seconds


@dataclass(frozen=True)
class ArbiterConfig:
    arbitration_mode: ArbitrationMode = ArbitrationMode.BLENDED
    allow_reverse_in_blend: bool = False


@dataclass(frozen=True)
class ArbitrationConfig:
    """All tunables of the arbitration core.

    Validated on construction, so an invalid combination never reaches
    build_arbiter. The section dataclasses are not checked on their own;
    most invariants span sections.
    """
    sensor: SensorConfig = field(default_factory=SensorConfig)
    fuzzy: FuzzyConfig = field(default_factory=FuzzyConfig)
    fsm: FSMConfig = field(default_factory=FSMConfig)
    arbiter: ArbiterConfig = field(default_factory=ArbiterConfig)

    def __post_init__(self):
        errors = validate_config(self.to_dict())
        if errors:
            raise ConfigError(errors)

    @classmethod
    def from_dict(cls, config: Dict[str, Any]) -> "ArbitrationConfig":
        """Build from a config dict, failing fast on invalid values.

        Unknown keys inside a section are rejected rather than ignored.

        Raises:
            ConfigError: If validate_config reports any violation
        """
        errors = validate_config(config)
        if errors:
            raise ConfigError(errors)

        arbiter = dict(config.get("arbiter") or {})
        if "arbitration_mode" in arbiter:
            arbiter["arbitration_mode"] = ArbitrationMode(arbiter["arbitration_mode"])

        return cls(
            sensor=SensorConfig(**(config.get("sensor") or {})),
            fuzzy=FuzzyConfig(**(config.get("fuzzy") or {})),
            fsm=FSMConfig(**(config.get("fsm") or {})),
            arbiter=ArbiterConfig(**arbiter),
        )

    def to_dict(self) -> Dict[str, Any]:
        out = asdict(self)
        mode = self.arbiter.arbitration_mode
        out["arbiter"]["arbitration_mode"] = mode.value if isinstance(mode, ArbitrationMode) else mode
        return out


_SECTIONS = {
    "sensor": SensorConfig,
    "fuzzy": FuzzyConfig,
    "fsm": FSMConfig,
    "arbiter": ArbiterConfig,
}


_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_count(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


def _merged(config: Dict[str, Any], section: str) -> Dict[str, Any]:
    defaults = asdict(_SECTIONS[section]())
    defaults.update(config.get(section) or {})
    return defaults


def validate_config(config: Dict[str, Any]) -> List[str]:
    """Validate an arbitration configuration.

    Missing sections and keys fall back to defaults; only the values that
    end up in effect are checked.

    Args:
        config: Configuration dictionary

    Returns:
        List of validation errors (empty if valid)
    """
    errors = []

    for section, cls in _SECTIONS.items():
        raw = config.get(section) or {}
        if not isinstance(raw, dict):
            errors.append(f"{section} must be a mapping, got {type(raw).__name__}")
            continue
        known = {f.name for f in fields(cls)}
        for key in raw:
            if key not in known:
                errors.append(f"Unknown option: {section}.{key}")
    if errors:
        return errors

    for section in ("sensor", "fuzzy", "fsm"):
        for key, value in (config.get(section) or {}).items():
            if not _is_number(value):
                errors.append(f"{section}.{key} must be a number, got {value!r}")
    if errors:
        return errors

    sensor = _merged(config, "sensor")
    fuzzy = _merged(config, "fuzzy")
    fsm = _merged(config, "fsm")
    arbiter = _merged(config, "arbiter")

    # Validate sensor
    if not isinstance(sensor["rays_per_side"], int) or sensor["rays_per_side"] < 0:
        errors.append(f"sensor.rays_per_side must be a non-negative integer, got {sensor['rays_per_side']}")
    if not isinstance(sensor["layer_mask"], int):
        errors.append(f"sensor.layer_mask must be an integer, got {sensor['layer_mask']!r}")
    if not 0.0 <= sensor["max_probe_angle"] <= 180.0:
        errors.append(f"sensor.max_probe_angle must be in [0, 180], got {sensor['max_probe_angle']}")
    if sensor["probe_radius"] < 0:
        errors.append(f"sensor.probe_radius must be non-negative, got {sensor['probe_radius']}")
    if sensor["min_distance_considered"] < 0:
        errors.append(
            f"sensor.min_distance_considered must be non-negative, got {sensor['min_distance_considered']}"
        )
    if sensor["probe_length"] <= sensor["min_distance_considered"]:
        errors.append(
            f"sensor.probe_length must exceed min_distance_considered, got {sensor['probe_length']}"
        )

    # Validate fuzzy
    near = fuzzy["near_threshold"]
    medium = fuzzy["medium_threshold"]
    if not near > 0:
        errors.append(f"fuzzy.near_threshold must be positive, got {near}")
    if not medium > near:
        errors.append(f"fuzzy.medium_threshold must exceed near_threshold, got {medium} <= {near}")
    if near <= sensor["min_distance_considered"]:
        errors.append(
            f"fuzzy.near_threshold must exceed sensor.min_distance_considered, got {near}"
        )
    if math.isclose(sensor["probe_length"], 0.9 * medium):
        errors.append("sensor.probe_length must differ from 0.9 * fuzzy.medium_threshold")
    for key in ("min_throttle_multiplier", "steer_strength", "side_steer_weight"):
        if not 0.0 <= fuzzy[key] <= 1.0:
            errors.append(f"fuzzy.{key} must be in [0, 1], got {fuzzy[key]}")

    # Validate fsm
    if not fsm["collision_distance"] > 0:
        errors.append(f"fsm.collision_distance must be positive, got {fsm['collision_distance']}")
    if fsm["avoid_distance"] < fsm["collision_distance"]:
        errors.append(
            f"fsm.avoid_distance must be >= collision_distance, got {fsm['avoid_distance']}"
        )
    if fsm["stuck_speed_threshold"] < 0:
        errors.append(f"fsm.stuck_speed_threshold must be non-negative, got {fsm['stuck_speed_threshold']}")
    if not fsm["stuck_time_threshold"] > 0:
        errors.append(f"fsm.stuck_time_threshold must be positive, got {fsm['stuck_time_threshold']}")

    # Validate arbiter
    mode = arbiter["arbitration_mode"]
    valid_modes = [m.value for m in ArbitrationMode]
    if isinstance(mode, ArbitrationMode):
        mode = mode.value
    if mode not in valid_modes:
        errors.append(f"arbiter.arbitration_mode must be one of {valid_modes}, got '{mode}'")
    if not isinstance(arbiter["allow_reverse_in_blend"], bool):
        errors.append(
            f"arbiter.allow_reverse_in_blend must be a boolean, got {arbiter['allow_reverse_in_blend']!r}"
        )

    errors.extend(_validate_run_sections(config))
    return errors


def _validate_run_sections(config: Dict[str, Any]) -> List[str]:
    """Check the policy, sim and logging sections read by the scripts."""
    errors = []
    sections = {}
    for section in ("policy", "sim", "logging"):
        raw = config.get(section) or {}
        if not isinstance(raw, dict):
            errors.append(f"{section} must be a mapping, got {type(raw).__name__}")
            raw = {}
        sections[section] = raw

    policy = sections["policy"]
    if "hidden_dims" in policy:
        dims = policy["hidden_dims"]
        if not isinstance(dims, list) or not dims or not all(_is_count(d) for d in dims):
            errors.append(f"policy.hidden_dims must be a non-empty list of positive integers, got {dims!r}")
    if "activation" in policy and not isinstance(policy["activation"], str):
        errors.append(f"policy.activation must be a string, got {policy['activation']!r}")
    if "deterministic" in policy and not isinstance(policy["deterministic"], bool):
        errors.append(f"policy.deterministic must be a boolean, got {policy['deterministic']!r}")

    sim = sections["sim"]
    for key in ("episodes", "num_steps"):
        if key in sim and not _is_count(sim[key]):
            errors.append(f"sim.{key} must be a positive integer, got {sim[key]!r}")
    if "dt" in sim and not (_is_number(sim["dt"]) and sim["dt"] > 0):
        errors.append(f"sim.dt must be a positive number, got {sim['dt']!r}")
    if "seed" in sim and (not isinstance(sim["seed"], int) or isinstance(sim["seed"], bool)):
        errors.append(f"sim.seed must be an integer, got {sim['seed']!r}")

    level = sections["logging"].get("level", "INFO")
    if not isinstance(level, str) or level.upper() not in _LOG_LEVELS:
        errors.append(f"logging.level must be one of {list(_LOG_LEVELS)}, got {level!r}")

    return errors


def load_config(config_path: Path) -> Dict[str, Any]:
    """Load configuration from YAML file.

    Args:
        config_path: Path to config file

    Returns:
        Configuration dictionary (empty dict for an empty file)
    """
    with open(config_path) as f:
        config = yaml.safe_load(f)
    return config or {}


def load_arbitration_config(config_path: Path) -> ArbitrationConfig:
    return ArbitrationConfig.from_dict(load_config(config_path))


def apply_overrides(config: Dict[str, Any], overrides: List[str]) -> Dict[str, Any]:
    """Apply command-line overrides to config.

    Args:
        config: Base configuration
        overrides: List of "key.subkey=value" strings

    Returns:
        Modified configuration
    """
    for override in overrides:
        if "=" not in override:
            raise ValueError(f"Invalid override format: {override}. Expected key=value")

        key, value = override.split("=", 1)
        keys = key.split(".")

        # Navigate to nested key
        d = config
        for k in keys[:-1]:
            if d.get(k) is None:
                d[k] = {}
            d = d[k]

        # yaml gives ints, floats, bools and strings the same way the file would
        d[keys[-1]] = yaml.safe_load(value)

    return config
