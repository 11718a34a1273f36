# Analysis module - Logging, telemetry, metrics
# IMPURE - Has side effects (file I/O, logging)

from .logger import setup_logging, TelemetryLogger
from .metrics import compute_metrics, check_driving_health
