# Logging utilities

import logging
import json
import csv
from pathlib import Path
from typing import Dict, List, Any, Optional


def setup_logging(
    level: str = "INFO",
    log_file: Optional[Path] = None,
) -> logging.Logger:
    """Setup logging configuration.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR)
        log_file: Optional file path for logging

    Returns:
        Configured package logger
    """
    logger = logging.getLogger("hybrid_drive")
    logger.setLevel(getattr(logging, level.upper()))
    logger.handlers.clear()

    # Console handler
    console_handler = logging.StreamHandler()
    console_handler.setLevel(getattr(logging, level.upper()))
    console_format = logging.Formatter(
        "%(asctime)s | %(levelname)s | %(message)s",
        datefmt="%H:%M:%S",
    )
    console_handler.setFormatter(console_format)
    logger.addHandler(console_handler)

    # File handler
    if log_file is not None:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(logging.DEBUG)
        file_format = logging.Formatter(
            "%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        )
        file_handler.setFormatter(file_format)
        logger.addHandler(file_handler)

    return logger


class TelemetryLogger:
    """Per-tick telemetry to CSV, per-episode summaries to JSON."""

    def __init__(self, csv_path: Path):
        """Initialize telemetry logger.

        Args:
            csv_path: Destination CSV; the JSON summary sits next to it
        """
        self.csv_path = Path(csv_path)
        self.csv_path.parent.mkdir(parents=True, exist_ok=True)
        self.json_path = self.csv_path.with_suffix(".json")

        self._summaries: List[Dict[str, Any]] = []
        self._fieldnames: List[str] = []

    def log_episode(self, episode: int, rows: List[Dict[str, float]], summary: Dict[str, Any]) -> None:
        """Append one episode's tick rows and remember its summary.

        Args:
            episode: Episode index
            rows: One dict per tick (see EpisodeRecord.rows)
            summary: Episode summary dict
        """
        self._summaries.append({"episode": episode, **summary})
        if not rows:
            return

        records = [{"episode": episode, "tick": t, **row} for t, row in enumerate(rows)]

        # Header comes from the first record ever written
        if not self._fieldnames:
            self._fieldnames = list(records[0].keys())
            with open(self.csv_path, "w", newline="") as f:
                writer = csv.DictWriter(f, fieldnames=self._fieldnames)
                writer.writeheader()

        with open(self.csv_path, "a", newline="") as f:
            writer = csv.DictWriter(f, fieldnames=self._fieldnames, extrasaction="ignore")
            writer.writerows(records)

    def save_summary(self) -> None:
        """Save all episode summaries as JSON."""
        with open(self.json_path, "w") as f:
            json.dump(self._summaries, f, indent=2, default=float)

    @property
    def summaries(self) -> List[Dict[str, Any]]:
        return list(self._summaries)
