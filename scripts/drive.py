#!/usr/bin/env python3
"""Drive the demo course with a chosen arbitration mode.

Runs episodes through the full arbitration core and reports how the
vehicle behaved. Without a checkpoint the learned policy is replaced by
a fixed cruise action.

Usage:
    # Blend of fixed cruise action, FSM and fuzzy controller
    python scripts/drive.py --config configs/default.yaml

    # Fuzzy controller alone, telemetry to file
    python scripts/drive.py --mode fuzzy_only --output telemetry.csv

    # Trained policy
    python scripts/drive.py --checkpoint experiments/.../best.pt --episodes 5
"""

import argparse
import random
from pathlib import Path

import numpy as np
import torch

from hybrid_drive.analysis import TelemetryLogger, check_driving_health, compute_metrics, setup_logging
from hybrid_drive.config import ArbitrationConfig, ConfigError, apply_overrides, load_config
from hybrid_drive.control import build_arbiter
from hybrid_drive.models import ConstantPolicySource, TorchPolicySource, load_policy
from hybrid_drive.sim import KinematicVehicle, make_demo_scene, run_episode


def main():
    parser = argparse.ArgumentParser(description="Drive the demo course")
    parser.add_argument("--config", type=Path, default=Path("configs/default.yaml"))
    parser.add_argument(
        "--mode",
        type=str,
        choices=["policy_only", "state_only", "fuzzy_only", "blended"],
        default=None,
        help="Arbitration mode (overrides config)",
    )
    parser.add_argument("--checkpoint", type=Path, default=None, help="Policy checkpoint (cruise action if not provided)")
    parser.add_argument("--episodes", type=int, default=None, help="Number of episodes to run")
    parser.add_argument("--output", type=Path, default=None, help="Save telemetry to CSV")
    parser.add_argument(
        "--override",
        action="append",
        default=[],
        help="Config overrides in format key.subkey=value",
    )

    args = parser.parse_args()

    config = load_config(args.config)
    if args.override:
        config = apply_overrides(config, args.override)
    if args.mode is not None:
        config.setdefault("arbiter", {})["arbitration_mode"] = args.mode

    try:
        arbitration_config = ArbitrationConfig.from_dict(config)
    except ConfigError as e:
        setup_logging().error(str(e))
        raise SystemExit(1)

    logger = setup_logging((config.get("logging") or {}).get("level", "INFO"))

    sim_config = config.get("sim") or {}
    seed = sim_config.get("seed", 42)
    random.seed(seed)
    np.random.seed(seed)
    torch.manual_seed(seed)

    episodes = args.episodes or sim_config.get("episodes", 3)
    num_steps = sim_config.get("num_steps", 1500)
    dt = sim_config.get("dt", 0.02)

    # Policy
    if args.checkpoint is not None:
        policy_net = load_policy(args.checkpoint, config)
        policy = TorchPolicySource(
            policy_net,
            deterministic=(config.get("policy") or {}).get("deterministic", True),
        )
    else:
        logger.info("No checkpoint provided - using fixed cruise action")
        policy = ConstantPolicySource(steer=0.0, throttle=0.6)

    scene, tracker, start = make_demo_scene()
    vehicle = KinematicVehicle()
    arbiter = build_arbiter(scene, vehicle, arbitration_config)

    logger.info(
        f"Mode: {arbiter.mode.value}, reverse in blend: {arbiter.allow_reverse_in_blend}, "
        f"probes: {arbiter.sensor.num_probes}"
    )

    telemetry = TelemetryLogger(args.output) if args.output else None
    summaries = []

    for ep in range(episodes):
        record = run_episode(
            arbiter=arbiter,
            vehicle=vehicle,
            policy=policy,
            scene=scene,
            tracker=tracker,
            start=start,
            num_steps=num_steps,
            dt=dt,
        )
        summary = record.summary()
        summaries.append(summary)

        logger.info(
            f"Episode {ep + 1}/{episodes}: speed={summary['mean_speed']:.2f} m/s, "
            f"collisions={summary['collisions']}, checkpoints={summary['checkpoints_passed']}, "
            f"recover={summary['frac_recover'] * 100:.0f}%"
        )
        if telemetry is not None:
            telemetry.log_episode(ep, record.rows(), summary)

    metrics = compute_metrics(summaries)
    for key, value in metrics.items():
        logger.info(f"{key}: {value:.3f}")
    for warning in check_driving_health(metrics):
        logger.warning(warning)

    if telemetry is not None:
        telemetry.save_summary()
        logger.info(f"Telemetry saved to {args.output}")


if __name__ == "__main__":
    main()
