# Metrics computation

import numpy as np
from typing import Any, Dict, List


def compute_metrics(summaries: List[Dict[str, Any]]) -> Dict[str, float]:
    """Aggregate episode summaries.

    Args:
        summaries: Output of EpisodeRecord.summary() per episode

    Returns:
        Dict of computed metrics
    """
    metrics = {}
    if not summaries:
        return metrics

    speeds = [s["mean_speed"] for s in summaries]
    collisions = [s["collisions"] for s in summaries]
    passed = [s["checkpoints_passed"] for s in summaries]

    metrics["mean_speed"] = float(np.mean(speeds))
    metrics["mean_collisions"] = float(np.mean(collisions))
    metrics["collision_free_rate"] = float(np.mean([c == 0 for c in collisions]))
    metrics["mean_checkpoints"] = float(np.mean(passed))
    metrics["max_checkpoints"] = float(np.max(passed))

    fraction_keys = [k for k in summaries[0] if k.startswith("frac_")]
    for key in fraction_keys:
        metrics[f"mean_{key}"] = float(np.mean([s[key] for s in summaries]))

    return metrics


def check_driving_health(metrics: Dict[str, float], max_recover_fraction: float = 0.5) -> List[str]:
    """Flag signs that the arbitration setup is not driving sensibly.

    Args:
        metrics: Output of compute_metrics
        max_recover_fraction: Tolerated share of ticks spent recovering

    Returns:
        List of warning messages (empty if healthy)
    """
    warnings = []

    if metrics.get("mean_speed", 0.0) < 0.5:
        warnings.append(f"Vehicle barely moves: mean speed {metrics.get('mean_speed', 0.0):.2f} m/s")

    recover = metrics.get("mean_frac_recover", 0.0)
    if recover > max_recover_fraction:
        warnings.append(f"Controller spends {recover * 100:.0f}% of ticks in recover")

    if metrics.get("mean_collisions", 0.0) > 0:
        warnings.append(f"Collisions per episode: {metrics['mean_collisions']:.1f}")

    return warnings
