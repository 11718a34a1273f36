# Policy sources for the arbiter

import logging
from pathlib import Path
from typing import Any, Dict, Optional

import numpy as np
import torch

from ..core.types import PolicyAction
from .policy import GaussianPolicy, OBSERVATION_DIM, ACTION_DIM


logger = logging.getLogger(__name__)


class TorchPolicySource:
    """Adapt a GaussianPolicy to the PolicySource interface."""

    def __init__(
        self,
        policy: GaussianPolicy,
        device: torch.device = torch.device("cpu"),
        deterministic: bool = True,
    ):
        self.policy = policy.to(device)
        self.policy.eval()
        self.device = device
        self.deterministic = deterministic

    def act(self, observation: np.ndarray) -> PolicyAction:
        obs_tensor = torch.as_tensor(observation, dtype=torch.float32, device=self.device).unsqueeze(0)
        with torch.no_grad():
            action, _ = self.policy.sample(obs_tensor, deterministic=self.deterministic)
        return PolicyAction.from_array(action.cpu().numpy().squeeze(0))


class ConstantPolicySource:
    """Always returns the same action."""

    def __init__(self, steer: float = 0.0, throttle: float = 0.0):
        self.action = PolicyAction(steer=steer, throttle=throttle)

    def act(self, observation: np.ndarray) -> PolicyAction:
        return self.action


def load_policy(
    path: Path,
    config: Optional[Dict[str, Any]] = None,
    device: torch.device = torch.device("cpu"),
) -> GaussianPolicy:
    """Load policy weights from a checkpoint file.

    The checkpoint must hold a "policy_state_dict" entry. Network shape
    comes from the "policy" section of config.

    Args:
        path: Checkpoint path
        config: Configuration dict (policy.hidden_dims, policy.activation)
        device: Device to map tensors to

    Returns:
        GaussianPolicy in eval mode

    Raises:
        FileNotFoundError: If path does not exist
        KeyError: If the checkpoint has no policy weights
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Checkpoint not found: {path}")

    policy_config = (config or {}).get("policy", {})
    policy = GaussianPolicy(
        state_dim=OBSERVATION_DIM,
        action_dim=ACTION_DIM,
        hidden_dims=policy_config.get("hidden_dims", [128, 128]),
        activation=policy_config.get("activation", "tanh"),
    )

    checkpoint = torch.load(path, map_location=device)
    if "policy_state_dict" not in checkpoint:
        raise KeyError(f"No policy_state_dict in checkpoint {path}")
    policy.load_state_dict(checkpoint["policy_state_dict"])
    policy.eval()

    logger.info(f"Loaded policy from {path}")
    return policy
