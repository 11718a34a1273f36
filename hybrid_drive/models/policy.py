# Driving policy network (Actor)
# FORBIDDEN: sim.*, control.*, logging, pathlib

import torch
import torch.nn as nn
from torch.distributions import Normal
from typing import Tuple, List
from .blocks import feature_trunk


OBSERVATION_DIM = 5   # local goal direction (3), goal distance, forward speed
ACTION_DIM = 2        # steer, throttle


class GaussianPolicy(nn.Module):
    """Gaussian policy producing (steer, throttle).

    Outputs mean and log_std for each action dimension. Actions are
    tanh-squashed to [-1, 1]; callers decide whether negative throttle
    is meaningful.
    """

    def __init__(
        self,
        state_dim: int = OBSERVATION_DIM,
        action_dim: int = ACTION_DIM,
        hidden_dims: List[int] = None,
        activation: str = "tanh",
        log_std_min: float = -20.0,
        log_std_max: float = 2.0,
    ):
        super().__init__()

        if hidden_dims is None:
            hidden_dims = [128, 128]

        self.state_dim = state_dim
        self.action_dim = action_dim
        self.log_std_min = log_std_min
        self.log_std_max = log_std_max

        self.features = feature_trunk(state_dim, hidden_dims, activation)
        self.mean_head = nn.Linear(hidden_dims[-1], action_dim)
        self.log_std_head = nn.Linear(hidden_dims[-1], action_dim)

        self._init_weights()

    def _init_weights(self):
        """Orthogonal init, small gain so an untrained policy idles near zero."""
        for m in self.modules():
            if isinstance(m, nn.Linear):
                nn.init.orthogonal_(m.weight, gain=0.01)
                nn.init.zeros_(m.bias)

    def forward(
        self,
        state: torch.Tensor,
    ) -> Tuple[torch.Tensor, torch.Tensor]:
        """Compute action distribution parameters.

        Args:
            state: Observation, shape (batch, state_dim)

        Returns:
            mean: Action mean, shape (batch, action_dim)
            log_std: Action log std, shape (batch, action_dim)
        """
        features = self.features(state)
        mean = self.mean_head(features)
        log_std = self.log_std_head(features)
        log_std = torch.clamp(log_std, self.log_std_min, self.log_std_max)
        return mean, log_std

    def sample(
        self,
        state: torch.Tensor,
        deterministic: bool = False,
    ) -> Tuple[torch.Tensor, torch.Tensor]:
        """Sample action from policy.

        Args:
            state: Observation, shape (batch, state_dim)
            deterministic: If True, return tanh(mean) (no sampling)

        Returns:
            action: Squashed action, shape (batch, action_dim)
            log_prob: Log probability of action, shape (batch,)
        """
        mean, log_std = self.forward(state)

        if deterministic:
            action = torch.tanh(mean)
            log_prob = torch.zeros(state.shape[0], device=state.device)
        else:
            dist = Normal(mean, log_std.exp())
            x = dist.rsample()
            action = torch.tanh(x)

            # Correction for tanh squashing
            log_prob = dist.log_prob(x).sum(dim=-1)
            log_prob -= torch.log(1 - action.pow(2) + 1e-6).sum(dim=-1)

        return action, log_prob
