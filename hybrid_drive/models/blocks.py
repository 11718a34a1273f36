# Reusable network building blocks
# FORBIDDEN: sim.*, control.*, logging, pathlib

import torch.nn as nn
from typing import List


def get_activation(name: str) -> nn.Module:
    """Get activation function by name.

    Args:
        name: Activation name ("relu", "elu", "tanh", "gelu", "silu")

    Returns:
        Activation module
    """
    activations = {
        "relu": nn.ReLU,
        "elu": nn.ELU,
        "tanh": nn.Tanh,
        "gelu": nn.GELU,
        "silu": nn.SiLU,
    }
    if name not in activations:
        raise ValueError(f"Unknown activation: {name}. Available: {list(activations.keys())}")
    return activations[name]()


def feature_trunk(input_dim: int, hidden_dims: List[int], activation: str) -> nn.Sequential:
    """Stack of Linear + activation layers, no output head."""
    layers = []
    in_dim = input_dim
    for h_dim in hidden_dims:
        layers.extend([
            nn.Linear(in_dim, h_dim),
            get_activation(activation),
        ])
        in_dim = h_dim
    return nn.Sequential(*layers)
