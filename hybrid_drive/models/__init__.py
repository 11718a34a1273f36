# Models module - Learned driving policy
# FORBIDDEN: sim.*, control.*

from .policy import GaussianPolicy
from .policy_source import TorchPolicySource, ConstantPolicySource, load_policy
