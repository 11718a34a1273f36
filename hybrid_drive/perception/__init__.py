# Perception module - Ranged sensing
# FORBIDDEN: torch, models.*, sim.*

from .proximity import ProximitySensor
