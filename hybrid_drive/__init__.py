# hybrid_drive - control arbitration for a simulated vehicle

__version__ = "0.1.0"
