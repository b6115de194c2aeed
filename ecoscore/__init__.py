"""ecoscore - category classification and sustainability scoring engine."""

__version__ = "0.1.0"
