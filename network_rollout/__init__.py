"""Bootstrap and rollout decision engine for a two-tier cluster network datapath."""

__version__ = "0.1.0"
