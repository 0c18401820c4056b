"""Utility functions for the overlay engine."""

from .logging import get_logger, set_level
from .config import load_config, apply_env_overrides

__all__ = ["get_logger", "set_level", "load_config", "apply_env_overrides"]
