"""Viewer connection: owned state and a simulated backend."""

from .context import Subscription, ViewerBackend, ViewerContext
from .simulated import SimulatedViewer

__all__ = ["Subscription", "ViewerBackend", "ViewerContext", "SimulatedViewer"]
