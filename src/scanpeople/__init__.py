"""Anchor people figures to a 3D scan viewer.

The package projects 3D anchors to the screen, promotes 2D clicks and
lasso samples to floor positions, scales figures by depth and keeps
them in place as the viewer's camera moves.
"""

from .errors import ConfigurationError, PlacementError, ScanPeopleError, ViewerUnavailableError
from .session import Occupancy, OverlaySession, OverlaySettings

__version__ = "0.1.0"

__all__ = [
    "ConfigurationError",
    "PlacementError",
    "ScanPeopleError",
    "ViewerUnavailableError",
    "Occupancy",
    "OverlaySession",
    "OverlaySettings",
]
