"""Exception hierarchy for the scan people overlay.

Most failures in the projection and placement engine are recovered
locally and never raised: an unprojectable point hides its figure, a
degenerate floor inversion falls back to a 2D placement and an
exhausted sampler simply returns fewer points.  The exceptions below
cover the cases that have to cross a module boundary.
"""


class ScanPeopleError(Exception):
    """Base exception for all overlay errors."""

    def __init__(self, message: str, details: dict | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ConfigurationError(ScanPeopleError):
    """Raised when configuration is invalid."""


class ViewerUnavailableError(ScanPeopleError):
    """Raised by a viewer backend that cannot connect to its scan."""


class PlacementError(ScanPeopleError):
    """Raised when a placement request is malformed."""
