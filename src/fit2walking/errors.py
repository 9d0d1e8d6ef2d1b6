"""Central error types used across the application."""

from typing import Optional


class Fit2WalkingError(RuntimeError):
    """Base error for failures while converting an activity file."""


class TrackInputError(Fit2WalkingError):
    """Raised when an activity file cannot be opened or decoded."""


class CensorFileError(Fit2WalkingError):
    """Raised when a censor polygon description is malformed or unreadable."""

    def __init__(
        self,
        message: str,
        line_number: Optional[int] = None,
        token: Optional[str] = None,
        source: Optional[str] = None,
    ):
        self.line_number = line_number
        self.token = token
        self.source = source
        location = source or "<censor polygon>"
        if line_number is not None:
            location = f"{location}:{line_number}"
        super().__init__(f"{location}: {message}")


class FieldEncodingError(Fit2WalkingError):
    """Raised when a record field carries a different primitive type than expected."""


class GeodesicConvergenceError(Fit2WalkingError):
    """Raised under the strict policy when Vincenty's iteration does not converge."""


class MissingExtentError(Fit2WalkingError):
    """Raised when a required attribute range cannot be computed for a track."""


__all__ = [
    "Fit2WalkingError",
    "TrackInputError",
    "CensorFileError",
    "FieldEncodingError",
    "GeodesicConvergenceError",
    "MissingExtentError",
]
