"""Central error types used across the application."""

from __future__ import annotations


class DecodeFailure(RuntimeError):
    """Base error for a workout file that could not be turned into an activity."""


class NoGpsDataError(DecodeFailure):
    """Raised when a file contains no records with a usable lat/lon pair."""


class MissingTimestampsError(DecodeFailure):
    """Raised when neither the session nor the records provide start/end times."""


class MalformedContainerError(DecodeFailure):
    """Raised when the binary container itself cannot be read."""


class ActivityStoreError(RuntimeError):
    """Raised when the activity store rejects or fails a request."""


__all__ = [
    "DecodeFailure",
    "NoGpsDataError",
    "MissingTimestampsError",
    "MalformedContainerError",
    "ActivityStoreError",
]
