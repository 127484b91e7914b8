"""
Exception hierarchy for SkyKML.

Per-record problems are absorbed by the normalizer; everything else
surfaces to the HTTP layer, which turns it into one generic failure
response.
"""


class SkyKMLError(Exception):
    """Base class for all SkyKML errors."""


class MalformedRecordError(SkyKMLError):
    """A raw record is too short or lacks required coordinates."""

    def __init__(self, key: str, reason: str):
        super().__init__(f'record {key!r}: {reason}')
        self.key = key
        self.reason = reason


class FetchError(SkyKMLError):
    """The telemetry provider could not deliver a snapshot."""

    def __init__(self, message: str, status_code=None):
        super().__init__(message)
        self.status_code = status_code


class SerializationError(SkyKMLError):
    """A GeoDocument violated a structural invariant during serialization."""


class TruncatedArchiveError(SkyKMLError):
    """KMZ finalization did not complete."""
