"""
Telemetry module for SkyKML.

Fetches raw snapshots from the providers and normalizes their positional
records into AircraftFix values.
"""

from skykml.telemetry.normalizer import (
    AircraftFix,
    NormalizePolicy,
    normalize,
    normalize_snapshot,
)
from skykml.telemetry.opensky_client import BoundingBox, ClientCredentialsToken, OpenSkyClient
from skykml.telemetry.schemas import SchemaKind
from skykml.telemetry.zones_client import ZonesFeedClient

__all__ = [
    'AircraftFix',
    'NormalizePolicy',
    'normalize',
    'normalize_snapshot',
    'BoundingBox',
    'ClientCredentialsToken',
    'OpenSkyClient',
    'SchemaKind',
    'ZonesFeedClient',
]
