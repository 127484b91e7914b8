"""
Positional field layouts of the supported telemetry providers.

Both providers ship each aircraft as a flat JSON array whose *index*
carries the meaning. The tables below are the only place those indices
live; everything else reads records through `field_value()`.

Zones feed record (FlightRadar24-style, keyed by flight id):
0: latitude        - WGS84 latitude
1: longitude       - WGS84 longitude
2: altitude        - Altitude (feet)
3: speed           - Ground speed (knots)
4: callsign        - Flight callsign
5: aircraft_type   - ICAO type designator
12: heading        - Track (degrees, 0=north)

States record (OpenSky state vector):
0: icao24          - ICAO24 hex address
1: callsign        - Callsign (8 chars max, space padded)
2: origin_country  - Country of registration
3: time_position   - Unix timestamp of last position update
4: last_contact    - Unix timestamp of last message
5: longitude       - WGS84 longitude
6: latitude        - WGS84 latitude
7: baro_altitude   - Barometric altitude (meters)
8: on_ground       - Boolean
9: velocity        - Ground speed (m/s)
10: true_track     - Track angle (degrees, 0=north)
11: vertical_rate  - Vertical rate (m/s)
12: sensors        - Sensor IDs (array)
13: geo_altitude   - Geometric altitude (meters)
14: squawk         - Transponder code
15: spi            - Special position indicator
16: position_source - 0=ADS-B, 1=ASTERIX, 2=MLAT, 3=FLARM
17: category       - Emitter category
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Sequence


class SchemaKind(str, Enum):
    """Source record layout."""
    ZONES = 'zones'
    STATES = 'states'


@dataclass(frozen=True)
class FieldLayout:
    """Index table plus the minimum record length for one schema."""
    kind: SchemaKind
    indices: Dict[str, int]
    min_length: int
    altitude_unit: str
    speed_unit: str

    def index_of(self, name: str) -> int:
        return self.indices[name]


ZONES_LAYOUT = FieldLayout(
    kind=SchemaKind.ZONES,
    indices={
        'latitude': 0,
        'longitude': 1,
        'altitude': 2,
        'speed': 3,
        'callsign': 4,
        'aircraft_type': 5,
        'heading': 12,
    },
    min_length=5,
    altitude_unit='ft',
    speed_unit='kt',
)

STATES_LAYOUT = FieldLayout(
    kind=SchemaKind.STATES,
    indices={
        'icao24': 0,
        'callsign': 1,
        'origin_country': 2,
        'time_position': 3,
        'last_contact': 4,
        'longitude': 5,
        'latitude': 6,
        'baro_altitude': 7,
        'on_ground': 8,
        'velocity': 9,
        'true_track': 10,
        'vertical_rate': 11,
        'sensors': 12,
        'geo_altitude': 13,
        'squawk': 14,
        'spi': 15,
        'position_source': 16,
        'category': 17,
    },
    # Shorter records simply lack the trailing fields
    min_length=0,
    altitude_unit='m',
    speed_unit='m/s',
)

LAYOUTS = {
    SchemaKind.ZONES: ZONES_LAYOUT,
    SchemaKind.STATES: STATES_LAYOUT,
}


def get_layout(schema) -> FieldLayout:
    """Look up the layout for a SchemaKind (or its string value)."""
    return LAYOUTS[SchemaKind(schema)]


def field_value(layout: FieldLayout, raw: Sequence[Any], name: str) -> Any:
    """
    Read a named field from a raw record.

    Returns None when the index is past the end of the record.
    """
    index = layout.index_of(name)
    if index >= len(raw):
        return None
    return raw[index]
