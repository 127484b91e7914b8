"""
Record normalizer - raw provider arrays to canonical AircraftFix values.

Each provider record is decoded through its FieldLayout (see schemas.py),
never by unpacking. Malformed records raise MalformedRecordError inside
the decoders; `normalize()` absorbs it and returns None, so one bad record
can never fail a whole snapshot.
"""

import logging
import math
from dataclasses import dataclass
from typing import Any, Iterator, List, Optional, Sequence, Tuple

from skykml.errors import MalformedRecordError
from skykml.telemetry.schemas import (
    FieldLayout,
    SchemaKind,
    STATES_LAYOUT,
    ZONES_LAYOUT,
    field_value,
    get_layout,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NormalizePolicy:
    """
    Validity rules applied on top of the coordinate presence check.

    treat_zero_as_missing: drop records whose latitude/longitude (and, when
        altitude is required, altitude) is exactly 0. Loses aircraft on the
        equator or prime meridian.
    require_altitude: drop zones-feed records without an altitude.
    """
    treat_zero_as_missing: bool = False
    require_altitude: bool = False


DEFAULT_POLICY = NormalizePolicy()


@dataclass(frozen=True)
class AircraftFix:
    """
    One normalized aircraft position.

    Units follow the source schema: zones feed reports feet and knots,
    states reports meters and m/s. All optional fields may be None.
    """
    id: str
    schema: SchemaKind
    latitude: float
    longitude: float
    callsign: Optional[str] = None
    altitude: Optional[float] = None
    speed: Optional[float] = None
    heading: Optional[float] = None
    vertical_rate: Optional[float] = None
    on_ground: Optional[bool] = None
    origin_country: Optional[str] = None
    squawk: Optional[str] = None
    category: Optional[str] = None
    aircraft_type: Optional[str] = None

    @property
    def display_name(self) -> str:
        """Callsign when known, otherwise the identifier."""
        return self.callsign or self.id


def _as_number(value: Any) -> Optional[float]:
    """Numeric field or None. Booleans, strings and NaN/inf are not numbers here."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if isinstance(value, float) and not math.isfinite(value):
        return None
    return value


def _as_text(value: Any) -> Optional[str]:
    """Trimmed string or None for absent/blank values."""
    if value is None or isinstance(value, bool):
        return None
    text = str(value).strip()
    return text or None


def _require_position(
    key: str,
    lat: Optional[float],
    lon: Optional[float],
    policy: NormalizePolicy,
) -> Tuple[float, float]:
    if lat is None or lon is None:
        raise MalformedRecordError(key, 'missing latitude/longitude')
    if policy.treat_zero_as_missing and (lat == 0 or lon == 0):
        raise MalformedRecordError(key, 'zero latitude/longitude')
    return lat, lon


def _pick_id(key: str, *candidates: Optional[str]) -> str:
    for candidate in candidates:
        if candidate:
            return candidate
    raise MalformedRecordError(key, 'no identifier')


def decode_zones(
    key: str,
    raw: Sequence[Any],
    policy: NormalizePolicy = DEFAULT_POLICY,
) -> AircraftFix:
    """Decode a zones-feed record. Raises MalformedRecordError."""
    layout: FieldLayout = ZONES_LAYOUT

    lat, lon = _require_position(
        key,
        _as_number(field_value(layout, raw, 'latitude')),
        _as_number(field_value(layout, raw, 'longitude')),
        policy,
    )

    altitude = _as_number(field_value(layout, raw, 'altitude'))
    if policy.require_altitude:
        if altitude is None or (policy.treat_zero_as_missing and altitude == 0):
            raise MalformedRecordError(key, 'missing altitude')

    callsign = _as_text(field_value(layout, raw, 'callsign'))

    return AircraftFix(
        id=_pick_id(key, _as_text(key), callsign),
        schema=SchemaKind.ZONES,
        latitude=lat,
        longitude=lon,
        callsign=callsign,
        altitude=altitude,
        speed=_as_number(field_value(layout, raw, 'speed')),
        heading=_as_number(field_value(layout, raw, 'heading')),
        aircraft_type=_as_text(field_value(layout, raw, 'aircraft_type')),
    )


def decode_states(
    key: str,
    raw: Sequence[Any],
    policy: NormalizePolicy = DEFAULT_POLICY,
) -> AircraftFix:
    """Decode an OpenSky state vector. Raises MalformedRecordError."""
    layout: FieldLayout = STATES_LAYOUT

    lat, lon = _require_position(
        key,
        _as_number(field_value(layout, raw, 'latitude')),
        _as_number(field_value(layout, raw, 'longitude')),
        policy,
    )

    # Barometric first; geometric fills gaps
    altitude = _as_number(field_value(layout, raw, 'baro_altitude'))
    if altitude is None:
        altitude = _as_number(field_value(layout, raw, 'geo_altitude'))

    on_ground = field_value(layout, raw, 'on_ground')
    callsign = _as_text(field_value(layout, raw, 'callsign'))

    return AircraftFix(
        id=_pick_id(key, _as_text(field_value(layout, raw, 'icao24')), callsign, _as_text(key)),
        schema=SchemaKind.STATES,
        latitude=lat,
        longitude=lon,
        callsign=callsign,
        altitude=altitude,
        speed=_as_number(field_value(layout, raw, 'velocity')),
        heading=_as_number(field_value(layout, raw, 'true_track')),
        vertical_rate=_as_number(field_value(layout, raw, 'vertical_rate')),
        on_ground=None if on_ground is None else bool(on_ground),
        origin_country=_as_text(field_value(layout, raw, 'origin_country')),
        squawk=_as_text(field_value(layout, raw, 'squawk')),
        category=_as_text(field_value(layout, raw, 'category')),
    )


_DECODERS = {
    SchemaKind.ZONES: decode_zones,
    SchemaKind.STATES: decode_states,
}


def normalize(
    key: str,
    raw: Any,
    schema,
    policy: NormalizePolicy = DEFAULT_POLICY,
) -> Optional[AircraftFix]:
    """
    Normalize one raw record.

    Returns None if the record is not an array, is shorter than the
    schema minimum, or fails the validity policy.
    """
    layout = get_layout(schema)

    if not isinstance(raw, (list, tuple)):
        return None

    try:
        if len(raw) < layout.min_length:
            raise MalformedRecordError(key, f'{len(raw)} fields, need {layout.min_length}')
        return _DECODERS[layout.kind](key, raw, policy)
    except MalformedRecordError as e:
        logger.debug(f'Skipping {e}')
        return None


def iter_records(snapshot: Any) -> Iterator[Tuple[str, Any]]:
    """
    Yield (key, raw_record) pairs from a mapping or list snapshot.

    List entries are keyed by their position. Anything else yields nothing.
    """
    if isinstance(snapshot, dict):
        for key, value in snapshot.items():
            yield str(key), value
    elif isinstance(snapshot, (list, tuple)):
        for position, value in enumerate(snapshot):
            yield str(position), value


def normalize_snapshot(
    snapshot: Any,
    schema,
    policy: NormalizePolicy = DEFAULT_POLICY,
) -> List[AircraftFix]:
    """Normalize every record in a snapshot, preserving input order."""
    fixes: List[AircraftFix] = []
    skipped = 0

    for key, raw in iter_records(snapshot):
        fix = normalize(key, raw, schema, policy)
        if fix is None:
            skipped += 1
            continue
        fixes.append(fix)

    logger.debug(f'Normalized {len(fixes)} {SchemaKind(schema).value} records, skipped {skipped}')
    return fixes
