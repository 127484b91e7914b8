"""
GeoDocument model and builder.

A GeoDocument is the in-memory form of the KML we serve: a titled
Document holding an optional shared icon style and one Folder of point
Placemarks, one per AircraftFix, in input order.

Styling is chosen per endpoint, not per aircraft:
- NONE:   no styling at all (compact KMZ payloads)
- SHARED: one document-level style referenced by every placemark
- INLINE: a style per placemark whose icon heading follows the aircraft track
"""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List, Optional

AIRCRAFT_ICON_HREF = 'http://maps.google.com/mapfiles/kml/shapes/airports.png'
AIRCRAFT_ICON_SCALE = '1.1'
SHARED_STYLE_ID = 'aircraft'

MISSING = 'N/A'
UNKNOWN_TYPE = 'Desconhecido'


class StyleMode(str, Enum):
    """How placemark icons are styled."""
    NONE = 'none'
    SHARED = 'shared'
    INLINE = 'inline'


@dataclass(frozen=True)
class IconStyle:
    href: str = AIRCRAFT_ICON_HREF
    scale: str = AIRCRAFT_ICON_SCALE
    heading: Optional[int] = None


@dataclass(frozen=True)
class Style:
    """A KML Style; `id` is set only for the shared document-level style."""
    icon: IconStyle
    id: Optional[str] = None


@dataclass(frozen=True)
class Point:
    longitude: float
    latitude: float
    altitude: float = 0


@dataclass(frozen=True)
class Placemark:
    name: str
    description: str
    point: Point
    style: Optional[Style] = None
    style_url: Optional[str] = None


@dataclass
class GeoDocument:
    title: str
    folder_title: str
    placemarks: List[Placemark] = field(default_factory=list)
    shared_style: Optional[Style] = None

    def __len__(self) -> int:
        return len(self.placemarks)


def format_measure(value: Optional[float], decimals: int, unit: str = '') -> str:
    """
    Format a reading for description text.

    >>> format_measure(250.54, 1, ' m/s')
    '250.5 m/s'
    >>> format_measure(None, 0, ' ft')
    'N/A'
    """
    if value is None:
        return MISSING
    return f'{value:.{decimals}f}{unit}'


def round_heading(heading: Optional[float]) -> int:
    """Nearest whole degree (halves round up); 0 when unknown."""
    if heading is None:
        return 0
    return int(math.floor(heading + 0.5))


def _text(value: Optional[str]) -> str:
    return value if value else MISSING


def _yes_no(value: Optional[bool]) -> str:
    if value is None:
        return MISSING
    return 'Sim' if value else 'Não'


def describe_zones(fix) -> str:
    lines = [
        f'Tipo: {fix.aircraft_type or UNKNOWN_TYPE}',
        f'Altitude: {format_measure(fix.altitude, 0, " ft")}',
        f'Velocidade: {format_measure(fix.speed, 1, " kt")}',
        f'Proa: {format_measure(fix.heading, 0, "°")}',
    ]
    return '\n'.join(lines)


def describe_states(fix) -> str:
    lines = [
        f'ICAO24: {fix.id}',
        f'País de origem: {_text(fix.origin_country)}',
        f'Altitude: {format_measure(fix.altitude, 0, " m")}',
        f'Velocidade: {format_measure(fix.speed, 1, " m/s")}',
        f'Rumo: {format_measure(fix.heading, 1, "°")}',
        f'Razão vertical: {format_measure(fix.vertical_rate, 1, " m/s")}',
        f'No solo: {_yes_no(fix.on_ground)}',
        f'Squawk: {_text(fix.squawk)}',
        f'Categoria: {_text(fix.category)}',
    ]
    return '\n'.join(lines)


_DESCRIBERS = {
    'zones': describe_zones,
    'states': describe_states,
}


def describe(fix) -> str:
    """Multi-line human description using the template of the fix's schema."""
    schema = getattr(fix.schema, 'value', fix.schema)
    return _DESCRIBERS[schema](fix)


def make_placemark(fix, style_mode: StyleMode) -> Placemark:
    """Turn one AircraftFix into a Placemark."""
    point = Point(
        longitude=fix.longitude,
        latitude=fix.latitude,
        altitude=fix.altitude if fix.altitude is not None else 0,
    )

    style = None
    style_url = None
    if style_mode == StyleMode.INLINE:
        style = Style(icon=IconStyle(heading=round_heading(fix.heading)))
    elif style_mode == StyleMode.SHARED:
        style_url = f'#{SHARED_STYLE_ID}'

    return Placemark(
        name=fix.display_name,
        description=describe(fix),
        point=point,
        style=style,
        style_url=style_url,
    )


def build(
    title: str,
    folder_title: str,
    fixes: Iterable,
    style_mode: StyleMode = StyleMode.NONE,
) -> GeoDocument:
    """
    Assemble a GeoDocument from normalized fixes.

    Fixes are consumed once, in order; nothing is sorted or deduplicated.
    """
    style_mode = StyleMode(style_mode)

    shared_style = None
    if style_mode == StyleMode.SHARED:
        shared_style = Style(icon=IconStyle(), id=SHARED_STYLE_ID)

    return GeoDocument(
        title=title,
        folder_title=folder_title,
        placemarks=[make_placemark(fix, style_mode) for fix in fixes],
        shared_style=shared_style,
    )
