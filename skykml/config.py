"""
Configuration management for SkyKML.

Loads settings from environment variables (and a local .env file) with
sensible defaults. Nothing here is read at import time: `load_config()`
builds an immutable AppConfig that the application factory hands to the
fetchers and pipelines it creates.
"""

import os
from dataclasses import dataclass, field
from typing import Optional

from dotenv import load_dotenv

from skykml.kml.document import StyleMode

_TRUTHY = {'1', 'true', 'yes', 'on'}


def _get_bool(name: str, default: bool = False) -> bool:
    """Parse an environment variable into a boolean with a default."""
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in _TRUTHY


def _get_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        return float(value)
    except ValueError:
        raise ValueError(f'{name} must be a number, got {value!r}')


def _get_style_mode(name: str, default: StyleMode) -> StyleMode:
    value = os.getenv(name)
    if not value:
        return default
    try:
        return StyleMode(value.strip().lower())
    except ValueError:
        choices = ', '.join(m.value for m in StyleMode)
        raise ValueError(f'{name} must be one of {choices}, got {value!r}')


@dataclass(frozen=True)
class RegionConfig:
    """
    Geographic bounding box forwarded to the providers.

    Defaults cover Brazil (and the equator, which is why zero coordinates
    are not treated as missing unless explicitly requested).
    """
    lat_min: float = -35.0
    lat_max: float = 5.0
    lon_min: float = -75.0
    lon_max: float = -33.0

    def __post_init__(self):
        if self.lat_min >= self.lat_max:
            raise ValueError('REGION_LAT_MIN must be below REGION_LAT_MAX')
        if self.lon_min >= self.lon_max:
            raise ValueError('REGION_LON_MIN must be below REGION_LON_MAX')


@dataclass(frozen=True)
class ZonesFeedConfig:
    """FlightRadar24-style zones feed settings."""
    url: str = 'https://data-live.flightradar24.com/zones/fcgi/feed.js'
    api_key: Optional[str] = None
    api_key_header: str = 'x-api-key'
    require_altitude: bool = False


@dataclass(frozen=True)
class OpenSkyConfig:
    """OpenSky Network API settings (OAuth2 client credentials)."""
    base_url: str = 'https://opensky-network.org/api'
    token_url: str = (
        'https://auth.opensky-network.org/auth/realms/opensky-network'
        '/protocol/openid-connect/token'
    )
    client_id: Optional[str] = None
    client_secret: Optional[str] = None

    @property
    def is_authenticated(self) -> bool:
        return bool(self.client_id and self.client_secret)


@dataclass(frozen=True)
class RenderConfig:
    """How documents are styled and which records are kept."""
    kml_style_mode: StyleMode = StyleMode.INLINE
    kmz_style_mode: StyleMode = StyleMode.NONE
    treat_zero_as_missing: bool = False


@dataclass(frozen=True)
class AppConfig:
    """Main application configuration."""
    region: RegionConfig = field(default_factory=RegionConfig)
    zones: ZonesFeedConfig = field(default_factory=ZonesFeedConfig)
    opensky: OpenSkyConfig = field(default_factory=OpenSkyConfig)
    render: RenderConfig = field(default_factory=RenderConfig)
    request_timeout: float = 30.0

    # Server settings
    host: str = '0.0.0.0'
    port: int = 8080
    debug: bool = False
    log_level: str = 'INFO'


def load_config(dotenv_path: Optional[str] = None) -> AppConfig:
    """
    Load and validate all configuration.

    Raises:
        ValueError if any value is malformed.
    """
    load_dotenv(dotenv_path)

    region = RegionConfig(
        lat_min=_get_float('REGION_LAT_MIN', RegionConfig.lat_min),
        lat_max=_get_float('REGION_LAT_MAX', RegionConfig.lat_max),
        lon_min=_get_float('REGION_LON_MIN', RegionConfig.lon_min),
        lon_max=_get_float('REGION_LON_MAX', RegionConfig.lon_max),
    )

    zones = ZonesFeedConfig(
        url=os.getenv('ZONES_FEED_URL') or ZonesFeedConfig.url,
        api_key=os.getenv('ZONES_API_KEY') or None,
        api_key_header=os.getenv('ZONES_API_KEY_HEADER') or ZonesFeedConfig.api_key_header,
        require_altitude=_get_bool('ZONES_REQUIRE_ALTITUDE'),
    )

    opensky = OpenSkyConfig(
        base_url=os.getenv('OPENSKY_BASE_URL') or OpenSkyConfig.base_url,
        token_url=os.getenv('OPENSKY_TOKEN_URL') or OpenSkyConfig.token_url,
        client_id=os.getenv('OPENSKY_CLIENT_ID') or None,
        client_secret=os.getenv('OPENSKY_CLIENT_SECRET') or None,
    )

    render = RenderConfig(
        kml_style_mode=_get_style_mode('KML_STYLE_MODE', StyleMode.INLINE),
        kmz_style_mode=_get_style_mode('KMZ_STYLE_MODE', StyleMode.NONE),
        treat_zero_as_missing=_get_bool('TREAT_ZERO_AS_MISSING'),
    )

    port = os.getenv('PORT', '8080')
    if not port.isdigit():
        raise ValueError(f'PORT must be an integer, got {port!r}')

    return AppConfig(
        region=region,
        zones=zones,
        opensky=opensky,
        render=render,
        request_timeout=_get_float('REQUEST_TIMEOUT_SECONDS', 30.0),
        host=os.getenv('HOST', '0.0.0.0'),
        port=int(port),
        debug=os.getenv('FLASK_DEBUG', '0') == '1',
        log_level=os.getenv('LOG_LEVEL', 'INFO').upper(),
    )
