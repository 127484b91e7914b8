"""
Zones feed client (FlightRadar24-style live feed).

The feed answers with one JSON object keyed by flight id, each value a
positional record (see schemas.py), mixed with bookkeeping entries such
as 'full_count' and 'version' that the normalizer ignores.
"""

import logging
from typing import Any, Dict, Optional

import requests

from skykml.errors import FetchError
from skykml.telemetry.opensky_client import BoundingBox
from skykml.telemetry.schemas import SchemaKind

logger = logging.getLogger(__name__)

# The feed rejects obvious non-browser clients
BROWSER_USER_AGENT = (
    'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 '
    '(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36'
)

# Sources and filters requested on every poll
FEED_FLAGS = {
    'faa': 1,
    'satellite': 1,
    'mlat': 1,
    'flarm': 1,
    'adsb': 1,
    'gnd': 1,
    'air': 1,
    'vehicles': 0,
    'estimated': 1,
    'maxage': 14400,
}


class ZonesFeedClient:
    """
    Snapshot fetcher for the zones feed.

    An optional static shared secret is sent in a configurable header.
    """

    schema = SchemaKind.ZONES

    def __init__(
        self,
        bbox: BoundingBox,
        url: str = 'https://data-live.flightradar24.com/zones/fcgi/feed.js',
        api_key: Optional[str] = None,
        api_key_header: str = 'x-api-key',
        session: Optional[requests.Session] = None,
        timeout: float = 30.0,
    ):
        self.bbox = bbox
        self.url = url
        self.session = session or requests.Session()
        self.timeout = timeout

        self.headers: Dict[str, str] = {
            'User-Agent': BROWSER_USER_AGENT,
            'Accept': 'application/json',
        }
        if api_key:
            self.headers[api_key_header] = api_key

    @classmethod
    def from_config(cls, config, session: Optional[requests.Session] = None) -> 'ZonesFeedClient':
        """Create client from an AppConfig."""
        return cls(
            bbox=BoundingBox.from_config(config.region),
            url=config.zones.url,
            api_key=config.zones.api_key,
            api_key_header=config.zones.api_key_header,
            session=session,
            timeout=config.request_timeout,
        )

    def fetch(self) -> Dict[str, Any]:
        """
        Fetch the current feed snapshot.

        Raises:
            FetchError on network, HTTP, or decode errors.
        """
        params = {'bounds': self.bbox.to_zones_param(), **FEED_FLAGS}

        logger.debug(f'Fetching zones feed: {self.url} bounds={params["bounds"]}')

        try:
            response = self.session.get(
                self.url,
                params=params,
                headers=self.headers,
                timeout=self.timeout,
            )
            response.raise_for_status()
            data = response.json()
        except requests.exceptions.Timeout as e:
            logger.error('Zones feed timeout')
            raise FetchError('zones feed request timed out') from e
        except requests.exceptions.HTTPError as e:
            status = e.response.status_code if e.response is not None else None
            logger.error(f'Zones feed error: {status}')
            raise FetchError(f'zones feed returned HTTP {status}', status_code=status) from e
        except requests.exceptions.RequestException as e:
            logger.error(f'Zones feed request failed: {e}')
            raise FetchError('zones feed request failed') from e
        except ValueError as e:
            logger.error(f'Zones feed returned invalid JSON: {e}')
            raise FetchError('zones feed returned invalid JSON') from e

        if not isinstance(data, dict):
            raise FetchError('zones feed response is not a JSON object')

        logger.info(f'Received {data.get("full_count", len(data))} entries from zones feed')
        return data
