"""
OpenSky Network API client.

Fetches raw state vectors for a bounding box. Records are returned
untouched; decoding is the normalizer's job (see schemas.py for the
field layout).

Authentication is optional. With client credentials configured, every
request carries an OAuth2 bearer token obtained from the OpenSky identity
provider and cached until shortly before it expires.
"""

import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

import requests

from skykml.errors import FetchError
from skykml.telemetry.schemas import SchemaKind

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BoundingBox:
    """
    Geographic bounding box for provider queries.

    OpenSky expects: lamin, lomin, lamax, lomax.
    The zones feed expects one 'latMin,latMax,lonMin,lonMax' string.
    """
    lat_min: float
    lat_max: float
    lon_min: float
    lon_max: float

    @classmethod
    def from_config(cls, region) -> 'BoundingBox':
        return cls(
            lat_min=region.lat_min,
            lat_max=region.lat_max,
            lon_min=region.lon_min,
            lon_max=region.lon_max,
        )

    def to_states_params(self) -> dict:
        """Convert to OpenSky API query parameters."""
        return {
            'lamin': self.lat_min,
            'lamax': self.lat_max,
            'lomin': self.lon_min,
            'lomax': self.lon_max,
        }

    def to_zones_param(self) -> str:
        return f'{self.lat_min:g},{self.lat_max:g},{self.lon_min:g},{self.lon_max:g}'


class ClientCredentialsToken:
    """
    OAuth2 client-credentials token source.

    Thread-safe: concurrent requests share one cached token.
    """

    # Refresh this many seconds before the provider says the token expires
    EXPIRY_MARGIN = 30

    def __init__(
        self,
        token_url: str,
        client_id: str,
        client_secret: str,
        session: Optional[requests.Session] = None,
        timeout: float = 15.0,
        clock: Callable[[], float] = time.time,
    ):
        self.token_url = token_url
        self.client_id = client_id
        self.client_secret = client_secret
        self.session = session or requests.Session()
        self.timeout = timeout
        self._clock = clock

        self._token: Optional[str] = None
        self._expires_at: float = 0
        self._lock = threading.Lock()

    def get_token(self) -> str:
        """Return a valid access token, requesting a new one if needed."""
        with self._lock:
            if self._token and self._clock() < self._expires_at:
                return self._token

            logger.debug(f'Requesting access token from {self.token_url}')
            try:
                response = self.session.post(
                    self.token_url,
                    data={
                        'grant_type': 'client_credentials',
                        'client_id': self.client_id,
                        'client_secret': self.client_secret,
                    },
                    timeout=self.timeout,
                )
                response.raise_for_status()
                payload = response.json()
                token = payload.get('access_token') if isinstance(payload, dict) else None
                if not token:
                    raise FetchError('authentication failed: no access_token in response')
                expires_in = float(payload.get('expires_in') or 300)
            except requests.exceptions.HTTPError as e:
                status = e.response.status_code if e.response is not None else None
                logger.error(f'Token request rejected: {status}')
                raise FetchError('authentication failed', status_code=status) from e
            except (requests.exceptions.RequestException, TypeError, ValueError) as e:
                logger.error(f'Token request failed: {e}')
                raise FetchError('authentication failed') from e

            self._token = token
            self._expires_at = self._clock() + max(expires_in - self.EXPIRY_MARGIN, 0)
            logger.info(f'Obtained access token valid for {expires_in}s')
            return token

    def auth_headers(self) -> Dict[str, str]:
        return {'Authorization': f'Bearer {self.get_token()}'}


class OpenSkyClient:
    """
    Snapshot fetcher for the OpenSky /states/all endpoint.

    Produces a list of raw state vector arrays (states schema).
    """

    schema = SchemaKind.STATES

    def __init__(
        self,
        bbox: BoundingBox,
        base_url: str = 'https://opensky-network.org/api',
        token: Optional[ClientCredentialsToken] = None,
        session: Optional[requests.Session] = None,
        timeout: float = 30.0,
    ):
        self.bbox = bbox
        self.base_url = base_url.rstrip('/')
        self.token = token
        self.session = session or requests.Session()
        self.timeout = timeout

        if token:
            logger.info('OpenSky client initialized with client credentials')
        else:
            logger.warning('OpenSky client running without authentication (lower rate limits)')

    @classmethod
    def from_config(cls, config, session: Optional[requests.Session] = None) -> 'OpenSkyClient':
        """Create client from an AppConfig."""
        session = session or requests.Session()
        token = None
        if config.opensky.is_authenticated:
            token = ClientCredentialsToken(
                token_url=config.opensky.token_url,
                client_id=config.opensky.client_id,
                client_secret=config.opensky.client_secret,
                session=session,
                timeout=config.request_timeout,
            )
        return cls(
            bbox=BoundingBox.from_config(config.region),
            base_url=config.opensky.base_url,
            token=token,
            session=session,
            timeout=config.request_timeout,
        )

    def fetch(self) -> List[Any]:
        """
        Fetch current state vectors inside the bounding box.

        Returns:
            List of raw state vector arrays (possibly empty).

        Raises:
            FetchError on network, HTTP, authentication, or decode errors.
        """
        url = f'{self.base_url}/states/all'
        params = self.bbox.to_states_params()
        headers = self.token.auth_headers() if self.token else {}

        logger.debug(f'Fetching states: {url} params={params}')

        try:
            response = self.session.get(url, params=params, headers=headers, timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
        except requests.exceptions.Timeout as e:
            logger.error('OpenSky API timeout')
            raise FetchError('OpenSky request timed out') from e
        except requests.exceptions.HTTPError as e:
            status = e.response.status_code if e.response is not None else None
            if status == 429:
                logger.warning('OpenSky rate limit exceeded')
            else:
                logger.error(f'OpenSky API error: {status}')
            raise FetchError(f'OpenSky returned HTTP {status}', status_code=status) from e
        except requests.exceptions.RequestException as e:
            logger.error(f'OpenSky request failed: {e}')
            raise FetchError('OpenSky request failed') from e
        except ValueError as e:
            logger.error(f'OpenSky returned invalid JSON: {e}')
            raise FetchError('OpenSky returned invalid JSON') from e

        if not isinstance(data, dict):
            raise FetchError('OpenSky response is not a JSON object')

        states = data.get('states') or []
        logger.info(f'Received {len(states)} state vectors from OpenSky')
        return states
