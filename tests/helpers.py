import json

import requests


def make_response(status_code=200, payload=None, body=None, url='https://provider.test/'):
    """Build a real requests.Response without touching the network."""
    response = requests.Response()
    response.status_code = status_code
    response.url = url
    if body is None:
        body = json.dumps(payload).encode('utf-8')
    response._content = body
    response.encoding = 'utf-8'
    return response


class FakeSession:
    """Stands in for requests.Session; replays queued responses or exceptions."""

    def __init__(self, get=None, post=None):
        self.get_results = list(get or [])
        self.post_results = list(post or [])
        self.get_calls = []
        self.post_calls = []

    @staticmethod
    def _next(results):
        result = results.pop(0)
        if isinstance(result, Exception):
            raise result
        return result

    def get(self, url, **kwargs):
        self.get_calls.append((url, kwargs))
        return self._next(self.get_results)

    def post(self, url, **kwargs):
        self.post_calls.append((url, kwargs))
        return self._next(self.post_results)


class StaticFetcher:
    """Snapshot fetcher returning a canned snapshot (or raising)."""

    def __init__(self, schema, snapshot=None, error=None):
        self.schema = schema
        self.snapshot = snapshot
        self.error = error
        self.calls = 0

    def fetch(self):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.snapshot


# OpenSky state vector used across tests
STATES_RECORD = [
    'abc123', 'TAM3456 ', 'Brazil', 0, 0, -46.5, -23.5, 1000, False,
    250.5, 90.0, 0, None, 1050, '1200', False, 0, 'A3',
]

# Zones feed record: lat, lon, alt, speed, callsign, type, ..., heading@12
ZONES_RECORD = [
    -22.81, -43.25, 35000, 450, 'GLO1234', 'B738',
    None, None, None, None, None, None, 87.6,
]


