import pytest

from skykml.config import AppConfig
from tests.helpers import STATES_RECORD, ZONES_RECORD


@pytest.fixture
def states_record():
    return list(STATES_RECORD)


@pytest.fixture
def zones_record():
    return list(ZONES_RECORD)


@pytest.fixture
def app_config():
    return AppConfig()
