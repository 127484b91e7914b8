import io
import threading
import xml.etree.ElementTree as ET
import zipfile

import pytest

from skykml.config import AppConfig, RenderConfig, ZonesFeedConfig
from skykml.errors import FetchError, TruncatedArchiveError
from skykml.kml.document import StyleMode
from skykml.pipeline import FeedPipeline, RenderOptions, build_pipelines
from skykml.telemetry.normalizer import NormalizePolicy
from skykml.telemetry.opensky_client import OpenSkyClient
from skykml.telemetry.schemas import SchemaKind
from skykml.telemetry.zones_client import ZonesFeedClient
from tests.helpers import STATES_RECORD, ZONES_RECORD, StaticFetcher

NS = {'kml': 'http://www.opengis.net/kml/2.2'}


def _pipeline(schema, snapshot, **options):
    options.setdefault('title', 'Test feed')
    return FeedPipeline(StaticFetcher(schema, snapshot), RenderOptions(**options))


def test_states_end_to_end():
    pipeline = _pipeline(SchemaKind.STATES, [STATES_RECORD])

    root = ET.fromstring(pipeline.render_kml())
    placemark = root.find('.//kml:Placemark', NS)

    assert placemark.find('kml:name', NS).text == 'TAM3456'
    assert placemark.find('kml:Point/kml:coordinates', NS).text == '-46.5,-23.5,1000'
    description = placemark.find('kml:description', NS).text
    assert 'Altitude: 1000 m' in description
    assert 'Velocidade: 250.5 m/s' in description


def test_zones_missing_altitude_end_to_end():
    snapshot = {'full_count': 1, 'x1': [-22.8, -43.2, None, None, None]}
    pipeline = _pipeline(SchemaKind.ZONES, snapshot)

    root = ET.fromstring(pipeline.render_kml())
    placemarks = root.findall('.//kml:Placemark', NS)

    assert len(placemarks) == 1
    assert placemarks[0].find('kml:name', NS).text == 'x1'
    assert placemarks[0].find('kml:Point/kml:coordinates', NS).text == '-43.2,-22.8,0'
    description = placemarks[0].find('kml:description', NS).text
    assert 'Desconhecido' in description
    assert 'N/A' in description


def test_bad_records_do_not_fail_the_batch():
    snapshot = [STATES_RECORD, ['short'], None, ['x', None, None, 0, 0, None, 1.0], STATES_RECORD]

    root = ET.fromstring(_pipeline(SchemaKind.STATES, snapshot).render_kml())

    assert len(root.findall('.//kml:Placemark', NS)) == 2


def test_titles_and_styles_follow_options():
    pipeline = _pipeline(
        SchemaKind.ZONES, {'a': ZONES_RECORD},
        title='Tráfego', folder_title='Voos', kml_style_mode=StyleMode.SHARED,
    )

    root = ET.fromstring(pipeline.render_kml(pretty=False))

    assert root.find('kml:Document/kml:name', NS).text == 'Tráfego'
    assert root.find('kml:Document/kml:Folder/kml:name', NS).text == 'Voos'
    assert root.find('.//kml:Placemark/kml:styleUrl', NS).text == '#aircraft'


def test_kmz_contains_compact_unstyled_kml():
    pipeline = _pipeline(SchemaKind.ZONES, {'a': ZONES_RECORD})

    with zipfile.ZipFile(io.BytesIO(pipeline.render_kmz())) as zf:
        assert zf.namelist() == ['doc.kml']
        markup = zf.read('doc.kml')

    assert b'\n  ' not in markup
    root = ET.fromstring(markup)
    assert root.find('.//kml:Placemark/kml:Style', NS) is None
    assert len(root.findall('.//kml:Placemark', NS)) == 1


def test_kmz_abort_raises():
    abort = threading.Event()
    abort.set()
    with pytest.raises(TruncatedArchiveError):
        _pipeline(SchemaKind.ZONES, {}).render_kmz(abort=abort)


def test_each_render_fetches_a_fresh_snapshot():
    fetcher = StaticFetcher(SchemaKind.STATES, [STATES_RECORD])
    pipeline = FeedPipeline(fetcher, RenderOptions(title='T'))

    pipeline.render_kml()
    pipeline.render_kmz()

    assert fetcher.calls == 2


def test_fetch_errors_propagate():
    fetcher = StaticFetcher(SchemaKind.STATES, error=FetchError('down'))
    with pytest.raises(FetchError):
        FeedPipeline(fetcher, RenderOptions(title='T')).render_kml()


def test_policy_is_applied():
    snapshot = {'a': [-22.8, -43.2, None, 100, 'X']}
    fetcher = StaticFetcher(SchemaKind.ZONES, snapshot)
    pipeline = FeedPipeline(fetcher, RenderOptions(title='T'), NormalizePolicy(require_altitude=True))

    assert pipeline.collect() == []


def test_build_pipelines_from_config():
    config = AppConfig(
        zones=ZonesFeedConfig(require_altitude=True),
        render=RenderConfig(kml_style_mode=StyleMode.SHARED, treat_zero_as_missing=True),
    )

    pipelines = build_pipelines(config)

    assert set(pipelines) == {'flightradar', 'opensky'}
    assert isinstance(pipelines['flightradar'].fetcher, ZonesFeedClient)
    assert isinstance(pipelines['opensky'].fetcher, OpenSkyClient)
    assert pipelines['flightradar'].schema == SchemaKind.ZONES
    assert pipelines['opensky'].schema == SchemaKind.STATES
    assert pipelines['flightradar'].policy == NormalizePolicy(True, True)
    assert pipelines['opensky'].policy == NormalizePolicy(True, False)
    assert pipelines['opensky'].options.kml_style_mode == StyleMode.SHARED
    assert pipelines['opensky'].options.kmz_style_mode == StyleMode.NONE
