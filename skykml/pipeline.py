"""
Feed pipeline - orchestrates one request from provider to KML/KMZ bytes.

Pipeline stages:
1. Fetch: pull one raw snapshot from the provider
2. Normalize: decode each positional record into an AircraftFix
3. Build: assemble the GeoDocument
4. Serialize: render KML markup
5. Pack: wrap the markup in a KMZ archive (KMZ endpoints only)

Each call recomputes everything from a fresh snapshot; the pipeline keeps
no state between requests.
"""

import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, List, Optional, Protocol

from skykml.kml.archive import DEFAULT_ENTRY_NAME, pack
from skykml.kml.document import GeoDocument, StyleMode, build
from skykml.kml.serializer import serialize
from skykml.telemetry.normalizer import AircraftFix, NormalizePolicy, normalize_snapshot
from skykml.telemetry.opensky_client import OpenSkyClient
from skykml.telemetry.schemas import SchemaKind
from skykml.telemetry.zones_client import ZonesFeedClient

logger = logging.getLogger(__name__)

KML_CONTENT_TYPE = 'application/vnd.google-earth.kml+xml'
KMZ_CONTENT_TYPE = 'application/vnd.google-earth.kmz'
KMZ_DOWNLOAD_NAME = 'flights.kmz'


class SnapshotFetcher(Protocol):
    """Anything that can produce one raw snapshot for a schema."""
    schema: SchemaKind

    def fetch(self) -> Any:
        ...


@dataclass(frozen=True)
class RenderOptions:
    title: str
    folder_title: str = 'Aeronaves'
    kml_style_mode: StyleMode = StyleMode.INLINE
    kmz_style_mode: StyleMode = StyleMode.NONE


class FeedPipeline:
    """
    One provider wired to the document stages.

    The fetcher decides the schema; options decide titles and styling.
    """

    def __init__(
        self,
        fetcher: SnapshotFetcher,
        options: RenderOptions,
        policy: Optional[NormalizePolicy] = None,
    ):
        self.fetcher = fetcher
        self.schema = SchemaKind(fetcher.schema)
        self.options = options
        self.policy = policy or NormalizePolicy()

    def collect(self) -> List[AircraftFix]:
        """
        Fetch and normalize one snapshot.

        Raises:
            FetchError from the fetcher
        """
        start_time = time.perf_counter()
        snapshot = self.fetcher.fetch()
        fixes = normalize_snapshot(snapshot, self.schema, self.policy)

        elapsed_ms = (time.perf_counter() - start_time) * 1000
        logger.info(f'{self.schema.value}: {len(fixes)} aircraft ready ({elapsed_ms:.0f} ms)')
        return fixes

    def build_document(self, style_mode: StyleMode) -> GeoDocument:
        return build(
            self.options.title,
            self.options.folder_title,
            self.collect(),
            style_mode,
        )

    def render_kml(self, pretty: bool = True) -> bytes:
        """Full KML document for the current snapshot."""
        doc = self.build_document(self.options.kml_style_mode)
        markup = serialize(doc, pretty=pretty)
        logger.info(f'Rendered KML with {len(doc)} placemarks ({len(markup)} bytes)')
        return markup

    def render_kmz(self, abort: Optional[threading.Event] = None) -> bytes:
        """KMZ archive (single doc.kml entry) for the current snapshot."""
        doc = self.build_document(self.options.kmz_style_mode)
        archive = pack(serialize(doc, pretty=False), DEFAULT_ENTRY_NAME, abort=abort)
        logger.info(f'Rendered KMZ with {len(doc)} placemarks ({len(archive)} bytes)')
        return archive


def build_pipelines(config, session=None) -> dict:
    """
    Create the provider pipelines from an AppConfig.

    Returns:
        Dict of feed name -> FeedPipeline ('flightradar', 'opensky')
    """
    render = config.render

    zones_policy = NormalizePolicy(
        treat_zero_as_missing=render.treat_zero_as_missing,
        require_altitude=config.zones.require_altitude,
    )
    states_policy = NormalizePolicy(treat_zero_as_missing=render.treat_zero_as_missing)

    return {
        'flightradar': FeedPipeline(
            ZonesFeedClient.from_config(config, session=session),
            RenderOptions(
                title='FlightRadar24 - Tráfego Aéreo no Brasil',
                kml_style_mode=render.kml_style_mode,
                kmz_style_mode=render.kmz_style_mode,
            ),
            zones_policy,
        ),
        'opensky': FeedPipeline(
            OpenSkyClient.from_config(config, session=session),
            RenderOptions(
                title='OpenSky - Tráfego Aéreo no Brasil',
                kml_style_mode=render.kml_style_mode,
                kmz_style_mode=render.kmz_style_mode,
            ),
            states_policy,
        ),
    }
