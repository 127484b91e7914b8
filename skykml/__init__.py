"""
SkyKML Package.

Live aircraft telemetry rendered as KML/KMZ for globe viewers, built with
Flask and requests.

Modules:
    telemetry/   Snapshot clients (zones feed, OpenSky states) and the record normalizer
    kml/         Document builder, markup serializer, and KMZ packager
    api/         HTTP endpoints serving the rendered documents
    pipeline.py  Fetch -> normalize -> build -> serialize -> pack orchestration
    errors.py    Exception hierarchy shared by every stage
    config.py    Centralized configuration from environment variables
"""

__version__ = '1.0.0'
