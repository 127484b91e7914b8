"""
KML module for SkyKML.

Builds GeoDocuments from AircraftFix values, serializes them to KML
markup, and packages the markup as KMZ.
"""

from skykml.kml.archive import pack
from skykml.kml.document import GeoDocument, Placemark, StyleMode, build
from skykml.kml.serializer import serialize

__all__ = ['GeoDocument', 'Placemark', 'StyleMode', 'build', 'serialize', 'pack']
