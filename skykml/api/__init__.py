"""
API module for SkyKML.

Provides HTTP endpoints serving KML and KMZ renderings of each feed.
"""

from skykml.api.feeds import feeds_bp

__all__ = ['feeds_bp']
