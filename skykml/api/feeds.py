"""
Feed endpoints.

Provides endpoints for:
- GET /<feed>.kml - KML document for the current snapshot
- GET /<feed>.kmz - Same document packaged as a KMZ download

Feeds: 'flightradar' (zones feed) and 'opensky' (state vectors).
"""

import logging

from flask import Blueprint, Response, abort, current_app, jsonify, request

from skykml.errors import FetchError, SkyKMLError
from skykml.pipeline import KML_CONTENT_TYPE, KMZ_CONTENT_TYPE, KMZ_DOWNLOAD_NAME

logger = logging.getLogger(__name__)

feeds_bp = Blueprint('feeds', __name__)


def _get_pipeline(feed: str):
    pipelines = current_app.config.get('FEED_PIPELINES') or {}
    pipeline = pipelines.get(feed)
    if pipeline is None:
        abort(404)
    return pipeline


def _failure(kind: str, feed: str, error: Exception) -> Response:
    """Generic failure response; details only go to the log."""
    status = 502 if isinstance(error, FetchError) else 500
    logger.error(f'Failed to render {feed}.{kind}: {error}')
    return Response(
        f'Erro ao gerar {kind.upper()}',
        status=status,
        mimetype='text/plain',
    )


@feeds_bp.route('/<feed>.kml', methods=['GET'])
def get_kml(feed: str):
    """
    Render the feed as KML.

    Query parameters:
    - pretty: boolean, indent the markup (default true)
    """
    pipeline = _get_pipeline(feed)
    pretty = request.args.get('pretty', 'true').lower() != 'false'

    try:
        body = pipeline.render_kml(pretty=pretty)
    except SkyKMLError as e:
        return _failure('kml', feed, e)

    return Response(body, status=200, content_type=KML_CONTENT_TYPE)


@feeds_bp.route('/<feed>.kmz', methods=['GET'])
def get_kmz(feed: str):
    """Render the feed as a KMZ download."""
    pipeline = _get_pipeline(feed)

    try:
        body = pipeline.render_kmz()
    except SkyKMLError as e:
        return _failure('kmz', feed, e)

    response = Response(body, status=200, content_type=KMZ_CONTENT_TYPE)
    response.headers['Content-Disposition'] = f'attachment; filename="{KMZ_DOWNLOAD_NAME}"'
    return response


@feeds_bp.route('/feeds', methods=['GET'])
def list_feeds():
    """List available feeds and their document URLs."""
    pipelines = current_app.config.get('FEED_PIPELINES') or {}
    return jsonify({
        'feeds': [
            {
                'name': name,
                'schema': pipeline.schema.value,
                'kml': f'/{name}.kml',
                'kmz': f'/{name}.kmz',
            }
            for name, pipeline in pipelines.items()
        ],
    })
