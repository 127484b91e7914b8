"""
KMZ packager.

A KMZ is a zip archive whose single entry is the KML document. The
archive is built in memory and checked after finalization, so callers
get either a complete archive or TruncatedArchiveError.
"""

import io
import logging
import threading
import zipfile
from typing import Optional

from skykml.errors import TruncatedArchiveError

logger = logging.getLogger(__name__)

DEFAULT_ENTRY_NAME = 'doc.kml'
COMPRESSION_LEVEL = 9


def pack(
    markup: bytes,
    entry_name: str = DEFAULT_ENTRY_NAME,
    abort: Optional[threading.Event] = None,
) -> bytes:
    """
    Wrap KML bytes in a single-entry deflated zip archive.

    Args:
        markup: Serialized KML document
        entry_name: Name of the entry inside the archive
        abort: Optional event; if set before the central directory is
            written, packing stops and TruncatedArchiveError is raised

    Raises:
        TruncatedArchiveError if the archive could not be finalized.
    """
    buffer = io.BytesIO()

    try:
        with zipfile.ZipFile(
            buffer,
            mode='w',
            compression=zipfile.ZIP_DEFLATED,
            compresslevel=COMPRESSION_LEVEL,
        ) as archive:
            archive.writestr(entry_name, markup)
            if abort is not None and abort.is_set():
                raise TruncatedArchiveError('packing aborted before finalization')
    except TruncatedArchiveError:
        logger.warning(f'KMZ packing of {entry_name} aborted')
        raise
    except (OSError, ValueError, zipfile.BadZipFile) as e:
        raise TruncatedArchiveError(f'failed to write archive: {e}') from e

    data = buffer.getvalue()
    _verify(data, entry_name)

    logger.debug(f'Packed {len(markup)} bytes of KML into {len(data)} byte KMZ')
    return data


def _verify(data: bytes, entry_name: str) -> None:
    """Reopen the archive and confirm it holds exactly the expected entry."""
    try:
        with zipfile.ZipFile(io.BytesIO(data)) as archive:
            names = archive.namelist()
            if names != [entry_name]:
                raise TruncatedArchiveError(f'unexpected archive entries: {names}')
            if archive.testzip() is not None:
                raise TruncatedArchiveError(f'corrupt archive entry: {entry_name}')
    except zipfile.BadZipFile as e:
        raise TruncatedArchiveError('archive central directory missing') from e
