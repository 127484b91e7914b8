import io
import threading
import zipfile

import pytest

from skykml.errors import TruncatedArchiveError
from skykml.kml.archive import pack
from skykml.kml.document import StyleMode, build
from skykml.kml.serializer import serialize
from skykml.telemetry.normalizer import normalize_snapshot


def test_pack_produces_single_doc_kml_entry(states_record, zones_record):
    fixes = normalize_snapshot([states_record, states_record], 'states')
    markup = serialize(build('T', 'F', fixes, StyleMode.NONE))

    archive = pack(markup)

    with zipfile.ZipFile(io.BytesIO(archive)) as zf:
        assert zf.namelist() == ['doc.kml']
        info = zf.getinfo('doc.kml')
        assert info.compress_type == zipfile.ZIP_DEFLATED
        assert zf.read('doc.kml') == markup


def test_pack_custom_entry_name():
    archive = pack(b'<kml/>', entry_name='flights.kml')
    with zipfile.ZipFile(io.BytesIO(archive)) as zf:
        assert zf.namelist() == ['flights.kml']


def test_pack_empty_document():
    markup = serialize(build('T', 'F', []))
    with zipfile.ZipFile(io.BytesIO(pack(markup))) as zf:
        assert zf.read('doc.kml') == markup


def test_pack_compresses_repetitive_markup(zones_record):
    snapshot = {str(i): zones_record for i in range(200)}
    markup = serialize(build('T', 'F', normalize_snapshot(snapshot, 'zones'), StyleMode.INLINE))

    assert len(pack(markup)) < len(markup) // 5


def test_aborted_pack_raises_instead_of_returning_partial_bytes():
    abort = threading.Event()
    abort.set()

    with pytest.raises(TruncatedArchiveError):
        pack(b'<kml/>', abort=abort)


def test_unset_abort_event_packs_normally():
    assert zipfile.is_zipfile(io.BytesIO(pack(b'<kml/>', abort=threading.Event())))
