import pytest

from skykml.telemetry.normalizer import (
    NormalizePolicy,
    iter_records,
    normalize,
    normalize_snapshot,
)
from skykml.telemetry.schemas import (
    STATES_LAYOUT,
    ZONES_LAYOUT,
    SchemaKind,
    field_value,
    get_layout,
)


@pytest.mark.parametrize('name, index', [
    ('latitude', 0),
    ('longitude', 1),
    ('altitude', 2),
    ('speed', 3),
    ('callsign', 4),
    ('aircraft_type', 5),
    ('heading', 12),
])
def test_zones_field_indices(name, index):
    assert ZONES_LAYOUT.index_of(name) == index


@pytest.mark.parametrize('name, index', [
    ('icao24', 0),
    ('callsign', 1),
    ('origin_country', 2),
    ('time_position', 3),
    ('last_contact', 4),
    ('longitude', 5),
    ('latitude', 6),
    ('baro_altitude', 7),
    ('on_ground', 8),
    ('velocity', 9),
    ('true_track', 10),
    ('vertical_rate', 11),
    ('sensors', 12),
    ('geo_altitude', 13),
    ('squawk', 14),
    ('spi', 15),
    ('position_source', 16),
    ('category', 17),
])
def test_states_field_indices(name, index):
    assert STATES_LAYOUT.index_of(name) == index


def test_layout_minimums():
    assert ZONES_LAYOUT.min_length == 5
    assert STATES_LAYOUT.min_length == 0
    assert get_layout('zones') is ZONES_LAYOUT


def test_field_value_out_of_range_is_none():
    assert field_value(ZONES_LAYOUT, [1, 2, 3, 4, 5], 'heading') is None


def test_states_record_decodes_every_field(states_record):
    fix = normalize('0', states_record, SchemaKind.STATES)

    assert fix.id == 'abc123'
    assert fix.callsign == 'TAM3456'
    assert fix.display_name == 'TAM3456'
    assert fix.origin_country == 'Brazil'
    assert fix.longitude == -46.5
    assert fix.latitude == -23.5
    assert fix.altitude == 1000
    assert fix.on_ground is False
    assert fix.speed == 250.5
    assert fix.heading == 90.0
    assert fix.vertical_rate == 0
    assert fix.squawk == '1200'
    assert fix.category == 'A3'


def test_states_altitude_falls_back_to_geometric(states_record):
    states_record[7] = None
    fix = normalize('0', states_record, SchemaKind.STATES)
    assert fix.altitude == 1050


def test_states_short_record_keeps_available_fields():
    fix = normalize('7', ['abc123', None, 'Brazil', 0, 0, -46.5, -23.5], 'states')

    assert fix.latitude == -23.5
    assert fix.altitude is None
    assert fix.speed is None
    assert fix.category is None
    assert fix.display_name == 'abc123'


def test_states_id_falls_back_to_callsign_then_key(states_record):
    states_record[0] = None
    assert normalize('3', states_record, 'states').id == 'TAM3456'

    states_record[1] = '   '
    fix = normalize('3', states_record, 'states')
    assert fix.id == '3'
    assert fix.callsign is None
    assert fix.display_name == '3'


def test_zones_record_decodes_every_field(zones_record):
    fix = normalize('2f4a1b', zones_record, SchemaKind.ZONES)

    assert fix.id == '2f4a1b'
    assert fix.latitude == -22.81
    assert fix.longitude == -43.25
    assert fix.altitude == 35000
    assert fix.speed == 450
    assert fix.callsign == 'GLO1234'
    assert fix.aircraft_type == 'B738'
    assert fix.heading == 87.6


def test_zones_record_without_heading_slot():
    fix = normalize('k', [-22.8, -43.2, 1200, 140, 'AZU4001'], 'zones')
    assert fix is not None
    assert fix.heading is None


def test_zones_missing_altitude_is_kept_by_default(zones_record):
    zones_record[2] = None
    fix = normalize('k', zones_record, 'zones')
    assert fix is not None
    assert fix.altitude is None


def test_zones_missing_altitude_rejected_when_required(zones_record):
    zones_record[2] = None
    policy = NormalizePolicy(require_altitude=True)
    assert normalize('k', zones_record, 'zones', policy) is None


@pytest.mark.parametrize('raw', [
    [-22.8, -43.2, 1200, 140],  # below minimum length
    [None, -43.2, 1200, 140, 'X'],
    [-22.8, None, 1200, 140, 'X'],
    ['-22.8', -43.2, 1200, 140, 'X'],
    [True, -43.2, 1200, 140, 'X'],
    [float('nan'), -43.2, 1200, 140, 'X'],
    {'lat': -22.8},
    None,
    'garbage',
])
def test_zones_rejections(raw):
    assert normalize('k', raw, 'zones') is None


def test_states_rejects_missing_latitude(states_record):
    states_record[6] = None
    assert normalize('0', states_record, 'states') is None


def test_zero_coordinates_kept_unless_policy_says_otherwise(states_record):
    states_record[5] = 0.0
    states_record[6] = 0.0
    assert normalize('0', states_record, 'states') is not None

    policy = NormalizePolicy(treat_zero_as_missing=True)
    assert normalize('0', states_record, 'states', policy) is None


def test_iter_records_handles_mappings_and_lists():
    assert list(iter_records({'a': [1]})) == [('a', [1])]
    assert list(iter_records([[1], [2]])) == [('0', [1]), ('1', [2])]
    assert list(iter_records(None)) == []


def test_normalize_snapshot_skips_bad_records_and_keeps_order(zones_record):
    snapshot = {
        'full_count': 3,
        'version': 4,
        'b': zones_record,
        'bad': [None, None, None, None, None],
        'a': [-10.0, -50.0, 5000, 200, 'TAM10'],
    }

    fixes = normalize_snapshot(snapshot, 'zones')

    assert [f.id for f in fixes] == ['b', 'a']


def test_normalize_snapshot_does_not_mutate_input(states_record):
    snapshot = [states_record]
    normalize_snapshot(snapshot, 'states')
    assert snapshot[0][1] == 'TAM3456 '
