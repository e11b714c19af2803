from datetime import datetime

import pytz

from utils.format import (
    format_idr,
    format_local_datetime,
    format_number,
    local_input_to_utc_iso,
    parse_formatted_number,
    parse_iso,
    to_local,
    utc_iso_to_local_input,
)


def test_format_idr_groups_thousands_with_dots():
    assert format_idr(12500) == 'Rp 12.500'
    assert format_idr(1234567) == 'Rp 1.234.567'
    assert format_idr(0) == 'Rp 0'
    assert format_idr(None) == 'Rp 0'
    assert format_idr(999) == 'Rp 999'


def test_format_idr_rounds_and_keeps_sign():
    assert format_idr(1000.5) == 'Rp 1.001'
    assert format_idr(-2500) == '-Rp 2.500'
    assert format_idr('not a number') == 'Rp 0'


def test_parse_formatted_number_keeps_digits_only():
    assert parse_formatted_number('Rp 12.500') == '12500'
    assert parse_formatted_number('') == ''
    assert parse_formatted_number(None) == ''
    assert parse_formatted_number(7000) == '7000'


def test_format_number_for_inputs():
    assert format_number('12500') == 'Rp 12.500'
    assert format_number('Rp 1.000.000') == 'Rp 1.000.000'
    assert format_number('abc') == ''


def test_parse_iso_handles_z_suffix_and_offsets():
    dt = parse_iso('2024-05-01T03:30:00.000Z')
    assert dt == datetime(2024, 5, 1, 3, 30, tzinfo=pytz.utc)
    assert parse_iso('2024-05-01T10:30:00+07:00') == dt
    assert parse_iso('') is None
    assert parse_iso('yesterday') is None


def test_local_input_round_trip_through_utc():
    iso = local_input_to_utc_iso('2024-05-01T10:30', 'Asia/Jakarta')
    assert iso == '2024-05-01T03:30:00.000Z'
    assert utc_iso_to_local_input(iso, 'Asia/Jakarta') == '2024-05-01T10:30'


def test_local_input_accepts_datetime_and_empty():
    assert local_input_to_utc_iso(datetime(2024, 1, 1, 0, 15), 'Asia/Jakarta') == '2023-12-31T17:15:00.000Z'
    assert local_input_to_utc_iso('', 'Asia/Jakarta') is None
    assert local_input_to_utc_iso(None, 'Asia/Jakarta') is None


def test_to_local_and_display_format():
    local = to_local('2024-05-01T20:00:00Z', 'Asia/Jakarta')
    assert local.day == 2 and local.hour == 3
    assert format_local_datetime('2024-05-01T20:00:00Z', 'Asia/Jakarta') == '02 May 2024 03:00'
    assert format_local_datetime(None, 'Asia/Jakarta') == ''
