from datetime import datetime

from migration_flow.models import TimePeriod, parse_response
from migration_flow.periods import (
    available_periods, format_period_label, decode_period_code, resolve_period,
    period_year, period_month, months_in_range,
)


def test_label_same_month():
    assert format_period_label('2024-12-01', '2024-12-31', 'dec24') == 'Dec 2024'


def test_label_span_uses_en_dash():
    assert format_period_label('2024-11-01', '2025-01-31') == 'Nov 2024 – Jan 2025'


def test_label_decodes_code():
    assert format_period_label(None, None, 'dec24') == 'Dec 2024'
    assert format_period_label(None, None, 'JAN20') == 'Jan 2020'


def test_label_falls_back_to_upper_id():
    assert format_period_label(None, None, 'q3-2024') == 'Q3-2024'
    assert format_period_label(None, None, 'xyz24') == 'XYZ24'
    assert format_period_label() == 'Unknown Period'


def test_decode_period_code():
    assert decode_period_code('mar21') == {'month': 2, 'year': 2021}
    assert decode_period_code('march21') is None


def test_available_periods_prefers_catalog(bangkok_chiangmai):
    assert available_periods(bangkok_chiangmai) == [{'id': 'dec24', 'label': 'Dec 2024'}]


def test_available_periods_from_flows_in_first_appearance_order():
    response = parse_response({
        'time_periods': [],
        'flows': [
            {'origin': {'id': 'a'}, 'destination': {'id': 'b'}, 'time_period_id': 'feb24', 'flow_count': 1},
            {'origin': {'id': 'a'}, 'destination': {'id': 'b'}, 'time_period_id': 'jan24', 'flow_count': 1},
            {'origin': {'id': 'b'}, 'destination': {'id': 'a'}, 'time_period_id': 'feb24', 'flow_count': 1},
        ],
    })
    assert available_periods(response) == [
        {'id': 'feb24', 'label': 'Feb 2024'},
        {'id': 'jan24', 'label': 'Jan 2024'},
    ]


def test_resolve_period(flow_only_payload):
    response = parse_response(flow_only_payload)
    assert resolve_period(response) == 'nov24'
    assert resolve_period(response, 'dec24') == 'dec24'
    assert resolve_period(response, 'missing') == 'nov24'
    assert resolve_period(parse_response({})) is None


def test_period_year_and_month():
    dated = TimePeriod('p1', start=datetime(2023, 7, 1), end=datetime(2023, 7, 31))
    assert period_year(dated) == 2023
    assert period_month(dated) == 'Jul'
    assert period_year(TimePeriod('aug22')) == 2022
    assert period_month('aug22') == 'Aug'
    assert period_year('unknown') is None


def test_months_in_range():
    codes = ['Nov19', 'Dec19', 'Jan20', 'Feb20', 'Mar20', 'bad']
    assert months_in_range(codes, '2019-12-15', '2020-02-01') == ['Dec19', 'Jan20', 'Feb20']
    assert months_in_range(codes) == ['Nov19', 'Dec19', 'Jan20', 'Feb20', 'Mar20']


def test_offset_dates_keep_local_calendar():
    response = parse_response({'time_periods': [
        {'id': 'jan25', 'start_date': '2025-01-01T00:00:00+07:00', 'end_date': '2025-01-31T23:59:59+07:00'},
    ]})
    assert available_periods(response) == [{'id': 'jan25', 'label': 'Jan 2025'}]

    period = response.time_periods[0]
    assert period.start == datetime(2025, 1, 1)
    assert period_year(period) == 2025
    assert period_month(period) == 'Jan'
