import pytest

from migration_flow.models import parse_response


def flow(origin, destination, count, period='dec24', origin_name=None, destination_name=None, **extra):
    record = {
        'origin': {'id': origin, 'name': origin_name or origin},
        'destination': {'id': destination, 'name': destination_name or destination},
        'time_period_id': period,
        'flow_count': count,
        'flow_rate': None,
    }
    record.update(extra)
    return record


@pytest.fixture
def bangkok_chiangmai_payload():
    return {
        'metadata': {'scale': 'province', 'start_date': '2024-12-01', 'end_date': '2024-12-31',
                     'total_records': 2},
        'time_periods': [
            {'id': 'dec24', 'start_date': '2024-12-01T00:00:00', 'end_date': '2024-12-31T00:00:00'},
        ],
        'data': [
            {'location': {'id': 'TH-10', 'name': 'Bangkok'},
             'time_series': {'dec24': {'move_in': 5317, 'move_out': 21433}}},
            {'location': {'id': 'TH-50', 'name': 'Chiang Mai'},
             'time_series': {'dec24': {'move_in': 21433, 'move_out': 5317}}},
        ],
        'flows': [
            flow('TH-10', 'TH-50', 21433, origin_name='Bangkok', destination_name='Chiang Mai'),
            flow('TH-50', 'TH-10', 5317, origin_name='Chiang Mai', destination_name='Bangkok'),
        ],
    }


@pytest.fixture
def bangkok_chiangmai(bangkok_chiangmai_payload):
    return parse_response(bangkok_chiangmai_payload)


@pytest.fixture
def flow_only_payload():
    return {
        'metadata': {'scale': 'province', 'total_records': 3},
        'time_periods': [
            {'id': 'nov24', 'start_date': '2024-11-01', 'end_date': '2024-11-30'},
            {'id': 'dec24', 'start_date': '2024-12-01', 'end_date': '2024-12-31'},
        ],
        'data': [],
        'flows': [
            flow('TH-10', 'TH-50', 100, period='nov24', origin_name='Bangkok', destination_name='Chiang Mai'),
            flow('TH-10', 'TH-20', 40, period='nov24', origin_name='Bangkok', destination_name='Chon Buri'),
            flow('TH-50', 'TH-10', 60, period='dec24', origin_name='Chiang Mai', destination_name='Bangkok'),
        ],
    }
