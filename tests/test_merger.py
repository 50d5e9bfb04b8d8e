from datetime import date

import pytest

from migration_flow import diagnostics as D
from migration_flow.cache import TTLCache
from migration_flow.diagnostics import DiagnosticLog
from migration_flow.merger import (
    MultiPeriodMerger, MultiPeriodMergeError, merge_responses, validate_query, year_windows,
)
from migration_flow.models import DetailedResponse, FlowOnlyResponse

from conftest import flow


def year_response(year, flows, data=None):
    return {
        'metadata': {'scale': 'province', 'start_date': f'{year}-01-01', 'end_date': f'{year}-12-31',
                     'total_records': len(flows)},
        'time_periods': [
            {'id': f'jan{year % 100:02d}', 'start_date': f'{year}-01-01', 'end_date': f'{year}-01-31'},
        ],
        'data': data or [],
        'flows': flows,
    }


def test_year_windows_cover_whole_years():
    windows = year_windows(date(2022, 6, 15), date(2024, 2, 10))
    assert windows == [
        (2022, date(2022, 1, 1), date(2022, 12, 31)),
        (2023, date(2023, 1, 1), date(2023, 12, 31)),
        (2024, date(2024, 1, 1), date(2024, 12, 31)),
    ]


def test_validate_query():
    assert validate_query() == (None, None)
    assert validate_query('2023-01-01', '2023-06-30') == (date(2023, 1, 1), date(2023, 6, 30))
    with pytest.raises(ValueError):
        validate_query('2023-01-01', None)
    with pytest.raises(ValueError):
        validate_query('2023-06-30', '2023-01-01')
    with pytest.raises(ValueError):
        validate_query('not a date', '2023-01-01')


def test_disjoint_years_union_and_sum():
    r1 = year_response(2023, [flow('a', 'b', 10, period='jan23'), flow('b', 'a', 4, period='jan23')])
    r2 = year_response(2024, [flow('a', 'b', 7, period='jan24')])
    merged = merge_responses([r1, r2])

    assert [p.id for p in merged.time_periods] == ['jan23', 'jan24']
    assert sum(f.count for f in merged.flows) == 21
    assert merged.metadata.start_date == '2023-01-01'
    assert merged.metadata.end_date == '2024-12-31'
    assert merged.metadata.total_records == 3
    assert isinstance(merged, FlowOnlyResponse)


def test_shared_flow_counts_are_summed():
    r1 = year_response(2024, [flow('a', 'b', 100, period='jan24')])
    r2 = year_response(2024, [flow('a', 'b', 50, period='jan24')])
    merged = merge_responses([r1, r2])
    assert len(merged.flows) == 1
    assert merged.flows[0].count == 150
    assert len(merged.time_periods) == 1


def test_location_data_is_reconciled():
    r1 = year_response(2023, [], data=[
        {'location': {'id': 'a', 'name': 'A'}, 'time_series': {'jan23': {'move_in': 1, 'move_out': 2}}},
    ])
    r2 = year_response(2024, [], data=[
        {'location': {'id': 'a', 'name': 'A'}, 'time_series': {'jan24': {'move_in': 3, 'move_out': 4}}},
        {'location': {'id': 'b', 'name': 'B'}, 'time_series': {'jan24': {'move_in': 5, 'move_out': 6}}},
    ])
    log = DiagnosticLog()
    merged = merge_responses([r1, r2], log)

    assert isinstance(merged, DetailedResponse)
    by_id = {entry.location.id: entry for entry in merged.data}
    assert set(by_id) == {'a', 'b'}
    assert set(by_id['a'].series) == {'jan23', 'jan24'}
    assert log.count(D.LOCATION_SET_MISMATCH) == 1


def _fake_backend(calls, fail_years=()):
    def query(start, end):
        calls.append((start, end))
        if start.year in fail_years:
            raise ConnectionError(f"backend down for {start.year}")
        yy = start.year % 100
        return year_response(start.year, [flow('a', 'b', start.year - 2000, period=f'jan{yy:02d}')])
    return query


def test_merge_across_years_splits_per_year():
    calls = []
    merger = MultiPeriodMerger(_fake_backend(calls), max_workers=3)
    merged = merger.merge_across_years('2022-03-01', '2024-05-31')

    assert sorted(calls) == [
        (date(2022, 1, 1), date(2022, 12, 31)),
        (date(2023, 1, 1), date(2023, 12, 31)),
        (date(2024, 1, 1), date(2024, 12, 31)),
    ]
    assert [p.id for p in merged.time_periods] == ['jan22', 'jan23', 'jan24']
    assert sum(f.count for f in merged.flows) == 22 + 23 + 24


def test_single_year_is_one_query():
    calls = []
    MultiPeriodMerger(_fake_backend(calls)).merge_across_years('2024-01-01', '2024-06-30')
    assert calls == [(date(2024, 1, 1), date(2024, 6, 30))]


def test_any_failure_fails_the_merge():
    calls = []
    merger = MultiPeriodMerger(_fake_backend(calls, fail_years={2023}))
    with pytest.raises(MultiPeriodMergeError) as excinfo:
        merger.merge_across_years('2022-01-01', '2024-12-31')

    assert excinfo.value.failed_years == [2023]
    assert excinfo.value.total == 3
    assert str(excinfo.value) == "Failed to load data for 1 of 3 year(s)"


def test_cache_coalesces_repeated_windows():
    calls = []
    merger = MultiPeriodMerger(_fake_backend(calls), cache=TTLCache(60))
    merger.merge_across_years('2023-01-01', '2024-12-31')
    merger.merge_across_years('2023-01-01', '2024-12-31')
    assert len(calls) == 2


def test_partial_years_query_full_calendar_years():
    calls = []
    MultiPeriodMerger(_fake_backend(calls)).merge_across_years('2023-06-15', '2024-03-10')
    assert sorted(calls) == [
        (date(2023, 1, 1), date(2023, 12, 31)),
        (date(2024, 1, 1), date(2024, 12, 31)),
    ]
