import pytest

from migration_flow.matrix import (
    build_matrix, derive_directional_totals, province_of,
    ProvinceFilter, DateTimeFilter, SubactionFilter, SparseMonthlyMatrices,
)
from migration_flow.models import MatrixView


def test_districts_collapse_to_province():
    records = [
        {'source': 'A#1', 'destination': 'B#1', 'count': 10},
        {'source': 'A#1', 'destination': 'B#2', 'count': 5},
    ]
    matrix = build_matrix(records)
    assert matrix.names == ['A', 'B']
    assert matrix.cell('A', 'B') == 15
    assert matrix.cell('B', 'A') == 0


def test_province_of():
    assert province_of('Chiang Mai#Mueang#Suthep') == 'Chiang Mai'
    assert province_of('Bangkok') == 'Bangkok'


def test_diagonal_is_kept():
    records = [('A#1', 'A#2', 7), ('A#1', 'B#1', 3)]
    matrix = build_matrix(records)
    assert matrix.cell('A', 'A') == 7


def test_first_appearance_order():
    records = [('C#1', 'A#1', 1), ('B#1', 'C#2', 1)]
    assert build_matrix(records).names == ['C', 'A', 'B']


def test_province_filter_applies_to_both_axes():
    records = [
        ('Chiang Mai#1', 'Bangkok#1', 10),
        ('Bangkok#1', 'Phuket#1', 4),
        ('Phuket#1', 'Chiang Mai#2', 2),
    ]
    matrix = build_matrix(records, [ProvinceFilter(['chiang mai', 'phuket'])])
    assert matrix.names == ['Chiang Mai', 'Phuket']
    assert matrix.cell('Phuket', 'Chiang Mai') == 2
    assert len(matrix.cells) == 2 and all(len(row) == 2 for row in matrix.cells)


def test_empty_input():
    assert build_matrix([]).names == []


def test_directional_totals_exclude_diagonal():
    matrix = MatrixView(names=['A', 'B'], cells=[[100, 10], [4, 50]])
    assert derive_directional_totals(matrix, 'moveout') == {'a': 10, 'b': 4}
    assert derive_directional_totals(matrix, 'movein') == {'a': 4, 'b': 10}
    assert derive_directional_totals(matrix, 'net') == {'a': -6, 'b': 6}


def test_directional_totals_unknown_direction():
    with pytest.raises(ValueError):
        derive_directional_totals(MatrixView(), 'sideways')


def test_subaction_filter_validation():
    with pytest.raises(ValueError):
        SubactionFilter('teleport')


@pytest.fixture
def monthly():
    return SparseMonthlyMatrices({
        'Dec19': {'A#1': {'B#1': 5}},
        'Jan20': {'A#1': {'B#1': 10, 'B#2': 5}, 'B#1': {'A#2': 3}},
        'Feb20': {'B#2': {'A#1': 1}},
    })


def test_sparse_months_and_records(monthly):
    assert monthly.available_months() == ['Dec19', 'Jan20', 'Feb20']
    assert monthly.districts() == ['A#1', 'A#2', 'B#1', 'B#2']
    assert len(monthly.records_for_month('Jan20')) == 3
    with pytest.raises(KeyError):
        monthly.records_for_month('Mar20')


def test_months_for_datetime_filter(monthly):
    filters = [DateTimeFilter('2020-01-10', '2020-02-28')]
    assert monthly.months_for_filters(filters) == ['Jan20', 'Feb20']
    assert monthly.months_for_filters([]) == ['Dec19', 'Jan20', 'Feb20']


def test_monthly_matrices_directional(monthly):
    filters = [DateTimeFilter('2020-01-01', '2020-01-31'), SubactionFilter('moveout')]
    result = monthly.monthly_matrices(filters)
    assert result == [{'totals': {'a': 15.0, 'b': 3.0}, 'month': 'Jan', 'period': 'Jan20'}]


def test_monthly_matrices_raw(monthly):
    result = monthly.monthly_matrices([DateTimeFilter('2019-12-01', '2019-12-31')])
    assert result[0]['matrix'] == {'names': ['A', 'B'], 'matrix': [[0.0, 5.0], [0.0, 0.0]]}


def test_aggregate_months(monthly):
    matrix = monthly.aggregate_months()
    assert matrix.cell('A', 'B') == 20
    assert matrix.cell('B', 'A') == 4


def test_region_filter():
    records = [
        ('Chiang Mai#1', 'Bangkok#1', 10),
        ('Phuket#1', 'Chiang Mai#2', 2),
        ('Chiang Rai#1', 'Chiang Mai#1', 6),
    ]
    matrix = build_matrix(records, [ProvinceFilter.for_region('north')])
    assert matrix.names == ['Chiang Mai', 'Chiang Rai']
    assert matrix.cell('Chiang Rai', 'Chiang Mai') == 6

    with pytest.raises(ValueError):
        ProvinceFilter.for_region('atlantis')
