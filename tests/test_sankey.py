from collections import defaultdict

from migration_flow import diagnostics as D
from migration_flow.diagnostics import DiagnosticLog
from migration_flow.models import parse_response
from migration_flow.sankey import build_sankey_graph

from conftest import flow


def _response():
    return parse_response({
        'time_periods': [
            {'id': 'nov23', 'start_date': '2023-11-01', 'end_date': '2023-11-30'},
            {'id': 'jan24', 'start_date': '2024-01-01', 'end_date': '2024-01-31'},
            {'id': 'mar24', 'start_date': '2024-03-01', 'end_date': '2024-03-31'},
        ],
        'flows': [
            flow('TH-10', 'TH-50', 30, period='mar24'),
            flow('TH-10', 'TH-50', 70, period='jan24'),
            flow('TH-10', 'TH-20', 25, period='jan24'),
            flow('TH-50', 'TH-10', 12, period='jan24'),
            flow('TH-10', 'TH-10', 999, period='jan24'),
            flow('TH-10', 'TH-50', 8, period='nov23'),
        ],
    })


def test_conservation_per_year_and_source():
    view = build_sankey_graph(_response().flows, _response().time_periods)
    layer = {n.id: n.layer for n in view.nodes}

    inflow = {}
    outflow = defaultdict(float)
    for link in view.links:
        if layer[link.source] == 0:
            inflow[link.target] = link.value
        else:
            outflow[link.source] += link.value

    assert inflow
    for source_id, value in inflow.items():
        assert value == outflow[source_id]


def test_self_loops_excluded():
    view = build_sankey_graph(_response().flows, _response().time_periods)
    for link in view.links:
        assert link.source != link.target
    assert 'dest-2024-TH-10-TH-10' not in {n.id for n in view.nodes}
    assert all(link.value != 999 for link in view.links)


def test_three_layers_and_sorted_years():
    view = build_sankey_graph(_response().flows, _response().time_periods)
    years = [n.name for n in view.nodes if n.layer == 0]
    assert years == ['2023', '2024']
    assert {n.layer for n in view.nodes} == {0, 1, 2}
    assert 'source-2024-TH-10' in {n.id for n in view.nodes}
    assert 'dest-2024-TH-10-TH-50' in {n.id for n in view.nodes}


def test_month_breakdown_calendar_order():
    view = build_sankey_graph(_response().flows, _response().time_periods)
    link = next(l for l in view.links if l.target == 'dest-2024-TH-10-TH-50')
    assert link.value == 100
    assert link.month_breakdown == (('Jan', 70.0), ('Mar', 30.0))
    assert link.to_dict()['monthBreakdown'][0] == {'month': 'Jan', 'count': 70.0}


def test_undatable_period_is_reported():
    log = DiagnosticLog()
    flows = parse_response({'flows': [flow('a', 'b', 5, period='someday')]}).flows
    view = build_sankey_graph(flows, [], diagnostics=log)
    assert view.nodes == [] and view.links == []
    assert log.count(D.UNKNOWN_PERIOD) == 1


def test_period_code_without_catalog():
    flows = parse_response({'flows': [flow('a', 'b', 5, period='feb22')]}).flows
    view = build_sankey_graph(flows, [])
    assert [n.id for n in view.nodes] == ['year-2022', 'source-2022-a', 'dest-2022-a-b']


def test_offset_dates_use_local_year():
    response = parse_response({
        'time_periods': [
            {'id': 'jan25', 'start_date': '2025-01-01T00:00:00+07:00', 'end_date': '2025-01-31T23:59:59+07:00'},
        ],
        'flows': [flow('TH-10', 'TH-50', 12, period='jan25')],
    })
    view = build_sankey_graph(response.flows, response.time_periods)
    assert [n.id for n in view.nodes if n.layer == 0] == ['year-2025']
    assert view.links[-1].month_breakdown == (('Jan', 12.0),)
