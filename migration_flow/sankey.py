"""
Three-layer Sankey grouping: year -> source -> destination
"""
from typing import Dict, List

import pandas as pd

from . import config as C
from . import diagnostics as D
from .models import SankeyLink, SankeyNode, SankeyView
from .periods import period_month, period_year


def flows_to_frame(flows, periods, diagnostics=None) -> pd.DataFrame:
    """
    One row per non-self-loop flow with its year and month

    Flows whose period year cannot be determined are dropped and reported.
    """
    diagnostics = diagnostics if diagnostics is not None else D.DiagnosticLog()
    period_index = {p.id: p for p in periods or []}

    rows = []
    for flow in flows:
        if flow.is_self_loop:
            continue

        period = period_index.get(flow.period_id, flow.period_id)
        year = period_year(period)
        if year is None:
            diagnostics.warn(D.UNKNOWN_PERIOD,
                             f"Cannot determine year for period '{flow.period_id}'",
                             period_id=flow.period_id)
            continue

        rows.append({
            'year': year,
            'month': period_month(period),
            'source_id': flow.origin.id,
            'source_name': flow.origin.name or flow.origin.id,
            'dest_id': flow.destination.id,
            'dest_name': flow.destination.name or flow.destination.id,
            'count': flow.count,
        })

    return pd.DataFrame(rows, columns=['year', 'month', 'source_id', 'source_name',
                                       'dest_id', 'dest_name', 'count'])


def _month_breakdown(group: pd.DataFrame):
    by_month = group.dropna(subset=['month']).groupby('month')['count'].sum()
    ordered = sorted(by_month.items(), key=lambda item: C.MONTH_LOOKUP[item[0].lower()])
    return tuple((month, float(count)) for month, count in ordered)


def build_sankey_graph(flows, periods, diagnostics=None) -> SankeyView:
    """
    Sankey nodes and links grouped by year

    Source nodes are scoped to their year and destination nodes to their
    year and source, so every year->source link carries exactly the sum of
    that source's destination links.

    Args:
        flows: MigrationFlow list
        periods: TimePeriod catalog used to date each flow
        diagnostics: DiagnosticLog for flows with an undatable period

    Returns:
        SankeyView
    """
    df = flows_to_frame(flows, periods, diagnostics)
    if df.empty:
        return SankeyView()

    nodes: List[SankeyNode] = []
    links: List[SankeyLink] = []
    seen: Dict[str, SankeyNode] = {}

    def node(node_id, name, layer, color, sort_key):
        if node_id not in seen:
            seen[node_id] = SankeyNode(id=node_id, name=name, layer=layer,
                                       color=color, sort_key=sort_key)
            nodes.append(seen[node_id])
        return seen[node_id]

    for year in sorted(df['year'].unique()):
        year_df = df[df['year'] == year]
        year_label = str(year)
        year_node = node(f"year-{year}", year_label, 0, C.COLORS['year'], year_label)

        for source_id, source_df in year_df.groupby('source_id', sort=False):
            source_name = source_df['source_name'].iloc[0]
            source_node = node(f"source-{year}-{source_id}", source_name, 1,
                               C.COLORS['source'], f"{year}-{source_name}")

            dest_links = []
            for dest_id, dest_df in source_df.groupby('dest_id', sort=False):
                dest_name = dest_df['dest_name'].iloc[0]
                dest_node = node(f"dest-{year}-{source_id}-{dest_id}", dest_name, 2,
                                 C.COLORS['destination'], f"{year}-{dest_name}")
                dest_links.append(SankeyLink(
                    source=source_node.id,
                    target=dest_node.id,
                    value=float(dest_df['count'].sum()),
                    year=year_label,
                    month_breakdown=_month_breakdown(dest_df),
                ))

            links.append(SankeyLink(
                source=year_node.id,
                target=source_node.id,
                value=sum(link.value for link in dest_links),
                year=year_label,
            ))
            links.extend(dest_links)

    return SankeyView(nodes=nodes, links=links)
