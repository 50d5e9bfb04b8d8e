"""
Flow pair aggregation
Turns directional flow records for one period into positioned nodes and
bidirectional connections with normalized rates.
"""
from collections import OrderedDict
from typing import Dict, Iterable, List

import networkx as nx

from . import diagnostics as D
from .codec import location_display_info
from .models import (
    ConnectionMeta, DetailedResponse, GraphConnection, GraphNode, GraphView,
    LocationMigrationData, MigrationFlow,
)
from .periods import resolve_period
from .projection import SpatialProjector
from .scaling import MagnitudeNormalizer


class FlowPairAggregator:
    """
    Builds the map graph for a single period

    Args:
        projector: SpatialProjector for node positions
        normalizer: MagnitudeNormalizer for radius and rates
        diagnostics: DiagnosticLog receiving fallback and dropped-flow warnings
    """

    def __init__(self, projector=None, normalizer=None, diagnostics=None):
        self.projector = projector if projector is not None else SpatialProjector()
        self.normalizer = normalizer if normalizer is not None else MagnitudeNormalizer()
        self.diagnostics = diagnostics if diagnostics is not None else D.DiagnosticLog()

    # ----------------------------------------
    # Flow graph
    # ----------------------------------------

    @staticmethod
    def flow_graph(flows: Iterable[MigrationFlow]) -> nx.DiGraph:
        """
        Directed graph with one edge per (origin, destination)

        Duplicate directed records are summed into the edge's count.
        """
        G = nx.DiGraph()
        for flow in flows:
            u, v = flow.origin.id, flow.destination.id
            if G.has_edge(u, v):
                G[u][v]['count'] += flow.count
            else:
                G.add_edge(u, v, count=flow.count)
        return G

    @staticmethod
    def canonical_pairs(flows: Iterable[MigrationFlow]) -> List[tuple]:
        """Unordered pairs in first-seen order, oriented as first seen"""
        pairs = OrderedDict()
        for flow in flows:
            u, v = flow.origin.id, flow.destination.id
            key = tuple(sorted((u, v)))
            if key not in pairs:
                pairs[key] = (u, v)
        return list(pairs.values())

    # ----------------------------------------
    # Nodes
    # ----------------------------------------

    def _node_totals(self, flows, period_id, known_locations) -> "OrderedDict[str, Dict]":
        totals = OrderedDict()

        if known_locations:
            for entry in known_locations:
                loc = entry.location
                stats = entry.stats_for(period_id)
                totals[loc.id] = {
                    'name': loc.name,
                    'move_in': stats.move_in,
                    'move_out': stats.move_out,
                }
            return totals

        # Aggregated responses: derive volumes from the flows themselves
        for flow in flows:
            for loc in (flow.origin, flow.destination):
                if loc.id not in totals:
                    totals[loc.id] = {'name': loc.name, 'move_in': 0, 'move_out': 0}
            totals[flow.origin.id]['move_out'] += abs(flow.count)
            totals[flow.destination.id]['move_in'] += abs(flow.count)
        return totals

    def _build_node(self, location_id, info) -> GraphNode:
        name = info['name'] or location_id
        result = self.projector.resolve(location_id, info['name'])
        if result.is_fallback:
            self.diagnostics.warn(
                D.COORDINATE_FALLBACK,
                f"No coordinates for '{name}' ({location_id}), using {result.fallback.value}",
                location_id=location_id, name=name, reason=result.fallback.value,
            )

        location_type = self.projector.unit_type(location_id, info['name'])
        label, tooltip = location_display_info(name, location_type=location_type)

        return GraphNode(
            id=location_id,
            label=label,
            tooltip=tooltip,
            x=result.x,
            y=result.y,
            radius=self.normalizer.node_radius(info['move_in'], info['move_out']),
            fallback=result.is_fallback,
        )

    # ----------------------------------------
    # Graph view
    # ----------------------------------------

    def build_graph(self, flows, period_id, known_locations=None) -> GraphView:
        """
        Nodes and paired connections for one period

        Args:
            flows: All flow records (filtered to period_id here)
            period_id: Active period
            known_locations: LocationMigrationData list; when empty, nodes are
                derived from the flows

        Returns:
            GraphView whose connections only reference existing nodes
        """
        period_flows = [f for f in flows if f.period_id == period_id]
        known_locations = list(known_locations or [])

        if not period_flows and not known_locations:
            self.diagnostics.warn(D.EMPTY_PERIOD, f"No flows for period '{period_id}'",
                                  period_id=period_id)
            return GraphView(period_id=period_id)

        totals = self._node_totals(period_flows, period_id, known_locations)
        nodes = [self._build_node(loc_id, info) for loc_id, info in totals.items()]
        node_ids = set(totals)

        G = self.flow_graph(period_flows)
        counts = [abs(c) for _, _, c in G.edges(data='count')]
        max_count = max(counts) if counts else 0

        connections = []
        for u, v in self.canonical_pairs(period_flows):
            missing = [loc for loc in (u, v) if loc not in node_ids]
            if missing:
                self.diagnostics.warn(
                    D.MISSING_ENDPOINT,
                    f"Dropping flow {u} -> {v}: no node for {', '.join(missing)}",
                    origin=u, destination=v, period_id=period_id,
                )
                continue
            connections.append(self._connection(G, u, v, max_count))

        return GraphView(nodes=nodes, connections=connections, period_id=period_id)

    def _connection(self, G, u, v, max_count) -> GraphConnection:
        to_count = G[u][v]['count']

        if u == v:
            return GraphConnection(
                from_id=u, to_id=v,
                to_rate=self.normalizer.flow_rate(to_count, max_count),
                from_rate=0.0,
                meta=ConnectionMeta(absolute_to=abs(to_count), absolute_from=0),
                is_self_loop=True,
            )

        # Reverse direction comes from its own record, never from return_count
        if G.has_edge(v, u):
            from_count = G[v][u]['count']
            from_rate = -self.normalizer.flow_rate(from_count, max_count)
        else:
            from_count = 0
            from_rate = 0.0

        return GraphConnection(
            from_id=u, to_id=v,
            to_rate=self.normalizer.flow_rate(to_count, max_count),
            from_rate=from_rate,
            meta=ConnectionMeta(absolute_to=abs(to_count), absolute_from=abs(from_count)),
        )

    def transform_response(self, response, period_id=None) -> GraphView:
        """Graph view for a parsed response, defaulting to its first period"""
        period_id = resolve_period(response, period_id)
        if period_id is None:
            self.diagnostics.warn(D.EMPTY_PERIOD, "Response has no periods")
            return GraphView()

        known: List[LocationMigrationData] = []
        if isinstance(response, DetailedResponse):
            known = response.data
        return self.build_graph(response.flows, period_id, known)


def build_graph(flows, period_id, known_locations=None,
                projector=None, diagnostics=None) -> GraphView:
    aggregator = FlowPairAggregator(projector=projector, diagnostics=diagnostics)
    return aggregator.build_graph(flows, period_id, known_locations)
