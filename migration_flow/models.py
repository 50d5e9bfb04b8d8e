"""
Data model for migration responses and the derived visualization structures

Responses come in two variants: DetailedResponse carries per-location time
series in data[], FlowOnlyResponse only carries flow records. Use
parse_response() to get the right one from a JSON payload.
"""
from dataclasses import dataclass, field
from datetime import datetime, date
from typing import Dict, List, Optional, Tuple, Any

import pandas as pd

from .config import FLOW_UNITS


def parse_date(value) -> Optional[datetime]:
    """Parse an ISO 8601 string (or date) into a datetime, None if unparseable"""
    if value is None or value == '':
        return None
    if isinstance(value, datetime):
        return value.replace(tzinfo=None)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    ts = pd.to_datetime(value, errors='coerce')
    if pd.isna(ts):
        return None
    if ts.tzinfo is not None:
        # Keep the wall-clock time; the offset is dropped, not applied
        ts = ts.tz_localize(None)
    return ts.to_pydatetime()


def _format_date(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


# ============================================
# Input entities
# ============================================

@dataclass(frozen=True)
class TimePeriod:
    """One reporting bucket, e.g. id="dec24" for December 2024"""

    id: str
    start: Optional[datetime] = None
    end: Optional[datetime] = None

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "TimePeriod":
        return cls(
            id=str(d['id']),
            start=parse_date(d.get('start_date')),
            end=parse_date(d.get('end_date')),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'start_date': _format_date(self.start),
            'end_date': _format_date(self.end),
        }


@dataclass(frozen=True)
class LocationRef:
    """Province, district, subdistrict or an aggregated bucket. Identity is by id."""

    id: str
    name: str = ''
    code: Optional[str] = None
    parent_id: Optional[str] = None

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "LocationRef":
        return cls(
            id=str(d.get('id', '')),
            name=d.get('name') or '',
            code=d.get('code'),
            parent_id=d.get('parent_id'),
        )

    def to_dict(self) -> Dict[str, Any]:
        result = {'id': self.id, 'name': self.name}
        if self.code is not None:
            result['code'] = self.code
        if self.parent_id is not None:
            result['parent_id'] = self.parent_id
        return result


@dataclass(frozen=True)
class MigrationFlow:
    """
    Directional flow from origin to destination within one period

    return_count/return_rate mirror the reverse direction in some records.
    They are carried for round-tripping only and never combined with count.
    """

    origin: LocationRef
    destination: LocationRef
    period_id: str
    count: float
    rate: Optional[float] = None
    return_count: Optional[float] = None
    return_rate: Optional[float] = None

    @property
    def key(self) -> Tuple[str, str, str]:
        return (self.origin.id, self.destination.id, self.period_id)

    @property
    def is_self_loop(self) -> bool:
        return self.origin.id == self.destination.id

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "MigrationFlow":
        return cls(
            origin=LocationRef.from_dict(d['origin']),
            destination=LocationRef.from_dict(d['destination']),
            period_id=str(d.get('time_period_id', '')),
            count=d.get('flow_count') or 0,
            rate=d.get('flow_rate'),
            return_count=d.get('return_flow_count'),
            return_rate=d.get('return_flow_rate'),
        )

    def to_dict(self) -> Dict[str, Any]:
        result = {
            'origin': self.origin.to_dict(),
            'destination': self.destination.to_dict(),
            'time_period_id': self.period_id,
            'flow_count': self.count,
            'flow_rate': self.rate,
        }
        if self.return_count is not None:
            result['return_flow_count'] = self.return_count
        if self.return_rate is not None:
            result['return_flow_rate'] = self.return_rate
        return result


@dataclass(frozen=True)
class MigrationStats:
    move_in: float = 0
    move_out: float = 0
    net: Optional[float] = None

    @property
    def net_migration(self) -> float:
        return self.net if self.net is not None else self.move_in - self.move_out

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "MigrationStats":
        return cls(
            move_in=d.get('move_in') or 0,
            move_out=d.get('move_out') or 0,
            net=d.get('net_migration'),
        )

    def to_dict(self) -> Dict[str, Any]:
        result = {'move_in': self.move_in, 'move_out': self.move_out}
        if self.net is not None:
            result['net_migration'] = self.net
        return result


@dataclass
class LocationMigrationData:
    """Per-location time series keyed by period id"""

    location: LocationRef
    series: Dict[str, MigrationStats] = field(default_factory=dict)

    def stats_for(self, period_id) -> MigrationStats:
        return self.series.get(period_id, MigrationStats())

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "LocationMigrationData":
        series = {
            str(period_id): MigrationStats.from_dict(stats)
            for period_id, stats in (d.get('time_series') or {}).items()
        }
        return cls(location=LocationRef.from_dict(d['location']), series=series)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'location': self.location.to_dict(),
            'time_series': {pid: s.to_dict() for pid, s in self.series.items()},
        }


@dataclass
class ResponseMetadata:
    scale: str = 'province'
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    total_records: int = 0
    aggregation: Optional[str] = None

    @classmethod
    def from_dict(cls, d: Optional[Dict[str, Any]]) -> "ResponseMetadata":
        d = d or {}
        return cls(
            scale=d.get('scale', 'province'),
            start_date=d.get('start_date'),
            end_date=d.get('end_date'),
            total_records=d.get('total_records') or 0,
            aggregation=d.get('aggregation'),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'scale': self.scale,
            'start_date': self.start_date,
            'end_date': self.end_date,
            'total_records': self.total_records,
            'aggregation': self.aggregation,
        }


# ============================================
# Response variants
# ============================================

@dataclass
class MigrationResponse:
    """Fields shared by both response variants"""

    metadata: ResponseMetadata = field(default_factory=ResponseMetadata)
    time_periods: List[TimePeriod] = field(default_factory=list)
    flows: List[MigrationFlow] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'metadata': self.metadata.to_dict(),
            'time_periods': [p.to_dict() for p in self.time_periods],
            'data': [d.to_dict() for d in getattr(self, 'data', [])],
            'flows': [f.to_dict() for f in self.flows],
        }


@dataclass
class DetailedResponse(MigrationResponse):
    """Response with per-location time series"""

    data: List[LocationMigrationData] = field(default_factory=list)


@dataclass
class FlowOnlyResponse(MigrationResponse):
    """Aggregated response: nodes must be derived from the flows"""

    @property
    def data(self) -> List[LocationMigrationData]:
        return []


def parse_response(payload) -> MigrationResponse:
    """
    Build a typed response from the API's JSON shape

    Args:
        payload: dict with metadata, time_periods, data and flows (or a response object)

    Returns:
        DetailedResponse when data[] is non-empty, FlowOnlyResponse otherwise
    """
    if isinstance(payload, MigrationResponse):
        return payload

    metadata = ResponseMetadata.from_dict(payload.get('metadata'))
    periods = [TimePeriod.from_dict(p) for p in payload.get('time_periods') or []]
    flows = [MigrationFlow.from_dict(f) for f in payload.get('flows') or []]
    data = [LocationMigrationData.from_dict(d) for d in payload.get('data') or []]

    if data:
        return DetailedResponse(metadata=metadata, time_periods=periods, flows=flows, data=data)
    return FlowOnlyResponse(metadata=metadata, time_periods=periods, flows=flows)


# ============================================
# Derived: graph view
# ============================================

@dataclass(frozen=True)
class GraphNode:
    id: str
    label: str
    tooltip: str
    x: float
    y: float
    radius: float
    fallback: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'label': self.label,
            'tooltip': self.tooltip,
            'x': self.x,
            'y': self.y,
            'radius': self.radius,
            'fallback': self.fallback,
        }


@dataclass(frozen=True)
class ConnectionMeta:
    absolute_to: float
    absolute_from: float
    units: str = FLOW_UNITS


@dataclass(frozen=True)
class GraphConnection:
    """Bidirectional connection; the "from" side is empty for self-loops"""

    from_id: str
    to_id: str
    to_rate: float
    from_rate: float
    meta: ConnectionMeta
    is_self_loop: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            'fromId': self.from_id,
            'toId': self.to_id,
            'toRate': self.to_rate,
            'fromRate': self.from_rate,
            'selfLoop': self.is_self_loop,
            'meta': {
                'absoluteTo': self.meta.absolute_to,
                'absoluteFrom': self.meta.absolute_from,
                'units': self.meta.units,
            },
        }


@dataclass
class GraphView:
    nodes: List[GraphNode] = field(default_factory=list)
    connections: List[GraphConnection] = field(default_factory=list)
    period_id: Optional[str] = None

    def node_ids(self):
        return {node.id for node in self.nodes}

    def to_dict(self) -> Dict[str, Any]:
        return {
            'period_id': self.period_id,
            'nodes': [n.to_dict() for n in self.nodes],
            'connections': [c.to_dict() for c in self.connections],
        }


# ============================================
# Derived: matrix view
# ============================================

@dataclass
class MatrixView:
    """cells[i][j] is the flow from names[i] to names[j]"""

    names: List[str] = field(default_factory=list)
    cells: List[List[float]] = field(default_factory=list)

    def cell(self, source, destination) -> float:
        return self.cells[self.names.index(source)][self.names.index(destination)]

    def to_dict(self) -> Dict[str, Any]:
        return {'names': list(self.names), 'matrix': [list(row) for row in self.cells]}


# ============================================
# Derived: Sankey view
# ============================================

@dataclass(frozen=True)
class SankeyNode:
    id: str
    name: str
    layer: int  # 0=year, 1=source, 2=destination
    color: str
    sort_key: str = ''

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'name': self.name,
            'layer': self.layer,
            'color': self.color,
            'sortKey': self.sort_key,
        }


@dataclass(frozen=True)
class SankeyLink:
    source: str
    target: str
    value: float
    year: str
    month_breakdown: Tuple[Tuple[str, float], ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            'source': self.source,
            'target': self.target,
            'value': self.value,
            'year': self.year,
            'monthBreakdown': [{'month': m, 'count': c} for m, c in self.month_breakdown],
        }


@dataclass
class SankeyView:
    nodes: List[SankeyNode] = field(default_factory=list)
    links: List[SankeyLink] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'nodes': [n.to_dict() for n in self.nodes],
            'links': [l.to_dict() for l in self.links],
        }
