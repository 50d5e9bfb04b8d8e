from .models import (
    TimePeriod, LocationRef, MigrationFlow, MigrationStats, LocationMigrationData,
    ResponseMetadata, MigrationResponse, DetailedResponse, FlowOnlyResponse,
    GraphNode, GraphConnection, GraphView, MatrixView, SankeyNode, SankeyLink,
    SankeyView, parse_response,
)
from .codec import normalize, normalize_as_key, location_display_info
from .projection import project, SpatialProjector, LocationDirectory, FallbackReason
from .periods import available_periods, format_period_label
from .scaling import node_radius, flow_rate, edge_width, MagnitudeNormalizer
from .graph import FlowPairAggregator, build_graph
from .matrix import build_matrix, derive_directional_totals, SparseMonthlyMatrices
from .sankey import build_sankey_graph
from .merger import MultiPeriodMerger, MultiPeriodMergeError, merge_responses
from .cache import TTLCache
from .diagnostics import DiagnosticLog
from .pipeline import MigrationFlowEngine
from .utils import Config, get_config, set_config

__version__ = "0.1.0"
