"""
Engine facade
Wires the projector, normalizer, aggregators and merger together from a Config.
"""
from typing import Optional

from . import diagnostics as D
from .cache import TTLCache
from .diagnostics import DiagnosticLog
from .graph import FlowPairAggregator
from .matrix import build_matrix
from .merger import MultiPeriodMerger
from .models import GraphView, MatrixView, SankeyView, parse_response
from .periods import available_periods, period_candidates
from .projection import SpatialProjector
from .sankey import build_sankey_graph
from .scaling import MagnitudeNormalizer
from .utils import get_config


class MigrationFlowEngine:
    """
    Builds every view from a migration response

    Args:
        config: Config (global config when None)
        directory: LocationDirectory for coordinate lookup
        diagnostics: DiagnosticLog shared by every stage
    """

    def __init__(self, config=None, directory=None, diagnostics=None):
        self.config = config if config is not None else get_config()
        self.diagnostics = diagnostics if diagnostics is not None else DiagnosticLog(self.config.verbose)
        self.projector = SpatialProjector(directory=directory, config=self.config)
        self.normalizer = MagnitudeNormalizer.from_config(self.config)
        self.aggregator = FlowPairAggregator(self.projector, self.normalizer, self.diagnostics)
        self.cache = TTLCache(self.config.cache_ttl_seconds) if self.config.cache_enabled else None

    def periods(self, response):
        return available_periods(parse_response(response))

    def build_graph_view(self, response, period_id: Optional[str] = None) -> GraphView:
        return self.aggregator.transform_response(parse_response(response), period_id)

    def build_matrix_view(self, response, period_id=None, filters=None) -> MatrixView:
        """
        Matrix over the response's flows

        Location names are used as keys so "Province#District" names collapse
        to provinces. All periods are summed unless period_id is given; an
        unknown period_id yields an empty matrix.
        """
        response = parse_response(response)
        flows = response.flows
        if period_id is not None:
            if period_id not in [p.id for p in period_candidates(response)]:
                self.diagnostics.warn(D.UNKNOWN_PERIOD, f"Unknown period '{period_id}' for matrix view",
                                      period_id=period_id)
                return MatrixView()
            flows = [f for f in flows if f.period_id == period_id]

        records = [
            {
                'source': f.origin.name or f.origin.id,
                'destination': f.destination.name or f.destination.id,
                'count': f.count,
            }
            for f in flows
        ]
        return build_matrix(records, filters, self.config.district_separator)

    def build_sankey_view(self, response) -> SankeyView:
        response = parse_response(response)
        return build_sankey_graph(response.flows, response.time_periods, self.diagnostics)

    def merger(self, query_fn) -> MultiPeriodMerger:
        return MultiPeriodMerger(
            query_fn,
            max_workers=self.config.max_workers,
            cache=self.cache,
            diagnostics=self.diagnostics,
            verbose=self.config.verbose,
        )

    def fetch(self, query_fn, start_date, end_date):
        """Query a date range through the merger (split per year when needed)"""
        return self.merger(query_fn).merge_across_years(start_date, end_date)
