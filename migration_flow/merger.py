"""
Multi-year query splitting and response merging

The backend answers one calendar year at a time, so a range spanning several
years is split into per-year sub-queries that run concurrently and are merged
back into a single response.
"""
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import replace
from datetime import date, datetime
from typing import Callable, Dict, List, Optional, Tuple

from tqdm import tqdm

from . import diagnostics as D
from .models import (
    DetailedResponse, FlowOnlyResponse, LocationMigrationData, MigrationResponse,
    MigrationStats, ResponseMetadata, parse_date, parse_response,
)


class MultiPeriodMergeError(RuntimeError):
    """Raised when any per-year sub-query fails"""

    def __init__(self, failed_years, total, errors=None):
        self.failed_years = sorted(failed_years)
        self.total = total
        self.errors = errors or {}
        super().__init__(f"Failed to load data for {len(self.failed_years)} of {total} year(s)")


# ============================================
# Query boundary
# ============================================

def normalize_date(value) -> Optional[date]:
    """date from a date, datetime or ISO 8601 string; None for empty input"""
    if value is None or value == '':
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    parsed = parse_date(value)
    if parsed is None:
        raise ValueError(f"Invalid date format, use ISO 8601: {value!r}")
    return parsed.date()


def validate_query(start_date=None, end_date=None) -> Tuple[Optional[date], Optional[date]]:
    """
    Check a date range before it is queried

    Both dates or neither must be given, and start must be before end.

    Returns:
        (start, end) as dates
    """
    start = normalize_date(start_date)
    end = normalize_date(end_date)

    if (start is None) != (end is None):
        raise ValueError("If providing dates, both start date and end date are required")
    if start is not None and start >= end:
        raise ValueError("Start date must be before end date")

    return start, end


def year_windows(start: date, end: date) -> List[Tuple[int, date, date]]:
    """One (year, Jan 1, Dec 31) window per calendar year the range touches"""
    return [(year, date(year, 1, 1), date(year, 12, 31)) for year in range(start.year, end.year + 1)]


# ============================================
# Merging
# ============================================

def _merge_stats(a: MigrationStats, b: MigrationStats) -> MigrationStats:
    net = None
    if a.net is not None and b.net is not None:
        net = a.net + b.net
    return MigrationStats(move_in=a.move_in + b.move_in, move_out=a.move_out + b.move_out, net=net)


def _merge_locations(responses, diagnostics) -> List[LocationMigrationData]:
    merged: Dict[str, LocationMigrationData] = {}
    location_sets = []

    for response in responses:
        if not response.data:
            continue
        location_sets.append(frozenset(entry.location.id for entry in response.data))

        for entry in response.data:
            loc_id = entry.location.id
            if loc_id not in merged:
                merged[loc_id] = LocationMigrationData(location=entry.location, series=dict(entry.series))
                continue
            series = merged[loc_id].series
            for period_id, stats in entry.series.items():
                series[period_id] = _merge_stats(series[period_id], stats) if period_id in series else stats

    if len(set(location_sets)) > 1:
        diagnostics.warn(
            D.LOCATION_SET_MISMATCH,
            f"Location sets differ across {len(location_sets)} responses; using their union",
            locations=len(merged),
        )

    return list(merged.values())


def _sum_optional(a, b):
    if a is None:
        return b
    if b is None:
        return a
    return a + b


def merge_responses(responses, diagnostics=None) -> MigrationResponse:
    """
    Merge responses into one

    Periods are unioned by id (first definition wins) and ordered by start
    date; flows sharing (origin, destination, period) have their counts
    summed; location series are unioned by location id.

    Args:
        responses: Responses in year order
        diagnostics: DiagnosticLog for location-set mismatches

    Returns:
        DetailedResponse if any input had location data, else FlowOnlyResponse
    """
    diagnostics = diagnostics if diagnostics is not None else D.DiagnosticLog()
    responses = [parse_response(r) for r in responses]

    periods = {}
    for response in responses:
        for period in response.time_periods:
            periods.setdefault(period.id, period)
    ordered_periods = sorted(
        periods.values(),
        key=lambda p: (p.start is None, p.start or datetime.min),
    )

    flows = {}
    for response in responses:
        for flow in response.flows:
            existing = flows.get(flow.key)
            if existing is None:
                flows[flow.key] = flow
            else:
                flows[flow.key] = replace(
                    existing,
                    count=existing.count + flow.count,
                    return_count=_sum_optional(existing.return_count, flow.return_count),
                )

    starts = [r.metadata.start_date for r in responses if parse_date(r.metadata.start_date)]
    ends = [r.metadata.end_date for r in responses if parse_date(r.metadata.end_date)]
    first = responses[0].metadata if responses else ResponseMetadata()
    metadata = ResponseMetadata(
        scale=first.scale,
        start_date=min(starts, key=parse_date) if starts else None,
        end_date=max(ends, key=parse_date) if ends else None,
        total_records=sum(r.metadata.total_records for r in responses),
        aggregation=first.aggregation,
    )

    data = _merge_locations(responses, diagnostics)
    if data:
        return DetailedResponse(metadata=metadata, time_periods=ordered_periods,
                                flows=list(flows.values()), data=data)
    return FlowOnlyResponse(metadata=metadata, time_periods=ordered_periods,
                            flows=list(flows.values()))


# ============================================
# Concurrent fan-out
# ============================================

class MultiPeriodMerger:
    """
    Splits multi-year ranges into per-year sub-queries and merges the results

    Args:
        query_fn: Callable (start: date, end: date) -> response dict or MigrationResponse
        max_workers: Thread pool size
        cache: Optional TTLCache keyed by (start, end) ISO strings
        diagnostics: DiagnosticLog
        verbose: Print progress
    """

    def __init__(self, query_fn: Callable, max_workers=4, cache=None, diagnostics=None, verbose=False):
        self.query_fn = query_fn
        self.max_workers = max_workers
        self.cache = cache
        self.diagnostics = diagnostics if diagnostics is not None else D.DiagnosticLog(verbose)
        self.verbose = verbose

    def _query(self, start: date, end: date) -> MigrationResponse:
        key = (start.isoformat(), end.isoformat())
        if self.cache is not None:
            cached = self.cache.get(key)
            if cached is not None:
                return cached

        response = parse_response(self.query_fn(start, end))
        if self.cache is not None:
            self.cache.put(key, response)
        return response

    def merge_across_years(self, start_date, end_date) -> MigrationResponse:
        """
        Query a date range, splitting it per calendar year when it spans several

        Raises:
            ValueError: invalid range
            MultiPeriodMergeError: any sub-query failed
        """
        start, end = validate_query(start_date, end_date)
        if start is None:
            return self._query_single(None, None)

        if end.year <= start.year:
            return self._query(start, end)

        windows = year_windows(start, end)
        if self.verbose:
            print(f"\nMulti-year query ({start.year}-{end.year}), querying {len(windows)} years separately...")

        results = {}
        errors = {}
        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            futures = {
                executor.submit(self._query, window_start, window_end): year
                for year, window_start, window_end in windows
            }
            for future in tqdm(as_completed(futures), total=len(futures),
                               desc="Years", disable=not self.verbose):
                year = futures[future]
                try:
                    results[year] = future.result()
                except Exception as e:
                    errors[year] = e

        if errors:
            if self.verbose:
                print(f"  Warning: {len(errors)} year queries failed")
            raise MultiPeriodMergeError(errors.keys(), len(windows), errors) from next(iter(errors.values()))

        merged = merge_responses([results[year] for year, _, _ in windows], self.diagnostics)
        if self.verbose:
            print(f"  ✓ Merged {len(merged.flows):,} flows across {len(merged.time_periods)} periods")
        return merged

    def _query_single(self, start, end) -> MigrationResponse:
        return parse_response(self.query_fn(start, end))
