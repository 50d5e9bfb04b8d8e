"""
Province migration matrices
Collapses district-level records ("Province#District") into province-by-province
matrices and derives directional totals from them.
"""
import json
from dataclasses import dataclass, field
from typing import Dict, List, Optional

import numpy as np
import pandas as pd

from . import config as C
from .codec import normalize_as_key
from .models import MatrixView
from .periods import months_in_range
from .regions import provinces_in_region, region_query


# ============================================
# Filters
# ============================================

@dataclass
class ProvinceFilter:
    """Allow-list of province name keys (compared with normalize_as_key)"""
    province_ids: List[str] = field(default_factory=list)
    type: str = 'province'

    @classmethod
    def for_region(cls, query) -> "ProvinceFilter":
        """Every province in a region ("northeast", "southern", ...)"""
        region = region_query(query)
        if region is None:
            raise ValueError(f"Unknown region: {query}")
        return cls(provinces_in_region(region))


@dataclass
class DateTimeFilter:
    start_date: str
    end_date: str
    type: str = 'datetime'


@dataclass
class SubactionFilter:
    subaction: str = 'raw'
    type: str = 'subaction'

    def __post_init__(self):
        if self.subaction not in C.SUBACTIONS:
            raise ValueError(f"Unknown subaction: {self.subaction}")


def _find_filter(filters, filter_type):
    for f in filters or []:
        if getattr(f, 'type', None) == filter_type:
            return f
    return None


# ============================================
# Matrix construction
# ============================================

def records_to_frame(records) -> pd.DataFrame:
    """DataFrame with source, destination, count from dicts or (src, dst, count) tuples"""
    rows = []
    for record in records or []:
        if isinstance(record, dict):
            rows.append((record['source'], record['destination'], record.get('count') or 0))
        else:
            source, destination, count = record
            rows.append((source, destination, count or 0))
    return pd.DataFrame(rows, columns=['source', 'destination', 'count'])


def province_of(key, separator=C.DISTRICT_SEPARATOR) -> str:
    """Text before the first separator, or the whole key"""
    return str(key).split(separator, 1)[0]


def build_matrix(records, filters=None, separator=C.DISTRICT_SEPARATOR) -> MatrixView:
    """
    Province-by-province matrix from district records

    Args:
        records: Iterable of {source, destination, count}
        filters: Active filters; a ProvinceFilter restricts both axes
        separator: District key separator

    Returns:
        Square MatrixView in first-appearance order, diagonal kept
    """
    df = records_to_frame(records)
    if df.empty:
        return MatrixView()

    df['source_province'] = df['source'].map(lambda v: province_of(v, separator))
    df['destination_province'] = df['destination'].map(lambda v: province_of(v, separator))

    # First appearance, reading source then destination of each record
    order = pd.unique(df[['source_province', 'destination_province']].to_numpy().ravel())
    names = [str(n) for n in order]

    province_filter = _find_filter(filters, 'province')
    if province_filter is not None:
        allowed = set(province_filter.province_ids)
        names = [n for n in names if normalize_as_key(n) in allowed]

    if not names:
        return MatrixView()

    totals = df.groupby(['source_province', 'destination_province'])['count'].sum()
    matrix = totals.unstack(fill_value=0).reindex(index=names, columns=names, fill_value=0)

    return MatrixView(names=names, cells=matrix.to_numpy(dtype=float).tolist())


def derive_directional_totals(matrix: MatrixView, direction: str) -> Dict[str, float]:
    """
    Per-province totals excluding the diagonal

    Args:
        matrix: Square MatrixView
        direction: 'moveout' (row sums), 'movein' (column sums) or 'net' (movein - moveout)

    Returns:
        {normalized province key: total}
    """
    if direction not in ('movein', 'moveout', 'net'):
        raise ValueError(f"Unknown direction: {direction}")
    if not matrix.names:
        return {}

    values = np.array(matrix.cells, dtype=float)
    np.fill_diagonal(values, 0)

    outgoing = values.sum(axis=1)
    incoming = values.sum(axis=0)

    if direction == 'moveout':
        totals = outgoing
    elif direction == 'movein':
        totals = incoming
    else:
        totals = incoming - outgoing

    result = {}
    for name, total in zip(matrix.names, totals):
        key = normalize_as_key(name)
        result[key] = result.get(key, 0.0) + float(total)
    return result


# ============================================
# Sparse monthly input
# ============================================

class SparseMonthlyMatrices:
    """
    Monthly sparse district matrices: {month_code: {source: {destination: count}}}

    Month codes follow the "{Mon}{YY}" form ("Jan20").
    """

    def __init__(self, data: Dict[str, Dict[str, Dict[str, float]]], separator=C.DISTRICT_SEPARATOR):
        self.data = data or {}
        self.separator = separator

    @classmethod
    def from_json(cls, path, separator=C.DISTRICT_SEPARATOR) -> "SparseMonthlyMatrices":
        with open(path, 'r', encoding='utf-8') as f:
            return cls(json.load(f), separator=separator)

    def available_months(self) -> List[str]:
        return list(self.data.keys())

    def districts(self) -> List[str]:
        """Every district key seen in any month, sorted"""
        seen = set()
        for month_data in self.data.values():
            for source, destinations in month_data.items():
                seen.add(source)
                seen.update(destinations.keys())
        return sorted(seen)

    def records_for_month(self, month) -> List[Dict]:
        if month not in self.data:
            raise KeyError(f"No data available for month: {month}")
        return [
            {'source': source, 'destination': destination, 'count': count}
            for source, destinations in self.data[month].items()
            for destination, count in destinations.items()
        ]

    def months_for_filters(self, filters=None) -> List[str]:
        """Months inside the datetime filter's range, or all months without one"""
        months = self.available_months()
        datetime_filter = _find_filter(filters, 'datetime')
        if datetime_filter is None:
            return months
        return months_in_range(months, datetime_filter.start_date, datetime_filter.end_date)

    def matrix_for_month(self, month, filters=None) -> MatrixView:
        return build_matrix(self.records_for_month(month), filters, self.separator)

    def monthly_matrices(self, filters=None) -> List[Dict]:
        """
        Per-month output for the selected subaction

        'raw' yields the matrix itself; movein, moveout and net yield
        directional totals. Each entry carries the short month name.
        """
        subaction_filter = _find_filter(filters, 'subaction')
        subaction = subaction_filter.subaction if subaction_filter else 'raw'

        results = []
        for month in self.months_for_filters(filters):
            matrix = self.matrix_for_month(month, filters)
            if subaction == 'raw':
                entry = {'matrix': matrix.to_dict()}
            else:
                entry = {'totals': derive_directional_totals(matrix, subaction)}
            entry['month'] = month[:3]
            entry['period'] = month
            results.append(entry)
        return results

    def aggregate_months(self, months: Optional[List[str]] = None, filters=None) -> MatrixView:
        """Single matrix summed over the given months (all months by default)"""
        if months is None:
            months = self.months_for_filters(filters)
        records = []
        for month in months:
            records.extend(self.records_for_month(month))
        return build_matrix(records, filters, self.separator)
