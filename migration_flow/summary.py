"""
Summary statistics over per-location migration series
"""
from typing import Dict, List

import pandas as pd

from .models import LocationMigrationData, MigrationStats

AGGREGATED_PERIOD = 'aggregated'


def series_frame(data: List[LocationMigrationData]) -> pd.DataFrame:
    """Long-format frame: one row per (location, period)"""
    rows = []
    for entry in data:
        for period_id, stats in entry.series.items():
            rows.append({
                'location_id': entry.location.id,
                'location': entry.location.name,
                'period_id': period_id,
                'move_in': stats.move_in,
                'move_out': stats.move_out,
                'net_migration': stats.net_migration,
            })
    return pd.DataFrame(rows, columns=['location_id', 'location', 'period_id',
                                       'move_in', 'move_out', 'net_migration'])


def calculate_summary_stats(data: List[LocationMigrationData]) -> Dict:
    df = series_frame(data)
    return {
        'total_move_in': float(df['move_in'].sum()),
        'total_move_out': float(df['move_out'].sum()),
        'total_net_migration': float(df['net_migration'].sum()),
        'location_count': len(data),
    }


def _top_locations(data, column, limit) -> List[Dict]:
    df = series_frame(data)
    if df.empty:
        return []

    totals = (df.groupby(['location_id', 'location'], sort=False)[column]
                .sum()
                .reset_index()
                .sort_values(column, ascending=False, kind='stable')
                .head(limit))

    return [
        {'location': row.location, 'location_id': row.location_id, f"total_{column}": float(getattr(row, column))}
        for row in totals.itertuples(index=False)
    ]


def top_destinations(data: List[LocationMigrationData], limit=10) -> List[Dict]:
    """Locations ranked by total move-in"""
    return _top_locations(data, 'move_in', limit)


def top_origins(data: List[LocationMigrationData], limit=10) -> List[Dict]:
    """Locations ranked by total move-out"""
    return _top_locations(data, 'move_out', limit)


def top_flows(flows, limit=10):
    """Flows ranked by count, largest first; the input list is left untouched"""
    return sorted(flows, key=lambda f: f.count, reverse=True)[:limit]


def filter_by_time_period(data: List[LocationMigrationData], period_ids) -> List[LocationMigrationData]:
    """Keep only the given periods; locations left with no periods are dropped"""
    wanted = set(period_ids)
    filtered = []
    for entry in data:
        series = {pid: stats for pid, stats in entry.series.items() if pid in wanted}
        if series:
            filtered.append(LocationMigrationData(location=entry.location, series=series))
    return filtered


def aggregate_across_time(data: List[LocationMigrationData]) -> List[LocationMigrationData]:
    """Collapse each location's series into a single 'aggregated' entry"""
    result = []
    for entry in data:
        stats = list(entry.series.values())
        total = MigrationStats(
            move_in=sum(s.move_in for s in stats),
            move_out=sum(s.move_out for s in stats),
            net=sum(s.net_migration for s in stats),
        )
        result.append(LocationMigrationData(location=entry.location, series={AGGREGATED_PERIOD: total}))
    return result
