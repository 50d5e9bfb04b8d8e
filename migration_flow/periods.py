"""
Period resolution and labels
"""
import re
from typing import Dict, List, Optional

from . import config as C
from .models import TimePeriod, parse_date

_PERIOD_CODE = re.compile(r'^([a-z]{3})(\d{2})$', re.IGNORECASE)

UNKNOWN_LABEL = 'Unknown Period'


def _month_name(value) -> str:
    return C.MONTH_ORDER[value.month - 1]


def decode_period_code(period_id) -> Optional[Dict[str, int]]:
    """
    Decode a "{mon}{yy}" id such as "dec24"

    Returns:
        {'month': 0-11, 'year': 2024} or None when the id does not follow the pattern
    """
    if not isinstance(period_id, str):
        return None
    match = _PERIOD_CODE.match(period_id.strip())
    if not match:
        return None
    month = C.MONTH_LOOKUP.get(match.group(1).lower())
    if month is None:
        return None
    return {'month': month, 'year': C.CENTURY + int(match.group(2))}


def format_period_label(start=None, end=None, fallback_id=None) -> str:
    """
    Human-readable label for a period

    "Dec 2024" when start and end share a month, "Nov 2024 – Jan 2025" when
    they don't. Without dates the id is decoded ("dec24" -> "Dec 2024") or
    shown upper-cased.
    """
    start = parse_date(start)
    end = parse_date(end)

    if start is not None and end is not None:
        if start.year == end.year and start.month == end.month:
            return f"{_month_name(start)} {start.year}"
        return f"{_month_name(start)} {start.year} – {_month_name(end)} {end.year}"

    if start is not None:
        return f"{_month_name(start)} {start.year}"

    decoded = decode_period_code(fallback_id)
    if decoded is not None:
        return f"{C.MONTH_ORDER[decoded['month']]} {decoded['year']}"

    if fallback_id:
        return str(fallback_id).upper()
    return UNKNOWN_LABEL


def period_candidates(response) -> List[TimePeriod]:
    """
    Periods offered to the user

    The explicit catalog wins; otherwise distinct period ids from the flows
    in first-appearance order (without dates).
    """
    if response is None:
        return []
    if response.time_periods:
        return list(response.time_periods)

    seen = {}
    for flow in response.flows:
        if flow.period_id and flow.period_id not in seen:
            seen[flow.period_id] = TimePeriod(id=flow.period_id)
    return list(seen.values())


def available_periods(response) -> List[Dict[str, str]]:
    """[{id, label}] for every candidate period"""
    return [
        {'id': period.id, 'label': format_period_label(period.start, period.end, period.id)}
        for period in period_candidates(response)
    ]


def resolve_period(response, period_id=None) -> Optional[str]:
    """The requested period if it exists, otherwise the first candidate"""
    candidates = [p.id for p in period_candidates(response)]
    if not candidates:
        return None
    if period_id is not None and period_id in candidates:
        return period_id
    return candidates[0]


def period_year(period) -> Optional[int]:
    """Calendar year of a period: start date first, then the id code"""
    if isinstance(period, TimePeriod):
        if period.start is not None:
            return period.start.year
        period = period.id
    decoded = decode_period_code(period)
    return decoded['year'] if decoded else None


def period_month(period) -> Optional[str]:
    """Three-letter month of a period ("Jan".."Dec")"""
    if isinstance(period, TimePeriod):
        if period.start is not None:
            return _month_name(period.start)
        period = period.id
    decoded = decode_period_code(period)
    return C.MONTH_ORDER[decoded['month']] if decoded else None


def months_in_range(month_codes, start=None, end=None) -> List[str]:
    """
    Month codes whose month lies between start and end (inclusive)

    Codes that cannot be decoded are dropped. With no bounds every decodable
    code is kept.
    """
    start = parse_date(start)
    end = parse_date(end)
    lower = (start.year, start.month - 1) if start is not None else None
    upper = (end.year, end.month - 1) if end is not None else None

    selected = []
    for code in month_codes:
        decoded = decode_period_code(code)
        if decoded is None:
            continue
        key = (decoded['year'], decoded['month'])
        if lower is not None and key < lower:
            continue
        if upper is not None and key > upper:
            continue
        selected.append(code)
    return selected
