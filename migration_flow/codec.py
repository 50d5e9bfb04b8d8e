"""
Location identifier normalization and display labels
"""
import re

from .config import COUNTRY_PREFIX

_SEPARATOR_RUN = re.compile(r'[\s_\-]+')


def normalize(raw) -> str:
    """
    Normalize an administrative identifier into a lookup key

    "TH-10", "th-010" and "10" all map to "10". Unknown or malformed input
    returns "" which callers treat as unmatched.

    Args:
        raw: Identifier as received (any type)

    Returns:
        Canonical key
    """
    if raw is None or isinstance(raw, bool):
        return ''
    if isinstance(raw, int):
        raw = str(raw)
    if not isinstance(raw, str):
        return ''

    key = raw.strip().lower()

    # Repeat until stable so normalize(normalize(x)) == normalize(x)
    while True:
        previous = key
        if key.startswith(COUNTRY_PREFIX):
            key = key[len(COUNTRY_PREFIX):].strip()
        if key and set(key) == {'0'}:
            # All-zero ids keep a single zero
            key = '0'
        else:
            key = key.lstrip('0').strip()
        if key == previous:
            return key


def normalize_as_key(name) -> str:
    """Lower-cased, trimmed name with separator runs collapsed to one space"""
    if not isinstance(name, str):
        return ''
    return _SEPARATOR_RUN.sub(' ', name.strip().lower()).strip()


def short_location_name(full_name) -> str:
    """
    Short label for districts and sub-districts

    "Hat Yai" -> "HY", "Loei" -> "LOE"
    """
    if not isinstance(full_name, str) or not full_name.strip():
        return ''

    words = full_name.strip().split()
    if len(words) == 1:
        return words[0][:3].upper()
    return ''.join(word[0] for word in words).upper()


def location_display_info(name, code=None, location_type='province'):
    """
    Display text and tooltip for a map node

    Args:
        name: Full location name
        code: Location code (unused for now, kept for provinces with codes)
        location_type: 'province', 'district' or 'subDistrict'

    Returns:
        Tuple of (display_text, tooltip_text)
    """
    tooltip = name or ''
    if location_type in ('district', 'subDistrict', 'subdistrict'):
        return short_location_name(tooltip), tooltip
    return tooltip, tooltip
