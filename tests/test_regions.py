from migration_flow.regions import (
    PROVINCES, PROVINCE_REGION_MAPPING, REGIONS, HEX_LATTICE,
    province_region, provinces_in_region, region_query,
)
from migration_flow.codec import normalize, normalize_as_key


def test_province_table_complete():
    assert len(PROVINCES) == 77
    assert len({normalize(pid) for pid, _, _, _ in PROVINCES}) == 77


def test_every_province_has_a_region():
    for _, name, _, _ in PROVINCES:
        assert province_region(name) in REGIONS, name


def test_province_region_tolerates_spacing():
    assert province_region('ChiangMai') == 'northern'
    assert province_region('chiang_mai') == 'northern'
    assert province_region('Atlantis') is None


def test_region_query_aliases():
    assert region_query('Northeast') == 'northeastern'
    assert region_query('southern') == 'southern'
    assert region_query('middle earth') is None


def test_provinces_in_region():
    assert 'bangkok' in provinces_in_region('central')
    assert sum(len(provinces_in_region(r)) for r in REGIONS) == len(PROVINCE_REGION_MAPPING)


def test_hex_lattice_expansion():
    assert {'row': 1, 'col': 9, 'region': 'north'} in HEX_LATTICE
    row2 = [c['col'] for c in HEX_LATTICE if c['row'] == 2]
    assert row2 == list(range(5, 13))
