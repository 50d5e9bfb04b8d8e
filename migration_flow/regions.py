"""
Static geography tables for Thailand
Province coordinates, the six-region grouping, and the hand-tuned hexagon lattice
"""
from typing import Dict, List, Optional

from .codec import normalize_as_key


# ============================================
# Provinces: (ISO 3166-2 id, English name, latitude, longitude)
# ============================================
PROVINCES = [
    ('TH-10', 'Bangkok', 13.7563, 100.5018),
    ('TH-11', 'Samut Prakan', 13.5991, 100.5998),
    ('TH-12', 'Nonthaburi', 13.8621, 100.5144),
    ('TH-13', 'Pathum Thani', 14.0208, 100.5250),
    ('TH-14', 'Phra Nakhon Si Ayutthaya', 14.3692, 100.5877),
    ('TH-15', 'Ang Thong', 14.5896, 100.4551),
    ('TH-16', 'Lop Buri', 14.7995, 100.6534),
    ('TH-17', 'Sing Buri', 14.8936, 100.3967),
    ('TH-18', 'Chai Nat', 15.1852, 100.1251),
    ('TH-19', 'Saraburi', 14.5289, 100.9101),
    ('TH-20', 'Chon Buri', 13.3611, 100.9847),
    ('TH-21', 'Rayong', 12.6814, 101.2816),
    ('TH-22', 'Chanthaburi', 12.6113, 102.1039),
    ('TH-23', 'Trat', 12.2428, 102.5175),
    ('TH-24', 'Chachoengsao', 13.6904, 101.0779),
    ('TH-25', 'Prachin Buri', 14.0509, 101.3717),
    ('TH-26', 'Nakhon Nayok', 14.2069, 101.2131),
    ('TH-27', 'Sa Kaeo', 13.8240, 102.0646),
    ('TH-30', 'Nakhon Ratchasima', 14.9799, 102.0978),
    ('TH-31', 'Buri Ram', 14.9930, 103.1029),
    ('TH-32', 'Surin', 14.8818, 103.4936),
    ('TH-33', 'Si Sa Ket', 15.1186, 104.3220),
    ('TH-34', 'Ubon Ratchathani', 15.2287, 104.8564),
    ('TH-35', 'Yasothon', 15.7944, 104.1451),
    ('TH-36', 'Chaiyaphum', 15.8068, 102.0316),
    ('TH-37', 'Amnat Charoen', 15.8657, 104.6258),
    ('TH-38', 'Bueng Kan', 18.3609, 103.6464),
    ('TH-39', 'Nong Bua Lam Phu', 17.2218, 102.4260),
    ('TH-40', 'Khon Kaen', 16.4322, 102.8236),
    ('TH-41', 'Udon Thani', 17.4138, 102.7872),
    ('TH-42', 'Loei', 17.4860, 101.7223),
    ('TH-43', 'Nong Khai', 17.8783, 102.7420),
    ('TH-44', 'Maha Sarakham', 16.1851, 103.3026),
    ('TH-45', 'Roi Et', 16.0538, 103.6520),
    ('TH-46', 'Kalasin', 16.4314, 103.5059),
    ('TH-47', 'Sakon Nakhon', 17.1546, 104.1348),
    ('TH-48', 'Nakhon Phanom', 17.3920, 104.7695),
    ('TH-49', 'Mukdahan', 16.5420, 104.7235),
    ('TH-50', 'Chiang Mai', 18.7883, 98.9853),
    ('TH-51', 'Lamphun', 18.5745, 99.0087),
    ('TH-52', 'Lampang', 18.2888, 99.4909),
    ('TH-53', 'Uttaradit', 17.6201, 100.0993),
    ('TH-54', 'Phrae', 18.1446, 100.1403),
    ('TH-55', 'Nan', 18.7756, 100.7730),
    ('TH-56', 'Phayao', 19.1665, 99.9019),
    ('TH-57', 'Chiang Rai', 19.9105, 99.8406),
    ('TH-58', 'Mae Hong Son', 19.3020, 97.9654),
    ('TH-60', 'Nakhon Sawan', 15.7047, 100.1372),
    ('TH-61', 'Uthai Thani', 15.3835, 100.0246),
    ('TH-62', 'Kamphaeng Phet', 16.4827, 99.5226),
    ('TH-63', 'Tak', 16.8840, 99.1258),
    ('TH-64', 'Sukhothai', 17.0078, 99.8230),
    ('TH-65', 'Phitsanulok', 16.8211, 100.2659),
    ('TH-66', 'Phichit', 16.4429, 100.3488),
    ('TH-67', 'Phetchabun', 16.4190, 101.1591),
    ('TH-70', 'Ratchaburi', 13.5283, 99.8134),
    ('TH-71', 'Kanchanaburi', 14.0228, 99.5328),
    ('TH-72', 'Suphan Buri', 14.4745, 100.1177),
    ('TH-73', 'Nakhon Pathom', 13.8199, 100.0622),
    ('TH-74', 'Samut Sakhon', 13.5475, 100.2744),
    ('TH-75', 'Samut Songkhram', 13.4098, 100.0023),
    ('TH-76', 'Phetchaburi', 13.1119, 99.9397),
    ('TH-77', 'Prachuap Khiri Khan', 11.8124, 99.7973),
    ('TH-80', 'Nakhon Si Thammarat', 8.4304, 99.9631),
    ('TH-81', 'Krabi', 8.0863, 98.9063),
    ('TH-82', 'Phangnga', 8.4501, 98.5255),
    ('TH-83', 'Phuket', 7.8804, 98.3923),
    ('TH-84', 'Surat Thani', 9.1382, 99.3215),
    ('TH-85', 'Ranong', 9.9529, 98.6085),
    ('TH-86', 'Chumphon', 10.4930, 99.1800),
    ('TH-90', 'Songkhla', 7.1898, 100.5954),
    ('TH-91', 'Satun', 6.6238, 100.0674),
    ('TH-92', 'Trang', 7.5563, 99.6114),
    ('TH-93', 'Phatthalung', 7.6167, 100.0740),
    ('TH-94', 'Pattani', 6.8691, 101.2550),
    ('TH-95', 'Yala', 6.5411, 101.2804),
    ('TH-96', 'Narathiwat', 6.4255, 101.8253),
]


# ============================================
# Six-region grouping (keys are normalize_as_key province names)
# ============================================
REGIONS = ['central', 'northern', 'northeastern', 'eastern', 'western', 'southern']

PROVINCE_REGION_MAPPING = {
    # Northeastern (Isan)
    'amnat charoen': 'northeastern',
    'bueng kan': 'northeastern',
    'buri ram': 'northeastern',
    'chaiyaphum': 'northeastern',
    'kalasin': 'northeastern',
    'khon kaen': 'northeastern',
    'loei': 'northeastern',
    'maha sarakham': 'northeastern',
    'mukdahan': 'northeastern',
    'nakhon phanom': 'northeastern',
    'nakhon ratchasima': 'northeastern',
    'nong bua lam phu': 'northeastern',
    'nong khai': 'northeastern',
    'roi et': 'northeastern',
    'sakon nakhon': 'northeastern',
    'si sa ket': 'northeastern',
    'surin': 'northeastern',
    'ubon ratchathani': 'northeastern',
    'udon thani': 'northeastern',
    'yasothon': 'northeastern',

    # Northern
    'chiang mai': 'northern',
    'chiang rai': 'northern',
    'lampang': 'northern',
    'lamphun': 'northern',
    'mae hong son': 'northern',
    'nan': 'northern',
    'phayao': 'northern',
    'phrae': 'northern',
    'uttaradit': 'northern',

    # Eastern (Pattaya is a special area inside Chon Buri)
    'chachoengsao': 'eastern',
    'chanthaburi': 'eastern',
    'chon buri': 'eastern',
    'prachin buri': 'eastern',
    'pattaya': 'eastern',
    'rayong': 'eastern',
    'sa kaeo': 'eastern',
    'trat': 'eastern',

    # Western
    'kanchanaburi': 'western',
    'phetchaburi': 'western',
    'prachuap khiri khan': 'western',
    'ratchaburi': 'western',
    'tak': 'western',

    # Southern
    'chumphon': 'southern',
    'krabi': 'southern',
    'nakhon si thammarat': 'southern',
    'narathiwat': 'southern',
    'pattani': 'southern',
    'phangnga': 'southern',
    'phatthalung': 'southern',
    'phuket': 'southern',
    'ranong': 'southern',
    'satun': 'southern',
    'songkhla': 'southern',
    'surat thani': 'southern',
    'trang': 'southern',
    'yala': 'southern',

    # Central
    'ang thong': 'central',
    'bangkok': 'central',
    'chai nat': 'central',
    'kamphaeng phet': 'central',
    'lop buri': 'central',
    'nakhon nayok': 'central',
    'nakhon pathom': 'central',
    'nakhon sawan': 'central',
    'nonthaburi': 'central',
    'pathum thani': 'central',
    'phetchabun': 'central',
    'phichit': 'central',
    'phitsanulok': 'central',
    'phra nakhon si ayutthaya': 'central',
    'samut prakan': 'central',
    'samut sakhon': 'central',
    'samut songkhram': 'central',
    'saraburi': 'central',
    'sing buri': 'central',
    'sukhothai': 'central',
    'suphan buri': 'central',
    'uthai thani': 'central',
}

_REGION_ALIASES = {
    'north': 'northern',
    'northeast': 'northeastern',
    'south': 'southern',
    'east': 'eastern',
    'west': 'western',
}


def province_region(province_name) -> Optional[str]:
    """
    Region for a province name, tolerating missing spaces ("ChiangMai")

    Returns:
        Region name or None if the province is unknown
    """
    key = normalize_as_key(province_name)
    if key in PROVINCE_REGION_MAPPING:
        return PROVINCE_REGION_MAPPING[key]

    compact = key.replace(' ', '')
    for name, region in PROVINCE_REGION_MAPPING.items():
        if name.replace(' ', '') == compact:
            return region
    return None


def provinces_in_region(region) -> List[str]:
    return [name for name, r in PROVINCE_REGION_MAPPING.items() if r == region]


def region_query(query) -> Optional[str]:
    """Region named by a free-text query ("northeast" -> "northeastern")"""
    key = normalize_as_key(query)
    if key in REGIONS:
        return key
    return _REGION_ALIASES.get(key)


# ============================================
# Hexagon lattice
# Hand-tuned (row, col) membership for the stylized map. Static data:
# edit by hand, do not regenerate.
# ============================================
HEX_LATTICE_ROWS = [
    (1, [([9, 10, 11], 'north')]),
    (2, [((5, 12), 'north')]),
    (3, [((4, 12), 'north')]),
    (4, [((4, 12), 'north')]),
    (5, [((4, 12), 'north'), ((15, 18), 'north')]),
    (6, [((4, 19), 'north'), ([18], 'northeast')]),
    (7, [((5, 20), 'north')]),
    (8, [((6, 20), 'north')]),
    (9, [((6, 11), 'central'), ((12, 21), 'northeast')]),
    (10, [((6, 12), 'central'), ((13, 22), 'northeast')]),
    (11, [((5, 13), 'central'), ((14, 22), 'northeast')]),
    (12, [([5], 'west'), ((6, 14), 'central'), ((15, 22), 'northeast')]),
    (13, [([6, 6], 'west'), ((7, 15), 'central'), ((16, 22), 'northeast')]),
    (14, [((7, 16), 'west'), ((6, 16), 'central')]),
    (15, [([7, 8, 9, 10], 'west')]),
    (16, [([8, 9, 10], 'west')]),
    (17, [([8, 9], 'west')]),
    (18, [([9], 'west')]),
    (19, [([8], 'west')]),
    (20, [([7, 8], 'west')]),
    (21, [([7, 8], 'west')]),
    (22, [([6, 7], 'west')]),
    (23, [([6, 7, 9], 'south')]),
    (24, [((5, 9), 'south')]),
    (25, [((5, 10), 'south')]),
    (26, [((5, 10), 'south')]),
    (27, [((6, 10), 'south')]),
    (28, [((8, 10), 'south')]),
    (29, [((9, 14), 'south')]),
    (30, [((12, 14), 'south')]),
    (31, [((12, 14), 'south')]),
]


def _expand_lattice(rows) -> List[Dict]:
    """Expand (row, segments) entries; a tuple segment is an inclusive column range"""
    cells = []
    for row, segments in rows:
        for cols, region in segments:
            if isinstance(cols, tuple):
                cols = range(cols[0], cols[1] + 1)
            for col in cols:
                cells.append({'row': row, 'col': col, 'region': region})
    return cells


HEX_LATTICE = _expand_lattice(HEX_LATTICE_ROWS)
