"""
Fixed settings for migration flow transformation
Values here are domain constants; tunables live in config.yaml
"""

# ============================================
# Geography
# ============================================
# Thailand's extremities (Mae Sai in the north, Betong in the south)
BOUNDS = {
    'min_lat': 5.6130,
    'max_lat': 20.4633,
    'min_lon': 97.3438,
    'max_lon': 105.6368,
}

# Bangkok, used when a location cannot be resolved
DEFAULT_LOCATION_NAME = 'Bangkok'
DEFAULT_LAT = 13.7563
DEFAULT_LON = 100.5018

COUNTRY_PREFIX = 'th-'

# ============================================
# Map canvas
# ============================================
MAP_WIDTH = 270
MAP_HEIGHT = 500
ORIGIN_X = 45
ORIGIN_Y = -70

HEX_WIDTH = 18
HEX_HEIGHT = 15.588

# ============================================
# Scaling
# ============================================
NODE_RADIUS_RANGE = (15, 40)
MIGRATION_VOLUME_RANGE = (10000, 200000)
FLOW_RATE_RANGE = (1, 50)
EDGE_WIDTH_RANGE = (0.5, 6.0)

FLOW_UNITS = 'people'

# ============================================
# Matrix / keys
# ============================================
DISTRICT_SEPARATOR = '#'

SUBACTIONS = ('movein', 'moveout', 'net', 'raw')

# ============================================
# Calendar
# ============================================
MONTH_ORDER = ['Jan', 'Feb', 'Mar', 'Apr', 'May', 'Jun',
               'Jul', 'Aug', 'Sep', 'Oct', 'Nov', 'Dec']

MONTH_LOOKUP = {name.lower(): idx for idx, name in enumerate(MONTH_ORDER)}

# Two-digit year codes ("dec24") are read as 20xx
CENTURY = 2000

# ============================================
# Sankey colors
# ============================================
COLORS = {
    'year': '#1f77b4',
    'source': '#2ca02c',
    'destination': '#d62728',
}
