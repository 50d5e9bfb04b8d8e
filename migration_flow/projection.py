"""
Geographic projection onto the map canvas
Resolves a location to (lat, lon), then to canvas (x, y), reporting any fallback used.
"""
import json
import math
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Tuple

import numpy as np

from . import config as C
from .codec import normalize
from .regions import PROVINCES, HEX_LATTICE


def _clamp_unit(value) -> float:
    if not math.isfinite(value):
        return 0.0
    return float(np.clip(value, 0.0, 1.0))


def project(lat, lon,
            canvas_width=C.MAP_WIDTH, canvas_height=C.MAP_HEIGHT,
            origin_x=C.ORIGIN_X, origin_y=C.ORIGIN_Y) -> Tuple[float, float]:
    """
    Linear projection of Thailand's bounding box onto the canvas, north up

    Coordinates outside the box are clamped to its edge; NaN or infinite
    input is treated as the box's top-left corner.

    Returns:
        (x, y) canvas coordinates
    """
    bounds = C.BOUNDS
    try:
        lat = float(lat)
        lon = float(lon)
    except (TypeError, ValueError):
        lat = lon = float('nan')

    fx = _clamp_unit((lon - bounds['min_lon']) / (bounds['max_lon'] - bounds['min_lon']))
    fy = _clamp_unit((bounds['max_lat'] - lat) / (bounds['max_lat'] - bounds['min_lat']))

    return fx * canvas_width + origin_x, fy * canvas_height + origin_y


# ============================================
# Location directory
# ============================================

@dataclass(frozen=True)
class AdministrativeUnit:
    id: str
    name_en: str
    name_th: str = ''
    type: str = 'province'
    latitude: Optional[float] = None
    longitude: Optional[float] = None

    @property
    def has_coordinate(self) -> bool:
        return (self.latitude is not None and self.longitude is not None
                and math.isfinite(self.latitude) and math.isfinite(self.longitude))


class LocationDirectory:
    """
    Administrative units indexed by normalized id and by lower-cased name

    Defaults to the 77 provinces when no records are given.
    """

    def __init__(self, units=None):
        if units is None:
            units = [
                AdministrativeUnit(id=pid, name_en=name, latitude=lat, longitude=lon)
                for pid, name, lat, lon in PROVINCES
            ]
        self.units: List[AdministrativeUnit] = list(units)
        self._by_id: Dict[str, AdministrativeUnit] = {}
        self._by_name: Dict[str, AdministrativeUnit] = {}

        for unit in self.units:
            key = normalize(unit.id)
            if key:
                self._by_id.setdefault(key, unit)
            for name in (unit.name_en, unit.name_th):
                if name:
                    self._by_name.setdefault(name.strip().lower(), unit)

    @classmethod
    def from_records(cls, records) -> "LocationDirectory":
        """Build from dicts with id, name_en, name_th, type, latitude, longitude"""
        units = []
        for record in records:
            units.append(AdministrativeUnit(
                id=str(record.get('id', '')),
                name_en=record.get('name_en') or record.get('name') or '',
                name_th=record.get('name_th') or '',
                type=record.get('type') or 'province',
                latitude=record.get('latitude'),
                longitude=record.get('longitude'),
            ))
        return cls(units)

    @classmethod
    def from_json(cls, path) -> "LocationDirectory":
        with open(path, 'r', encoding='utf-8') as f:
            payload = json.load(f)
        if isinstance(payload, dict):
            payload = payload.get('locations') or payload.get('data') or []
        return cls.from_records(payload)

    def by_id(self, location_id) -> Optional[AdministrativeUnit]:
        key = normalize(location_id)
        return self._by_id.get(key) if key else None

    def by_name(self, name) -> Optional[AdministrativeUnit]:
        if not isinstance(name, str) or not name.strip():
            return None
        return self._by_name.get(name.strip().lower())

    def find(self, location_id=None, name=None) -> Optional[AdministrativeUnit]:
        return self.by_id(location_id) or self.by_name(name)

    def __len__(self):
        return len(self.units)


_PROVINCE_TABLE = {name.lower(): (lat, lon) for _, name, lat, lon in PROVINCES}


# ============================================
# Resolution
# ============================================

class FallbackReason(Enum):
    PROVINCE_TABLE = 'province_table'
    DEFAULT_COORDINATE = 'default_coordinate'


@dataclass(frozen=True)
class CoordinateResult:
    lat: float
    lon: float
    x: float
    y: float
    fallback: Optional[FallbackReason] = None

    @property
    def is_fallback(self) -> bool:
        return self.fallback is not None


class SpatialProjector:
    """
    Resolve locations to canvas positions

    Lookup order: directory by id, directory by name, static province table
    by name, then the Bangkok default. Never raises and never logs; the
    result says whether a fallback was used.

    Args:
        directory: LocationDirectory (defaults to the province table)
        config: Config supplying canvas size, origin and layout
    """

    def __init__(self, directory=None, config=None):
        self.directory = directory if directory is not None else LocationDirectory()
        if config is not None:
            self.canvas = (config.map_width, config.map_height, config.origin_x, config.origin_y)
            self.layout = config.layout
            self._cells = hex_cells(config.hex_width, config.hex_height,
                                    config.origin_x, config.origin_y) if config.layout == 'hex' else None
        else:
            self.canvas = (C.MAP_WIDTH, C.MAP_HEIGHT, C.ORIGIN_X, C.ORIGIN_Y)
            self.layout = 'continuous'
            self._cells = None

    def _position(self, lat, lon) -> Tuple[float, float]:
        x, y = project(lat, lon, *self.canvas)
        if self._cells:
            cell = snap_to_hex(x, y, self._cells)
            return cell['x'], cell['y']
        return x, y

    def _result(self, lat, lon, fallback=None) -> CoordinateResult:
        x, y = self._position(lat, lon)
        return CoordinateResult(lat=lat, lon=lon, x=x, y=y, fallback=fallback)

    def resolve(self, location_id=None, name=None) -> CoordinateResult:
        unit = self.directory.find(location_id, name)
        if unit is not None and unit.has_coordinate:
            return self._result(unit.latitude, unit.longitude)

        if isinstance(name, str):
            coords = _PROVINCE_TABLE.get(name.strip().lower())
            if coords is not None:
                return self._result(coords[0], coords[1], FallbackReason.PROVINCE_TABLE)

        return self._result(C.DEFAULT_LAT, C.DEFAULT_LON, FallbackReason.DEFAULT_COORDINATE)

    def unit_type(self, location_id=None, name=None) -> str:
        unit = self.directory.find(location_id, name)
        return unit.type if unit is not None else 'province'


# ============================================
# Hexagon layout
# ============================================

def hex_cells(hex_width=C.HEX_WIDTH, hex_height=C.HEX_HEIGHT,
              offset_x=0.0, offset_y=0.0, lattice=HEX_LATTICE) -> List[Dict]:
    """
    Canvas positions of the lattice cells

    Odd columns are shifted down half a cell (flat-topped hexagons).
    """
    cells = []
    for cell in lattice:
        row, col = cell['row'], cell['col']
        cells.append({
            'row': row,
            'col': col,
            'region': cell['region'],
            'x': col * hex_width * 0.75 + offset_x,
            'y': row * hex_height + (col % 2) * hex_height * 0.5 + offset_y,
        })
    return cells


def snap_to_hex(x, y, cells) -> Optional[Dict]:
    """Nearest lattice cell to (x, y); None when there are no cells"""
    if not cells:
        return None
    xs = np.array([c['x'] for c in cells])
    ys = np.array([c['y'] for c in cells])
    distances = (xs - x) ** 2 + (ys - y) ** 2
    return cells[int(np.argmin(distances))]
