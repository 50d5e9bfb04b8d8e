"""
Visual magnitude scaling
Maps raw people counts into bounded ranges for node radius, flow rate and edge width.
All functions are total: they never raise and never return NaN or infinity.
"""
import math

import numpy as np

from . import config as C


def _finite(value, default=0.0) -> float:
    try:
        value = float(value)
    except (TypeError, ValueError):
        return default
    return value if math.isfinite(value) else default


class MagnitudeNormalizer:
    """
    Scaling functions with configurable ranges

    Args:
        radius_range: (min, max) node radius
        volume_range: (min, max) move_in + move_out clamped before mapping
        rate_range: (min, max) magnitude of a normalized flow rate
        width_range: (min, max) edge stroke width
    """

    def __init__(self,
                 radius_range=C.NODE_RADIUS_RANGE,
                 volume_range=C.MIGRATION_VOLUME_RANGE,
                 rate_range=C.FLOW_RATE_RANGE,
                 width_range=C.EDGE_WIDTH_RANGE):
        self.radius_range = radius_range
        self.volume_range = volume_range
        self.rate_range = rate_range
        self.width_range = width_range

    @classmethod
    def from_config(cls, config) -> "MagnitudeNormalizer":
        return cls(
            radius_range=(config.node_radius_min, config.node_radius_max),
            volume_range=(config.migration_min, config.migration_max),
            rate_range=(config.flow_rate_min, config.flow_rate_max),
            width_range=(config.edge_width_min, config.edge_width_max),
        )

    def node_radius(self, move_in, move_out) -> float:
        """
        Radius for a node from its total migration volume

        Args:
            move_in: People moving into the location
            move_out: People moving out of the location

        Returns:
            Radius in the configured radius range (linear in the clamped volume)
        """
        min_size, max_size = self.radius_range
        min_volume, max_volume = self.volume_range

        total = _finite(move_in) + _finite(move_out)
        clamped = float(np.clip(total, min_volume, max_volume))
        span = max_volume - min_volume
        ratio = (clamped - min_volume) / span if span > 0 else 0.0

        return min_size + ratio * (max_size - min_size)

    def flow_rate(self, count, max_count) -> float:
        """
        Signed rate for a flow relative to the largest flow in the period

        The magnitude always lands in the rate range so small flows stay
        visible; the sign of count is preserved.

        Args:
            count: Flow count (sign carries direction)
            max_count: Largest absolute flow count in the period

        Returns:
            Rate in [-max, max]; 0 when max_count is 0
        """
        max_count = abs(_finite(max_count))
        count = _finite(count)
        if max_count == 0:
            return 0.0

        min_rate, max_rate = self.rate_range
        ratio = min(abs(count) / max_count, 1.0)
        return float(np.sign(count)) * (min_rate + ratio * (max_rate - min_rate))

    def edge_width(self, count, max_count) -> float:
        """Stroke width using square-root scaling to compress large flows"""
        min_width, max_width = self.width_range
        max_count = abs(_finite(max_count))
        if max_count == 0:
            return min_width

        ratio = math.sqrt(min(abs(_finite(count)) / max_count, 1.0))
        return min_width + ratio * (max_width - min_width)


_default = MagnitudeNormalizer()


def node_radius(move_in, move_out) -> float:
    return _default.node_radius(move_in, move_out)


def flow_rate(count, max_count) -> float:
    return _default.flow_rate(count, max_count)


def edge_width(count, max_count) -> float:
    return _default.edge_width(count, max_count)
