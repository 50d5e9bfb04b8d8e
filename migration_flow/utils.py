"""
Configuration management and small shared helpers
"""
import os
import yaml
import argparse
from typing import Dict, Any, Optional
from dataclasses import dataclass, field
from pathlib import Path

from . import config as C


# ========================================
# Configuration Class
# ========================================

@dataclass
class Config:
    """Configuration class with attribute access"""

    # Map canvas
    map_width: float = C.MAP_WIDTH
    map_height: float = C.MAP_HEIGHT
    origin_x: float = C.ORIGIN_X
    origin_y: float = C.ORIGIN_Y
    layout: str = "continuous"
    hex_width: float = C.HEX_WIDTH
    hex_height: float = C.HEX_HEIGHT

    # Scaling
    node_radius_min: float = C.NODE_RADIUS_RANGE[0]
    node_radius_max: float = C.NODE_RADIUS_RANGE[1]
    migration_min: float = C.MIGRATION_VOLUME_RANGE[0]
    migration_max: float = C.MIGRATION_VOLUME_RANGE[1]
    flow_rate_min: float = C.FLOW_RATE_RANGE[0]
    flow_rate_max: float = C.FLOW_RATE_RANGE[1]
    edge_width_min: float = C.EDGE_WIDTH_RANGE[0]
    edge_width_max: float = C.EDGE_WIDTH_RANGE[1]

    # Matrix
    district_separator: str = C.DISTRICT_SEPARATOR

    # Multi-year merge
    max_workers: int = 4

    # Cache
    cache_enabled: bool = True
    cache_ttl_seconds: float = 300.0

    # Output
    output_dir: str = "results/views"
    verbose: bool = False

    # Raw config dict
    _raw_config: Dict = field(default_factory=dict, repr=False)

    @classmethod
    def from_yaml(cls, yaml_path: str = None) -> "Config":
        """
        Load configuration from YAML file

        Args:
            yaml_path: Path to YAML config file (default: config.yaml in same dir as utils.py)

        Returns:
            Config instance
        """
        if yaml_path is None:
            current_dir = os.path.dirname(os.path.abspath(__file__))
            yaml_path = os.path.join(current_dir, "config.yaml")

        if not os.path.exists(yaml_path):
            raise FileNotFoundError(f"Config file not found: {yaml_path}")

        with open(yaml_path, 'r') as f:
            raw_config = yaml.safe_load(f) or {}

        config = cls()
        config._raw_config = raw_config

        # Flatten nested config into attributes
        config.map_width = raw_config['map']['width']
        config.map_height = raw_config['map']['height']
        config.origin_x = raw_config['map']['origin_x']
        config.origin_y = raw_config['map']['origin_y']
        config.layout = raw_config['map'].get('layout', config.layout)
        config.hex_width = raw_config['map'].get('hex_width', config.hex_width)
        config.hex_height = raw_config['map'].get('hex_height', config.hex_height)

        config.node_radius_min = raw_config['scaling']['node_radius_min']
        config.node_radius_max = raw_config['scaling']['node_radius_max']
        config.migration_min = raw_config['scaling']['migration_min']
        config.migration_max = raw_config['scaling']['migration_max']
        config.flow_rate_min = raw_config['scaling']['flow_rate_min']
        config.flow_rate_max = raw_config['scaling']['flow_rate_max']
        config.edge_width_min = raw_config['scaling'].get('edge_width_min', config.edge_width_min)
        config.edge_width_max = raw_config['scaling'].get('edge_width_max', config.edge_width_max)

        config.district_separator = raw_config['matrix']['district_separator']

        config.max_workers = raw_config['merge']['max_workers']

        config.cache_enabled = raw_config['cache']['enabled']
        config.cache_ttl_seconds = raw_config['cache']['ttl_seconds']

        config.output_dir = raw_config['output']['output_dir']
        config.verbose = raw_config['output'].get('verbose', False)

        if config.layout not in ('continuous', 'hex'):
            raise ValueError(f"Unknown map layout: {config.layout}")

        return config

    @classmethod
    def from_args(cls, args: Optional[argparse.Namespace] = None) -> "Config":
        """
        Create config from command line arguments (with YAML as base)

        Args:
            args: Parsed arguments (parses if None)

        Returns:
            Config instance
        """
        if args is None:
            args = parse_args()

        if args.config:
            config = cls.from_yaml(args.config)
        else:
            config = cls.from_yaml()

        # Override with command line arguments
        if args.output_dir:
            config.output_dir = args.output_dir
        if getattr(args, 'layout', None):
            config.layout = args.layout
        if getattr(args, 'no_cache', False):
            config.cache_enabled = False
        if getattr(args, 'verbose', False):
            config.verbose = True

        return config

    def get(self, key_path: str, default: Any = None) -> Any:
        """
        Get nested value from raw config using dot notation

        Args:
            key_path: Path like 'map.width'
            default: Default value if not found

        Returns:
            Config value or default
        """
        keys = key_path.split('.')
        value = self._raw_config

        try:
            for key in keys:
                value = value[key]
            return value
        except (KeyError, TypeError):
            return default


# ========================================
# Argument Parser
# ========================================

def parse_args(argv=None) -> argparse.Namespace:
    """
    Parse command line arguments

    Returns:
        Parsed arguments
    """
    parser = argparse.ArgumentParser(
        description='Migration flow view builder',
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )

    parser.add_argument(
        'response',
        type=str,
        help='Path to a migration response JSON file'
    )

    parser.add_argument(
        '--config',
        type=str,
        default=None,
        help='Path to config YAML file (default: config.yaml in migration_flow/)'
    )

    parser.add_argument(
        '--output-dir',
        type=str,
        help='Override output directory'
    )

    parser.add_argument(
        '--period',
        type=str,
        default=None,
        help='Time period id for the graph view (default: first period)'
    )

    parser.add_argument(
        '--locations',
        type=str,
        default=None,
        help='Path to a location directory JSON file with coordinates'
    )

    parser.add_argument(
        '--monthly',
        type=str,
        default=None,
        help='Path to sparse monthly district matrices JSON'
    )

    parser.add_argument(
        '--layout',
        choices=['continuous', 'hex'],
        help='Override node layout strategy'
    )

    parser.add_argument(
        '--no-cache',
        action='store_true',
        help='Disable caching'
    )

    parser.add_argument(
        '--verbose',
        action='store_true',
        help='Enable verbose output'
    )

    return parser.parse_args(argv)


# ========================================
# Global Config Instance
# ========================================

_global_config: Optional[Config] = None


def get_config() -> Config:
    """
    Get global config instance (loads if not exists)

    Returns:
        Config instance
    """
    global _global_config
    if _global_config is None:
        _global_config = Config.from_yaml()
    return _global_config


def set_config(config: Config):
    """Set global config instance"""
    global _global_config
    _global_config = config


# ========================================
# File Path Utilities
# ========================================

def ensure_dir(directory: str):
    """
    Create directory if it doesn't exist

    Args:
        directory: Path to directory
    """
    Path(directory).mkdir(parents=True, exist_ok=True)
