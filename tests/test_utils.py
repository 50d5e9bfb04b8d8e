import pytest
import yaml

from migration_flow.utils import Config, parse_args, get_config, set_config


def test_default_yaml_loads():
    config = Config.from_yaml()
    assert config.map_width == 270
    assert config.origin_y == -70
    assert config.layout == 'continuous'
    assert config.flow_rate_max == 50
    assert config.district_separator == '#'
    assert config.get('cache.ttl_seconds') == 300
    assert config.get('cache.missing', 'fallback') == 'fallback'


def test_missing_yaml():
    with pytest.raises(FileNotFoundError):
        Config.from_yaml('/nonexistent/config.yaml')


def test_invalid_layout(tmp_path):
    config = Config.from_yaml()
    raw = dict(config._raw_config)
    raw['map'] = dict(raw['map'], layout='spiral')
    path = tmp_path / 'bad.yaml'
    path.write_text(yaml.safe_dump(raw))
    with pytest.raises(ValueError):
        Config.from_yaml(str(path))


def test_args_override_yaml(tmp_path):
    args = parse_args(['response.json', '--output-dir', str(tmp_path), '--layout', 'hex',
                       '--no-cache', '--verbose'])
    config = Config.from_args(args)
    assert config.output_dir == str(tmp_path)
    assert config.layout == 'hex'
    assert config.cache_enabled is False
    assert config.verbose is True


def test_global_config_roundtrip():
    custom = Config(map_width=100)
    set_config(custom)
    try:
        assert get_config() is custom
    finally:
        set_config(None)
