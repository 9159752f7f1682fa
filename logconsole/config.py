"""
Load ConsoleWriter settings from YAML.

Example config.yml:

    console:
      no_color: false
      time_format: "%H:%M:%S"
      time_field_format: unixms
      parts_order: [time, level, message]
      fields_exclude: [pid, hostname]
"""

import os
from typing import Any, Dict

import yaml

from logconsole.errors import ConfigError
from logconsole.formatters import EPOCH_UNITS_PER_SECOND, TIME_FIELD_RFC3339
from logconsole.writer import WriterConfig

CONFIG_SECTION = 'console'

STRING_KEYS = ('time_format', 'time_field_format')
LIST_KEYS = ('parts_order', 'parts_exclude', 'fields_exclude')
BOOL_KEYS = ('no_color',)


def _expand(value: str) -> str:
    return os.path.expandvars(value)


def writer_config_from_dict(data: Dict[str, Any]) -> WriterConfig:
    """
    Build a WriterConfig from a parsed mapping.

    Accepts either the console section itself or a document containing one.

    Raises:
        ConfigError: If a key is unknown or a value has the wrong type
    """
    if data is None:
        return WriterConfig()
    if not isinstance(data, dict):
        raise ConfigError(f"Expected a mapping, got {type(data).__name__}")

    if CONFIG_SECTION in data:
        data = data[CONFIG_SECTION] or {}
        if not isinstance(data, dict):
            raise ConfigError(f"'{CONFIG_SECTION}' must be a mapping")

    known = set(STRING_KEYS) | set(LIST_KEYS) | set(BOOL_KEYS)
    unknown = sorted(set(data) - known)
    if unknown:
        raise ConfigError(f"Unknown config keys: {', '.join(map(str, unknown))}")

    options: Dict[str, Any] = {}

    for key in BOOL_KEYS:
        if key in data:
            if not isinstance(data[key], bool):
                raise ConfigError(f"'{key}' must be true or false")
            options[key] = data[key]

    for key in STRING_KEYS:
        if key in data:
            if not isinstance(data[key], str):
                raise ConfigError(f"'{key}' must be a string")
            options[key] = _expand(data[key])

    for key in LIST_KEYS:
        if key in data:
            value = data[key]
            if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
                raise ConfigError(f"'{key}' must be a list of strings")
            options[key] = [_expand(v) for v in value]

    time_field_format = options.get('time_field_format')
    if time_field_format is not None:
        valid = [TIME_FIELD_RFC3339, *EPOCH_UNITS_PER_SECOND]
        # Anything else must at least look like a strptime pattern
        if time_field_format not in valid and '%' not in time_field_format:
            raise ConfigError(
                f"Invalid time_field_format: {time_field_format}. "
                f"Must be one of {valid} or a strptime pattern"
            )

    return WriterConfig(**options)


def load_config(config_path) -> WriterConfig:
    """
    Parse a YAML config file into a WriterConfig.

    Args:
        config_path: Path to the YAML file

    Returns:
        WriterConfig: Validated settings

    Raises:
        ConfigError: If the file is missing or invalid
    """
    try:
        with open(config_path, 'r') as f:
            data = yaml.safe_load(f)
    except FileNotFoundError:
        raise ConfigError(f"Config file not found: {config_path}")
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML: {e}")

    return writer_config_from_dict(data)
