"""
Configuration utilities for claimauthz.
Provides configuration loading and validation functions.
"""

import json
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml


ENV_PREFIX = "CLAIMAUTHZ_"


def get_config_value(key: str, default: Any = None,
                     cast_type: Optional[type] = None,
                     env_prefix: str = ENV_PREFIX) -> Any:
    """
    Get configuration value from environment or return default.
    Optionally cast to specified type.
    """
    env_key = f"{env_prefix}{key.upper()}"
    value = os.environ.get(env_key, default)

    if value is None or cast_type is None:
        return value

    try:
        if cast_type == bool:
            # Handle boolean conversion specially
            if isinstance(value, str):
                return value.lower() in ('true', '1', 'yes', 'on')
            return bool(value)
        elif cast_type == list:
            # Handle list conversion (comma-separated)
            if isinstance(value, str):
                return [item.strip() for item in value.split(',') if item.strip()]
            return list(value) if value else []
        else:
            return cast_type(value)
    except (ValueError, TypeError):
        return default


def get_bool_config(key: str, default: bool = False,
                    env_prefix: str = ENV_PREFIX) -> bool:
    """Get boolean configuration value."""
    return get_config_value(key, default, bool, env_prefix)


def get_int_config(key: str, default: int = 0,
                   env_prefix: str = ENV_PREFIX) -> int:
    """Get integer configuration value."""
    return get_config_value(key, default, int, env_prefix)


def validate_config(config: Dict[str, Any],
                    schema: Dict[str, Dict[str, Any]]) -> List[str]:
    """
    Validate configuration against a schema.
    Returns list of validation errors.

    Schema format:
    {
        'field_name': {
            'required': True/False,
            'type': type,
            'choices': [list_of_valid_values],
            'min': min_value,
            'max': max_value
        }
    }
    """
    errors = []

    for field, rules in schema.items():
        if rules.get('required', False) and field not in config:
            errors.append(f"Missing required field: {field}")
            continue

        if field not in config:
            continue

        value = config[field]

        # Optional fields may be explicitly unset
        if value is None and not rules.get('required', False):
            continue

        expected_type = rules.get('type')
        if expected_type and not isinstance(value, expected_type):
            errors.append(f"Field {field} must be of type {expected_type.__name__}")
            continue

        choices = rules.get('choices')
        if choices and value not in choices:
            errors.append(f"Field {field} must be one of: {choices}")

        if isinstance(value, (int, float)) and not isinstance(value, bool):
            min_val = rules.get('min')
            max_val = rules.get('max')

            if min_val is not None and value < min_val:
                errors.append(f"Field {field} must be >= {min_val}")

            if max_val is not None and value > max_val:
                errors.append(f"Field {field} must be <= {max_val}")

    return errors


def load_config_file(file_path: str) -> Dict[str, Any]:
    """Load configuration from a file (JSON or YAML)."""
    if not os.path.exists(file_path):
        raise FileNotFoundError(f"Configuration file not found: {file_path}")

    file_ext = Path(file_path).suffix.lower()

    with open(file_path, 'r', encoding='utf-8') as f:
        if file_ext in ['.json']:
            data = json.load(f)
        elif file_ext in ['.yaml', '.yml']:
            try:
                data = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ValueError(f"Invalid YAML in {file_path}: {e}") from e
        else:
            raise ValueError(f"Unsupported configuration file format: {file_ext}")

    # An empty YAML document loads as None
    return data or {}
