"""
Utility package providing configuration and logging helpers for claimauthz.
"""

from .config import (
    ENV_PREFIX, get_config_value, get_bool_config, get_int_config,
    validate_config, load_config_file
)
from .log import configure_logging

__all__ = [
    # Configuration utilities
    'ENV_PREFIX', 'get_config_value', 'get_bool_config', 'get_int_config',
    'validate_config', 'load_config_file',

    # Logging
    'configure_logging'
]
