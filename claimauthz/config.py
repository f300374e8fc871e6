"""
Configuration module for claimauthz.
"""

from dataclasses import dataclass, fields
from typing import Any, Dict, Optional

from .authz.policy import REQUIRE_CLAIM_POLICY
from .types.errors import ConfigurationError
from .util.config import (
    get_bool_config, get_config_value, get_int_config, load_config_file, validate_config
)


AUDIT_LOGGER_TYPES = ("none", "memory", "file")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

CONFIG_SCHEMA = {
    'default_policy': {'required': True, 'type': str},
    'requirements_file': {'type': str},
    'audit_logger': {'type': str, 'choices': list(AUDIT_LOGGER_TYPES)},
    'audit_file': {'type': str},
    'audit_max_entries': {'type': int, 'min': 1},
    'metrics_enabled': {'type': bool},
    'log_level': {'type': str, 'choices': list(LOG_LEVELS)},
}


@dataclass
class AuthzConfig:
    """Configuration for the claims authorizer"""
    default_policy: str = REQUIRE_CLAIM_POLICY
    requirements_file: Optional[str] = None
    audit_logger: str = "none"
    audit_file: Optional[str] = None
    audit_max_entries: int = 1000
    metrics_enabled: bool = False
    log_level: str = "INFO"

    def __post_init__(self):
        if isinstance(self.log_level, str):
            self.log_level = self.log_level.upper()

    @classmethod
    def from_env(cls) -> "AuthzConfig":
        """Create configuration from CLAIMAUTHZ_* environment variables"""
        defaults = cls()
        return cls(
            default_policy=get_config_value("default_policy", defaults.default_policy),
            requirements_file=get_config_value("requirements_file"),
            audit_logger=get_config_value("audit_logger", defaults.audit_logger),
            audit_file=get_config_value("audit_file"),
            audit_max_entries=get_int_config("audit_max_entries", defaults.audit_max_entries),
            metrics_enabled=get_bool_config("metrics_enabled", defaults.metrics_enabled),
            log_level=get_config_value("log_level", defaults.log_level),
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AuthzConfig":
        """Create configuration from a mapping, ignoring unknown keys"""
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})

    @classmethod
    def from_file(cls, file_path: str) -> "AuthzConfig":
        """
        Load configuration from a JSON or YAML file.

        Settings may sit at the top level or under an 'authz' key.
        """
        try:
            data = load_config_file(file_path)
        except (OSError, ValueError) as e:
            raise ConfigurationError(
                f"Cannot read configuration file {file_path}", config_key='file', cause=e
            ) from e
        if not isinstance(data, dict):
            raise ConfigurationError(f"Configuration file {file_path} must contain a mapping")
        return cls.from_dict(data.get('authz', data))

    def to_dict(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}

    def validate(self) -> bool:
        """Validate the configuration"""
        errors = validate_config(self.to_dict(), CONFIG_SCHEMA)
        if not self.default_policy:
            errors.append("default_policy is required")
        if self.audit_logger == "file" and not self.audit_file:
            errors.append("audit_file is required when audit_logger is 'file'")
        if errors:
            raise ConfigurationError("; ".join(errors), details={'errors': errors})
        return True


def load_requirements(file_path: str) -> Dict[str, Any]:
    """
    Read the 'resources' section of a requirements file.

    Raises:
        ConfigurationError: If the file is missing, unreadable or malformed
    """
    try:
        data = load_config_file(file_path)
    except (OSError, ValueError) as e:
        raise ConfigurationError(
            f"Cannot read requirements file {file_path}", config_key='requirements_file', cause=e
        ) from e

    resources = data.get('resources') if isinstance(data, dict) else None
    if not isinstance(resources, dict):
        raise ConfigurationError(
            f"Requirements file {file_path} must contain a 'resources' mapping",
            config_key='requirements_file', config_value=file_path
        )
    return resources
