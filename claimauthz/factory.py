"""
Factory functions wiring an authorizer from configuration.
"""

from typing import Optional
import logging

from .audit.logger import create_audit_logger
from .config import AuthzConfig, load_requirements
from .metrics.collector import create_metrics
from .authz.authorizer import ClaimAuthorizer
from .authz.policy import PolicyRegistry
from .authz.registry import RequirementRegistry
from .util.log import configure_logging


logger = logging.getLogger(__name__)


def create_authorizer(config: Optional[AuthzConfig] = None,
                      registry: Optional[RequirementRegistry] = None,
                      policies: Optional[PolicyRegistry] = None) -> ClaimAuthorizer:
    """
    Create a ClaimAuthorizer from configuration.

    Args:
        config: Authorizer configuration; read from the environment when omitted
        registry: Registry to use; a new one when omitted
        policies: Policy registry to use; one holding the default policy when omitted

    Returns:
        ClaimAuthorizer: Authorizer with logging, audit logging and metrics as configured
    """
    config = config or AuthzConfig.from_env()
    config.validate()
    configure_logging(config.log_level)

    registry = registry if registry is not None else RequirementRegistry()
    if config.requirements_file:
        registry.load(load_requirements(config.requirements_file))

    policies = policies or PolicyRegistry()
    # Fail fast on a default policy nothing handles
    policies.get_policy(config.default_policy)

    audit_logger = create_audit_logger(
        config.audit_logger,
        max_entries=config.audit_max_entries,
        file_path=config.audit_file
    )
    metrics = create_metrics() if config.metrics_enabled else None

    logger.info(
        f"Created authorizer: {len(registry)} resource(s), default policy {config.default_policy}, "
        f"audit={config.audit_logger}, metrics={'on' if metrics else 'off'}"
    )

    return ClaimAuthorizer(
        registry=registry,
        policies=policies,
        audit_logger=audit_logger,
        metrics=metrics,
        default_policy=config.default_policy
    )
