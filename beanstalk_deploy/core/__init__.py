"""Core functionality for beanstalk-deploy."""

from beanstalk_deploy.core.exceptions import (
    ConfigError,
    DeployError,
    DeploymentTimeoutError,
    ReconciliationError,
    UnexpectedStatusError,
    UpstreamError,
    VersionMismatchError,
)

__all__ = [
    "DeployError",
    "ConfigError",
    "UpstreamError",
    "ReconciliationError",
    "VersionMismatchError",
    "UnexpectedStatusError",
    "DeploymentTimeoutError",
]
