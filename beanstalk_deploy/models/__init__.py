"""Data models for beanstalk-deploy."""

from beanstalk_deploy.models.deployment import (
    ArtifactLocation,
    Credentials,
    DeploymentReport,
    DeploymentRequest,
    EnvironmentResult,
    ReconciliationOutcome,
)
from beanstalk_deploy.models.environment import (
    EnvironmentHealth,
    EnvironmentSnapshot,
    EnvironmentStatus,
    RecentEvent,
    VersionHandle,
)

__all__ = [
    # Deployment models
    "ArtifactLocation",
    "Credentials",
    "DeploymentRequest",
    "DeploymentReport",
    "EnvironmentResult",
    "ReconciliationOutcome",
    # Environment models
    "EnvironmentHealth",
    "EnvironmentSnapshot",
    "EnvironmentStatus",
    "RecentEvent",
    "VersionHandle",
]
