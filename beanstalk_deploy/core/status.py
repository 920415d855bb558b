"""Interpretation of environment snapshots."""

from beanstalk_deploy.models.deployment import ReconciliationOutcome
from beanstalk_deploy.models.environment import (
    EnvironmentHealth,
    EnvironmentSnapshot,
    EnvironmentStatus,
)

# Statuses that mean "still rolling out, keep polling"
IN_PROGRESS_STATUSES = frozenset({EnvironmentStatus.UPDATING.value})


def is_ready(snapshot: EnvironmentSnapshot) -> bool:
    """Check whether the environment reports Ready, whatever its version."""
    return snapshot.status == EnvironmentStatus.READY.value


def is_in_progress(snapshot: EnvironmentSnapshot) -> bool:
    return snapshot.status in IN_PROGRESS_STATUSES


def is_degraded(snapshot: EnvironmentSnapshot) -> bool:
    """Check whether the platform reports the environment as unhealthy."""
    return snapshot.health == EnvironmentHealth.RED.value


def classify(
    snapshot: EnvironmentSnapshot, desired_version: str
) -> ReconciliationOutcome | None:
    """Classify a snapshot taken while waiting for ``desired_version``.

    Returns:
        The terminal outcome, or None when the rollout is still in progress.
    """
    if is_ready(snapshot):
        if snapshot.version_label == desired_version:
            return ReconciliationOutcome.SUCCEEDED
        return ReconciliationOutcome.VERSION_MISMATCH

    if is_in_progress(snapshot):
        return None

    return ReconciliationOutcome.UNEXPECTED_STATUS
