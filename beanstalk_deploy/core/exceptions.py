"""Custom exceptions for beanstalk-deploy."""

from typing import Any

from beanstalk_deploy.models.deployment import ReconciliationOutcome
from beanstalk_deploy.models.environment import EnvironmentSnapshot, RecentEvent


class DeployError(Exception):
    """Base exception for beanstalk-deploy."""

    outcome = ReconciliationOutcome.UPSTREAM_ERROR

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class ConfigError(DeployError):
    """Invocation parameters are invalid. Raised before any remote call."""

    pass


class UpstreamError(DeployError):
    """A control-plane call failed."""

    outcome = ReconciliationOutcome.UPSTREAM_ERROR

    def __init__(self, operation: str, message: str, code: str | None = None):
        details: dict[str, Any] = {"operation": operation}
        if code:
            details["code"] = code
        super().__init__(f"{operation} failed: {message}", details)
        self.operation = operation
        self.code = code


class ReconciliationError(DeployError):
    """An environment reached a terminal state other than success."""

    def __init__(
        self,
        environment: str,
        message: str,
        snapshot: EnvironmentSnapshot | None = None,
        event: RecentEvent | None = None,
    ):
        details: dict[str, Any] = {"environment": environment}
        if snapshot is not None:
            details.update(
                status=snapshot.status,
                health=snapshot.health,
                version=snapshot.version_label,
            )
        if event is not None:
            details["last_event"] = event.message
        super().__init__(message, details)
        self.environment = environment
        self.snapshot = snapshot
        self.event = event


class VersionMismatchError(ReconciliationError):
    """Environment settled at Ready on a different version."""

    outcome = ReconciliationOutcome.VERSION_MISMATCH


class UnexpectedStatusError(ReconciliationError):
    """Environment entered a status outside Updating/Ready."""

    outcome = ReconciliationOutcome.UNEXPECTED_STATUS


class DeploymentTimeoutError(ReconciliationError):
    """Deadline elapsed before a terminal status was observed."""

    outcome = ReconciliationOutcome.TIMED_OUT
