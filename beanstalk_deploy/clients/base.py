"""Base class for control-plane clients."""

from abc import ABC, abstractmethod

from beanstalk_deploy.models.deployment import DeploymentRequest
from beanstalk_deploy.models.environment import EnvironmentSnapshot, RecentEvent, VersionHandle
from beanstalk_deploy.utils.logging import get_logger


class ControlPlaneClient(ABC):
    """Request/response interface to the hosting platform.

    Implementations are stateless and must not retry on their own beyond what
    the transport does. Every failure is raised as ``UpstreamError``.
    Subclasses implement:
    - name: Platform identifier used in logs
    - create_version(), update_environment()
    - describe_environment(), describe_latest_event()
    """

    def __init__(self):
        self.logger = get_logger(f"client.{self.name}")

    @property
    @abstractmethod
    def name(self) -> str:
        """Client name/identifier."""
        pass

    @abstractmethod
    async def create_version(self, request: DeploymentRequest) -> VersionHandle:
        """Register ``request.version_label`` from ``request.artifact``.

        May create the application when ``request.auto_create`` is set.
        """
        pass

    @abstractmethod
    async def update_environment(
        self,
        application: str,
        environment: str,
        version_label: str,
        description: str = "",
    ) -> None:
        """Ask the platform to start rolling ``environment`` to a version.

        Returns once the request is accepted, not when the rollout finishes.
        """
        pass

    @abstractmethod
    async def describe_environment(
        self, application: str, environment: str
    ) -> EnvironmentSnapshot:
        """Read the current state of one environment."""
        pass

    @abstractmethod
    async def describe_latest_event(
        self, application: str, environment: str
    ) -> RecentEvent | None:
        """Read the most recent event, or None when there is none."""
        pass
