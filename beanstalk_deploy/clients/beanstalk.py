"""Elastic Beanstalk control-plane client.

Thin wrapper over the boto3 ``elasticbeanstalk`` client. Calls are blocking,
so each one runs in a worker thread to keep the orchestrator's event loop free.
"""

import asyncio
from typing import Any, Callable

from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from beanstalk_deploy.clients.base import ControlPlaneClient
from beanstalk_deploy.clients.credentials import CredentialProvider
from beanstalk_deploy.core.exceptions import UpstreamError
from beanstalk_deploy.models.deployment import DeploymentRequest
from beanstalk_deploy.models.environment import EnvironmentSnapshot, RecentEvent, VersionHandle

# One initial attempt plus two transport-level retries
TRANSPORT_CONFIG = Config(retries={"total_max_attempts": 3, "mode": "legacy"})


class BeanstalkClient(ControlPlaneClient):
    """Control-plane client for AWS Elastic Beanstalk."""

    def __init__(
        self,
        provider: CredentialProvider,
        region: str,
        client: Any | None = None,
    ):
        super().__init__()
        self.region = region
        self._client = client or provider.session(region).client(
            "elasticbeanstalk", config=TRANSPORT_CONFIG
        )

    @property
    def name(self) -> str:
        return "elasticbeanstalk"

    async def _call(self, operation: str, method: Callable[..., dict], **kwargs: Any) -> dict:
        """Run one API call off the event loop, translating botocore errors."""
        self.logger.debug("client.call", operation=operation, region=self.region)
        try:
            return await asyncio.to_thread(method, **kwargs)
        except ClientError as e:
            error = e.response.get("Error", {})
            self.logger.warning(
                "client.call_failed", operation=operation, code=error.get("Code")
            )
            raise UpstreamError(
                operation,
                error.get("Message") or str(e),
                code=error.get("Code"),
            ) from e
        except BotoCoreError as e:
            raise UpstreamError(operation, str(e)) from e

    async def create_version(self, request: DeploymentRequest) -> VersionHandle:
        if request.artifact is None:
            raise ValueError("create_version needs an artifact location")

        params: dict[str, Any] = {
            "ApplicationName": request.application,
            "VersionLabel": request.version_label,
            "AutoCreateApplication": request.auto_create,
            "Process": request.process,
            "SourceBundle": {
                "S3Bucket": request.artifact.bucket,
                "S3Key": request.artifact.key,
            },
        }
        if request.description:
            params["Description"] = request.description

        response = await self._call(
            "CreateApplicationVersion", self._client.create_application_version, **params
        )
        version = response.get("ApplicationVersion", {})
        return VersionHandle(
            application=version.get("ApplicationName", request.application),
            version_label=version.get("VersionLabel", request.version_label),
            status=version.get("Status"),
        )

    async def update_environment(
        self,
        application: str,
        environment: str,
        version_label: str,
        description: str = "",
    ) -> None:
        params: dict[str, Any] = {
            "ApplicationName": application,
            "EnvironmentName": environment,
            "VersionLabel": version_label,
        }
        if description:
            params["Description"] = description

        await self._call("UpdateEnvironment", self._client.update_environment, **params)

    async def describe_environment(
        self, application: str, environment: str
    ) -> EnvironmentSnapshot:
        response = await self._call(
            "DescribeEnvironments",
            self._client.describe_environments,
            ApplicationName=application,
            EnvironmentNames=[environment],
            IncludeDeleted=False,
        )

        # Only ever read the entry for the environment that was asked for
        for env in response.get("Environments", []):
            if env.get("EnvironmentName") == environment:
                return EnvironmentSnapshot(
                    name=environment,
                    status=env.get("Status", ""),
                    health=env.get("Health", ""),
                    version_label=env.get("VersionLabel", ""),
                )

        raise UpstreamError(
            "DescribeEnvironments",
            f"environment {environment!r} not found in application {application!r}",
            code="NotFound",
        )

    async def describe_latest_event(
        self, application: str, environment: str
    ) -> RecentEvent | None:
        response = await self._call(
            "DescribeEvents",
            self._client.describe_events,
            ApplicationName=application,
            EnvironmentName=environment,
            MaxRecords=1,
        )

        events = response.get("Events", [])
        if not events:
            return None

        latest = events[0]
        return RecentEvent(
            message=latest.get("Message", ""),
            severity=latest.get("Severity"),
            event_date=latest.get("EventDate"),
        )
