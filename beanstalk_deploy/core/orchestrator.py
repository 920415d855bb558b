"""Deployment Orchestrator.

Registers an application version, rolls environments to it one at a time,
and polls each environment until it settles on that version or the deadline
passes.
"""

from dataclasses import dataclass

import structlog

from beanstalk_deploy.clients.base import ControlPlaneClient
from beanstalk_deploy.core.exceptions import (
    DeployError,
    DeploymentTimeoutError,
    UnexpectedStatusError,
    UpstreamError,
    VersionMismatchError,
)
from beanstalk_deploy.core.report import snapshot_fields
from beanstalk_deploy.core.status import classify, is_degraded, is_ready
from beanstalk_deploy.core.timing import Clock, LoopClock
from beanstalk_deploy.models.deployment import (
    ArtifactLocation,
    DeploymentReport,
    DeploymentRequest,
    EnvironmentResult,
    ReconciliationOutcome,
)
from beanstalk_deploy.models.environment import EnvironmentSnapshot, RecentEvent
from beanstalk_deploy.utils.logging import get_logger


@dataclass
class _Observation:
    """What the loop last saw of one environment."""

    snapshot: EnvironmentSnapshot | None = None
    event: RecentEvent | None = None
    polls: int = 0
    readiness_polls: int = 0

    def record(
        self, snapshot: EnvironmentSnapshot, event: RecentEvent | None, readiness: bool
    ) -> int:
        """Store a poll and return its number within the current phase."""
        self.snapshot = snapshot
        self.event = event
        if readiness:
            self.readiness_polls += 1
            return self.readiness_polls
        self.polls += 1
        return self.polls


class DeploymentOrchestrator:
    """Orchestrates a deployment against one control plane.

    Per environment, strictly in sequence:
    1. wait_for_ready - optional wait for Ready before touching anything
    2. mutate - register the version (first environment only), request the update
    3. reconcile - poll until Ready on the desired version, a failure, or timeout

    The first environment that does not succeed stops the run.
    """

    def __init__(self, client: ControlPlaneClient, clock: Clock | None = None):
        self.client = client
        self.clock = clock or LoopClock()
        self.logger = get_logger("orchestrator")

    async def run(self, request: DeploymentRequest) -> DeploymentReport:
        """Run a deployment.

        Args:
            request: The immutable invocation parameters

        Returns:
            The report, with one result per environment that was processed
        """
        report = DeploymentReport(
            application=request.application,
            version_label=request.version_label,
        )
        log = self.logger.bind(
            application=request.application,
            version_label=request.version_label,
            region=request.region,
        )
        log.info(
            "deploy.started",
            environments=list(request.environments),
            environment_update=request.environment_update,
            wait_for_ready=request.wait_for_ready,
            timeout_seconds=request.timeout.total_seconds(),
        )

        if not request.environment_update:
            await self._register_only(request, report, log)
            log.info("deploy.finished", outcome=report.outcome.value)
            return report

        for index, environment in enumerate(request.environments):
            result = await self._deploy_environment(
                request,
                environment,
                report,
                log,
                artifact=request.artifact if index == 0 else None,
            )
            report.environments.append(result)

            if not result.succeeded:
                report.outcome = result.outcome
                report.skipped_environments = list(request.environments[index + 1 :])
                if report.skipped_environments:
                    log.warning(
                        "deploy.aborted",
                        failed=environment,
                        skipped=report.skipped_environments,
                    )
                break

        log.info("deploy.finished", outcome=report.outcome.value)
        return report

    async def _register_only(
        self,
        request: DeploymentRequest,
        report: DeploymentReport,
        log: structlog.stdlib.BoundLogger,
    ) -> None:
        """Register the version without touching any environment."""
        if request.artifact is None:
            log.warning("deploy.nothing_to_do", reason="no artifact and no environment update")
            return

        try:
            await self._register_version(request, request.artifact, log)
            report.version_created = True
        except UpstreamError as e:
            report.version_error = e.message
            report.outcome = e.outcome
            log.error("deploy.version.failed", error=e.message, **e.details)

    async def _register_version(
        self,
        request: DeploymentRequest,
        artifact: ArtifactLocation,
        log: structlog.stdlib.BoundLogger,
    ) -> None:
        log.info(
            "deploy.version.creating",
            bucket=artifact.bucket,
            bucket_key=artifact.key,
            description=request.description,
            auto_create=request.auto_create,
            process=request.process,
        )
        handle = await self.client.create_version(request)
        log.info("deploy.version.created", version_status=handle.status)

    async def _deploy_environment(
        self,
        request: DeploymentRequest,
        environment: str,
        report: DeploymentReport,
        log: structlog.stdlib.BoundLogger,
        artifact: ArtifactLocation | None,
    ) -> EnvironmentResult:
        """Take one environment through readiness wait, update and reconcile.

        The version is registered from ``artifact`` when one is passed.
        """
        env_log = log.bind(environment=environment)
        observed = _Observation()
        started = self.clock.now()

        try:
            if request.wait_for_ready:
                env_log.info("deploy.environment.waiting_for_ready")
                await self._poll(request, environment, observed, env_log, desired_version=None)

            if artifact is not None:
                try:
                    await self._register_version(request, artifact, env_log)
                    report.version_created = True
                except UpstreamError as e:
                    # The label may already exist; the update below decides
                    report.version_error = e.message
                    env_log.warning("deploy.version.failed_continuing", error=e.message, **e.details)

            env_log.info("deploy.environment.updating", description=request.description)
            await self.client.update_environment(
                request.application,
                environment,
                request.version_label,
                request.description,
            )

            env_log.info(
                "deploy.environment.waiting",
                timeout_seconds=request.timeout.total_seconds(),
                poll_interval_seconds=request.poll_interval.total_seconds(),
            )
            await self._poll(
                request, environment, observed, env_log, desired_version=request.version_label
            )

        except DeployError as e:
            env_log.error(
                "deploy.environment.failed",
                outcome=e.outcome.value,
                error=e.message,
                polls=observed.polls,
                readiness_polls=observed.readiness_polls,
                **snapshot_fields(observed.snapshot, observed.event),
            )
            return EnvironmentResult(
                environment=environment,
                outcome=e.outcome,
                snapshot=observed.snapshot,
                event=observed.event,
                error=e.message,
                polls=observed.polls,
                readiness_polls=observed.readiness_polls,
                elapsed_seconds=self.clock.now() - started,
            )

        env_log.info(
            "deploy.environment.succeeded",
            polls=observed.polls,
            readiness_polls=observed.readiness_polls,
            **snapshot_fields(observed.snapshot, observed.event),
        )
        return EnvironmentResult(
            environment=environment,
            outcome=ReconciliationOutcome.SUCCEEDED,
            snapshot=observed.snapshot,
            event=observed.event,
            polls=observed.polls,
            readiness_polls=observed.readiness_polls,
            elapsed_seconds=self.clock.now() - started,
        )

    async def _poll(
        self,
        request: DeploymentRequest,
        environment: str,
        observed: _Observation,
        log: structlog.stdlib.BoundLogger,
        desired_version: str | None,
    ) -> None:
        """Poll one environment until it reaches a terminal state.

        With ``desired_version`` None only Ready is awaited and every other
        status keeps the loop going. Otherwise the snapshot is classified and
        anything but success raises.

        Raises:
            UpstreamError: A describe call failed
            VersionMismatchError: Ready on another version
            UnexpectedStatusError: Neither Updating nor Ready
            DeploymentTimeoutError: The deadline passed first
        """
        interval = request.poll_interval.total_seconds()
        timeout = request.timeout.total_seconds()
        started = self.clock.now()
        deadline = started + timeout
        next_tick = started + interval

        while True:
            # Wake on whichever comes first; a tick landing on the deadline is still served
            if next_tick > deadline:
                await self.clock.sleep_until(deadline)
                raise DeploymentTimeoutError(
                    environment,
                    f"timed out after {timeout:.0f}s",
                    observed.snapshot,
                    observed.event,
                )
            await self.clock.sleep_until(next_tick)

            snapshot = await self.client.describe_environment(request.application, environment)
            event = await self.client.describe_latest_event(request.application, environment)
            poll = observed.record(snapshot, event, readiness=desired_version is None)
            log.info(
                "deploy.environment.polled",
                phase="readiness" if desired_version is None else "rollout",
                poll=poll,
                **snapshot_fields(snapshot, event),
            )
            if is_degraded(snapshot):
                log.warning("deploy.environment.degraded", **snapshot_fields(snapshot, event))

            if desired_version is None:
                if is_ready(snapshot):
                    return
            else:
                outcome = classify(snapshot, desired_version)
                if outcome == ReconciliationOutcome.SUCCEEDED:
                    return
                if outcome == ReconciliationOutcome.VERSION_MISMATCH:
                    raise VersionMismatchError(
                        environment,
                        f"version mismatch: environment is Ready on "
                        f"{snapshot.version_label!r}, expected {desired_version!r}",
                        snapshot,
                        event,
                    )
                if outcome == ReconciliationOutcome.UNEXPECTED_STATUS:
                    raise UnexpectedStatusError(
                        environment,
                        f"environment is not updating (status {snapshot.status!r})",
                        snapshot,
                        event,
                    )

            now = self.clock.now()
            if now >= deadline:
                raise DeploymentTimeoutError(
                    environment,
                    f"timed out after {timeout:.0f}s",
                    snapshot,
                    event,
                )

            # Ticks missed during a slow call are dropped
            next_tick += interval
            while next_tick <= now:
                next_tick += interval
