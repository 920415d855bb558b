"""Pytest configuration and fixtures."""

import asyncio
import os
from collections import defaultdict
from datetime import timedelta
from typing import Any, Callable

import pytest

from beanstalk_deploy.clients.base import ControlPlaneClient
from beanstalk_deploy.core.exceptions import UpstreamError
from beanstalk_deploy.core.timing import Clock
from beanstalk_deploy.models.deployment import ArtifactLocation, DeploymentRequest
from beanstalk_deploy.models.environment import EnvironmentSnapshot, RecentEvent, VersionHandle

# Anything that could leak from the developer's shell or a CI runner
_SETTINGS_ENV_PREFIXES = ("PLUGIN_", "AWS_ACCESS_KEY_ID", "AWS_SECRET_ACCESS_KEY")


class FakeClock(Clock):
    """Clock that only moves when slept on or advanced."""

    def __init__(self, start: float = 0.0):
        self._now = start
        self.sleeps: list[float] = []

    def now(self) -> float:
        return self._now

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self._now += seconds
        await asyncio.sleep(0)

    def advance(self, seconds: float) -> None:
        self._now += seconds


class FakeControlPlane(ControlPlaneClient):
    """In-memory control plane with scripted environment snapshots.

    Each describe call consumes the next snapshot for that environment; the
    last one repeats forever.
    """

    def __init__(
        self,
        snapshots: dict[str, list[EnvironmentSnapshot]] | None = None,
        clock: FakeClock | None = None,
        failures: dict[str, UpstreamError] | None = None,
        latency: float = 0.0,
        events: bool = True,
    ):
        super().__init__()
        self.scripts = {env: list(snaps) for env, snaps in (snapshots or {}).items()}
        self.clock = clock
        self.failures = failures or {}
        self.latency = latency
        self.events = events
        self.calls: list[tuple[str, str]] = []
        self.poll_times: dict[str, list[float]] = defaultdict(list)

    @property
    def name(self) -> str:
        return "fake"

    def _maybe_fail(self, operation: str) -> None:
        if operation in self.failures:
            raise self.failures[operation]

    def calls_to(self, operation: str) -> list[str]:
        return [target for op, target in self.calls if op == operation]

    async def create_version(self, request: DeploymentRequest) -> VersionHandle:
        self.calls.append(("create_version", request.version_label))
        self._maybe_fail("create_version")
        return VersionHandle(
            application=request.application,
            version_label=request.version_label,
            status="PROCESSED",
        )

    async def update_environment(
        self,
        application: str,
        environment: str,
        version_label: str,
        description: str = "",
    ) -> None:
        self.calls.append(("update_environment", environment))
        self._maybe_fail("update_environment")

    async def describe_environment(
        self, application: str, environment: str
    ) -> EnvironmentSnapshot:
        self.calls.append(("describe_environment", environment))
        if self.clock is not None:
            self.poll_times[environment].append(self.clock.now())
            self.clock.advance(self.latency)
        self._maybe_fail("describe_environment")

        script = self.scripts.get(environment)
        if not script:
            raise UpstreamError("DescribeEnvironments", f"{environment} not found", code="NotFound")
        return script.pop(0) if len(script) > 1 else script[0]

    async def describe_latest_event(
        self, application: str, environment: str
    ) -> RecentEvent | None:
        self.calls.append(("describe_latest_event", environment))
        self._maybe_fail("describe_latest_event")
        if not self.events:
            return None
        return RecentEvent(message=f"{environment}: poll {len(self.poll_times[environment])}")


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep settings tests independent of the surrounding environment."""
    for name in list(os.environ):
        if name.upper().startswith(_SETTINGS_ENV_PREFIXES):
            monkeypatch.delenv(name, raising=False)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def make_snapshot() -> Callable[..., EnvironmentSnapshot]:
    """Build snapshots with sensible defaults."""

    def _make(
        status: str = "Updating",
        version: str = "v4",
        name: str = "prod",
        health: str = "Green",
    ) -> EnvironmentSnapshot:
        return EnvironmentSnapshot(name=name, status=status, health=health, version_label=version)

    return _make


@pytest.fixture
def make_control_plane(clock: FakeClock) -> Callable[..., FakeControlPlane]:
    """Build a fake control plane tied to the test clock."""

    def _make(
        snapshots: dict[str, list[EnvironmentSnapshot]] | None = None, **kwargs: Any
    ) -> FakeControlPlane:
        kwargs.setdefault("clock", clock)
        return FakeControlPlane(snapshots, **kwargs)

    return _make


@pytest.fixture
def make_request() -> Callable[..., DeploymentRequest]:
    """Build a request for prod/v5 with a 30s timeout and 10s cadence."""

    def _make(**overrides: Any) -> DeploymentRequest:
        values: dict[str, Any] = {
            "region": "us-east-1",
            "application": "storefront",
            "environments": ("prod",),
            "version_label": "v5",
            "description": "build 512",
            "artifact": ArtifactLocation(bucket="builds", key="storefront/v5.zip"),
            "environment_update": True,
            "timeout": timedelta(seconds=30),
            "poll_interval": timedelta(seconds=10),
        }
        values.update(overrides)
        return DeploymentRequest(**values)

    return _make
