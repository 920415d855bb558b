"""Deployment data models."""

from datetime import timedelta
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, SecretStr, model_validator

from beanstalk_deploy.models.environment import EnvironmentSnapshot, RecentEvent

DEFAULT_POLL_INTERVAL = timedelta(seconds=10)
DEFAULT_TIMEOUT = timedelta(minutes=20)


class ReconciliationOutcome(str, Enum):
    """Terminal result of reconciling one environment."""

    SUCCEEDED = "succeeded"
    VERSION_MISMATCH = "version_mismatch"
    UNEXPECTED_STATUS = "unexpected_status"
    UPSTREAM_ERROR = "upstream_error"
    TIMED_OUT = "timed_out"


class Credentials(BaseModel):
    """Static access-key credentials."""

    model_config = ConfigDict(frozen=True)

    access_key_id: str = Field(..., min_length=1)
    secret_access_key: SecretStr
    session_token: SecretStr | None = None


class ArtifactLocation(BaseModel):
    """Where the source bundle for a new version lives."""

    model_config = ConfigDict(frozen=True)

    bucket: str = Field(..., min_length=1)
    key: str = Field(..., min_length=1)


class DeploymentRequest(BaseModel):
    """Everything one invocation needs. Built once, never mutated."""

    model_config = ConfigDict(frozen=True)

    region: str = Field(default="us-east-1", min_length=1)
    credentials: Credentials | None = None
    artifact: ArtifactLocation | None = None

    application: str = Field(..., min_length=1)
    environments: tuple[str, ...] = ()
    version_label: str = Field(..., min_length=1)
    description: str = ""

    auto_create: bool = False
    process: bool = False
    environment_update: bool = False
    wait_for_ready: bool = False

    timeout: timedelta = DEFAULT_TIMEOUT
    poll_interval: timedelta = DEFAULT_POLL_INTERVAL

    @model_validator(mode="after")
    def validate_request(self) -> "DeploymentRequest":
        """Reject requests that cannot run."""
        if self.timeout <= timedelta(0):
            raise ValueError("timeout must be positive")
        if self.poll_interval <= timedelta(0):
            raise ValueError("poll_interval must be positive")
        if self.environment_update and not self.environments:
            raise ValueError("environment_update requires at least one environment")
        if any(not name.strip() for name in self.environments):
            raise ValueError("environment names must not be blank")
        if len(set(self.environments)) != len(self.environments):
            raise ValueError("environment names must be unique")
        return self


class EnvironmentResult(BaseModel):
    """How one environment ended up."""

    environment: str
    outcome: ReconciliationOutcome
    snapshot: EnvironmentSnapshot | None = None
    event: RecentEvent | None = None
    error: str | None = None
    polls: int = 0
    readiness_polls: int = 0
    elapsed_seconds: float = 0.0

    @property
    def succeeded(self) -> bool:
        return self.outcome == ReconciliationOutcome.SUCCEEDED


class DeploymentReport(BaseModel):
    """Result of a whole invocation."""

    application: str
    version_label: str
    outcome: ReconciliationOutcome = ReconciliationOutcome.SUCCEEDED
    version_created: bool = False
    version_error: str | None = None
    environments: list[EnvironmentResult] = Field(default_factory=list)
    skipped_environments: list[str] = Field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return self.outcome == ReconciliationOutcome.SUCCEEDED
