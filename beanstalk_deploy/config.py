"""Invocation configuration using pydantic-settings.

Values come from ``PLUGIN_*`` environment variables (the names a Drone plugin
step receives), a ``.env`` file, or keyword overrides passed by the CLI.
"""

from datetime import timedelta
from typing import Annotated, Any, Literal

from dotenv import load_dotenv
from pydantic import AliasChoices, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from beanstalk_deploy.core.exceptions import ConfigError
from beanstalk_deploy.models.deployment import ArtifactLocation, Credentials, DeploymentRequest

# Load .env without clobbering what the CI runner already exported
load_dotenv(override=False)


class Settings(BaseSettings):
    """Deployment settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # AWS
    access_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("PLUGIN_ACCESS_KEY", "AWS_ACCESS_KEY_ID"),
    )
    secret_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("PLUGIN_SECRET_KEY", "AWS_SECRET_ACCESS_KEY"),
    )
    region: str = Field(
        default="us-east-1",
        validation_alias=AliasChoices("PLUGIN_REGION"),
    )

    # Artifact
    bucket: str | None = Field(
        default=None,
        validation_alias=AliasChoices("PLUGIN_BUCKET"),
    )
    bucket_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("PLUGIN_BUCKET_KEY"),
    )

    # Target
    application: str = Field(
        default="",
        validation_alias=AliasChoices("PLUGIN_APPLICATION"),
    )
    environments: Annotated[list[str], NoDecode] = Field(
        default_factory=list,
        validation_alias=AliasChoices("PLUGIN_ENVIRONMENTS", "PLUGIN_ENVIRONMENT_NAME"),
    )
    version_label: str = Field(
        default="",
        validation_alias=AliasChoices("PLUGIN_VERSION_LABEL"),
    )
    description: str = Field(
        default="",
        validation_alias=AliasChoices("PLUGIN_DESCRIPTION"),
    )

    # Behaviour flags
    auto_create: bool = Field(
        default=False,
        validation_alias=AliasChoices("PLUGIN_AUTO_CREATE"),
    )
    process: bool = Field(
        default=False,
        validation_alias=AliasChoices("PLUGIN_PROCESS"),
    )
    environment_update: bool = Field(
        default=False,
        validation_alias=AliasChoices("PLUGIN_ENVIRONMENT_UPDATE"),
    )
    wait_for_ready: bool = Field(
        default=False,
        validation_alias=AliasChoices("PLUGIN_WAIT_FOR_READY"),
    )

    # Timing
    timeout: int = Field(
        default=20,
        description="Deploy timeout in minutes",
        validation_alias=AliasChoices("PLUGIN_TIMEOUT"),
    )
    poll_interval: float = Field(
        default=10.0,
        description="Seconds between environment polls",
        validation_alias=AliasChoices("PLUGIN_POLL_INTERVAL"),
    )

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        validation_alias=AliasChoices("PLUGIN_LOG_LEVEL"),
    )
    log_format: Literal["console", "json"] = Field(
        default="console",
        validation_alias=AliasChoices("PLUGIN_LOG_FORMAT"),
    )

    @field_validator("environments", mode="before")
    @classmethod
    def split_environments(cls, value: Any) -> Any:
        """Accept ``a,b`` strings as well as lists."""
        if isinstance(value, str):
            return [part.strip() for part in value.split(",") if part.strip()]
        return value

    @field_validator("log_level", mode="before")
    @classmethod
    def upper_log_level(cls, value: Any) -> Any:
        return value.upper() if isinstance(value, str) else value

    @field_validator("timeout")
    @classmethod
    def positive_timeout(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("timeout must be a positive number of minutes")
        return value

    @field_validator("poll_interval")
    @classmethod
    def positive_poll_interval(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("poll_interval must be a positive number of seconds")
        return value

    @property
    def has_static_credentials(self) -> bool:
        """Check whether both halves of an access key were provided."""
        return bool(self.access_key and self.secret_key)

    def to_request(self) -> DeploymentRequest:
        """Build the immutable request the orchestrator consumes.

        Raises:
            ConfigError: If the settings do not describe a runnable deployment.
        """
        if not self.application:
            raise ConfigError("application is required", {"setting": "application"})
        if not self.version_label:
            raise ConfigError("version label is required", {"setting": "version_label"})
        if bool(self.bucket) != bool(self.bucket_key):
            raise ConfigError(
                "bucket and bucket key must be given together",
                {"bucket": self.bucket, "bucket_key": self.bucket_key},
            )

        try:
            return DeploymentRequest(
                region=self.region,
                credentials=(
                    Credentials(access_key_id=self.access_key, secret_access_key=self.secret_key)
                    if self.has_static_credentials
                    else None
                ),
                artifact=(
                    ArtifactLocation(bucket=self.bucket, key=self.bucket_key)
                    if self.bucket and self.bucket_key
                    else None
                ),
                application=self.application,
                environments=tuple(self.environments),
                version_label=self.version_label,
                description=self.description,
                auto_create=self.auto_create,
                process=self.process,
                environment_update=self.environment_update,
                wait_for_ready=self.wait_for_ready,
                timeout=timedelta(minutes=self.timeout),
                poll_interval=timedelta(seconds=self.poll_interval),
            )
        except ValidationError as e:
            raise ConfigError(f"invalid deployment request: {e}") from e


def _init_key(name: str) -> str:
    """Key an override under the same alias the env source reads first."""
    alias = Settings.model_fields[name].validation_alias
    if isinstance(alias, AliasChoices):
        return str(alias.choices[0])
    return name


def load_settings(**overrides: Any) -> Settings:
    """Load settings, with non-None overrides taking precedence over the environment.

    Overrides are passed as init values so an invalid exported variable they
    replace is never validated.

    Raises:
        ConfigError: If a value fails validation.
    """
    values = {_init_key(key): value for key, value in overrides.items() if value is not None}
    try:
        return Settings(**values)
    except ValidationError as e:
        raise ConfigError(f"invalid configuration: {e}") from e
