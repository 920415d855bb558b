"""AWS credential providers.

The CLI picks one provider up front; clients only ever ask it for a session.
"""

from abc import ABC, abstractmethod

import boto3
from botocore.exceptions import BotoCoreError

from beanstalk_deploy.core.exceptions import UpstreamError
from beanstalk_deploy.models.deployment import Credentials
from beanstalk_deploy.utils.logging import get_logger

logger = get_logger(__name__)


class CredentialProvider(ABC):
    """Source of AWS credentials."""

    @property
    @abstractmethod
    def name(self) -> str:
        pass

    @abstractmethod
    def session(self, region: str) -> boto3.Session:
        """Build a boto3 session bound to ``region``."""
        pass

    def resolve(self, region: str = "us-east-1") -> Credentials:
        """Resolve concrete credentials.

        Raises:
            UpstreamError: If no credentials can be found.
        """
        try:
            found = self.session(region).get_credentials()
        except BotoCoreError as e:
            raise UpstreamError("ResolveCredentials", str(e)) from e
        if found is None:
            raise UpstreamError(
                "ResolveCredentials", f"no credentials available from {self.name} provider"
            )
        frozen = found.get_frozen_credentials()
        return Credentials(
            access_key_id=frozen.access_key,
            secret_access_key=frozen.secret_key,
            session_token=frozen.token,
        )


class StaticCredentialProvider(CredentialProvider):
    """Explicit access key and secret."""

    def __init__(self, credentials: Credentials):
        self.credentials = credentials

    @property
    def name(self) -> str:
        return "static"

    def session(self, region: str) -> boto3.Session:
        token = self.credentials.session_token
        return boto3.Session(
            aws_access_key_id=self.credentials.access_key_id,
            aws_secret_access_key=self.credentials.secret_access_key.get_secret_value(),
            aws_session_token=token.get_secret_value() if token else None,
            region_name=region,
        )

    def resolve(self, region: str = "us-east-1") -> Credentials:
        return self.credentials


class AmbientCredentialProvider(CredentialProvider):
    """boto3 default chain: env, shared config, instance or task role."""

    @property
    def name(self) -> str:
        return "ambient"

    def session(self, region: str) -> boto3.Session:
        return boto3.Session(region_name=region)


def select_credential_provider(credentials: Credentials | None) -> CredentialProvider:
    """Pick static credentials when given, otherwise fall back to the ambient chain."""
    if credentials is not None:
        return StaticCredentialProvider(credentials)

    logger.warning(
        "credentials.ambient_fallback",
        reason="access key and/or secret not provided, falling back to instance profile",
    )
    return AmbientCredentialProvider()
