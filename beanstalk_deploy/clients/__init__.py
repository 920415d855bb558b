"""Control-plane clients and credential providers."""

from beanstalk_deploy.clients.base import ControlPlaneClient
from beanstalk_deploy.clients.beanstalk import BeanstalkClient
from beanstalk_deploy.clients.credentials import (
    AmbientCredentialProvider,
    CredentialProvider,
    StaticCredentialProvider,
    select_credential_provider,
)

__all__ = [
    "ControlPlaneClient",
    "BeanstalkClient",
    "CredentialProvider",
    "StaticCredentialProvider",
    "AmbientCredentialProvider",
    "select_credential_provider",
]
