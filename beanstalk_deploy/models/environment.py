"""Environment data models as reported by the control plane."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict


class EnvironmentStatus(str, Enum):
    """Well-known environment lifecycle statuses.

    The platform owns this enum and may add values, so snapshots carry the
    raw string and compare against these members.
    """

    LAUNCHING = "Launching"
    UPDATING = "Updating"
    READY = "Ready"
    TERMINATING = "Terminating"
    TERMINATED = "Terminated"


class EnvironmentHealth(str, Enum):
    """Well-known environment health colours."""

    GREEN = "Green"
    YELLOW = "Yellow"
    RED = "Red"
    GREY = "Grey"


class EnvironmentSnapshot(BaseModel):
    """Point-in-time read of one environment."""

    model_config = ConfigDict(frozen=True)

    name: str
    status: str
    health: str = ""
    version_label: str = ""


class RecentEvent(BaseModel):
    """Latest diagnostic event for an application/environment pair."""

    model_config = ConfigDict(frozen=True)

    message: str
    severity: str | None = None
    event_date: datetime | None = None


class VersionHandle(BaseModel):
    """A registered application version."""

    model_config = ConfigDict(frozen=True)

    application: str
    version_label: str
    status: str | None = None
