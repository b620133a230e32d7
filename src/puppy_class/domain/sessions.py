"""Domain models for puppy class sessions."""

import secrets
from dataclasses import dataclass
from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict, Field


@dataclass(frozen=True)
class QueuedSession:
    """A session submitted while offline, waiting to be synced."""

    id: str
    ts: str
    breed: str
    notes: str
    image_blob: bytes

    @property
    def key(self) -> str:
        """Return the local store key for this session."""
        return self.id

    @property
    def photo_filename(self) -> str:
        return f"{self.id}.png"


class PuppySession(BaseModel):
    """A session stored by the server."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    ts: str
    breed: str = "Unknown breed"
    notes: str = ""
    photo_path: str = Field(alias="photoPath")


def new_session_id(now: datetime | None = None) -> str:
    """Return a time-sortable session id."""
    moment = now or datetime.now(tz=UTC)
    return f"{int(moment.timestamp() * 1000):013d}-{secrets.token_hex(4)}"


def utc_timestamp(now: datetime | None = None) -> str:
    """Return an ISO-8601 UTC timestamp."""
    moment = now or datetime.now(tz=UTC)
    return moment.isoformat().replace("+00:00", "Z")
