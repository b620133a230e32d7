"""Domain models for push subscriptions and notifications."""

from dataclasses import dataclass, field

from pydantic import BaseModel, ConfigDict, Field


class PushSubscriptionRecord(BaseModel):
    """A browser push subscription, unique by endpoint."""

    model_config = ConfigDict(extra="allow")

    endpoint: str
    keys: dict[str, str] = Field(default_factory=dict)


class NotificationPayload(BaseModel):
    """Push message sent from the server to subscribed clients."""

    model_config = ConfigDict(populate_by_name=True)

    title: str
    body: str = ""
    redirect_url: str | None = Field(default=None, alias="redirectUrl")


DEFAULT_NOTIFICATION = NotificationPayload(
    title="Puppy Yoga", body="Hello!", redirectUrl="/index.html"
)


@dataclass
class Notification:
    """A user-visible notification and its hidden metadata."""

    title: str
    body: str
    data: dict[str, str | None] = field(default_factory=dict)
    closed: bool = False

    def close(self) -> None:
        self.closed = True
