"""Push subscription bookkeeping and fan-out."""

import asyncio
import logging
from dataclasses import dataclass
from typing import Protocol

from puppy_class.domain.push import NotificationPayload, PushSubscriptionRecord

logger = logging.getLogger(__name__)

_GONE_STATUSES = {404, 410}


class SubscriptionRepository(Protocol):
    """Persistence interface for push subscriptions."""

    def get_by_endpoint(self, endpoint: str) -> PushSubscriptionRecord | None:
        """Return the subscription for an endpoint, if present."""

    def create_subscription(self, subscription: PushSubscriptionRecord) -> None:
        """Store a new subscription."""

    def list_subscriptions(self) -> list[PushSubscriptionRecord]:
        """Return every stored subscription."""

    def delete_subscription(self, endpoint: str) -> None:
        """Remove the subscription for an endpoint."""


class PushSender(Protocol):
    """Deliver a single push message."""

    def send(self, subscription: PushSubscriptionRecord, payload: str) -> None:
        """Send a payload, raising PushDeliveryError on failure."""


class PushDeliveryError(RuntimeError):
    """A push message could not be delivered."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code

    @property
    def subscription_gone(self) -> bool:
        return self.status_code in _GONE_STATUSES


@dataclass
class PushService:
    """Register subscriptions and notify all of them."""

    repository: SubscriptionRepository
    sender: PushSender | None
    title: str = "Puppy Yoga"
    redirect_url: str = "/index.html"

    def subscribe(self, subscription: PushSubscriptionRecord) -> bool:
        """Store the subscription unless its endpoint is known; return true if new."""
        if self.repository.get_by_endpoint(subscription.endpoint):
            return False
        self.repository.create_subscription(subscription)
        return True

    async def send_to_all(self, message: str) -> int:
        """Push a message to every subscriber and return the delivery count."""
        if self.sender is None:
            return 0
        payload = NotificationPayload(
            title=self.title, body=message, redirectUrl=self.redirect_url
        ).model_dump_json(by_alias=True)
        delivered = 0
        for subscription in self.repository.list_subscriptions():
            try:
                await asyncio.to_thread(self.sender.send, subscription, payload)
            except PushDeliveryError as exc:
                if exc.subscription_gone:
                    logger.info(
                        "Removing expired subscription",
                        extra={"endpoint": subscription.endpoint},
                    )
                    self.repository.delete_subscription(subscription.endpoint)
                else:
                    logger.warning(
                        "Push delivery failed: %s",
                        exc,
                        extra={"endpoint": subscription.endpoint},
                    )
                continue
            delivered += 1
        return delivered
