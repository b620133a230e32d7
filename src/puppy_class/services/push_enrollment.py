"""Enable and disable push notifications for this client."""

import logging
from dataclasses import dataclass
from typing import Protocol

import httpx

from puppy_class.adapters.puppy_api_client import (
    PuppyApiClient,
    decode_application_server_key,
)

logger = logging.getLogger(__name__)


class PushManager(Protocol):
    """Platform push service holding this client's subscription."""

    async def get_subscription(self) -> dict[str, object] | None:
        """Return the current subscription, if any."""

    async def subscribe(self, application_server_key: bytes) -> dict[str, object]:
        """Create a subscription bound to the server's VAPID key."""

    async def unsubscribe(self) -> None:
        """Drop the current subscription."""


@dataclass(frozen=True)
class EnrollmentResult:
    """Outcome of an enable or disable attempt."""

    ok: bool
    already: bool = False
    reason: str | None = None
    detail: str | None = None


@dataclass
class PushEnrollment:
    """Subscribe this client to server pushes exactly once."""

    push_manager: PushManager
    api_client: PuppyApiClient

    async def enable(self) -> EnrollmentResult:
        """Subscribe and register with the server unless already subscribed."""
        if await self.push_manager.get_subscription():
            return EnrollmentResult(ok=True, already=True)
        try:
            public_key = await self.api_client.fetch_public_key()
        except httpx.HTTPError:
            logger.exception("Failed to fetch push public key")
            return EnrollmentResult(ok=False, reason="publickey-endpoint-failed")
        if not public_key:
            return EnrollmentResult(
                ok=False,
                reason="missing-vapid-on-server",
                detail="Set VAPID_PUBLIC_KEY/VAPID_PRIVATE_KEY in server env.",
            )
        try:
            subscription = await self.push_manager.subscribe(
                decode_application_server_key(public_key)
            )
        except Exception as exc:
            logger.exception("Failed to subscribe to push")
            return EnrollmentResult(ok=False, reason="exception", detail=str(exc))
        try:
            await self.api_client.save_subscription(subscription)
        except httpx.HTTPError:
            logger.exception("Failed to save push subscription")
            return EnrollmentResult(ok=False, reason="save-subscription-failed")
        return EnrollmentResult(ok=True)

    async def disable(self) -> EnrollmentResult:
        """Remove the local push subscription."""
        if not await self.push_manager.get_subscription():
            return EnrollmentResult(ok=True, already=True)
        try:
            await self.push_manager.unsubscribe()
        except Exception as exc:
            logger.exception("Failed to unsubscribe from push")
            return EnrollmentResult(
                ok=False, reason="unsubscribe-failed", detail=str(exc)
            )
        return EnrollmentResult(ok=True)
