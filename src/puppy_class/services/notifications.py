"""Push event handling and notification clicks."""

import logging
from dataclasses import dataclass
from typing import Protocol

from pydantic import ValidationError

from puppy_class.domain.push import (
    DEFAULT_NOTIFICATION,
    Notification,
    NotificationPayload,
)
from puppy_class.errors import PayloadParseFailure

logger = logging.getLogger(__name__)

HOME_PATH = "/index.html"


class Notifier(Protocol):
    """Surface notifications and windows to the user."""

    async def show_notification(
        self, title: str, body: str, data: dict[str, str | None]
    ) -> Notification:
        """Display a notification and return a handle to it."""

    async def open_window(self, url: str) -> None:
        """Open or focus a window at the given URL."""


def parse_payload(data: bytes | str | None) -> NotificationPayload:
    """Parse a push payload, raising PayloadParseFailure on bad input."""
    if not data:
        raise PayloadParseFailure("Push event carried no payload")
    try:
        return NotificationPayload.model_validate_json(data)
    except ValidationError as exc:
        raise PayloadParseFailure(str(exc)) from exc


@dataclass
class NotificationDispatcher:
    """Turn push events into notifications and route clicks."""

    notifier: Notifier
    home_path: str = HOME_PATH

    async def handle_push(self, data: bytes | str | None) -> Notification:
        """Show a notification for a push event, never dropping it."""
        try:
            payload = parse_payload(data)
        except PayloadParseFailure as exc:
            logger.warning("Using default notification payload: %s", exc)
            payload = DEFAULT_NOTIFICATION
        return await self.notifier.show_notification(
            payload.title,
            payload.body,
            {"redirectUrl": payload.redirect_url},
        )

    async def handle_click(self, notification: Notification) -> str:
        """Close the notification and open its redirect target."""
        url = notification.data.get("redirectUrl") or self.home_path
        notification.close()
        await self.notifier.open_window(url)
        return url
