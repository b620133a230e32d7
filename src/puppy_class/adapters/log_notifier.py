"""Notifier that logs notifications and opens the system browser."""

import asyncio
import logging
import webbrowser
from dataclasses import dataclass
from urllib.parse import urljoin

from puppy_class.domain.push import Notification
from puppy_class.services.notifications import Notifier

logger = logging.getLogger(__name__)


@dataclass
class LoggingNotifier(Notifier):
    """Default notifier for headless clients."""

    base_url: str
    open_browser: bool = True

    async def show_notification(
        self, title: str, body: str, data: dict[str, str | None]
    ) -> Notification:
        """Log the notification and return its handle."""
        logger.info("%s: %s", title, body, extra={"notification_data": data})
        return Notification(title=title, body=body, data=dict(data))

    async def open_window(self, url: str) -> None:
        """Open the URL, resolved against the server, in the system browser."""
        target = urljoin(self.base_url, url)
        logger.info("Opening %s", target)
        if self.open_browser:
            await asyncio.to_thread(webbrowser.open, target)
