"""Connectivity polling that raises the background sync signal."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from puppy_class.adapters.puppy_api_client import PuppyApiClient
from puppy_class.services.sync import DrainResult

logger = logging.getLogger(__name__)


@dataclass
class ConnectivityMonitor:
    """Poll server liveness and fire the sync tag while work is pending.

    A sync is pending after every offline to online change, after
    ``request_sync`` and while the previous drain left records behind. The
    pending flag is only cleared by a drain that completes without failures.
    """

    api_client: PuppyApiClient
    sync_tag: str
    on_sync: Callable[[str], Awaitable[DrainResult | None]]
    online: bool | None = None
    sync_pending: bool = False

    def request_sync(self) -> None:
        """Ask for a sync on the next successful check."""
        self.sync_pending = True

    async def check(self) -> bool:
        """Ping the server once and fire the sync tag if work is pending."""
        reachable = await self.api_client.ping()
        if not reachable:
            if self.online:
                logger.info("Connectivity lost")
            self.online = False
            return False
        if not self.online:
            logger.info("Connectivity restored", extra={"tag": self.sync_tag})
            self.sync_pending = True
        if self.sync_pending:
            result = await self.on_sync(self.sync_tag)
            self.sync_pending = result is not None and bool(result.failed)
        self.online = True
        return True

    async def run(self, interval_seconds: float, stop: asyncio.Event) -> None:
        """Poll until ``stop`` is set."""
        while not stop.is_set():
            try:
                await self.check()
            except Exception:
                logger.exception("Connectivity check failed")
            try:
                await asyncio.wait_for(stop.wait(), timeout=interval_seconds)
            except TimeoutError:
                continue
