"""Background sync of sessions queued while offline."""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Protocol

from puppy_class.adapters.puppy_api_client import PuppyApiClient
from puppy_class.domain.sessions import QueuedSession
from puppy_class.errors import SyncRecordFailure

logger = logging.getLogger(__name__)


class LocalStore(Protocol):
    """Durable key-value store of queued sessions."""

    async def put(self, key: str, value: QueuedSession) -> None:
        """Store a session atomically."""

    async def delete(self, key: str) -> None:
        """Remove a session."""

    async def list_entries(self) -> list[tuple[str, QueuedSession]]:
        """Return a snapshot of all queued sessions."""


@dataclass(frozen=True)
class DrainResult:
    """Outcome of one drain pass."""

    delivered: list[str]
    failed: list[str]


@dataclass
class SyncDrainer:
    """Deliver queued sessions and forget the ones the server acknowledged."""

    store: LocalStore
    api_client: PuppyApiClient
    tag: str = "sync-sessions"
    _lock: asyncio.Lock = field(default_factory=asyncio.Lock, init=False, repr=False)

    async def handle_sync(self, tag: str) -> DrainResult | None:
        """Run a drain when the sync signal carries our tag."""
        if tag != self.tag:
            logger.debug("Ignoring sync tag", extra={"tag": tag})
            return None
        return await self.drain()

    async def drain(self) -> DrainResult:
        """Attempt delivery of every queued session, one at a time."""
        async with self._lock:
            entries = await self.store.list_entries()
            delivered: list[str] = []
            failed: list[str] = []
            for key, session in entries:
                try:
                    await self._deliver(key, session)
                except SyncRecordFailure as exc:
                    reason = exc.reason
                except Exception as exc:
                    reason = f"{type(exc).__name__}: {exc}"
                else:
                    delivered.append(key)
                    continue
                # one bad record never aborts the batch
                logger.warning("Session left queued: %s", reason, extra={"key": key})
                failed.append(key)
            if entries:
                logger.info(
                    "Drained offline queue",
                    extra={"delivered": len(delivered), "failed": len(failed)},
                )
            return DrainResult(delivered=delivered, failed=failed)

    async def _deliver(self, key: str, session: QueuedSession) -> None:
        response = await self.api_client.upload_session(session)
        if not response.is_success:
            raise SyncRecordFailure(key, f"server answered {response.status_code}")
        payload = response.json()
        if not isinstance(payload, dict) or payload.get("success") is False:
            raise SyncRecordFailure(key, "server did not accept the session")
        acknowledged = str(payload.get("id") or "")
        if acknowledged != key:
            raise SyncRecordFailure(key, f"acknowledged id {acknowledged!r}")
        await self.store.delete(acknowledged)
