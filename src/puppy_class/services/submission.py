"""Session submission that falls back to the offline queue."""

import logging
from collections.abc import Callable
from dataclasses import dataclass

from puppy_class.adapters.puppy_api_client import PuppyApiClient
from puppy_class.domain.sessions import QueuedSession, new_session_id, utc_timestamp
from puppy_class.errors import NetworkFailure, SubmissionRejected
from puppy_class.services.sync import LocalStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SubmissionResult:
    """Where a submitted session ended up."""

    session: QueuedSession
    queued: bool


@dataclass
class SessionSubmitter:
    """Submit sessions online, or queue them for the next sync."""

    api_client: PuppyApiClient
    store: LocalStore
    request_sync: Callable[[], None] | None = None

    async def submit(self, breed: str, notes: str, image: bytes) -> SubmissionResult:
        """Send a new session to the server, queueing it when offline.

        Raises SubmissionRejected when the server refuses the session and
        StorageUnavailable when it cannot be queued locally.
        """
        session = QueuedSession(
            id=new_session_id(),
            ts=utc_timestamp(),
            breed=breed,
            notes=notes,
            image_blob=image,
        )
        try:
            response = await self.api_client.upload_session(session)
        except NetworkFailure:
            await self.store.put(session.key, session)
            logger.info("Queued session for sync", extra={"session_id": session.id})
            if self.request_sync is not None:
                self.request_sync()
            return SubmissionResult(session=session, queued=True)
        if not response.is_success:
            raise SubmissionRejected(response.status_code)
        return SubmissionResult(session=session, queued=False)
