"""Server-side storage of puppy class sessions."""

import logging
import re
from dataclasses import dataclass
from typing import Protocol

from puppy_class.domain.sessions import PuppySession, utc_timestamp
from puppy_class.services.push import PushService

logger = logging.getLogger(__name__)

_UNSAFE_ID_CHARS = re.compile(r"[^a-z0-9_-]", re.IGNORECASE)


class SessionRepository(Protocol):
    """Persistence interface for stored sessions."""

    def create_session(self, session: PuppySession) -> None:
        """Store a session, replacing any earlier one with the same id."""

    def list_sessions(self) -> list[PuppySession]:
        """Return all stored sessions."""


class PhotoRepository(Protocol):
    """Persistence interface for session photos."""

    def save_photo(self, filename: str, content: bytes, content_type: str) -> str:
        """Store a photo and return the path it is served from."""


@dataclass
class SessionService:
    """Store uploaded sessions and announce them to subscribers."""

    session_repository: SessionRepository
    photo_repository: PhotoRepository
    push_service: PushService

    async def create_session(  # noqa: PLR0913
        self,
        session_id: str,
        ts: str | None,
        breed: str | None,
        notes: str | None,
        photo_filename: str,
        photo: bytes,
        photo_content_type: str = "image/png",
    ) -> PuppySession:
        """Persist the photo and session, then push a sync notice."""
        stored_name = photo_storage_name(session_id, photo_filename)
        photo_path = self.photo_repository.save_photo(
            stored_name, photo, photo_content_type
        )
        session = PuppySession(
            id=session_id,
            ts=ts or utc_timestamp(),
            breed=breed or "Unknown breed",
            notes=notes or "",
            photoPath=photo_path,
        )
        self.session_repository.create_session(session)
        logger.info("Stored session", extra={"session_id": session.id})
        await self.push_service.send_to_all(f"Session synced ({session.breed})")
        return session

    def list_sessions(self) -> list[PuppySession]:
        """Return stored sessions, newest first."""
        sessions = self.session_repository.list_sessions()
        return sorted(sessions, key=lambda session: session.ts or "", reverse=True)


def photo_storage_name(session_id: str, original_filename: str) -> str:
    """Build a storage-safe photo name that keeps the uploaded name readable."""
    safe_id = _UNSAFE_ID_CHARS.sub("", session_id) or "session"
    return f"{safe_id}/{original_filename.replace(':', '-')}"
