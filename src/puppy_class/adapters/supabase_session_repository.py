"""Supabase-backed session repository."""

from dataclasses import dataclass

from supabase import Client

from puppy_class.domain.sessions import PuppySession
from puppy_class.services.sessions import SessionRepository


@dataclass
class SupabaseSessionRepository(SessionRepository):
    """Supabase implementation for puppy class sessions."""

    client: Client
    table_name: str = "puppy_sessions"

    def create_session(self, session: PuppySession) -> None:
        """Insert or replace the session row with the same id."""
        response = (
            self.client.table(self.table_name)
            .upsert(
                {
                    "id": session.id,
                    "ts": session.ts,
                    "breed": session.breed,
                    "notes": session.notes,
                    "photo_path": session.photo_path,
                },
                on_conflict="id",
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create session")

    def list_sessions(self) -> list[PuppySession]:
        """Return all sessions ordered by timestamp, newest first."""
        response = (
            self.client.table(self.table_name)
            .select("id, ts, breed, notes, photo_path")
            .order("ts", desc=True)
            .execute()
        )
        return [
            PuppySession(
                id=row["id"],
                ts=row.get("ts") or "",
                breed=row.get("breed") or "Unknown breed",
                notes=row.get("notes") or "",
                photoPath=row.get("photo_path") or "",
            )
            for row in response.data or []
        ]
