"""Puppy class server API client adapter."""

import base64
from dataclasses import dataclass
from typing import Protocol

import httpx

from puppy_class.domain.sessions import QueuedSession
from puppy_class.errors import NetworkFailure


class PuppyApiClient(Protocol):
    """Interface for calls to the puppy class server."""

    async def ping(self) -> bool:
        """Return true when the server answered the liveness probe."""

    async def upload_session(self, session: QueuedSession) -> httpx.Response:
        """POST a session as multipart form data and return the raw response."""

    async def list_sessions(self) -> list[dict[str, object]]:
        """Return stored sessions, newest first."""

    async def fetch_public_key(self) -> str:
        """Return the server's VAPID public key, empty when not configured."""

    async def save_subscription(self, subscription: dict[str, object]) -> None:
        """Register a push subscription with the server."""


@dataclass
class HttpxPuppyApiClient(PuppyApiClient):
    """Puppy class API client implemented with httpx."""

    http_client: httpx.AsyncClient

    @classmethod
    def create(
        cls, base_url: str, transport: httpx.AsyncBaseTransport | None = None
    ) -> "HttpxPuppyApiClient":
        """Create a client with a managed httpx session."""
        return cls(
            http_client=httpx.AsyncClient(base_url=base_url, transport=transport)
        )

    async def ping(self) -> bool:
        """Probe /api/ping; network failures count as offline."""
        try:
            response = await self.http_client.get("/api/ping")
        except httpx.TransportError:
            return False
        if not response.is_success:
            return False
        try:
            payload = response.json()
        except ValueError:
            return False
        return isinstance(payload, dict) and bool(payload.get("ok"))

    async def upload_session(self, session: QueuedSession) -> httpx.Response:
        """Send a session to /api/sessions."""
        data = {
            "id": session.id,
            "ts": session.ts,
            "breed": session.breed,
            "notes": session.notes,
        }
        files = {
            "sessionPhoto": (session.photo_filename, session.image_blob, "image/png")
        }
        try:
            return await self.http_client.post("/api/sessions", data=data, files=files)
        except httpx.TransportError as exc:
            raise NetworkFailure(f"Failed to upload session {session.id}") from exc

    async def list_sessions(self) -> list[dict[str, object]]:
        """Fetch stored sessions."""
        response = await self.http_client.get("/api/sessions")
        response.raise_for_status()
        payload = response.json()
        return payload if isinstance(payload, list) else []

    async def fetch_public_key(self) -> str:
        """Fetch the VAPID public key."""
        response = await self.http_client.get("/api/publicKey")
        response.raise_for_status()
        return str(response.json().get("publicKey") or "")

    async def save_subscription(self, subscription: dict[str, object]) -> None:
        """Store a push subscription on the server."""
        response = await self.http_client.post("/api/subscriptions", json=subscription)
        response.raise_for_status()

    async def close(self) -> None:
        """Close the underlying HTTP client session."""
        await self.http_client.aclose()


def decode_application_server_key(public_key: str) -> bytes:
    """Decode a URL-safe base64 VAPID key, restoring stripped padding."""
    padding = "=" * (-len(public_key) % 4)
    return base64.urlsafe_b64decode(public_key + padding)
