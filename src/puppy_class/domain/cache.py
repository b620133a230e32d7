"""Domain models for cached responses."""

from dataclasses import dataclass

import httpx

# Headers that describe the transfer, not the stored body.
_TRANSFER_HEADERS = {"content-encoding", "content-length", "transfer-encoding"}


@dataclass(frozen=True)
class CachedResponse:
    """A response body and headers kept in the cache store."""

    status_code: int
    headers: list[tuple[str, str]]
    content: bytes

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    @classmethod
    def from_response(cls, response: httpx.Response) -> "CachedResponse":
        """Snapshot an already-read httpx response."""
        headers = [
            (name, value)
            for name, value in response.headers.multi_items()
            if name.lower() not in _TRANSFER_HEADERS
        ]
        return cls(
            status_code=response.status_code,
            headers=headers,
            content=response.content,
        )

    def to_response(
        self, request: httpx.Request | None = None, reason: str | None = None
    ) -> httpx.Response:
        """Build a fresh, independently consumable httpx response."""
        extensions = {"reason_phrase": reason.encode()} if reason else None
        response = httpx.Response(
            self.status_code,
            headers=self.headers,
            content=self.content,
            extensions=extensions,
        )
        if request is not None:
            response.request = request
        return response


def cache_url(url: httpx.URL, ignore_search: bool = False) -> str:
    """Normalize a URL into a cache lookup key."""
    normalized = str(url).split("#", 1)[0]
    if ignore_search:
        normalized = normalized.split("?", 1)[0]
    return normalized
