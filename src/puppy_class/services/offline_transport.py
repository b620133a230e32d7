"""Request interception that picks a caching strategy per request class.

``OfflineTransport`` wraps the real network transport of an
``httpx.AsyncClient``. Every GET the application sends is routed to one of
four hard-coded strategies:

* liveness probes go to the network only and never read the cache;
* API calls are network-first with a cache fallback and an empty list as
  the last resort;
* navigations walk a fallback chain that ends in a synthetic 503;
* everything else is cache-first with a network refill.

Other methods are forwarded untouched. Network failures never escape a
strategy; the caller always receives some response.
"""

import asyncio
import json
import logging
from dataclasses import dataclass
from enum import StrEnum
from typing import Protocol

import httpx

from puppy_class.domain.cache import CachedResponse
from puppy_class.errors import NetworkFailure

logger = logging.getLogger(__name__)

LIVENESS_PATHS = frozenset({"/api/ping"})
API_PREFIX = "/api/"
HOME_PAGE = "/index.html"
OFFLINE_PAGE = "/offline.html"
NOT_FOUND_PAGE = "/404.html"


class CacheStore(Protocol):
    """Versioned response cache."""

    async def open(self, name: str) -> None:
        """Create the named generation if missing."""

    async def keys(self) -> list[str]:
        """Return the names of all generations."""

    async def put(
        self, name: str, request: httpx.Request, response: CachedResponse
    ) -> None:
        """Store a GET response under a generation."""

    async def put_many(
        self, name: str, entries: list[tuple[httpx.Request, CachedResponse]]
    ) -> None:
        """Store several GET responses atomically."""

    async def match(
        self, url: httpx.URL, ignore_search: bool = False
    ) -> CachedResponse | None:
        """Return a cached response for the URL, if any."""

    async def delete(self, name: str) -> bool:
        """Delete a generation."""

    async def delete_all_except(self, name: str) -> list[str]:
        """Delete every other generation and return their names."""


class Strategy(StrEnum):
    """Handling strategy chosen for an intercepted request."""

    PASSTHROUGH = "passthrough"
    NETWORK_ONLY = "network-only"
    NETWORK_FIRST = "network-first"
    NAVIGATE = "navigate"
    CACHE_FIRST = "cache-first"


def is_navigation(request: httpx.Request) -> bool:
    """Return true when the request replaces the displayed page."""
    mode = request.extensions.get("mode") or request.headers.get("sec-fetch-mode")
    return mode == "navigate"


def classify(request: httpx.Request) -> Strategy:
    """Pick the strategy for a request by static routing rules."""
    if request.method != "GET":
        return Strategy.PASSTHROUGH
    path = request.url.path
    if path in LIVENESS_PATHS:
        return Strategy.NETWORK_ONLY
    if path.startswith(API_PREFIX):
        return Strategy.NETWORK_FIRST
    if is_navigation(request):
        return Strategy.NAVIGATE
    return Strategy.CACHE_FIRST


def _json_response(status_code: int, payload: object) -> httpx.Response:
    return httpx.Response(
        status_code,
        content=json.dumps(payload).encode(),
        headers={"Content-Type": "application/json"},
    )


def _offline_response() -> httpx.Response:
    return httpx.Response(
        503,
        text="Offline",
        extensions={"reason_phrase": b"Offline"},
    )


@dataclass
class OfflineTransport(httpx.AsyncBaseTransport):
    """httpx transport serving requests from network, cache or fallbacks."""

    network: httpx.AsyncBaseTransport
    cache: CacheStore
    cache_name: str
    timeout_seconds: float | None = None

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        strategy = classify(request)
        if strategy is Strategy.PASSTHROUGH:
            return await self.network.handle_async_request(request)
        if strategy is Strategy.NETWORK_ONLY:
            return await self.network_only(request)
        if strategy is Strategy.NETWORK_FIRST:
            return await self.network_first(request)
        if strategy is Strategy.NAVIGATE:
            return await self.navigate(request)
        return await self.cache_first(request)

    async def aclose(self) -> None:
        await self.network.aclose()

    async def network_only(self, request: httpx.Request) -> httpx.Response:
        """Always hit the network; report unavailability on failure."""
        try:
            fetched = await self._fetch(request)
        except NetworkFailure:
            logger.info("Liveness probe failed", extra={"url": str(request.url)})
            return _json_response(503, {"ok": False})
        return fetched.to_response()

    async def network_first(self, request: httpx.Request) -> httpx.Response:
        """Prefer fresh API data, fall back to the cache or an empty list."""
        try:
            fetched = await self._fetch(request)
        except NetworkFailure:
            cached = await self._lookup(request.url, ignore_search=True)
            if cached is not None:
                return cached.to_response()
            logger.info("Serving empty API fallback", extra={"url": str(request.url)})
            return _json_response(200, [])
        if fetched.ok:
            await self._remember(request, fetched)
        return fetched.to_response()

    async def navigate(self, request: httpx.Request) -> httpx.Response:
        """Resolve a navigation to the best available page."""
        try:
            fetched = await self._fetch(request)
        except NetworkFailure:
            return await self._offline_navigation(request)

        if fetched.ok:
            await self._remember(request, fetched)
            return fetched.to_response()

        cached_page = await self._cached_navigation(request)
        if cached_page is not None:
            return cached_page.to_response()
        not_found = await self._lookup(request.url.join(NOT_FOUND_PAGE))
        if not_found is not None:
            return not_found.to_response()
        return fetched.to_response()

    async def cache_first(self, request: httpx.Request) -> httpx.Response:
        """Serve static assets from cache, refilling it from the network."""
        cached = await self._lookup(request.url)
        if cached is not None:
            return cached.to_response()
        try:
            fetched = await self._fetch(request)
        except NetworkFailure:
            offline = await self._lookup(request.url.join(OFFLINE_PAGE))
            if offline is not None:
                return offline.to_response()
            return _offline_response()
        if fetched.ok:
            await self._remember(request, fetched)
        return fetched.to_response()

    async def _offline_navigation(self, request: httpx.Request) -> httpx.Response:
        cached_page = await self._cached_navigation(request)
        if cached_page is not None:
            return cached_page.to_response()
        for fallback in (OFFLINE_PAGE, HOME_PAGE):
            page = await self._lookup(request.url.join(fallback))
            if page is not None:
                return page.to_response()
        logger.info("No cached page for navigation", extra={"url": str(request.url)})
        return _offline_response()

    async def _cached_navigation(self, request: httpx.Request) -> CachedResponse | None:
        cached = await self._lookup(request.url, ignore_search=True)
        if cached is None:
            cached = await self._lookup(request.url.join(request.url.path))
        return cached

    async def _fetch(self, request: httpx.Request) -> CachedResponse:
        """Fetch from the network and read the whole body."""
        try:
            async with asyncio.timeout(self.timeout_seconds):
                response = await self.network.handle_async_request(request)
                try:
                    await response.aread()
                finally:
                    await response.aclose()
        except (httpx.TransportError, TimeoutError) as exc:
            raise NetworkFailure(f"{request.method} {request.url} failed") from exc
        return CachedResponse.from_response(response)

    async def _lookup(
        self, url: httpx.URL, ignore_search: bool = False
    ) -> CachedResponse | None:
        try:
            return await self.cache.match(url, ignore_search=ignore_search)
        except Exception:
            logger.exception("Cache lookup failed", extra={"url": str(url)})
            return None

    async def _remember(self, request: httpx.Request, response: CachedResponse) -> None:
        try:
            await self.cache.put(self.cache_name, request, response)
        except Exception:
            logger.exception(
                "Failed to cache response", extra={"url": str(request.url)}
            )
