"""App shell precaching and cache generation cutover."""

import logging
from dataclasses import dataclass

import httpx

from puppy_class.domain.cache import CachedResponse
from puppy_class.errors import PrecacheError
from puppy_class.services.offline_transport import CacheStore

logger = logging.getLogger(__name__)

APP_SHELL = (
    "/",
    "/index.html",
    "/addsession.html",
    "/offline.html",
    "/404.html",
    "/manifest.json",
    "/styles/styles.css",
    "/push.js",
    "/idb.js",
    "/img/android/android-launchericon-192-192.png",
    "/img/android/android-launchericon-512-512.png",
)


@dataclass
class CacheLifecycle:
    """Install and activate the current cache generation."""

    cache: CacheStore
    network: httpx.AsyncClient
    cache_name: str
    app_shell: tuple[str, ...] = APP_SHELL

    async def install(self) -> int:
        """Precache the app shell; nothing is stored unless every fetch works."""
        entries: list[tuple[httpx.Request, CachedResponse]] = []
        for path in self.app_shell:
            request = self.network.build_request("GET", path)
            try:
                response = await self.network.send(request)
            except httpx.TransportError as exc:
                raise PrecacheError(f"Failed to fetch {path}") from exc
            if not response.is_success:
                raise PrecacheError(f"Fetching {path} returned {response.status_code}")
            entries.append((request, CachedResponse.from_response(response)))
        await self.cache.open(self.cache_name)
        await self.cache.put_many(self.cache_name, entries)
        logger.info(
            "Precached app shell",
            extra={"cache_name": self.cache_name, "entries": len(entries)},
        )
        return len(entries)

    async def activate(self) -> list[str]:
        """Delete every cache generation except the current one."""
        return await self.cache.delete_all_except(self.cache_name)
