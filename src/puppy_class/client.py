"""Offline client wiring."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

import httpx

from puppy_class.adapters.log_notifier import LoggingNotifier
from puppy_class.adapters.puppy_api_client import HttpxPuppyApiClient
from puppy_class.adapters.sqlite_cache_store import SqliteCacheStore
from puppy_class.adapters.sqlite_local_store import SqliteLocalStore
from puppy_class.app_logging import configure_logging
from puppy_class.config import ClientSettings
from puppy_class.errors import PrecacheError
from puppy_class.services.connectivity import ConnectivityMonitor
from puppy_class.services.lifecycle import CacheLifecycle
from puppy_class.services.notifications import NotificationDispatcher, Notifier
from puppy_class.services.offline_transport import OfflineTransport
from puppy_class.services.push_enrollment import PushEnrollment, PushManager
from puppy_class.services.submission import SessionSubmitter
from puppy_class.services.sync import SyncDrainer

logger = logging.getLogger(__name__)


@dataclass
class OfflineClient:
    """Holds the client-side offline resilience components."""

    settings: ClientSettings
    http_client: httpx.AsyncClient
    local_store: SqliteLocalStore
    cache_store: SqliteCacheStore
    lifecycle: CacheLifecycle
    api_client: HttpxPuppyApiClient
    drainer: SyncDrainer
    dispatcher: NotificationDispatcher
    submitter: SessionSubmitter
    monitor: ConnectivityMonitor
    push_enrollment: PushEnrollment | None
    close_resources: Callable[[], Awaitable[None]]

    async def start(self) -> None:
        """Install and activate the cache generation, then check connectivity."""
        try:
            await self.lifecycle.install()
        except PrecacheError:
            # keep serving the previous generation until a later install works
            logger.exception("App shell precache failed")
        else:
            await self.lifecycle.activate()
        await self.monitor.check()

    async def run(self, stop: asyncio.Event) -> None:
        """Poll connectivity until stopped."""
        await self.monitor.run(self.settings.connectivity_poll_seconds, stop)


def build_offline_client(
    settings: ClientSettings | None = None,
    network: httpx.AsyncBaseTransport | None = None,
    notifier: Notifier | None = None,
    push_manager: PushManager | None = None,
) -> OfflineClient:
    """Create the default offline client."""
    resolved_settings = settings or ClientSettings()
    configure_logging(resolved_settings.log_level)
    network_transport = network or httpx.AsyncHTTPTransport()
    local_store = SqliteLocalStore(resolved_settings.database_path)
    cache_store = SqliteCacheStore(resolved_settings.database_path)
    transport = OfflineTransport(
        network=network_transport,
        cache=cache_store,
        cache_name=resolved_settings.cache_name,
        timeout_seconds=resolved_settings.network_timeout_seconds,
    )
    http_client = httpx.AsyncClient(
        base_url=resolved_settings.server_base_url, transport=transport
    )
    precache_client = httpx.AsyncClient(
        base_url=resolved_settings.server_base_url, transport=network_transport
    )
    api_client = HttpxPuppyApiClient(http_client=http_client)
    drainer = SyncDrainer(
        store=local_store, api_client=api_client, tag=resolved_settings.sync_tag
    )
    monitor = ConnectivityMonitor(
        api_client=api_client,
        sync_tag=resolved_settings.sync_tag,
        on_sync=drainer.handle_sync,
    )
    dispatcher = NotificationDispatcher(
        notifier or LoggingNotifier(base_url=resolved_settings.server_base_url)
    )
    enrollment = (
        PushEnrollment(push_manager=push_manager, api_client=api_client)
        if push_manager is not None
        else None
    )

    async def close_resources() -> None:
        await precache_client.aclose()
        await http_client.aclose()
        await local_store.close()
        await cache_store.close()

    return OfflineClient(
        settings=resolved_settings,
        http_client=http_client,
        local_store=local_store,
        cache_store=cache_store,
        lifecycle=CacheLifecycle(
            cache=cache_store,
            network=precache_client,
            cache_name=resolved_settings.cache_name,
        ),
        api_client=api_client,
        drainer=drainer,
        dispatcher=dispatcher,
        submitter=SessionSubmitter(
            api_client=api_client,
            store=local_store,
            request_sync=monitor.request_sync,
        ),
        monitor=monitor,
        push_enrollment=enrollment,
        close_resources=close_resources,
    )
