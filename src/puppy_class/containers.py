"""Dependency container wiring for the server."""

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from puppy_class.adapters.supabase_photo_repository import SupabasePhotoRepository
from puppy_class.adapters.supabase_session_repository import (
    SupabaseSessionRepository,
)
from puppy_class.adapters.supabase_subscription_repository import (
    SupabaseSubscriptionRepository,
)
from puppy_class.adapters.webpush_sender import PyWebPushSender
from puppy_class.config import Settings
from puppy_class.services.push import PushService
from puppy_class.services.sessions import SessionService

logger = logging.getLogger(__name__)


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    session_service: SessionService
    push_service: PushService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    if resolved_settings.push_enabled:
        sender = PyWebPushSender(
            vapid_private_key=resolved_settings.vapid_private_key,
            vapid_subject=resolved_settings.vapid_subject,
        )
    else:
        logger.warning("VAPID keys missing. Push notifications will NOT work yet.")
        sender = None
    push_service = PushService(
        repository=SupabaseSubscriptionRepository(
            supabase_client, table_name=resolved_settings.supabase_subscriptions_table
        ),
        sender=sender,
    )
    session_service = SessionService(
        session_repository=SupabaseSessionRepository(
            supabase_client, table_name=resolved_settings.supabase_sessions_table
        ),
        photo_repository=SupabasePhotoRepository(
            supabase_client, bucket=resolved_settings.supabase_photo_bucket
        ),
        push_service=push_service,
    )

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=resolved_settings,
        session_service=session_service,
        push_service=push_service,
        close_resources=close_resources,
    )
