"""Supabase-backed push subscription repository."""

from dataclasses import dataclass

from supabase import Client

from puppy_class.domain.push import PushSubscriptionRecord
from puppy_class.services.push import SubscriptionRepository


@dataclass
class SupabaseSubscriptionRepository(SubscriptionRepository):
    """Supabase implementation for push subscriptions."""

    client: Client
    table_name: str = "push_subscriptions"

    def get_by_endpoint(self, endpoint: str) -> PushSubscriptionRecord | None:
        """Return the subscription for an endpoint, if present."""
        response = (
            self.client.table(self.table_name)
            .select("endpoint, subscription_json")
            .eq("endpoint", endpoint)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return PushSubscriptionRecord.model_validate(
            response.data[0]["subscription_json"]
        )

    def create_subscription(self, subscription: PushSubscriptionRecord) -> None:
        """Insert a subscription row keyed by endpoint."""
        self.client.table(self.table_name).insert(
            {
                "endpoint": subscription.endpoint,
                "subscription_json": subscription.model_dump(),
            }
        ).execute()

    def list_subscriptions(self) -> list[PushSubscriptionRecord]:
        """Return every stored subscription."""
        response = (
            self.client.table(self.table_name)
            .select("endpoint, subscription_json")
            .execute()
        )
        return [
            PushSubscriptionRecord.model_validate(row["subscription_json"])
            for row in response.data or []
        ]

    def delete_subscription(self, endpoint: str) -> None:
        """Delete the subscription for an endpoint."""
        self.client.table(self.table_name).delete().eq("endpoint", endpoint).execute()
