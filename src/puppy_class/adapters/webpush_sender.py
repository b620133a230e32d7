"""Web Push sender backed by pywebpush."""

from dataclasses import dataclass

from pywebpush import WebPushException, webpush

from puppy_class.domain.push import PushSubscriptionRecord
from puppy_class.services.push import PushDeliveryError, PushSender


@dataclass
class PyWebPushSender(PushSender):
    """Send VAPID-signed push messages."""

    vapid_private_key: str
    vapid_subject: str

    def send(self, subscription: PushSubscriptionRecord, payload: str) -> None:
        """Send one payload to one subscription."""
        try:
            webpush(
                subscription_info=subscription.model_dump(),
                data=payload,
                vapid_private_key=self.vapid_private_key,
                vapid_claims={"sub": self.vapid_subject},
            )
        except WebPushException as exc:
            status_code = exc.response.status_code if exc.response is not None else None
            raise PushDeliveryError(str(exc), status_code=status_code) from exc
