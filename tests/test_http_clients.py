"""Tests for HTTP-based adapters."""

import asyncio
import base64
import json

import httpx
import pytest
from pywebpush import WebPushException

from puppy_class.adapters.log_notifier import LoggingNotifier
from puppy_class.adapters.puppy_api_client import (
    HttpxPuppyApiClient,
    decode_application_server_key,
)
from puppy_class.adapters.webpush_sender import PyWebPushSender
from puppy_class.domain.push import PushSubscriptionRecord
from puppy_class.services.push import PushDeliveryError


def _client(handler) -> HttpxPuppyApiClient:  # type: ignore[no-untyped-def]
    transport = httpx.MockTransport(handler)
    return HttpxPuppyApiClient.create("http://puppy.test", transport=transport)


def test_ping_reads_ok_flag() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/api/ping"
        return httpx.Response(200, json={"ok": True, "ts": 1})

    assert asyncio.run(_client(handler).ping()) is True


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(503, json={"ok": False}),
        httpx.Response(200, content=b"<html></html>"),
        httpx.Response(200, json=[]),
    ],
)
def test_ping_treats_bad_answers_as_offline(response: httpx.Response) -> None:
    assert asyncio.run(_client(lambda request: response).ping()) is False


def test_ping_treats_transport_errors_as_offline() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("down", request=request)

    assert asyncio.run(_client(handler).ping()) is False


def test_list_sessions_and_public_key() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/api/publicKey":
            return httpx.Response(200, json={"publicKey": "BKey"})
        return httpx.Response(200, json=[{"id": "1"}])

    client = _client(handler)

    assert asyncio.run(client.list_sessions()) == [{"id": "1"}]
    assert asyncio.run(client.fetch_public_key()) == "BKey"


def test_save_subscription_posts_json() -> None:
    seen: list[dict[str, object]] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(json.loads(request.content.decode()))
        return httpx.Response(200, json={"success": True})

    asyncio.run(_client(handler).save_subscription({"endpoint": "https://p/1"}))

    assert seen == [{"endpoint": "https://p/1"}]


def test_decode_application_server_key_restores_padding() -> None:
    raw = b"\x04" + bytes(range(64))
    encoded = base64.urlsafe_b64encode(raw).decode().rstrip("=")

    assert decode_application_server_key(encoded) == raw


def test_logging_notifier_resolves_window_url() -> None:
    notifier = LoggingNotifier(base_url="http://puppy.test", open_browser=False)

    notification = asyncio.run(
        notifier.show_notification("t", "b", {"redirectUrl": "/"})
    )
    asyncio.run(notifier.open_window("/addsession.html"))

    assert notification.data == {"redirectUrl": "/"}


def test_webpush_sender_maps_gone_responses(monkeypatch) -> None:
    calls: list[dict[str, object]] = []

    def fake_webpush(**kwargs):  # type: ignore[no-untyped-def]
        calls.append(kwargs)
        response = httpx.Response(410)
        raise WebPushException("Push failed: 410 Gone", response=response)

    monkeypatch.setattr("puppy_class.adapters.webpush_sender.webpush", fake_webpush)
    sender = PyWebPushSender(
        vapid_private_key="private", vapid_subject="mailto:admin@example.com"
    )
    subscription = PushSubscriptionRecord(
        endpoint="https://push.example/1", keys={"p256dh": "p", "auth": "a"}
    )

    with pytest.raises(PushDeliveryError) as excinfo:
        sender.send(subscription, '{"title": "t"}')

    assert excinfo.value.subscription_gone
    assert calls[0]["vapid_claims"] == {"sub": "mailto:admin@example.com"}
    assert calls[0]["subscription_info"] == {
        "endpoint": "https://push.example/1",
        "keys": {"p256dh": "p", "auth": "a"},
    }
