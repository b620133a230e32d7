"""Tests for container wiring."""

import asyncio

import httpx

from puppy_class.client import build_offline_client
from puppy_class.containers import build_container
from tests.conftest import FakeNetwork, FakeNotifier


def test_build_container_creates_services(settings) -> None:
    container = build_container(settings)
    assert container.session_service is not None
    assert container.push_service.sender is not None
    asyncio.run(container.close_resources())


def test_build_container_without_vapid_keys_disables_push(settings) -> None:
    settings.vapid_private_key = ""
    container = build_container(settings)
    assert container.push_service.sender is None
    asyncio.run(container.close_resources())


def test_offline_client_queues_and_syncs_on_reconnect(client_settings) -> None:
    network = FakeNetwork(online=False)
    network.route("GET", "/api/ping", json_body={"ok": True, "ts": 1})
    accepted: list[str] = []

    def accept(request: httpx.Request) -> httpx.Response:
        field = request.content.split(b'name="id"\r\n\r\n', 1)[1]
        session_id = field.split(b"\r\n", 1)[0].decode()
        accepted.append(session_id)
        return httpx.Response(200, json={"success": True, "id": session_id})

    network.routes[("POST", "/api/sessions")] = accept
    client = build_offline_client(
        client_settings, network=network.transport(), notifier=FakeNotifier()
    )

    async def scenario():  # type: ignore[no-untyped-def]
        await client.start()
        result = await client.submitter.submit("Corgi", "", b"png")
        queued_before = await client.local_store.list_entries()
        network.online = True
        await client.monitor.check()
        queued_after = await client.local_store.list_entries()
        await client.close_resources()
        return result, queued_before, queued_after

    result, queued_before, queued_after = asyncio.run(scenario())

    assert result.queued is True
    assert [key for key, _ in queued_before] == [result.session.key]
    assert accepted == [result.session.id]
    assert queued_after == []
    assert client.push_enrollment is None


def test_offline_client_start_precaches_shell(client_settings) -> None:
    network = FakeNetwork()
    network.route("GET", "/api/ping", json_body={"ok": True, "ts": 1})
    client = build_offline_client(
        client_settings, network=network.transport(), notifier=FakeNotifier()
    )
    for path in client.lifecycle.app_shell:
        network.route("GET", path, content=path.encode())

    async def scenario():  # type: ignore[no-untyped-def]
        await client.start()
        network.online = False
        page = await client.http_client.get("/styles/styles.css")
        keys = await client.cache_store.keys()
        await client.close_resources()
        return page, keys

    page, keys = asyncio.run(scenario())

    assert page.content == b"/styles/styles.css"
    assert keys == [client_settings.cache_name]


def test_session_queued_during_outage_syncs_when_link_returns(
    client_settings,
) -> None:
    network = FakeNetwork()
    network.route("GET", "/api/ping", json_body={"ok": True, "ts": 1})
    accepted: list[str] = []

    def accept(request: httpx.Request) -> httpx.Response:
        field = request.content.split(b'name="id"\r\n\r\n', 1)[1]
        session_id = field.split(b"\r\n", 1)[0].decode()
        accepted.append(session_id)
        return httpx.Response(200, json={"success": True, "id": session_id})

    network.routes[("POST", "/api/sessions")] = accept
    client = build_offline_client(
        client_settings, network=network.transport(), notifier=FakeNotifier()
    )

    async def scenario():  # type: ignore[no-untyped-def]
        await client.start()
        network.online = False
        result = await client.submitter.submit("Corgi", "", b"png")
        network.online = True
        for _ in range(3):
            await client.monitor.check()
        left = await client.local_store.list_entries()
        await client.close_resources()
        return result, left

    result, left = asyncio.run(scenario())

    assert result.queued is True
    assert left == []
    assert accepted == [result.session.id]
