import pytest

from meetup.schemas.envelope import ChatErrorCode, ErrorEnvelope, PongEnvelope
from meetup.websocket_manager import ConnectionManager


@pytest.mark.asyncio
async def test_connect_accepts_and_registers(manager, connect):
    websocket = await connect(1)

    assert 1 in manager.active_connections
    assert list(manager.active_connections) == [1]
    assert await manager.send(1, PongEnvelope()) is True
    assert websocket.envelopes == [{"type": "pong"}]


@pytest.mark.asyncio
async def test_send_to_unknown_user_is_silently_dropped(manager):
    assert await manager.send(42, PongEnvelope()) is False


@pytest.mark.asyncio
async def test_unregister_is_idempotent(manager, connect):
    await connect(1)

    assert manager.unregister(1) is True
    assert manager.unregister(1) is False
    assert 1 not in manager.active_connections


@pytest.mark.asyncio
async def test_second_registration_replaces_first(manager, connect):
    # last registration wins; the first tab stays open but gets nothing
    first_tab = await connect(1)
    second_tab = await connect(1)

    assert list(manager.active_connections) == [1]
    assert await manager.send(1, PongEnvelope()) is True
    assert first_tab.sent == []
    assert second_tab.envelopes == [{"type": "pong"}]


@pytest.mark.asyncio
async def test_replaced_channel_closing_does_not_evict_successor(manager, connect):
    first_tab = await connect(1)
    second_tab = await connect(1)

    await manager.disconnect(first_tab, 1)

    assert 1 in manager.active_connections
    assert manager.active_connections[1] is second_tab


@pytest.mark.asyncio
async def test_send_to_closed_channel_drops_mapping(manager, connect):
    websocket = await connect(1)
    websocket.drop()

    assert await manager.send(1, PongEnvelope()) is False
    assert 1 not in manager.active_connections
    assert websocket.sent == []


@pytest.mark.asyncio
async def test_transport_error_on_send_drops_mapping(manager, connect):
    await connect(1, fail_sends=True)

    envelope = ErrorEnvelope(code=ChatErrorCode.INTERNAL, message="boom")
    assert await manager.send(1, envelope) is False
    assert 1 not in manager.active_connections


@pytest.mark.asyncio
async def test_registry_instances_are_isolated(make_socket):
    first = ConnectionManager()
    second = ConnectionManager()
    await first.connect(make_socket(), 1)

    assert 1 in first.active_connections
    assert 1 not in second.active_connections
