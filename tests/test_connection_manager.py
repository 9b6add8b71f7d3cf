"""
Tests for the transport connection lifecycle: reconnect, logout, pairing,
credential persistence and inbound routing.
"""
import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from relay.auth_state import CredentialStore
from relay.connection import ConnectionManager
from relay.types import (
    BatchKind,
    ConnectionState,
    ConnectionUpdate,
    CredentialsUpdate,
    DisconnectReason,
    InboundBatch,
    RawMessage,
)

from .fakes import FakeSession, FakeTransport, closed

OPEN = ConnectionUpdate(connection="open")


@pytest.fixture
def store(tmp_path):
    return CredentialStore(tmp_path / "auth")


@pytest.fixture
def dispatcher():
    mock = MagicMock()
    mock.handle_batch = AsyncMock()
    return mock


def make_manager(transport, store, dispatcher, **kwargs):
    return ConnectionManager(
        transport=transport,
        credential_store=store,
        dispatcher=dispatcher,
        on_pairing=kwargs.pop("on_pairing", MagicMock()),
        **kwargs,
    )


@pytest.mark.asyncio
async def test_restart_required_triggers_exactly_one_reconnect(store, dispatcher):
    first = FakeSession([OPEN, closed(DisconnectReason.RESTART_REQUIRED)])
    second = FakeSession([OPEN, closed(DisconnectReason.LOGGED_OUT)])
    transport = FakeTransport(first, second)

    manager = make_manager(transport, store, dispatcher)
    final_state = await manager.run()

    assert len(transport.connect_calls) == 2
    assert final_state == ConnectionState.LOGGED_OUT
    assert first.closed and second.closed


@pytest.mark.asyncio
async def test_logged_out_is_terminal(store, dispatcher):
    transport = FakeTransport(FakeSession([OPEN, closed(DisconnectReason.LOGGED_OUT)]))

    manager = make_manager(transport, store, dispatcher)
    final_state = await manager.run()

    assert len(transport.connect_calls) == 1
    assert final_state == ConnectionState.LOGGED_OUT
    assert manager.connect_attempts == 1


@pytest.mark.asyncio
async def test_failed_connect_is_retried(store, dispatcher):
    transport = FakeTransport(
        OSError("network unreachable"),
        FakeSession([closed(DisconnectReason.LOGGED_OUT)]),
    )

    final_state = await make_manager(transport, store, dispatcher).run()

    assert len(transport.connect_calls) == 2
    assert final_state == ConnectionState.LOGGED_OUT


@pytest.mark.asyncio
async def test_credentials_are_persisted_and_reused(store, dispatcher):
    first = FakeSession([CredentialsUpdate({"token": "abc", "user_id": "42"}), OPEN,
                         closed(DisconnectReason.CONNECTION_LOST)])
    second = FakeSession([closed(DisconnectReason.LOGGED_OUT)])
    transport = FakeTransport(first, second)

    await make_manager(transport, store, dispatcher).run()

    assert store.load() == {"token": "abc", "user_id": "42"}
    assert transport.connect_calls[0] == ("test-1.0", {})
    assert transport.connect_calls[1] == ("test-1.0", {"token": "abc", "user_id": "42"})


@pytest.mark.asyncio
async def test_pairing_challenge_is_rendered(store, dispatcher):
    on_pairing = MagicMock()
    states = []
    session = FakeSession([
        ConnectionUpdate(connection="connecting", pairing_challenge="PAIR-1234"),
        closed(DisconnectReason.LOGGED_OUT),
    ])
    manager = make_manager(FakeTransport(session), store, dispatcher, on_pairing=on_pairing)
    set_state = manager._set_state
    manager._set_state = lambda state: (states.append(state), set_state(state))

    await manager.run()

    on_pairing.assert_called_once_with("PAIR-1234")
    assert ConnectionState.AWAITING_PAIRING in states


@pytest.mark.asyncio
async def test_inbound_batches_reach_dispatcher_with_session(store, dispatcher):
    handled = asyncio.Event()
    dispatcher.handle_batch.side_effect = lambda batch, session: handled.set()
    batch = InboundBatch(kind=BatchKind.NOTIFY, messages=[RawMessage(sender_id="s", conversation="halo")])
    session = FakeSession([OPEN, batch, handled, closed(DisconnectReason.LOGGED_OUT)])

    await make_manager(FakeTransport(session), store, dispatcher).run()

    dispatcher.handle_batch.assert_awaited_once_with(batch, session)


@pytest.mark.asyncio
async def test_batches_before_open_are_dropped(store, dispatcher):
    batch = InboundBatch(kind=BatchKind.NOTIFY, messages=[RawMessage(sender_id="s", conversation="halo")])
    session = FakeSession([batch, closed(DisconnectReason.LOGGED_OUT)])

    await make_manager(FakeTransport(session), store, dispatcher).run()

    dispatcher.handle_batch.assert_not_called()


@pytest.mark.asyncio
async def test_stop_ends_the_loop_without_reconnecting(store, dispatcher):
    session = FakeSession([OPEN])
    transport = FakeTransport(session)
    manager = make_manager(transport, store, dispatcher)

    task = asyncio.create_task(manager.run())
    for _ in range(100):
        if manager.state == ConnectionState.CONNECTED:
            break
        await asyncio.sleep(0)
    assert manager.state == ConnectionState.CONNECTED

    await manager.stop()
    final_state = await asyncio.wait_for(task, timeout=2)

    assert final_state == ConnectionState.DISCONNECTED
    assert len(transport.connect_calls) == 1
    assert session.closed


def test_backoff_is_bounded(store, dispatcher):
    manager = make_manager(FakeTransport(), store, dispatcher, reconnect_delay=1.0, max_reconnect_delay=5.0)
    assert [manager._backoff(n) for n in range(5)] == [0.0, 1.0, 2.0, 4.0, 5.0]


def test_zero_base_delay_reconnects_immediately(store, dispatcher):
    manager = make_manager(FakeTransport(), store, dispatcher)
    assert manager._backoff(10) == 0.0


@pytest.mark.asyncio
async def test_backoff_waits_between_failed_attempts(store, dispatcher):
    transport = FakeTransport(
        FakeSession([closed(DisconnectReason.CONNECTION_LOST)]),
        FakeSession([closed(DisconnectReason.CONNECTION_LOST)]),
        FakeSession([OPEN, closed(DisconnectReason.CONNECTION_LOST)]),
        FakeSession([closed(DisconnectReason.LOGGED_OUT)]),
    )
    manager = make_manager(transport, store, dispatcher, reconnect_delay=1.0, max_reconnect_delay=5.0)
    delays = []

    async def record_delay(delay):
        delays.append(delay)

    manager._wait_before_reconnect = record_delay
    await manager.run()

    # third session reached CONNECTED, so its disconnect reconnects immediately
    assert delays == [1.0, 2.0]


@pytest.mark.asyncio
async def test_stop_interrupts_backoff_wait(store, dispatcher):
    transport = FakeTransport(FakeSession([closed(DisconnectReason.CONNECTION_LOST)]))
    manager = make_manager(transport, store, dispatcher, reconnect_delay=60.0, max_reconnect_delay=60.0)

    task = asyncio.create_task(manager.run())
    await asyncio.sleep(0.05)
    assert not task.done()

    await manager.stop()
    final_state = await asyncio.wait_for(task, timeout=2)

    assert final_state == ConnectionState.DISCONNECTED
    assert len(transport.connect_calls) == 1


def test_pairing_panel_shows_code():
    from rich.console import Console

    from relay.pairing import render_pairing_challenge

    console = Console(record=True, width=80)
    render_pairing_challenge("PAIR-1234", console=console)
    assert "PAIR-1234" in console.export_text()
