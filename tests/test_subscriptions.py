"""Tests for log subscriptions."""

import logging

import pytest

from solana_rpc_client.core.models import LogNotification
from solana_rpc_client.core.subscriptions import CALLBACK_FAILURE, DISPOSAL_FAILURE, Subscription, log_error

PROGRAM_ID = "TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA"


def _notification(slot: int) -> LogNotification:
    return LogNotification(slot=slot, signature=f"sig-{slot}", logs=[f"Program log: slot {slot}"])


@pytest.mark.asyncio
async def test_subscribe_registers_with_commitment(client, transport):
    """Test subscribing registers the topic at the client commitment."""
    subscription = await client.subscribe_logs(PROGRAM_ID, lambda note: None)

    assert isinstance(subscription, Subscription)
    assert subscription.topic == PROGRAM_ID
    assert subscription.handle == 1
    assert not subscription.disposed
    assert transport.calls == [("subscribe_logs", PROGRAM_ID, "confirmed")]
    assert client.subscriptions.active == [subscription]


@pytest.mark.asyncio
async def test_callback_receives_notifications(client, transport):
    """Test notifications reach the callback in order."""
    received = []
    subscription = await client.subscribe_logs(PROGRAM_ID, received.append)

    transport.emit(subscription.handle, _notification(1))
    transport.emit(subscription.handle, _notification(2))

    assert [note.slot for note in received] == [1, 2]


@pytest.mark.asyncio
async def test_failing_callback_is_isolated(client, transport, reported_errors):
    """Test a raising callback keeps receiving later notifications."""
    received = []

    def callback(note: LogNotification) -> None:
        received.append(note.slot)
        if note.slot == 1:
            raise RuntimeError("consumer bug")

    subscription = await client.subscribe_logs(PROGRAM_ID, callback)

    transport.emit(subscription.handle, _notification(1))
    transport.emit(subscription.handle, _notification(2))

    assert received == [1, 2]
    assert len(reported_errors) == 1
    context, exc = reported_errors[0]
    assert context == CALLBACK_FAILURE
    assert str(exc) == "consumer bug"


@pytest.mark.asyncio
async def test_dispose_unregisters(client, transport):
    """Test dispose removes the transport listener."""
    subscription = await client.subscribe_logs(PROGRAM_ID, lambda note: None)

    await subscription.dispose()

    assert subscription.disposed
    assert transport.listeners == {}
    assert client.subscriptions.active == []


@pytest.mark.asyncio
async def test_dispose_twice_is_safe(client, transport, reported_errors):
    """Test a second dispose does nothing."""
    subscription = await client.subscribe_logs(PROGRAM_ID, lambda note: None)

    await subscription.dispose()
    await subscription.dispose()

    assert transport.count("unsubscribe_logs") == 1
    assert reported_errors == []


@pytest.mark.asyncio
async def test_subscription_is_callable_disposer(client, transport):
    """Test calling the subscription disposes it."""
    subscription = await client.subscribe_logs(PROGRAM_ID, lambda note: None)

    await subscription()

    assert subscription.disposed
    assert transport.count("unsubscribe_logs") == 1


@pytest.mark.asyncio
async def test_disposal_failure_is_reported_not_raised(client, transport, reported_errors):
    """Test an unsubscribe error goes to the reporter."""
    transport.unsubscribe_error = KeyError("already removed")
    subscription = await client.subscribe_logs(PROGRAM_ID, lambda note: None)

    await subscription.dispose()

    assert subscription.disposed
    assert [context for context, _ in reported_errors] == [DISPOSAL_FAILURE]
    assert client.subscriptions.active == []


@pytest.mark.asyncio
async def test_no_delivery_after_dispose(client, transport):
    """Test in-flight notifications are dropped after dispose."""
    received = []
    subscription = await client.subscribe_logs(PROGRAM_ID, received.append)
    callback = transport.listeners[subscription.handle][1]

    await subscription.dispose()
    # A notification already in flight when the listener was removed
    callback(_notification(3))

    assert received == []


@pytest.mark.asyncio
async def test_independent_subscriptions(client, transport, reported_errors):
    """Test one failing callback does not affect another subscription."""
    second_seen = []

    def broken(note: LogNotification) -> None:
        raise ValueError("boom")

    first = await client.subscribe_logs(PROGRAM_ID, broken)
    second = await client.subscribe_logs("Other111111111111111111111111111111111111111", second_seen.append)

    transport.emit(first.handle, _notification(1))
    transport.emit(second.handle, _notification(1))

    assert len(second_seen) == 1
    assert len(reported_errors) == 1


@pytest.mark.asyncio
async def test_close_disposes_active_subscriptions(client, transport):
    """Test closing the client disposes every subscription."""
    await client.subscribe_logs(PROGRAM_ID, lambda note: None)
    await client.subscribe_logs(PROGRAM_ID, lambda note: None)

    await client.close()

    assert transport.listeners == {}
    assert client.subscriptions.active == []
    assert transport.closed


@pytest.mark.asyncio
async def test_subscribe_failure_propagates(client, transport):
    """Test a failed registration raises and leaves nothing active."""
    transport.fail("subscribe_logs", ConnectionError("ws refused"))

    with pytest.raises(ConnectionError):
        await client.subscribe_logs(PROGRAM_ID, lambda note: None)
    assert client.subscriptions.active == []


def test_default_reporter_logs(caplog):
    """Test the default reporter logs the failure."""
    with caplog.at_level(logging.ERROR, logger="solana_rpc_client.core.subscriptions"):
        log_error(CALLBACK_FAILURE, RuntimeError("consumer bug"))

    assert "subscription_callback failed: consumer bug" in caplog.text
