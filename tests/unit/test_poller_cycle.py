"""Unit tests for the poller's receive -> dispatch -> ack cycle."""
from __future__ import annotations

import asyncio

import pytest

from sqs_listener.constants import PollerState
from sqs_listener.domain.models import Message
from sqs_listener.ports.queue_client import QueueClientError
from tests.fakes import (
    FAST_INTERVAL,
    QUEUE_URL,
    FakeQueueClient,
    RecordingHandler,
    build_client,
    failing_receive,
    make_message,
    wait_until,
)


async def _run_until(client, predicate) -> None:
    task = asyncio.create_task(client.start())
    try:
        await wait_until(predicate)
    finally:
        client.stop()
        await task


@pytest.mark.asyncio
async def test_handler_called_once_per_message_in_receive_order(handler):
    batch = [make_message("m1", "h1"), make_message("m2", "h2"), make_message("m3", "h3")]
    fake = FakeQueueClient([batch])
    client = build_client(fake, handler)

    await _run_until(client, lambda: len(fake.receive_calls) >= 2)

    assert handler.message_ids == ["m1", "m2", "m3"]
    assert fake.receive_calls[0] == QUEUE_URL


@pytest.mark.asyncio
async def test_auto_ack_deletes_every_message_after_dispatch(handler):
    fake = FakeQueueClient([[make_message("m1", "h1"), make_message("m2", "h2")]])
    client = build_client(fake, handler)

    await _run_until(client, lambda: len(fake.receive_calls) >= 2)

    assert fake.delete_calls == [(QUEUE_URL, "h1"), (QUEUE_URL, "h2")]
    # both deletes are issued before the next receive
    assert fake.events[:4] == [
        ("receive", QUEUE_URL),
        ("delete", "h1"),
        ("delete", "h2"),
        ("receive", QUEUE_URL),
    ]


@pytest.mark.asyncio
async def test_auto_ack_skips_messages_without_receipt_handle(handler, log_records):
    fake = FakeQueueClient(
        [[make_message("m1", "h1"), make_message("m2", None), make_message("m3", "h3")]]
    )
    client = build_client(fake, handler)

    await _run_until(client, lambda: len(fake.receive_calls) >= 2)

    assert handler.message_ids == ["m1", "m2", "m3"]
    assert fake.deleted_handles == ["h1", "h3"]
    assert any(
        r["level"].name == "WARNING" and "m2" in r["message"] for r in log_records
    )


@pytest.mark.asyncio
async def test_auto_ack_disabled_issues_no_deletes(handler):
    fake = FakeQueueClient([[make_message("m1", "h1")], [make_message("m2", "h2")]])
    client = build_client(fake, handler, auto_ack=False)

    await _run_until(client, lambda: len(fake.receive_calls) >= 3)

    assert handler.message_ids == ["m1", "m2"]
    assert fake.delete_calls == []


@pytest.mark.asyncio
async def test_delete_failure_does_not_block_other_deletes(handler, log_records):
    fake = FakeQueueClient(
        [[make_message("m1", "h1"), make_message("m2", "h2")]],
        delete_raises={"h1": QueueClientError("receipt handle is invalid")},
    )
    client = build_client(fake, handler)

    await _run_until(client, lambda: len(fake.receive_calls) >= 2)

    assert fake.deleted_handles == ["h1", "h2"]
    assert any("auto ack failed for m1" in r["message"] for r in log_records)


@pytest.mark.asyncio
async def test_unexpected_delete_error_waits_for_other_deletes(handler, log_records):
    h2_released = asyncio.Event()
    fake = FakeQueueClient(
        [[make_message("m1", "h1"), make_message("m2", "h2")]],
        delete_raises={"h1": RuntimeError("socket closed")},
        delete_gates={"h2": h2_released},
    )
    client = build_client(fake, handler)
    task = asyncio.create_task(client.start())
    try:
        await wait_until(lambda: fake.deleted_handles == ["h1", "h2"])
        await asyncio.sleep(FAST_INTERVAL * 5)
        # the cycle is still waiting on h2, so no new receive is issued
        assert len(fake.receive_calls) == 1
        assert client.state is PollerState.ACKNOWLEDGING

        h2_released.set()
        await wait_until(lambda: len(fake.receive_calls) >= 2)
    finally:
        client.stop()
        await task

    assert fake.completed_deletes == ["h2"]
    assert any(
        r["level"].name == "ERROR" and "unexpected error acking m1" in r["message"]
        for r in log_records
    )
    assert not any("unexpected error in listener cycle" in r["message"] for r in log_records)


@pytest.mark.asyncio
async def test_handler_error_is_logged_and_message_still_acked(log_records):
    handler = RecordingHandler(raise_for={"m1"})
    fake = FakeQueueClient([[make_message("m1", "h1"), make_message("m2", "h2")]])
    client = build_client(fake, handler)

    await _run_until(client, lambda: len(fake.receive_calls) >= 2)

    assert handler.message_ids == ["m1", "m2"]
    assert fake.deleted_handles == ["h1", "h2"]
    assert any(
        r["level"].name == "ERROR" and "message handler failed for m1" in r["message"]
        for r in log_records
    )


@pytest.mark.asyncio
async def test_coroutine_handler_is_awaited_before_next_message():
    seen: list[str] = []

    async def handle(message: Message) -> None:
        seen.append(f"start-{message.message_id}")
        await asyncio.sleep(0.01)
        seen.append(f"end-{message.message_id}")

    fake = FakeQueueClient([[make_message("m1", "h1"), make_message("m2", "h2")]])
    client = build_client(fake, handle)

    await _run_until(client, lambda: len(fake.receive_calls) >= 2)

    assert seen == ["start-m1", "end-m1", "start-m2", "end-m2"]


@pytest.mark.asyncio
async def test_receive_failure_is_logged_and_next_cycle_runs(handler, log_records):
    fake = FakeQueueClient([failing_receive(), [make_message("m1", "h1")]])
    client = build_client(fake, handler)

    await _run_until(client, lambda: handler.message_ids == ["m1"])

    assert len(fake.receive_calls) >= 2
    assert fake.deleted_handles == ["h1"]
    assert any(
        r["level"].name == "ERROR" and "unable to receive messages: connection reset" in r["message"]
        for r in log_records
    )


@pytest.mark.asyncio
async def test_missing_message_list_is_an_error_by_default(handler, log_records):
    fake = FakeQueueClient([None, [make_message("m1", "h1")]])
    client = build_client(fake, handler)

    await _run_until(client, lambda: handler.message_ids == ["m1"])

    errors = [r for r in log_records if r["level"].name == "ERROR"]
    assert any("unable to receive messages" in r["message"] for r in errors)


@pytest.mark.asyncio
async def test_missing_message_list_as_empty_batch_when_configured(handler, log_records):
    fake = FakeQueueClient([None, [make_message("m1", "h1")]])
    client = build_client(fake, handler, missing_messages_is_error=False)

    await _run_until(client, lambda: handler.message_ids == ["m1"])

    assert [r for r in log_records if r["level"].name == "ERROR"] == []
    assert fake.deleted_handles == ["h1"]


@pytest.mark.asyncio
async def test_next_cycle_waits_for_previous_cycle_plus_interval():
    interval = 0.02
    handler_delay = 0.05
    stamps: list[float] = []

    async def slow_handler(message: Message) -> None:
        await asyncio.sleep(handler_delay)

    class StampingClient(FakeQueueClient):
        async def receive_messages(self, queue_url: str):
            stamps.append(asyncio.get_running_loop().time())
            return [make_message(f"m{len(stamps)}", f"h{len(stamps)}")]

    fake = StampingClient()
    client = build_client(fake, slow_handler, check_interval_seconds=interval)

    await _run_until(client, lambda: len(stamps) >= 3)

    gaps = [b - a for a, b in zip(stamps, stamps[1:])]
    assert all(gap >= handler_delay + interval - 0.01 for gap in gaps)


@pytest.mark.asyncio
async def test_state_returns_to_idle_between_cycles(handler):
    fake = FakeQueueClient([[make_message("m1", "h1")]])
    client = build_client(fake, handler, check_interval_seconds=0.05)
    task = asyncio.create_task(client.start())

    await wait_until(lambda: fake.deleted_handles == ["h1"])
    await wait_until(lambda: client.state is PollerState.IDLE)
    assert client.running is True

    client.stop()
    await task
    assert client.state is PollerState.STOPPED
