"""
Poller: one worker task per listener driving the receive -> dispatch -> ack cycle.

Lifecycle:
  CREATED -> run() -> IDLE.
  Each timer tick: IDLE -> FETCHING -> DISPATCHING -> (ACKNOWLEDGING when auto_ack) -> IDLE,
  then the timer is re-armed, so the cadence is check_interval plus the cycle duration.
  A failed cycle still returns to IDLE and re-arms the timer.
  stop() or cancellation of run(): any state -> STOPPED. The in-flight cycle and acks are
  cancelled and awaited before run() returns; nothing is drained or requeued.
  stop() before run() does nothing.

Concurrency:
  - run() owns all poller state and reads a mailbox of ticks, acknowledge requests and stop.
  - The cycle runs as a child task so acknowledge requests are served while it is in flight;
    a handler may await a manual acknowledgment.
  - Only the timer produces ticks and it is re-armed after a cycle finishes, so at most one
    cycle is ever in flight.
"""
from __future__ import annotations

import asyncio
import inspect
from dataclasses import dataclass
from typing import Any

from loguru import logger

from sqs_listener.application.timer import Timer
from sqs_listener.constants import PollerState
from sqs_listener.core import SERVICE_NAME
from sqs_listener.domain.errors import (
    AckMessageError,
    ListenerAlreadyStartedError,
    ListenerError,
    ListenerStoppedError,
    NoMessageHandleError,
    ReceiveMessagesError,
    UnknownReceiveMessagesError,
)
from sqs_listener.domain.models import Config, Listener, Message
from sqs_listener.ports.queue_client import QueueClient, QueueClientError


def _log(event: str, **kwargs: Any) -> None:
    logger.bind(service_name=SERVICE_NAME, event=event, **kwargs).info("")


class _Tick:
    pass


class _Stop:
    pass


@dataclass
class _AckRequest:
    message: Message
    reply: asyncio.Future[None]


class Poller:
    """Polls one listener's queue on a timer and dispatches messages to its handler."""

    def __init__(self, client: QueueClient, listener: Listener, config: Config) -> None:
        self._client = client
        self._listener = listener
        self._config = config
        self._state = PollerState.CREATED
        self._mailbox: asyncio.Queue[Any] = asyncio.Queue()
        self._timer = Timer(self._mailbox, _Tick())
        self._cycle_task: asyncio.Task[None] | None = None
        self._ack_tasks: set[asyncio.Task[None]] = set()
        self._pending_replies: set[asyncio.Future[None]] = set()

    @property
    def state(self) -> PollerState:
        return self._state

    @property
    def running(self) -> bool:
        return self._state not in (PollerState.CREATED, PollerState.STOPPED)

    @property
    def listener(self) -> Listener:
        return self._listener

    @property
    def config(self) -> Config:
        return self._config

    def _set_state(self, state: PollerState) -> None:
        self._state = state

    async def run(self) -> None:
        """Serve the mailbox until stop() or cancellation. A poller runs at most once."""
        if self._state is not PollerState.CREATED:
            raise ListenerAlreadyStartedError()
        self._set_state(PollerState.IDLE)
        _log(
            "listener_started",
            queue_url=self._listener.queue_url,
            check_interval_seconds=self._config.check_interval_seconds,
            auto_ack=self._config.auto_ack,
        )
        self._timer.arm(self._config.check_interval_seconds)
        try:
            while True:
                item = await self._mailbox.get()
                if isinstance(item, _Stop):
                    break
                if isinstance(item, _Tick):
                    self._cycle_task = asyncio.create_task(self._run_cycle())
                elif isinstance(item, _AckRequest):
                    task = asyncio.create_task(self._serve_ack(item))
                    self._ack_tasks.add(task)
                    task.add_done_callback(self._ack_tasks.discard)
        finally:
            cancelled = self._shutdown()
            # wait for cancelled work so the queue client is idle once run() returns
            await asyncio.gather(*cancelled, return_exceptions=True)
            _log("listener_stopped", queue_url=self._listener.queue_url)

    def stop(self) -> None:
        """Request termination; run() returns once the mailbox reaches the request.

        No-op unless the poller is running: a poller that has not started yet can still be
        started, and stopping a stopped poller does nothing.
        """
        if self.running:
            self._mailbox.put_nowait(_Stop())

    async def acknowledge(self, message: Message) -> None:
        """Delete ``message`` from the queue.

        Raises ListenerStoppedError when the poller is not running, NoMessageHandleError when
        the message has no receipt handle and AckMessageError when the delete call fails.
        """
        if not self.running:
            raise ListenerStoppedError()
        reply: asyncio.Future[None] = asyncio.get_running_loop().create_future()
        self._pending_replies.add(reply)
        self._mailbox.put_nowait(_AckRequest(message, reply))
        try:
            await reply
        finally:
            self._pending_replies.discard(reply)

    def _shutdown(self) -> list[asyncio.Task[None]]:
        self._timer.cancel()
        cancelled = list(self._ack_tasks)
        if self._cycle_task is not None and not self._cycle_task.done():
            cancelled.append(self._cycle_task)
        for task in cancelled:
            task.cancel()
        self._set_state(PollerState.STOPPED)
        for reply in list(self._pending_replies):
            if not reply.done():
                reply.set_exception(ListenerStoppedError())
        return cancelled

    async def _run_cycle(self) -> None:
        try:
            await self._get_and_handle_messages()
        except ListenerError as exc:
            logger.error("error when handling messages: {}", exc)
        except Exception as exc:
            logger.exception("unexpected error in listener cycle: {}", exc)
        self._set_state(PollerState.IDLE)
        self._timer.arm(self._config.check_interval_seconds)

    async def _get_and_handle_messages(self) -> None:
        queue_url = self._listener.queue_url

        self._set_state(PollerState.FETCHING)
        try:
            messages = await self._client.receive_messages(queue_url)
        except QueueClientError as exc:
            raise ReceiveMessagesError(exc) from exc
        if messages is None:
            if self._config.missing_messages_is_error:
                raise UnknownReceiveMessagesError()
            messages = []
        if messages:
            _log("messages_received", queue_url=queue_url, count=len(messages))

        self._set_state(PollerState.DISPATCHING)
        for message in messages:
            await self._dispatch(message)

        if not self._config.auto_ack:
            return

        self._set_state(PollerState.ACKNOWLEDGING)
        await asyncio.gather(*(self._auto_ack(message) for message in messages))

    async def _dispatch(self, message: Message) -> None:
        try:
            result = self._listener.handler(message)
            if inspect.isawaitable(result):
                await result
        except Exception as exc:
            logger.exception("message handler failed for {}: {}", message.message_id, exc)

    async def _auto_ack(self, message: Message) -> None:
        if message.receipt_handle is None:
            logger.warning("message {} has no receipt handle, skipping ack", message.message_id)
            return
        try:
            await self._client.delete_message(self._listener.queue_url, message.receipt_handle)
        except QueueClientError as exc:
            logger.warning("auto ack failed for {}: {}", message.message_id, exc)
            return
        except Exception as exc:
            logger.exception("unexpected error acking {}: {}", message.message_id, exc)
            return
        _log("message_acked", message_id=message.message_id, manual=False)

    async def _serve_ack(self, request: _AckRequest) -> None:
        try:
            await self._ack_message(request.message)
        except Exception as exc:
            if not request.reply.done():
                request.reply.set_exception(exc)
        else:
            if not request.reply.done():
                request.reply.set_result(None)

    async def _ack_message(self, message: Message) -> None:
        if message.receipt_handle is None:
            raise NoMessageHandleError()
        try:
            await self._client.delete_message(self._listener.queue_url, message.receipt_handle)
        except QueueClientError as exc:
            raise AckMessageError(exc) from exc
        _log("message_acked", message_id=message.message_id, manual=True)
