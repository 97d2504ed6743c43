"""Caller-facing listener client and its builder.

Build a client with SQSListenerClientBuilder, then run it with ``await client.start()``.
The same client acknowledges messages manually when ``auto_ack`` is disabled.
"""
from __future__ import annotations

from botocore.config import Config as BotoConfig

from sqs_listener.application.poller import Poller
from sqs_listener.constants import PollerState
from sqs_listener.domain.errors import BuilderValidationError
from sqs_listener.domain.models import Config, Credentials, Listener, Message
from sqs_listener.infrastructure.sqs.factory import create_queue_client
from sqs_listener.ports.queue_client import QueueClient


class SQSListenerClient:
    """Handle on a single poller: start it, stop it, acknowledge its messages."""

    def __init__(self, poller: Poller) -> None:
        self._poller = poller

    @property
    def state(self) -> PollerState:
        return self._poller.state

    @property
    def running(self) -> bool:
        return self._poller.running

    async def start(self) -> None:
        """Start polling. Returns only once the listener is stopped, so by default never.

        Raises ListenerAlreadyStartedError when called a second time.
        """
        await self._poller.run()

    def stop(self) -> None:
        self._poller.stop()

    async def ack_message(self, message: Message) -> None:
        """Manually acknowledge a message when ``Config.auto_ack`` is disabled.

        Unacknowledged messages are delivered again once their visibility timeout expires.
        Raises ListenerStoppedError, NoMessageHandleError or AckMessageError.
        """
        await self._poller.acknowledge(message)


class SQSListenerClientBuilder:
    """Collects a queue client, a listener and an optional config, then builds a client."""

    def __init__(self, client: QueueClient | None = None) -> None:
        self._client = client
        self._listener: Listener | None = None
        self._config: Config | None = None

    @classmethod
    def new(cls, region: str) -> SQSListenerClientBuilder:
        """Use the default AWS credential chain for ``region``."""
        return cls.new_with_client(create_queue_client(region))

    @classmethod
    def new_with(
        cls,
        credentials: Credentials,
        region: str,
        *,
        boto_config: BotoConfig | None = None,
    ) -> SQSListenerClientBuilder:
        """Use explicit credentials; ``boto_config`` tunes the underlying HTTP transport."""
        return cls.new_with_client(
            create_queue_client(region, credentials=credentials, boto_config=boto_config)
        )

    @classmethod
    def new_with_client(cls, client: QueueClient) -> SQSListenerClientBuilder:
        return cls(client)

    def listener(self, listener: Listener) -> SQSListenerClientBuilder:
        self._listener = listener
        return self

    def config(self, config: Config) -> SQSListenerClientBuilder:
        self._config = config
        return self

    def build(self) -> SQSListenerClient:
        if self._client is None:
            raise BuilderValidationError("client")
        if self._listener is None:
            raise BuilderValidationError("listener")
        poller = Poller(self._client, self._listener, self._config or Config())
        return SQSListenerClient(poller)
