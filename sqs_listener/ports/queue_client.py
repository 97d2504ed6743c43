"""Queue client port: contract for receiving and deleting queue messages.

The poller depends on this port; infrastructure (e.g. boto3) implements it.
"""
from __future__ import annotations

from typing import Protocol, runtime_checkable

from sqs_listener.domain.models import Message


class QueueClientError(Exception):
    """Base for queue client failures (network, service, malformed response)."""


@runtime_checkable
class QueueClient(Protocol):
    """Port: queue service operations. Implementations live in infrastructure."""

    async def receive_messages(self, queue_url: str) -> list[Message] | None:
        """Receive one batch. Returns None when the response has no message list.

        Raises QueueClientError on failure.
        """
        ...

    async def delete_message(self, queue_url: str, receipt_handle: str) -> None:
        """Delete one delivery by its receipt handle; raise QueueClientError on failure."""
        ...

    async def close(self) -> None:
        """Release resources. No-op allowed if nothing to close."""
        ...
