"""Concrete queue client implementation using a boto3 SQS client.

boto3 calls block, so each one runs in a thread pool owned by the adapter. close() waits
for calls still running there before closing the boto3 client.
"""
from __future__ import annotations

import asyncio
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Mapping

from botocore.client import BaseClient
from botocore.exceptions import BotoCoreError, ClientError
from loguru import logger

from sqs_listener.domain.models import Message
from sqs_listener.ports.queue_client import QueueClient, QueueClientError


def _to_message(raw: Mapping[str, Any]) -> Message:
    return Message(
        message_id=str(raw["MessageId"]),
        body=str(raw.get("Body", "")),
        receipt_handle=raw.get("ReceiptHandle"),
        attributes=dict(raw.get("Attributes") or {}),
        message_attributes=dict(raw.get("MessageAttributes") or {}),
        md5_of_body=raw.get("MD5OfBody"),
    )


class Boto3SqsClient(QueueClient):
    """QueueClient implementation using a boto3 ``sqs`` client."""

    def __init__(self, client: BaseClient, *, max_workers: int = 4) -> None:
        self._client = client
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="sqs")
        self._closed = False

    def _ensure_open(self) -> None:
        if self._closed:
            raise QueueClientError("queue client is closed")

    @property
    def client(self) -> BaseClient:
        return self._client

    async def receive_messages(self, queue_url: str) -> list[Message] | None:
        self._ensure_open()
        loop = asyncio.get_running_loop()
        try:
            response = await loop.run_in_executor(
                self._executor,
                lambda: self._client.receive_message(QueueUrl=queue_url),
            )
        except (BotoCoreError, ClientError) as exc:
            raise QueueClientError(f"receive_message failed for {queue_url}: {exc}") from exc

        try:
            raw_messages = response.get("Messages")
            if raw_messages is None:
                return None
            messages = [_to_message(raw) for raw in raw_messages]
        except (AttributeError, KeyError, TypeError) as exc:
            raise QueueClientError(f"malformed receive_message response for {queue_url}") from exc

        logger.debug("received {} raw messages from {}", len(messages), queue_url)
        return messages

    async def delete_message(self, queue_url: str, receipt_handle: str) -> None:
        self._ensure_open()
        loop = asyncio.get_running_loop()
        try:
            await loop.run_in_executor(
                self._executor,
                lambda: self._client.delete_message(
                    QueueUrl=queue_url,
                    ReceiptHandle=receipt_handle,
                ),
            )
        except (BotoCoreError, ClientError) as exc:
            raise QueueClientError(f"delete_message failed for {queue_url}: {exc}") from exc

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        # cancelled awaits do not stop calls already running in the pool
        await asyncio.get_running_loop().run_in_executor(
            None,
            lambda: self._executor.shutdown(wait=True),
        )
        close = getattr(self._client, "close", None)
        if callable(close):
            close()
