"""Composition root: build the queue client and listener client from settings.

Composition may import concrete classes and call factories; everything it returns is typed
by port or by the public client.
"""
from __future__ import annotations

from sqs_listener.client import SQSListenerClient, SQSListenerClientBuilder
from sqs_listener.config.settings import Settings
from sqs_listener.domain.models import Listener, MessageHandler
from sqs_listener.infrastructure.sqs.factory import create_queue_client
from sqs_listener.ports.queue_client import QueueClient


def create_queue_client_from_settings(settings: Settings) -> QueueClient:
    return create_queue_client(
        settings.aws_region,
        credentials=settings.credentials(),
        endpoint_url=settings.sqs_endpoint_url or None,
    )


def create_listener_client(
    settings: Settings,
    handler: MessageHandler,
    *,
    queue_client: QueueClient | None = None,
) -> SQSListenerClient:
    """Wire a listener client for ``settings.queue_url``; builds the queue client unless given one."""
    client = queue_client or create_queue_client_from_settings(settings)
    return (
        SQSListenerClientBuilder.new_with_client(client)
        .listener(Listener(settings.queue_url, handler))
        .config(settings.to_config())
        .build()
    )
