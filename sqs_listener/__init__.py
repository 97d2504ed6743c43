"""Poll an SQS queue and hand every message to a callback.

    listener = Listener(queue_url, lambda message: print(message.body))
    client = SQSListenerClientBuilder.new("us-east-1").listener(listener).build()
    await client.start()
"""
from sqs_listener.client import SQSListenerClient, SQSListenerClientBuilder
from sqs_listener.constants import PollerState
from sqs_listener.domain.errors import (
    AckMessageError,
    BuilderValidationError,
    ListenerAlreadyStartedError,
    ListenerError,
    ListenerStoppedError,
    NoMessageHandleError,
    ReceiveMessagesError,
    UnknownReceiveMessagesError,
)
from sqs_listener.domain.models import Config, Credentials, Listener, Message
from sqs_listener.ports.queue_client import QueueClient, QueueClientError

__all__ = [
    "AckMessageError",
    "BuilderValidationError",
    "Config",
    "Credentials",
    "Listener",
    "ListenerAlreadyStartedError",
    "ListenerError",
    "ListenerStoppedError",
    "Message",
    "NoMessageHandleError",
    "PollerState",
    "QueueClient",
    "QueueClientError",
    "ReceiveMessagesError",
    "SQSListenerClient",
    "SQSListenerClientBuilder",
    "UnknownReceiveMessagesError",
]
