"""Listener errors raised to callers or logged by the poller."""
from __future__ import annotations


class ListenerError(Exception):
    """Base error for sqs_listener."""


class ReceiveMessagesError(ListenerError):
    """Raised when the receive call fails at the transport or protocol level."""

    def __init__(self, cause: Exception) -> None:
        super().__init__(f"unable to receive messages: {cause}")


class UnknownReceiveMessagesError(ListenerError):
    """Raised when a receive response carries no message list."""

    def __init__(self) -> None:
        super().__init__("unable to receive messages")


class AckMessageError(ListenerError):
    """Raised when deleting a message for a manual acknowledgment fails."""

    def __init__(self, cause: Exception) -> None:
        super().__init__(f"unable to acknowledge message: {cause}")


class NoMessageHandleError(ListenerError):
    def __init__(self) -> None:
        super().__init__("Message did not contain a message handle to use for acknowledging")


class ListenerStoppedError(ListenerError):
    def __init__(self) -> None:
        super().__init__("Listener has stopped")


class ListenerAlreadyStartedError(ListenerError):
    def __init__(self) -> None:
        super().__init__("Listener has already been started")


class BuilderValidationError(ListenerError):
    """Raised by the builder when a mandatory field was never set."""

    def __init__(self, field_name: str) -> None:
        self.field_name = field_name
        super().__init__(f"`{field_name}` must be initialized")
