"""Domain models."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Optional

DEFAULT_CHECK_INTERVAL_SECONDS = 10.0


@dataclass(frozen=True)
class Message:
    """A message as delivered by one receive call (value object).

    The attribute dicts take part in equality but not in the hash.
    """

    message_id: str
    body: str
    receipt_handle: str | None = None
    attributes: dict[str, str] = field(default_factory=dict, hash=False)
    message_attributes: dict[str, Any] = field(default_factory=dict, hash=False)
    md5_of_body: str | None = None


MessageHandler = Callable[[Message], Optional[Awaitable[None]]]


@dataclass(frozen=True)
class Listener:
    """Binds a queue URL to the handler run for every message received from it.

    The handler may be a plain function or a coroutine function; its result is
    otherwise ignored.
    """

    queue_url: str
    handler: MessageHandler


@dataclass(frozen=True)
class Config:
    """Polling configuration. Every field has a default, so building one never fails.

    check_interval_seconds: delay between the end of one cycle and the start of the next.
    auto_ack: delete every dispatched message at the end of the cycle. When disabled the
        caller must acknowledge messages through the client, or they are redelivered.
    missing_messages_is_error: a receive response without a message list aborts the cycle
        as an error. When disabled it is handled as an empty batch.
    """

    check_interval_seconds: float = DEFAULT_CHECK_INTERVAL_SECONDS
    auto_ack: bool = True
    missing_messages_is_error: bool = True


@dataclass(frozen=True)
class Credentials:
    """Static AWS credentials."""

    access_key_id: str
    secret_access_key: str
    session_token: str | None = None

    def __repr__(self) -> str:
        return f"Credentials(access_key_id={self.access_key_id!r}, secret_access_key='***')"
