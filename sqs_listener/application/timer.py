"""One-shot wake-up timer feeding a mailbox."""
from __future__ import annotations

import asyncio
from typing import Any


class Timer:
    """Delivers ``signal`` into ``mailbox`` once per ``arm()``.

    Re-arming replaces a pending wake-up, so at most one is ever scheduled.
    """

    def __init__(self, mailbox: asyncio.Queue[Any], signal: Any) -> None:
        self._mailbox = mailbox
        self._signal = signal
        self._handle: asyncio.TimerHandle | None = None

    @property
    def armed(self) -> bool:
        return self._handle is not None

    def arm(self, delay: float) -> None:
        self.cancel()
        loop = asyncio.get_running_loop()
        self._handle = loop.call_later(max(0.0, delay), self._fire)

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _fire(self) -> None:
        self._handle = None
        self._mailbox.put_nowait(self._signal)
