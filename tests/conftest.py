from __future__ import annotations

from typing import Any

import pytest
from loguru import logger

from tests.fakes import RecordingHandler


@pytest.fixture()
def handler() -> RecordingHandler:
    return RecordingHandler()


@pytest.fixture()
def log_records() -> list[dict[str, Any]]:
    """Captures loguru records emitted during the test."""
    records: list[dict[str, Any]] = []
    handler_id = logger.add(lambda message: records.append(message.record), level="DEBUG")
    yield records
    logger.remove(handler_id)
