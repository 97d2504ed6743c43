"""Poller lifecycle states."""
from enum import Enum


class PollerState(str, Enum):
    CREATED = "CREATED"
    IDLE = "IDLE"
    FETCHING = "FETCHING"
    DISPATCHING = "DISPATCHING"
    ACKNOWLEDGING = "ACKNOWLEDGING"
    STOPPED = "STOPPED"
