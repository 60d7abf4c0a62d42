"""Shared IRC session models."""

from __future__ import annotations

from enum import Enum, auto


class RegistrationState(Enum):
    CONNECTING = auto()
    AWAITING_WELCOME = auto()
    READY = auto()
    FAILED = auto()
