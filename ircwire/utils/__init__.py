"""Utility helpers."""

from .helpers import split_host_port  # noqa: F401
from .retry import retry_connect  # noqa: F401

__all__ = ["split_host_port", "retry_connect"]
