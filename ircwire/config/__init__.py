"""Configuration package exports."""

from .model import ClientConfig

__all__ = ["ClientConfig"]
