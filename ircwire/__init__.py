"""ircwire - asyncio IRC protocol engine and client runner."""

__version__ = "0.1.0"
