"""Small helpers shared by the config and session layers."""

from __future__ import annotations

from ..constants import DEFAULT_PORT


def split_host_port(address: str, default_port: int = DEFAULT_PORT) -> tuple[str, int]:
    """Split ``host[:port]`` (or ``[v6host]:port``) into host and port.

    Raises:
        ValueError: The address is empty or the port is not a valid number.
    """
    address = address.strip()
    if not address:
        raise ValueError("empty server address")
    host, port = address, ""
    if address.startswith("["):
        end = address.find("]")
        if end < 0:
            raise ValueError(f"unterminated IPv6 address: {address}")
        host, rest = address[1:end], address[end + 1 :]
        if rest:
            if not rest.startswith(":"):
                raise ValueError(f"invalid server address: {address}")
            port = rest[1:]
    elif address.count(":") == 1:
        host, port = address.split(":", 1)
    if not host:
        raise ValueError(f"missing host in server address: {address}")
    if not port:
        return host, default_port
    if not port.isdigit() or not 0 < int(port) < 65536:
        raise ValueError(f"invalid port in server address: {address}")
    return host, int(port)
