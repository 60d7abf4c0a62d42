from __future__ import annotations

import getpass
from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator

from ..constants import DEFAULT_PORT, KEEPALIVE_INTERVAL
from ..utils.helpers import split_host_port


def _default_nick() -> str:
    try:
        return getpass.getuser()
    except (KeyError, OSError):
        return "ircwire"


class ClientConfig(BaseModel):
    """Connection settings for one IRC client.

    Attributes:
        server: Host name or address of the IRC server.
        port: TCP port of the server.
        nick: Nickname to register with.
        fullname: Real name sent in USER.
        password: Connection password sent in PASS, if any.
        tls: Whether to wrap the connection in TLS.
        trust: Skip certificate validation (requires ``tls``).
        join: Channels joined after every successful registration.
        keepalive_interval: Idle seconds before a PING probe is sent.
    """

    server: str = Field(min_length=1)
    port: int = Field(default=DEFAULT_PORT, gt=0, lt=65536)
    nick: str = Field(default_factory=_default_nick)
    fullname: str = ""
    password: str | None = None
    tls: bool = False
    trust: bool = False
    join: list[str] = Field(default_factory=list)
    keepalive_interval: float = Field(default=KEEPALIVE_INTERVAL, gt=0)

    @field_validator("nick")
    @classmethod
    def validate_nick(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("nick must not be empty")
        if " " in v or v.startswith(":"):
            raise ValueError(f"invalid nick: {v!r}")
        return v

    @field_validator("join", mode="before")
    @classmethod
    def validate_join(cls, v: Any) -> list[str]:
        """Strip channel names, drop empty ones and deduplicate in order."""
        if v is None:
            return []
        if isinstance(v, str):
            v = [v]
        if not isinstance(v, list | tuple):
            raise ValueError("join must be a list of channels")
        stripped = (c.strip() for c in v if isinstance(c, str))
        return list(dict.fromkeys(c for c in stripped if c))

    @model_validator(mode="after")
    def validate_tls(self) -> ClientConfig:
        if self.trust and not self.tls:
            raise ValueError("trust requires tls")
        if not self.fullname:
            self.fullname = self.nick
        return self

    @property
    def host_port(self) -> str:
        """The server address in ``host:port`` form (IPv6 hosts bracketed)."""
        host = f"[{self.server}]" if ":" in self.server else self.server
        return f"{host}:{self.port}"

    @classmethod
    def from_address(cls, address: str, **fields: Any) -> ClientConfig:
        """Create a config from a ``host[:port]`` address plus other fields.

        Raises:
            ValueError: The address cannot be split.
            pydantic.ValidationError: A field failed validation.
        """
        host, port = split_host_port(address, fields.pop("port", DEFAULT_PORT))
        return cls.model_validate({**fields, "server": host, "port": port})
