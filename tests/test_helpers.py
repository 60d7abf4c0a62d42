"""Tests for ircwire.utils.helpers."""

import pytest

from ircwire.utils.helpers import split_host_port


@pytest.mark.parametrize(
    ("address", "expected"),
    [
        ("irc.example.net", ("irc.example.net", 6667)),
        ("irc.example.net:6697", ("irc.example.net", 6697)),
        ("  irc.example.net:7000 ", ("irc.example.net", 7000)),
        ("[::1]:6697", ("::1", 6697)),
        ("[2001:db8::1]", ("2001:db8::1", 6667)),
        ("2001:db8::1", ("2001:db8::1", 6667)),
    ],
)
def test_split_host_port(address, expected):
    assert split_host_port(address) == expected


def test_custom_default_port():
    assert split_host_port("localhost", 6697) == ("localhost", 6697)


@pytest.mark.parametrize(
    "address",
    ["", "   ", ":6667", "host:port", "host:70000", "[::1", "[::1]x", "host:0"],
)
def test_invalid_addresses(address):
    with pytest.raises(ValueError):
        split_host_port(address)
