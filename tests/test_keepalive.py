"""Tests for ircwire.irc.keepalive."""

from ircwire.irc.keepalive import IRCKeepalive


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


def test_remaining_counts_down():
    clock = FakeClock()
    ka = IRCKeepalive(60, clock=clock)
    clock.now += 45
    assert ka.remaining() == 15
    assert not ka.is_due()


def test_due_after_interval():
    clock = FakeClock()
    ka = IRCKeepalive(60, clock=clock)
    clock.now += 75
    assert ka.is_due()
    assert ka.remaining() == 0


def test_touch_resets_idle_time():
    clock = FakeClock()
    ka = IRCKeepalive(60, clock=clock)
    clock.now += 50
    ka.touch()
    assert ka.idle_for() == 0


def test_keepalive_ping_restarts_timer():
    clock = FakeClock()
    ka = IRCKeepalive(60, clock=clock)
    clock.now += 61
    ping = ka.probe("irc.example.net", "bob")
    assert ping.command == "PING"
    assert ping.arguments == ["irc.example.net"]
    assert ping.serialize() == "PING :irc.example.net"
    assert ka.probes_sent == 1
    assert ka.remaining() == 60
