"""Tests for environment overridable constants."""

from ircwire import constants


def test_get_env_int(monkeypatch):
    monkeypatch.setenv("IRC_TEST_INT", "42")
    assert constants._get_env_int("IRC_TEST_INT", 7) == 42


def test_get_env_int_invalid_falls_back(monkeypatch, capsys):
    monkeypatch.setenv("IRC_TEST_INT", "many")
    assert constants._get_env_int("IRC_TEST_INT", 7) == 7
    assert "Invalid integer value for IRC_TEST_INT" in capsys.readouterr().out


def test_get_env_float(monkeypatch):
    monkeypatch.setenv("IRC_TEST_FLOAT", "0.5")
    assert constants._get_env_float("IRC_TEST_FLOAT", 1.0) == 0.5
    monkeypatch.delenv("IRC_TEST_FLOAT")
    assert constants._get_env_float("IRC_TEST_FLOAT", 1.0) == 1.0


def test_wire_limits():
    assert constants.MAX_LINE_LENGTH == 512
    assert constants.MAX_PAYLOAD_LENGTH == 510
    assert constants.LINE_TERMINATOR == b"\r\n"
