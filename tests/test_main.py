from __future__ import annotations

import logging
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from ircwire.errors import NetworkError
from ircwire.main import build_config, build_parser, main, print_message, run
from ircwire.irc.message import parse_message
from ircwire.utils.retry import RetryExhaustedError


def test_parser_options():
    args = build_parser().parse_args(
        ["-n", "bob", "-f", "Bob Smith", "-p", "pw", "-d", "-j", "#a", "-j", "#b",
         "--ssl", "--trust", "irc.example.net:6697"]
    )
    assert args.nick == "bob"
    assert args.fullname == "Bob Smith"
    assert args.password == "pw"
    assert args.debug
    assert args.join == ["#a", "#b"]
    assert args.tls and args.trust
    assert args.server == "irc.example.net:6697"


def test_build_config():
    args = build_parser().parse_args(["-n", "bob", "-j", "#go", "irc.example.net"])
    cfg = build_config(args)
    assert cfg.server == "irc.example.net"
    assert cfg.port == 6667
    assert cfg.nick == "bob"
    assert cfg.fullname == "bob"
    assert cfg.join == ["#go"]


def test_print_message_uses_symbolic_name(caplog):
    with caplog.at_level(logging.INFO):
        print_message(parse_message(":srv 001 bob :Welcome"))
    assert "(RPL_WELCOME) :srv 001 bob :Welcome" in caplog.text


@pytest.mark.asyncio
async def test_main_runs_client():
    cfg = build_config(build_parser().parse_args(["-n", "bob", "irc.example.net"]))
    with patch("ircwire.main.IRCClient") as mock_client_cls:
        mock_client_cls.return_value.run = AsyncMock()
        assert await main(cfg) == 0
    mock_client_cls.assert_called_once_with(cfg, print_message)


@pytest.mark.asyncio
async def test_main_reports_exhausted_retries():
    cfg = build_config(build_parser().parse_args(["-n", "bob", "irc.example.net"]))
    error = RetryExhaustedError("failed", 3, NetworkError("refused"))
    with patch("ircwire.main.IRCClient") as mock_client_cls, \
         patch("ircwire.main.log_error") as mock_log_error:
        mock_client_cls.return_value.run = AsyncMock(side_effect=error)
        assert await main(cfg) == 1
    mock_log_error.assert_called_once_with("Could not connect", error.final_exception)


def test_run_exits_with_status():
    with patch("ircwire.main.LoggerConfigurator") as mock_configurator, \
         patch("ircwire.main.main", new=MagicMock()) as mock_main, \
         patch("ircwire.main.asyncio.run", return_value=0) as mock_run:
        with pytest.raises(SystemExit) as exc_info:
            run(["-n", "bob", "irc.example.net"])
    assert exc_info.value.code == 0
    mock_configurator.return_value.configure.assert_called_once_with(debug=None)
    mock_main.assert_called_once()
    mock_run.assert_called_once()


def test_run_debug_flag():
    with patch("ircwire.main.LoggerConfigurator") as mock_configurator, \
         patch("ircwire.main.main", new=MagicMock()), \
         patch("ircwire.main.asyncio.run", return_value=0):
        with pytest.raises(SystemExit):
            run(["-d", "-n", "bob", "irc.example.net"])
    mock_configurator.return_value.configure.assert_called_once_with(debug=True)


def test_run_invalid_config_exits_1(caplog):
    with patch("ircwire.main.LoggerConfigurator"), \
         patch("ircwire.main.asyncio.run") as mock_run, \
         caplog.at_level(logging.ERROR):
        with pytest.raises(SystemExit) as exc_info:
            run(["-n", "bob", "--trust", "irc.example.net"])
    assert exc_info.value.code == 1
    assert "Invalid configuration" in caplog.text
    mock_run.assert_not_called()


def test_run_keyboard_interrupt_exits_0():
    with patch("ircwire.main.LoggerConfigurator"), \
         patch("ircwire.main.main", new=MagicMock()), \
         patch("ircwire.main.asyncio.run", side_effect=KeyboardInterrupt):
        with pytest.raises(SystemExit) as exc_info:
            run(["-n", "bob", "irc.example.net"])
    assert exc_info.value.code == 0
