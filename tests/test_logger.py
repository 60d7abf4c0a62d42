from __future__ import annotations

import json
import logging

from ircwire.logs import event_catalog
from ircwire.logs.logger import ClientLogger


def test_logger_template_and_fallback(caplog) -> None:  # type: ignore[no-untyped-def]
    log = ClientLogger("test_logger")
    caplog.set_level(logging.INFO)

    log.log_event("client", "connecting", server="irc.example.net", port=6667)
    log.log_event("custom_domain", "custom_action", extra_field=123)

    msgs = [r.message for r in caplog.records]
    assert any("Connecting to irc.example.net:6667" in m for m in msgs)
    assert any("custom domain: custom action" in m for m in msgs)


def test_logger_prefix_column(caplog) -> None:  # type: ignore[no-untyped-def]
    log = ClientLogger("test_logger_prefix")
    caplog.set_level(logging.INFO)
    log.log_event("session", "registered", nick="bob", server="srv")
    log.log_event("app", "shutdown")
    first, second = (r.message for r in caplog.records)
    assert first.startswith("[bob@srv")
    assert "Registered with srv" in first
    assert second.startswith("[system")


def test_logger_missing_template_field_keeps_template(caplog) -> None:  # type: ignore[no-untyped-def]
    log = ClientLogger("test_logger_missing")
    caplog.set_level(logging.INFO)
    log.log_event("client", "giving_up")
    assert "Giving up after {failures} short sessions" in caplog.records[0].message


def test_logger_explicit_human_text(caplog) -> None:  # type: ignore[no-untyped-def]
    log = ClientLogger("test_logger_human")
    caplog.set_level(logging.INFO)
    log.log_event("irc", "message", human="hello world")
    assert caplog.records[0].message.endswith("hello world")


def test_logger_level_filtering(caplog) -> None:  # type: ignore[no-untyped-def]
    log = ClientLogger("test_logger_level")
    caplog.set_level(logging.WARNING)
    log.log_event("session", "started", level=logging.DEBUG)
    log.log_event("client", "disconnected", level=logging.WARNING, duration=3.0)
    assert len(caplog.records) == 1
    assert "Disconnected after 3.0s" in caplog.records[0].message


def test_logger_debug_alignment(caplog, monkeypatch) -> None:  # type: ignore[no-untyped-def]
    monkeypatch.setenv("DEBUG", "1")
    log = ClientLogger("test_logger_debug")
    caplog.set_level(logging.DEBUG)
    log.log_event("session", "connection_closed", closer="read", nick="bob")
    first = caplog.records[0].message
    assert first.startswith("session_connection_closed")
    assert len(first.split("[")[0]) >= 32
    assert "(closer=read)" in first


def test_reload_event_templates(tmp_path) -> None:
    path = tmp_path / "templates.json"
    path.write_text(json.dumps({"demo": {"hello": "Hi {name}"}}), encoding="utf-8")
    try:
        event_catalog.reload_event_templates(path)
        assert event_catalog.EVENT_TEMPLATES[("demo", "hello")] == "Hi {name}"
    finally:
        event_catalog.reload_event_templates()
    assert ("demo", "hello") not in event_catalog.EVENT_TEMPLATES


def test_missing_catalog_file(tmp_path) -> None:
    templates = event_catalog._load_event_templates(tmp_path / "absent.json")
    assert templates == {("app", "load_error"): "Event templates file missing"}

