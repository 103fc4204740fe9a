from __future__ import annotations

import logging
import sys
import threading

import orjson
import pytest

from othello_core import logging_setup
from othello_core.tools.diag import (
    DEFAULTS_PATH,
    PlayConfig,
    ensure_config,
    load_config,
    load_play_config,
    log_event,
)


class TestConfig:
    def test_defaults_load(self):
        cfg = load_config()
        assert cfg["play"]["human"] == "black"
        assert cfg["play"]["ai_delay_ms"] == 300
        assert load_play_config(cfg) == PlayConfig()

    def test_user_file_overrides_defaults(self, tmp_path):
        path = tmp_path / "config.toml"
        path.write_text('[play]\nhuman = "white"\nseed = 7\n', encoding="utf-8")
        cfg = load_config(path)
        assert cfg["play"]["human"] == "white"
        assert cfg["play"]["ai_delay_ms"] == 300
        config = load_play_config(cfg)
        assert config.human == "white"
        assert config.seed == 7
        assert config.log_level == "INFO"

    def test_malformed_file_falls_back(self, tmp_path, caplog):
        path = tmp_path / "config.toml"
        path.write_text("[play\nhuman = ", encoding="utf-8")
        with caplog.at_level(logging.WARNING):
            cfg = load_config(path)
        assert cfg == load_config()
        assert "using defaults" in caplog.text

    def test_missing_file_falls_back(self, tmp_path, caplog):
        with caplog.at_level(logging.WARNING):
            cfg = load_config(tmp_path / "nope.toml")
        assert cfg == load_config()
        assert "not found" in caplog.text

    @pytest.mark.parametrize(
        "play, log_cfg",
        [
            ({"human": "red"}, {}),
            ({"ai_delay_ms": -1}, {}),
            ({"ai_delay_ms": "fast"}, {}),
            ({"tie_break": "coin"}, {}),
            ({"seed": "abc"}, {}),
            ({}, {"level": "LOUD"}),
            (3, {}),
            ({}, "DEBUG"),
        ],
    )
    def test_invalid_values_raise(self, play, log_cfg):
        with pytest.raises(ValueError):
            load_play_config({"play": play, "logging": log_cfg})

    def test_ensure_config_writes_once(self, tmp_path):
        path = tmp_path / "home" / "config.toml"
        assert ensure_config(path) is True
        assert path.read_text(encoding="utf-8") == DEFAULTS_PATH.read_text(encoding="utf-8")
        assert ensure_config(path) is False


class TestLogEvent:
    def test_emits_json_line(self, caplog):
        with caplog.at_level(logging.INFO, logger="event.cli"):
            log_event("cli", "move", player="BLACK", square="d3")
        records = [r for r in caplog.records if r.name == "event.cli"]
        assert len(records) == 1
        payload = orjson.loads(records[0].getMessage())
        assert payload["event"] == "move"
        assert payload["module"] == "cli"
        assert payload["square"] == "d3"
        assert "ts" in payload

    def test_unserialisable_payload_is_logged_not_raised(self, caplog):
        with caplog.at_level(logging.INFO):
            log_event("cli", "move", where=object())
        assert "failed to log event" in caplog.text


@pytest.fixture
def clean_root_logging(monkeypatch):
    root = logging.getLogger()
    saved_handlers = root.handlers[:]
    saved_level = root.level
    monkeypatch.setattr(sys, "excepthook", sys.excepthook)
    monkeypatch.setattr(threading, "excepthook", threading.excepthook)
    if hasattr(root, "_oc_logging_configured"):
        delattr(root, "_oc_logging_configured")
    yield root
    for handler in root.handlers:
        if handler not in saved_handlers:
            handler.close()
    root.handlers = saved_handlers
    root.setLevel(saved_level)
    logging.captureWarnings(False)
    if hasattr(root, "_oc_logging_configured"):
        delattr(root, "_oc_logging_configured")


class TestSetupLogging:
    def test_writes_log_file(self, tmp_path, clean_root_logging):
        log_path = tmp_path / "run.log"
        logging_setup.setup_logging(level="DEBUG", log_path=log_path)
        assert clean_root_logging.level == logging.DEBUG
        assert sys.excepthook is logging_setup._log_unhandled_exception
        logging.getLogger("othello_core.test").info("hello from test")
        for handler in clean_root_logging.handlers:
            handler.flush()
        assert "hello from test" in log_path.read_text(encoding="utf-8")

    def test_second_call_is_a_noop(self, tmp_path, clean_root_logging):
        logging_setup.setup_logging(log_path=tmp_path / "a.log")
        handlers = clean_root_logging.handlers[:]
        logging_setup.setup_logging(log_path=tmp_path / "b.log")
        assert clean_root_logging.handlers == handlers
        assert not (tmp_path / "b.log").exists()

    def test_unknown_level(self, tmp_path, clean_root_logging):
        with pytest.raises(ValueError):
            logging_setup.setup_logging(level="LOUD", log_path=tmp_path / "x.log")

    def test_default_log_path_is_cwd(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        assert logging_setup.get_log_path() == tmp_path / logging_setup.LOG_FILE_NAME
