"""Tests for logging setup."""

import logging
from types import SimpleNamespace

import pytest
from loguru import logger

from md2word.logging_config import (
    INTERCEPTED_LOGGERS,
    InterceptHandler,
    _is_third_party_log,
    _should_show_log,
    setup_logging,
)


def record(level: str, name: str = "") -> dict:
    return {"level": SimpleNamespace(name=level), "extra": {"name": name}}


@pytest.fixture(autouse=True)
def restore_logger():
    yield
    logger.remove()
    for name in INTERCEPTED_LOGGERS:
        stdlib_logger = logging.getLogger(name)
        stdlib_logger.handlers.clear()
        stdlib_logger.propagate = True
        stdlib_logger.setLevel(logging.NOTSET)


class TestSetupLogging:
    """Tests for setup_logging."""

    def test_file_sink_created(self, tmp_path, monkeypatch):
        monkeypatch.delenv("MD2WORD_LOG_DIR", raising=False)

        console_id, log_file = setup_logging(log_dir=str(tmp_path / "logs"), quiet=True)
        logger.info("conversion started")
        logger.complete()

        assert console_id is None
        assert log_file.parent == tmp_path / "logs"
        assert log_file.name.startswith("md2word_")
        assert "conversion started" in log_file.read_text(encoding="utf-8")

    def test_env_overrides_log_dir(self, tmp_path, monkeypatch):
        monkeypatch.setenv("MD2WORD_LOG_DIR", str(tmp_path / "env_logs"))

        _, log_file = setup_logging(log_dir=str(tmp_path / "ignored"), quiet=True)

        assert log_file.parent == tmp_path / "env_logs"

    def test_no_file_sink_without_dir(self, monkeypatch):
        monkeypatch.delenv("MD2WORD_LOG_DIR", raising=False)

        console_id, log_file = setup_logging()

        assert console_id is not None
        assert log_file is None

    def test_third_party_loggers_intercepted(self, monkeypatch):
        monkeypatch.delenv("MD2WORD_LOG_DIR", raising=False)

        setup_logging(quiet=True)

        pil = logging.getLogger("PIL")
        assert any(isinstance(h, InterceptHandler) for h in pil.handlers)
        assert pil.propagate is False
        assert pil.level == logging.WARNING

    def test_intercepted_message_reaches_loguru(self, monkeypatch):
        monkeypatch.delenv("MD2WORD_LOG_DIR", raising=False)
        setup_logging(quiet=True)
        messages = []
        logger.add(lambda m: messages.append(m.record), level="WARNING")

        logging.getLogger("docx").warning("style missing")

        assert messages[0]["message"] == "style missing"
        assert messages[0]["extra"]["name"] == "docx"


class TestConsoleFilter:
    """Tests for the console filter."""

    def test_third_party_names(self):
        assert _is_third_party_log("playwright")
        assert _is_third_party_log("PIL.PngImagePlugin")
        assert _is_third_party_log("markdown_it.rules")
        assert not _is_third_party_log("md2word.converter")

    def test_warnings_always_shown(self):
        assert _should_show_log(record("WARNING", "PIL"), verbose=False)

    def test_debug_only_when_verbose(self):
        assert not _should_show_log(record("DEBUG"), verbose=False)
        assert _should_show_log(record("DEBUG"), verbose=True)

    def test_third_party_info_hidden(self):
        assert not _should_show_log(record("INFO", "playwright"), verbose=True)
        assert _should_show_log(record("INFO", "md2word"), verbose=False)


class TestSetupLoggingFromConfig:
    """Tests for config-driven logging setup."""

    def test_uses_log_section(self, tmp_path, monkeypatch):
        from md2word.config import LogConfig
        from md2word.logging_config import setup_logging_from_config

        monkeypatch.delenv("MD2WORD_LOG_DIR", raising=False)

        _, log_file = setup_logging_from_config(
            LogConfig(dir=str(tmp_path / "cfg_logs"), level="WARNING"), quiet=True
        )
        logger.info("hidden")
        logger.warning("kept")
        logger.complete()

        content = log_file.read_text(encoding="utf-8")
        assert log_file.parent == tmp_path / "cfg_logs"
        assert "kept" in content
        assert "hidden" not in content

    def test_reads_loaded_config_file(self, tmp_path, monkeypatch):
        import json

        from md2word.logging_config import setup_logging_from_config

        monkeypatch.delenv("MD2WORD_LOG_DIR", raising=False)
        config_file = tmp_path / "custom.json"
        config_file.write_text(json.dumps({"log": {"dir": str(tmp_path / "from_file")}}))
        monkeypatch.setenv("MD2WORD_CONFIG", str(config_file))

        _, log_file = setup_logging_from_config(quiet=True)

        assert log_file.parent == tmp_path / "from_file"
