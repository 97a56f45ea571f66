from __future__ import annotations

import logging

import pytest

from rspamd_client.config import ConfigError, LoggingConfig
from rspamd_client.logging import ConsoleFormatter, configure_logging, level_from_string


def test_configure_logging_writes_file(tmp_path):
    log_file = tmp_path / "logs" / "client.log"

    configure_logging(LoggingConfig(level="debug", file=log_file))
    logging.getLogger("rspamd_client.test").debug("hello from test")
    for handler in logging.getLogger().handlers:
        handler.flush()

    assert logging.getLogger().level == logging.DEBUG
    assert "hello from test" in log_file.read_text(encoding="utf-8")


def test_unknown_level_is_config_error():
    with pytest.raises(ConfigError, match="Unknown log level"):
        level_from_string("chatty")


def test_warn_alias():
    assert level_from_string(" warn ") == logging.WARNING


def test_console_formatter_symbols():
    record = logging.LogRecord("rspamd_client", logging.WARNING, __file__, 1, "careful", None, None)

    assert ConsoleFormatter(use_color=False).format(record) == "! rspamd_client: careful"
    assert ConsoleFormatter(use_color=True).format(record).startswith("\x1b[33m!")
