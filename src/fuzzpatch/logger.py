from __future__ import annotations

import logging
import warnings
from pathlib import Path
from typing import Optional, Union

import structlog

from fuzzpatch.settings.models import LoggingSettings, LogLevel

_LEVELS = {
    LogLevel.debug: logging.DEBUG,
    LogLevel.info: logging.INFO,
    LogLevel.warning: logging.WARNING,
    LogLevel.error: logging.ERROR,
    LogLevel.critical: logging.CRITICAL,
}

_file_handler: Optional[logging.FileHandler] = None


def level_to_int(level: Union[LogLevel, str]) -> int:
    return _LEVELS[LogLevel(level)]


def configure_logging(settings: Optional[LoggingSettings] = None) -> None:
    """
    Apply logging settings: level of the package logger, per-logger overrides
    and an optional log file. Safe to call more than once.
    """
    global _file_handler
    cfg = settings or LoggingSettings()

    logging.getLogger("fuzzpatch").setLevel(level_to_int(cfg.default_level))
    for name, level in cfg.enabled_loggers.items():
        logging.getLogger(name).setLevel(level_to_int(level))

    root_logger = logging.getLogger()
    if _file_handler is not None:
        root_logger.removeHandler(_file_handler)
        _file_handler.close()
        _file_handler = None

    if cfg.log_file:
        _file_handler = logging.FileHandler(
            Path(cfg.log_file), mode="a", encoding="utf-8", delay=True
        )
        _file_handler.setFormatter(logging.Formatter("%(message)s"))
        root_logger.addHandler(_file_handler)

    def _showwarning(
        message: warnings.WarningMessage | str,
        category: type[Warning],
        filename: str,
        lineno: int,
        file: object | None = None,
        line: str | None = None,
    ) -> None:
        text = warnings.formatwarning(message, category, filename, lineno, line)
        logging.getLogger("py.warnings").warning(text.strip())

    warnings.showwarning = _showwarning


structlog.configure(
    wrapper_class=structlog.make_filtering_bound_logger(logging.NOTSET),
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
    processors=[
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        structlog.processors.TimeStamper(fmt="%Y-%m-%d %H:%M:%S", utc=False),
        structlog.dev.ConsoleRenderer(colors=False),
    ],
)

logger: structlog.BoundLogger = structlog.get_logger("fuzzpatch")
