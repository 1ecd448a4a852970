"""Logging configuration for the app."""

from __future__ import annotations

import logging

from core.config import AppConfig

# Module loggers live under these packages; they all share the app handlers.
_APP_LOGGERS = ("core", "db", "library", "player", "ui", "playdeck")


def setup_logging(config: AppConfig) -> logging.Logger:
    logger = logging.getLogger("playdeck")
    logger.setLevel(logging.DEBUG)
    logger.propagate = False
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(config.log_level)
    console_handler.setFormatter(logging.Formatter("%(asctime)s | %(levelname)s | %(message)s"))
    handlers: list[logging.Handler] = [console_handler]

    if config.log_file:
        file_handler = logging.FileHandler(config.log_file, encoding="utf-8")
        file_handler.setLevel(config.file_log_level)
        file_handler.setFormatter(
            logging.Formatter(
                "%(asctime)s | %(levelname)s | %(name)s | %(module)s:%(lineno)d | "
                "%(funcName)s | %(message)s"
            )
        )
        handlers.append(file_handler)

    for name in _APP_LOGGERS:
        module_logger = logging.getLogger(name)
        module_logger.setLevel(logging.DEBUG)
        module_logger.propagate = False
        for handler in list(module_logger.handlers):
            module_logger.removeHandler(handler)
        for handler in handlers:
            module_logger.addHandler(handler)

    logging.captureWarnings(True)
    warnings_logger = logging.getLogger("py.warnings")
    warnings_logger.propagate = False
    for handler in list(warnings_logger.handlers):
        warnings_logger.removeHandler(handler)
    warnings_logger.addHandler(handlers[-1])
    return logger
