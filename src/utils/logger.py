import logging
import os

from rich.logging import RichHandler

_loggers = []


class CenteredFormatter(logging.Formatter):
    """Pads logger names to the widest name seen so far, centred."""

    widest_name = 12

    def __init__(self, fmt=None, datefmt=None, style="%", initial_width=12):
        super().__init__(fmt, datefmt, style)
        CenteredFormatter.widest_name = initial_width

    def format(self, record):
        CenteredFormatter.widest_name = max(
            CenteredFormatter.widest_name, len(record.name)
        )
        record.name = record.name.center(CenteredFormatter.widest_name)
        return super().format(record)


def get_logger(name=None) -> logging.Logger:
    """
    Return a logger writing through rich. Set DEBUG in the environment
    to see request/response traces from the gateway.
    """
    logger = logging.getLogger(name or "shop")
    log_level = logging.DEBUG if os.getenv("DEBUG") else logging.INFO
    logger.setLevel(log_level)

    if not logger.handlers:
        handler = RichHandler(
            show_time=True,
            show_level=True,
            show_path=False,
            rich_tracebacks=True,
            log_time_format="[%X]",
        )
        handler.setFormatter(CenteredFormatter("[%(name)s]  %(message)s"))
        handler.setLevel(log_level)
        logger.addHandler(handler)
        logger.propagate = False
        _loggers.append(logger)

    return logger


def set_debug(enabled: bool) -> None:
    """
    Switch every logger handed out so far. Module level loggers exist before
    `.env` is read, so the settings apply the DEBUG flag afterwards.
    """
    level = logging.DEBUG if enabled else logging.INFO
    for logger in _loggers:
        logger.setLevel(level)
        for handler in logger.handlers:
            handler.setLevel(level)
