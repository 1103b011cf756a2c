"""Console logging for laggy.

Every module logs through ``logging.getLogger(__name__)`` under the ``laggy``
logger.  :func:`configure_logging` attaches a single coloured stderr handler
and maps the ``verbose`` / ``silent`` flags onto levels.
"""

from __future__ import annotations

import logging

import click

ROOT_LOGGER = "laggy"

_LEVEL_COLORS: dict[int, str | None] = {
    logging.DEBUG: None,
    logging.INFO: None,
    logging.WARNING: "yellow",
    logging.ERROR: "red",
    logging.CRITICAL: "red",
}


class ClickFormatter(logging.Formatter):
    """Prefix records with ``[laggy]`` and colour them by level."""

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        color = _LEVEL_COLORS.get(record.levelno)
        if record.levelno <= logging.DEBUG:
            message = click.style(message, dim=True)
        elif color:
            message = click.style(message, fg=color)
        return f"{click.style('[laggy]', fg='cyan')} {message}"


class ClickHandler(logging.Handler):
    """Write records with :func:`click.echo` so colours respect the terminal."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            click.echo(self.format(record), err=True)
        except Exception:  # noqa: BLE001
            self.handleError(record)


def configure_logging(verbose: bool = False, silent: bool = False) -> logging.Logger:
    """Install the laggy console handler and set the level.

    ``silent`` wins over ``verbose``: only errors are shown.  Calling this
    again replaces the level without stacking handlers.
    """
    logger = logging.getLogger(ROOT_LOGGER)
    if not any(isinstance(handler, ClickHandler) for handler in logger.handlers):
        handler = ClickHandler()
        handler.setFormatter(ClickFormatter("%(message)s"))
        logger.addHandler(handler)
    logger.propagate = False
    if silent:
        logger.setLevel(logging.ERROR)
    elif verbose:
        logger.setLevel(logging.DEBUG)
    else:
        logger.setLevel(logging.INFO)
    return logger


def log_request(logger: logging.Logger, method: str, target: str, action: str) -> None:
    """Log one intercepted request as ``METHOD target → action`` at DEBUG."""
    if not logger.isEnabledFor(logging.DEBUG):
        return
    method_color = "green" if method.upper() == "GET" else "yellow"
    logger.debug(
        "%s %s → %s", click.style(method, fg=method_color), target, action
    )


__all__ = ["ClickFormatter", "ClickHandler", "ROOT_LOGGER", "configure_logging", "log_request"]
