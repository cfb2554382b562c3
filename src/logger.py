"""Logging configuration and helpers."""

import logging
import typing
from enum import StrEnum

from src import settings


class ConsoleFormat(StrEnum):
    """ANSI escape codes used by the colour console formatter.

    <https://en.wikipedia.org/wiki/ANSI_escape_code#Select_Graphic_Rendition_parameters>
    """

    RESET = "\033[0m"

    BLACK = "\033[30m"
    RED = "\033[31m"
    YELLOW = "\033[33m"
    BLUE = "\033[34m"
    LIGHT_GREY = "\033[37m"

    HIGHLIGHT_RED = "\033[41m"

    BOLD = "\033[1m"


class DefaultConsoleFormatter(logging.Formatter):
    """Plain console formatter, used when colour output is disabled."""

    fmt = "{asctime} - {name} - {levelname} - {message}"
    style = "{"
    validate = True

    def _formatted_message(self, *_: typing.Any, **__: typing.Any) -> str:
        return self.fmt

    def format(self, record: logging.LogRecord) -> str:
        """Format the specified log record as text."""
        formatter = logging.Formatter(
            self._formatted_message(record),
            style=self.style,  # type: ignore[arg-type]
            validate=self.validate,
        )
        return formatter.format(record)


class ColourConsoleFormatter(DefaultConsoleFormatter):
    """Console formatter that colours each line by log level."""

    COLOURS = {
        logging.DEBUG: ConsoleFormat.LIGHT_GREY,
        logging.INFO: ConsoleFormat.BLUE,
        logging.WARNING: ConsoleFormat.YELLOW,
        logging.ERROR: ConsoleFormat.RED,
        logging.CRITICAL: ConsoleFormat.BOLD + ConsoleFormat.HIGHLIGHT_RED + ConsoleFormat.BLACK,
    }

    def _formatted_message(self, record: logging.LogRecord) -> str:
        log_colour = self.COLOURS.get(record.levelno, ConsoleFormat.RESET)
        return f"{log_colour}{self.fmt}{ConsoleFormat.RESET}"


def _build_handler(level: str, colour: bool) -> logging.Handler:
    """Build the console handler used by the engine logger."""
    handler = logging.StreamHandler()
    handler.setLevel(level)
    handler.setFormatter(ColourConsoleFormatter() if colour else DefaultConsoleFormatter())
    return handler


LOGGER = logging.getLogger(settings.LOGGER_NAME)
LOGGER.setLevel(settings.LOG_LEVEL)
LOGGER.addHandler(_build_handler(settings.LOG_LEVEL, settings.LOG_COLOUR_ENABLED))
