"""
Logging for mocksmith.

The resolver reports a seeding run as a short pipeline and logs through a
``Logger`` subclass with three levels of its own:

- PHASE (35): extract resources, detect dependencies, generate seed data
- STEP (25): one resource being generated
- UPDATE (22): a result worth showing, such as a found foreign key or the
  generation order

Generated values and parsed schemas are logged at DEBUG with ``debugf``.
Nothing is printed until ``setup_logging`` attaches handlers to the
``mocksmith`` logger; library users can also route its records themselves.
"""

import logging
import sys
from typing import Any

from devtools import debug
from rich.console import Console
from rich.logging import RichHandler
from rich.theme import Theme


PHASE_LEVEL = 35  # Above WARNING: shown at the WARNING level too
STEP_LEVEL = 25
UPDATE_LEVEL = 22

logging.addLevelName(PHASE_LEVEL, "PHASE")
logging.addLevelName(STEP_LEVEL, "STEP")
logging.addLevelName(UPDATE_LEVEL, "UPDATE")

DEFAULT_LEVEL = UPDATE_LEVEL

DEFAULT_FILE_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"

# Level styles for the console; rich looks them up as logging.level.<name>
LOG_THEME = Theme(
    {
        "logging.level.debug": "dim",
        "logging.level.info": "green",
        "logging.level.update": "blue",
        "logging.level.step": "magenta",
        "logging.level.warning": "yellow",
        "logging.level.phase": "bold magenta",
        "logging.level.error": "bold red",
        "logging.level.critical": "reverse red",
    }
)


class Logger(logging.Logger):
    """``logging.Logger`` that knows the seeding levels."""

    def phase(self, message: str, *args, **kwargs) -> None:
        if self.isEnabledFor(PHASE_LEVEL):
            self._log(PHASE_LEVEL, message, args, **kwargs)

    def step(self, message: str, *args, **kwargs) -> None:
        if self.isEnabledFor(STEP_LEVEL):
            self._log(STEP_LEVEL, message, args, **kwargs)

    def update(self, message: str, *args, **kwargs) -> None:
        if self.isEnabledFor(UPDATE_LEVEL):
            self._log(UPDATE_LEVEL, message, args, **kwargs)

    def debugf(self, obj: Any) -> None:
        """Pretty-print a schema, dependency list or generated instance at DEBUG."""
        if self.isEnabledFor(logging.DEBUG):
            self.debug(str(debug.format(obj)))


logging.setLoggerClass(Logger)


class SeparatorRichHandler(RichHandler):
    """Draws a rule across the console before each phase and step."""

    def emit(self, record: logging.LogRecord) -> None:
        if record.levelno == PHASE_LEVEL:
            self.console.rule(characters="═", style="magenta")
        elif record.levelno == STEP_LEVEL:
            self.console.rule(characters="─", style="dim magenta")
        super().emit(record)


def setup_logging(
    level: int = DEFAULT_LEVEL,
    log_file: str | None = None,
    format_string: str | None = None,
    console: Console | None = None,
) -> Logger:
    """
    Attach console (and optionally file) handlers to the ``mocksmith`` logger.

    Calling it again replaces the handlers from the previous call. The root
    logger is left alone.

    Args:
        level: Minimum level; UPDATE by default, ``logging.DEBUG`` shows every
            generated instance
        log_file: Also write plain-text records to this path
        format_string: Record format for the file handler
        console: Rich console to render to (stdout when omitted)

    Returns:
        The ``mocksmith`` logger
    """
    logger = logging.getLogger("mocksmith")
    logger.setLevel(level)
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
        handler.close()

    if console is None:
        console = Console(file=sys.stdout, theme=LOG_THEME)
    else:
        console.push_theme(LOG_THEME)

    logger.addHandler(
        SeparatorRichHandler(
            console=console,
            level=level,
            show_path=False,
            markup=False,
        )
    )

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(logging.Formatter(format_string or DEFAULT_FILE_FORMAT))
        logger.addHandler(file_handler)

    return logger  # type: ignore[return-value]


def get_logger(name: str) -> Logger:
    """``logging.getLogger`` typed as a mocksmith ``Logger``."""
    return logging.getLogger(name)  # type: ignore[return-value]
