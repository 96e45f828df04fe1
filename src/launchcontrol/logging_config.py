"""
Logging setup for launchcontrol, rendered through rich.

Library modules only ever ask for a logger with get_logger(__name__).
Applications call setup_logging() once to get rich formatted output; until
they do, the standard logging defaults apply.
"""

import logging
from typing import Optional, Union

from rich.console import Console
from rich.logging import RichHandler

Level = Union[int, str]

_handler: Optional[RichHandler] = None


def _resolve_level(level: Level) -> int:
    """Accept a logging constant or a level name such as "debug"."""
    if isinstance(level, int):
        return level

    resolved = logging.getLevelName(level.upper())
    if not isinstance(resolved, int):
        raise ValueError(f"Unknown log level: {level}")
    return resolved


def setup_logging(
    level: Level = logging.INFO,
    show_time: bool = True,
    show_path: bool = False,
    rich_tracebacks: bool = True,
    console: Optional[Console] = None,
) -> None:
    """
    Route all log records through a single RichHandler on the root logger.

    Calling it again only changes the root level; the handler installed by
    the first call stays.

    Args:
        level: Root level, as a logging constant or a name such as "DEBUG"
        show_time: Show timestamps
        show_path: Show the source file and line of each record
        rich_tracebacks: Render exceptions with rich tracebacks
        console: Console to write to (stderr if None)

    Raises:
        ValueError: If level is an unknown name
    """
    global _handler

    root_level = _resolve_level(level)

    if _handler is None:
        # Messages contain raw bytes and brackets, so rich markup stays off
        _handler = RichHandler(
            console=console or Console(stderr=True),
            show_time=show_time,
            show_path=show_path,
            rich_tracebacks=rich_tracebacks,
            markup=False,
            log_time_format="[%X]",
        )
        logging.basicConfig(format="%(message)s", handlers=[_handler], force=True)

    logging.getLogger().setLevel(root_level)


def get_logger(name: str) -> logging.Logger:
    """Get the logger for a module (pass __name__)."""
    return logging.getLogger(name)


def set_module_level(module_name: str, level: Level) -> None:
    """
    Change the level of one module's logger, e.g. to trace every inbound
    message with set_module_level("launchcontrol.controller", "DEBUG").
    """
    logging.getLogger(module_name).setLevel(_resolve_level(level))
