"""Structured logging for release-note.

Events go through structlog into the stdlib ``release_note`` logger and
its children only. The global structlog configuration, the root logger
and other libraries' handlers are left untouched. Until
:func:`configure_logging` installs a handler, events propagate to
whatever stdlib logging the host application set up.

Two renderings are available:

- Console (default): ``[level] event key=value`` lines, colored on a TTY.
- JSON (``--json-log``): one object per line with an ISO timestamp.

Output goes to stderr by default so the rendered document on stdout can
be piped::

    release-note --format json --json-log 2>build.log | jq .recommended_version
"""

from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from typing import TextIO

LOGGER_NAME = "release_note"

_package_logger = logging.getLogger(LOGGER_NAME)
_package_logger.addHandler(logging.NullHandler())

_PROCESSORS: list[structlog.types.Processor] = [
    structlog.stdlib.filter_by_level,
    structlog.stdlib.add_logger_name,
    structlog.stdlib.add_log_level,
    structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
]


def _level(verbose: bool, quiet: bool) -> int:
    if quiet:
        return logging.WARNING
    if verbose:
        return logging.DEBUG
    return logging.INFO


def configure_logging(
    *,
    verbose: bool = False,
    quiet: bool = False,
    json_log: bool = False,
    stream: TextIO | None = None,
) -> None:
    """Attach a rendering handler to the ``release_note`` logger.

    Calling it again replaces the previous handler, so the CLI can be
    invoked repeatedly in one process.

    Args:
        verbose: Emit debug events (per-commit exclusions, git commands)
        quiet: Only emit warnings and errors; wins over ``verbose``
        json_log: Render JSON lines instead of console text
        stream: Destination (defaults to the current ``sys.stderr``)
    """
    stream = stream or sys.stderr

    if json_log:
        processors: list[structlog.types.Processor] = [
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.JSONRenderer(sort_keys=True),
        ]
    else:
        processors = [
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            structlog.dev.ConsoleRenderer(colors=stream.isatty()),
        ]

    handler = logging.StreamHandler(stream)
    handler.setFormatter(structlog.stdlib.ProcessorFormatter(processors=processors))

    _package_logger.handlers[:] = [handler]
    _package_logger.setLevel(_level(verbose, quiet))
    _package_logger.propagate = False


def get_logger(name: str = LOGGER_NAME) -> structlog.stdlib.BoundLogger:
    """Return a logger in the ``release_note`` hierarchy.

    Modules pass ``__name__``; names outside the package are nested under
    it so their events reach the configured handler.
    """
    if name != LOGGER_NAME and not name.startswith(f"{LOGGER_NAME}."):
        name = f"{LOGGER_NAME}.{name}"
    return structlog.wrap_logger(
        logging.getLogger(name),
        processors=_PROCESSORS,
        wrapper_class=structlog.stdlib.BoundLogger,
    )


__all__ = [
    "LOGGER_NAME",
    "configure_logging",
    "get_logger",
]
