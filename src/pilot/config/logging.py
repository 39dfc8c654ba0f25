"""structlog setup for the pilot host.

Library modules log through stdlib ``logging``. The catalog attaches
``plugin`` and ``action`` to its records as ``extra`` fields; they are
lifted into the event dict here, so a JSON line for a failed broadcast
can be filtered by plugin without parsing the message.

Output goes to stderr: colored console lines by default, JSON lines with
``--log-json``.
"""

from __future__ import annotations

import logging
import sys
from typing import TextIO

import structlog

PLUGIN_FIELDS = ("plugin", "action")


def _pre_chain() -> list[structlog.types.Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
    ]


def _render_chain(log_json: bool, stream: TextIO) -> list[structlog.types.Processor]:
    if log_json:
        return [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    return [structlog.dev.ConsoleRenderer(colors=stream.isatty())]


def build_handler(*, log_json: bool = False, stream: TextIO | None = None) -> logging.Handler:
    """Handler rendering both stdlib and structlog records through structlog."""
    stream = stream if stream is not None else sys.stderr
    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=[
            *_pre_chain(),
            structlog.stdlib.ExtraAdder(allow=PLUGIN_FIELDS),
        ],
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            *_render_chain(log_json, stream),
        ],
    )
    handler = logging.StreamHandler(stream)
    handler.setFormatter(formatter)
    return handler


def configure_logging(
    *,
    verbose: bool = False,
    log_json: bool = False,
    stream: TextIO | None = None,
) -> None:
    """Route all logging through a single structlog-formatted handler.

    Args:
        verbose: ``pilot`` loggers emit DEBUG (registration, changes).
            Otherwise only WARNING+, which still covers plugin failures.
        log_json: Render JSON lines instead of console lines.
        stream: Destination, stderr by default.
    """
    structlog.configure(
        processors=[
            *_pre_chain(),
            structlog.processors.StackInfoRenderer(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(build_handler(log_json=log_json, stream=stream))
    root_logger.setLevel(logging.WARNING)

    logging.getLogger("pilot").setLevel(logging.DEBUG if verbose else logging.WARNING)
