"""Structured logging for the test runner server.

Every tool call runs inside tool_call_context(), which binds a short request
ID and the tool name into structlog's context variables. Subprocess and
pipeline events logged while the call is in flight carry both fields without
any explicit plumbing.

Each configured output gets its own renderer (console or JSON) and level.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING
from uuid import uuid4

import structlog

if TYPE_CHECKING:
    from testrunner_mcp.config.models import LoggingConfig, LogOutputConfig

_LEVEL_MAP = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARN": logging.WARNING,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}

# Per-request chatter from the MCP SDK and uvicorn's access log
_QUIET_LOGGERS = (
    "mcp.server.lowlevel.server",
    "mcp.server.sse",
    "fastmcp.server.context.to_client",
    "uvicorn.access",
)

_SHARED_PROCESSORS: list[structlog.types.Processor] = [
    structlog.contextvars.merge_contextvars,
    structlog.processors.add_log_level,
    structlog.processors.TimeStamper(fmt="%Y-%m-%d %H:%M:%S", key="timestamp"),
]


def new_request_id() -> str:
    return uuid4().hex[:12]


def get_request_id() -> str | None:
    """Request ID of the tool call in progress, if any."""
    rid = structlog.contextvars.get_contextvars().get("request_id")
    return rid if isinstance(rid, str) else None


@contextmanager
def tool_call_context(tool: str, request_id: str | None = None) -> Iterator[str]:
    """Bind request_id and tool for the duration of one tool call.

    Yields the request ID. Bindings made by an enclosing call are restored
    on exit.
    """
    rid = request_id or new_request_id()
    with structlog.contextvars.bound_contextvars(request_id=rid, tool=tool):
        yield rid


def _level(name: str | None, fallback: int) -> int:
    if name is None:
        return fallback
    return _LEVEL_MAP.get(name.upper(), fallback)


def configure_logging(
    *,
    config: LoggingConfig | None = None,
    json_format: bool = False,
    level: str = "INFO",
) -> None:
    """Configure structlog. Pass config for multi-output, or use simple params.

    Args:
        config: Logging configuration with outputs
        json_format: Use JSON format for simple setup
        level: Default log level
    """
    from testrunner_mcp.config.models import LoggingConfig, LogOutputConfig

    if config is None:
        config = LoggingConfig(
            level=level,  # type: ignore[arg-type]
            outputs=[LogOutputConfig(format="json" if json_format else "console")],
        )

    default_level = _level(config.level, logging.INFO)

    structlog.configure(
        processors=[
            *_SHARED_PROCESSORS,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(default_level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        # Not cached so a later configure_logging() call takes effect
        cache_logger_on_first_use=False,
    )

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(default_level)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    for output in config.outputs:
        root_logger.addHandler(_handler(output, _level(output.level, default_level)))


def _handler(output: LogOutputConfig, level: int) -> logging.Handler:
    """Build the handler for one output: stderr, stdout, or a file path."""
    handler: logging.Handler
    if output.destination == "stderr":
        handler = logging.StreamHandler(sys.stderr)
        colors = sys.stderr.isatty()
    elif output.destination == "stdout":
        handler = logging.StreamHandler(sys.stdout)
        colors = sys.stdout.isatty()
    else:
        path = Path(output.destination)
        path.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(path, mode="a")
        colors = False

    renderer: structlog.types.Processor
    if output.format == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=colors, pad_event_to=0, pad_level=False)

    handler.setLevel(level)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=renderer,
            foreign_pre_chain=_SHARED_PROCESSORS,
        )
    )
    return handler
