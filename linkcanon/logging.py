"""
structlog setup for linkcanon.

Log records from structlog and from the standard library share one stderr
handler. Entries carry the OpenTelemetry trace_id/span_id when a span is
recording, so a canonicalization done inside a traced request shows up under
the caller's trace.
"""

import logging
import sys
from typing import Any

import structlog
from opentelemetry import trace
from structlog.typing import EventDict, Processor, WrappedLogger

LOGGER_NAME = "linkcanon"


def _repr_default(obj: Any) -> str:
    """Serialize values the JSON renderer does not understand."""
    return repr(obj)


def add_trace_context(
    _logger: WrappedLogger,
    _method_name: str,
    event_dict: EventDict,
) -> EventDict:
    """
    Copy the current span's identifiers into the event.

    ``trace_id`` is 32 hex digits and ``span_id`` 16, matching the W3C
    traceparent encoding. Nothing is added outside a recording span.
    """
    span = trace.get_current_span()
    if span and span.is_recording():
        ctx = span.get_span_context()
        event_dict["trace_id"] = format(ctx.trace_id, "032x")
        event_dict["span_id"] = format(ctx.span_id, "016x")
    return event_dict


def make_add_component_processor(component: str) -> Processor:
    """
    Build a processor that tags every event with ``component``.

    Parameters
    ----------
    component : str
        Value for the ``component`` field, e.g. ``"cli"``.

    Returns
    -------
    Processor
        structlog processor setting ``event_dict["component"]``.
    """

    def add_component(
        _logger: WrappedLogger,
        _method_name: str,
        event_dict: EventDict,
    ) -> EventDict:
        event_dict["component"] = component
        return event_dict

    return add_component


def _parse_level(log_level: str) -> int:
    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level '{log_level}'")
    return level


def _shared_processors(component: str | None) -> list[Processor]:
    """Processors run for both structlog and standard library records."""
    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
        add_trace_context,
    ]
    if component:
        processors.append(make_add_component_processor(component))
    return processors


def _stderr_handler(shared: list[Processor], json_logs: bool) -> logging.Handler:
    """Handler rendering records as JSON lines or as colored console text."""
    renderer: Processor
    if json_logs:
        renderer = structlog.processors.JSONRenderer(default=_repr_default)
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    # stdout is reserved for CLI output
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=[structlog.stdlib.ExtraAdder(), *shared],
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
        )
    )
    return handler


def configure_logging(
    json_logs: bool = True,
    log_level: str = "INFO",
    component: str | None = None,
) -> None:
    """
    Route linkcanon and library logs to stderr through structlog.

    Parameters
    ----------
    json_logs : bool
        JSON lines when True, human-readable console output otherwise.
    log_level : str
        Level name applied to the ``linkcanon`` logger. Other libraries stay
        at WARNING.
    component : str | None
        Added as a ``component`` field to every entry when given.

    Raises
    ------
    ValueError
        If ``log_level`` is not a logging level name.
    """
    level = _parse_level(log_level)
    shared = _shared_processors(component)

    structlog.configure(
        processors=[*shared, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(_stderr_handler(shared, json_logs))
    root.setLevel(logging.WARNING)
    logging.getLogger(LOGGER_NAME).setLevel(level)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Return a structlog logger named ``name`` (usually ``__name__``)."""
    return structlog.get_logger(name)
