"""Logging configuration for cli-updater.

Diagnostics go to stderr so that a host CLI's stdout stays clean.
"""

import logging
import sys

import structlog

from cli_updater.config import get_settings

_SHARED_PROCESSORS: list[structlog.types.Processor] = [
    structlog.contextvars.merge_contextvars,
    structlog.stdlib.add_logger_name,
    structlog.stdlib.add_log_level,
    structlog.processors.StackInfoRenderer(),
    structlog.dev.set_exc_info,
    structlog.processors.TimeStamper(fmt="iso"),
]

# Handler installed by setup_logging, replaced on reconfiguration
_console_handler: logging.Handler | None = None


def _stderr_logger_factory(*args: object) -> structlog.PrintLogger:
    # Resolve sys.stderr per logger so redirection (and pytest capture) is honored
    return structlog.PrintLogger(sys.stderr)


def configure_default_logging() -> None:
    """Send structlog output to stderr until setup_logging() runs.

    structlog's own default prints to stdout, which would corrupt the output
    of a host CLI that only embeds the checker.
    """
    if not structlog.is_configured():
        structlog.configure(logger_factory=_stderr_logger_factory)


def setup_logging() -> None:
    """Configure structured logging.

    Safe to call more than once: the previous console handler is replaced.
    """
    global _console_handler

    settings = get_settings()

    log_level = getattr(logging, str(settings.log_level).upper(), logging.INFO)
    if not isinstance(log_level, int):
        log_level = logging.INFO

    renderer: structlog.types.Processor = (
        structlog.dev.ConsoleRenderer(colors=True)
        if settings.is_development
        else structlog.processors.JSONRenderer()
    )

    structlog.configure(
        processors=[
            *_SHARED_PROCESSORS,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(format="%(message)s", level=log_level, handlers=[])

    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=_SHARED_PROCESSORS,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                renderer,
            ],
        )
    )
    root = logging.getLogger()
    if _console_handler is not None:
        root.removeHandler(_console_handler)
    root.addHandler(console)
    _console_handler = console
    root.setLevel(log_level)

    # Reduce noise from the HTTP stack
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a logger instance."""
    return structlog.get_logger(name)


configure_default_logging()
