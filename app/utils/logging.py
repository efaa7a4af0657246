"""structlog configuration shared by the pipeline, validators and scripts.

Library modules only call :func:`get_logger`; configuring processors and the
level filter is left to entry points (``scripts/assets.py``) so tests can
capture events with :func:`structlog.testing.capture_logs`.
"""

import logging
import sys

import structlog


def configure_logging(verbose: bool = False, json_output: bool = False) -> None:
    """Configure structlog for command-line use.

    Args:
        verbose:     Emit ``debug`` events; otherwise ``info`` and above.
        json_output: Render one JSON object per line instead of the
            human-readable console format.
    """
    renderer = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())
    )
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.DEBUG if verbose else logging.INFO
        ),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )


def get_logger(name: str):
    """Return a lazily configured structlog logger tagged with *name*."""
    return structlog.get_logger(name, component=name)
