"""structlog setup for the price history service.

Every module logs through ``get_logger(__name__)``. Per-asset context (mint)
is bound with structlog.contextvars by the scheduler, so concurrent asset
syncs never mix their context.
"""

import logging
import os

import structlog

# Third-party loggers that are noisy at INFO
_QUIET_LOGGERS = ("aiohttp", "aiosqlite", "uvicorn.access")


def setup_logging(log_level: str = "INFO") -> None:
    """Route structlog and stdlib records through one renderer.

    LOG_FORMAT=json selects machine-readable output; anything else renders
    for the console.
    """
    json_output = os.environ.get("LOG_FORMAT", "console").lower() == "json"
    renderer: structlog.types.Processor = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler()
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                renderer,
            ],
        )
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(getattr(logging, log_level.upper(), logging.INFO))

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)
