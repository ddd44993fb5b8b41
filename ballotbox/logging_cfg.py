"""structlog setup shared by the server, the CLI and the demo runner.

Usage:
    from ballotbox.logging_cfg import configure_logging
    configure_logging("DEBUG", "json")
"""

import logging
from typing import List

import structlog
from structlog.typing import Processor


def configure_logging(level: str = "INFO", fmt: str = "console") -> None:
    """Configure structlog: JSON lines when ``fmt == "json"``, console otherwise."""
    level_num = getattr(logging, str(level).upper(), logging.INFO)

    processors: List[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]
    if fmt == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level_num),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=False,
    )
