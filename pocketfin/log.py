"""
Structured Logging

Every service call that touches storage or a remote model emits one
structured event. Pure ledger functions never log.

Configuration is applied once; repeated calls are no-ops unless
`force=True` (tests use that to switch renderers).
"""

import logging
import sys
from typing import Optional

import structlog

from pocketfin.config import get_settings


_configured = False


def configure_logging(
    level: Optional[str] = None,
    json_logs: Optional[bool] = None,
    force: bool = False,
) -> None:
    """Install the structlog processor chain on top of stdlib logging."""
    global _configured
    if _configured and not force:
        return

    app_settings = get_settings().app
    level = (level or app_settings.log_level).upper()
    json_logs = app_settings.json_logs if json_logs is None else json_logs

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=level,
        force=force,
    )

    renderer = (
        structlog.processors.JSONRenderer()
        if json_logs
        else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    _configured = True


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    configure_logging()
    return structlog.get_logger(name)
