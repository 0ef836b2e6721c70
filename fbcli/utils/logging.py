"""structlog configuration.

Logs go to stderr so rendered reports on stdout stay machine-readable.
"""

from __future__ import annotations

import logging
import sys

import structlog

from fbcli.config import Settings, settings


def setup_logging(
    level: str | None = None,
    json_logs: bool | None = None,
    *,
    cfg: Settings | None = None,
) -> None:
    """Configure structlog once per process."""
    _cfg = cfg or settings
    level_name = (level or _cfg.fbcli_log_level).upper()
    use_json = _cfg.fbcli_log_json if json_logs is None else json_logs

    processors: list = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]
    if use_json:
        processors += [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, level_name, logging.INFO),
        ),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )


def get_logger(name: str):
    return structlog.get_logger(name)
