"""
Structured Logging Configuration

Application logs and the authorization audit trail share one structlog
pipeline. Audit events are emitted on the ``timetracker.audit`` logger and
carry ``audit=True`` so they can be routed separately downstream.
"""

import structlog
import logging
import sys
from typing import Any, Dict

from timetracker.core.config import settings

AUDIT_LOGGER_NAME = "timetracker.audit"

# Library loggers that drown out request logs at INFO
NOISY_LOGGERS = ("uvicorn.access", "sqlalchemy.engine", "aiosqlite", "asyncio")


def add_environment(logger: Any, method_name: str, event_dict: Dict[str, Any]) -> Dict[str, Any]:
    event_dict.setdefault("environment", settings.ENVIRONMENT)
    return event_dict


def add_actor_role_summary(logger: Any, method_name: str, event_dict: Dict[str, Any]) -> Dict[str, Any]:
    """Collapse role and real_role into one field while an admin is role testing"""
    role = event_dict.get("role")
    real_role = event_dict.get("real_role")
    if role and real_role and role != real_role:
        event_dict["acting_as"] = f"{real_role}->{role}"
    return event_dict


def setup_logging():
    """Configure structured logging for the application"""
    level = getattr(logging, settings.LOG_LEVEL)

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)
    if not settings.DEBUG:
        for name in NOISY_LOGGERS:
            logging.getLogger(name).setLevel(max(level, logging.WARNING))

    renderer = (
        structlog.processors.JSONRenderer()
        if settings.is_production
        else structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            add_environment,
            add_actor_role_summary,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def get_audit_logger():
    """Logger for authorization decisions and role changes"""
    return structlog.get_logger(AUDIT_LOGGER_NAME).bind(audit=True)
