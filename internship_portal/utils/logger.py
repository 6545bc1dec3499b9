"""
Structured Logger Module

JSON logging through structlog. Every portal service asks for a logger bound
to the session's correlation id and its own component name, so all actions
of one session can be followed through the log file.

Example Usage:
    from internship_portal.utils.logger import get_logger

    logger = get_logger(
        correlation_id="a1b2c3d4-e5f6-7890-abcd-ef1234567890",
        phase="top3Choice",
        component="application_tracker",
    )
    logger.info("Top-3 choice submitted", student_id="2", company_ids=["c1", "c3", "c6"])

Log Levels:
    - DEBUG: Registry lookups, seed collection loading
    - INFO: State changes (sign-in, phase activation, application decisions)
    - WARNING: Actions rejected at the action boundary
    - ERROR: Broken configuration or seed data
"""

import logging
import re
import sys
import uuid
from pathlib import Path
from typing import Optional

import structlog
from structlog.types import BindableLogger, EventDict, WrappedLogger

MASK = "***MASKED***"

# Matches "password", "session_token", "auth-header"... but not "author".
SENSITIVE_KEY = re.compile(r"(?:^|[_-])(?:password|token|secret|credential|auth)(?:[_-]|$)")


def mask_credentials(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """
    structlog processor replacing the values of credential-like keys with MASK.

    The demo login accepts any password; it still must never reach the log.
    """
    for key in event_dict:
        if SENSITIVE_KEY.search(key.lower()):
            event_dict[key] = MASK
    return event_dict


SHARED_PROCESSORS = [
    structlog.contextvars.merge_contextvars,
    structlog.stdlib.add_log_level,
    structlog.stdlib.add_logger_name,
    structlog.processors.TimeStamper(fmt="iso"),
    structlog.processors.StackInfoRenderer(),
    structlog.processors.format_exc_info,
    mask_credentials,
]


def configure_logging(
    log_file: str = "logs/internship-portal.log",
    log_level: str = "INFO",
    echo: bool = True,
) -> None:
    """
    Route structlog events as JSON lines to ``log_file`` (and stdout when ``echo``).

    Args:
        log_file: Log file path; its directory is created if missing
        log_level: Minimum level name, e.g. "DEBUG"
        echo: Also write every line to stdout

    Log line:
        {"correlation_id": "a1b2...", "component": "phase_sequencer",
         "event": "Phase activated", "phase_id": "p3", "level": "info",
         "timestamp": "2026-02-09T08:00:00Z"}
    """
    Path(log_file).parent.mkdir(parents=True, exist_ok=True)

    handlers: list[logging.Handler] = [logging.FileHandler(log_file, encoding="utf-8")]
    if echo:
        handlers.append(logging.StreamHandler(sys.stdout))

    logging.basicConfig(
        format="%(message)s",
        level=getattr(logging, log_level.upper()),
        handlers=handlers,
        force=True,
    )

    structlog.configure(
        processors=[*SHARED_PROCESSORS, structlog.processors.JSONRenderer()],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(
    correlation_id: Optional[str] = None,
    phase: Optional[str] = None,
    component: Optional[str] = None,
) -> BindableLogger:
    """
    Logger with the session context bound.

    Args:
        correlation_id: Session id shared by every service of one Portal (new UUID if None)
        phase: Phase type the work belongs to (e.g. "choose5"), if any
        component: Service name (e.g. "identity_store")
    """
    context = {
        "correlation_id": correlation_id or str(uuid.uuid4()),
        "phase": phase,
        "component": component,
    }
    return structlog.get_logger().bind(
        **{key: value for key, value in context.items() if value}
    )


configure_logging()
