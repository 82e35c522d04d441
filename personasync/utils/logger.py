"""
Structured Logger Module

Configures structlog for JSON-formatted structured logging with correlation IDs.
Session, dashboard and text-to-speech components all log through this module.

Example Usage:
    from personasync.utils.logger import configure_logging, get_logger

    configure_logging(log_level="DEBUG")

    logger = get_logger(
        correlation_id="a1b2c3d4-e5f6-7890-abcd-ef1234567890",
        component="user_session",
    )

    logger.info("survey_completed", username="alice", survey_id="s1", xp_earned=50)
    logger.warning("no_active_user", operation="add_xp")

Log Levels:
    - DEBUG: Store reads/writes, request payload sizes
    - INFO: Profile creation, survey completion, TTS synthesis
    - WARNING: Rejected operations (no active user, negative XP, duplicate username)
    - ERROR: Malformed stored records, TTS failures
"""

import logging
import sys
import uuid
from pathlib import Path
from typing import Optional
import structlog
from structlog.types import BindableLogger, EventDict, WrappedLogger

SENSITIVE_FIELDS = {"password", "api_key", "token", "secret", "credential", "auth", "email"}
MASK = "***MASKED***"


def mask_sensitive(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """
    Processor to mask credentials and personal data in log output.

    Args:
        logger: Logger instance
        method_name: Logging method name
        event_dict: Event dictionary to process

    Returns:
        Event dictionary with sensitive values replaced by "***MASKED***"

    Masks:
        - password, api_key, token, secret, credential, auth, email fields
        - Uses word boundary matching (underscore/hyphen) to avoid false positives
    """
    for key in list(event_dict.keys()):
        key_lower = key.lower()
        for sensitive in SENSITIVE_FIELDS:
            if (
                key_lower == sensitive
                or key_lower.endswith(f"_{sensitive}")
                or key_lower.endswith(f"-{sensitive}")
                or key_lower.startswith(f"{sensitive}_")
                or key_lower.startswith(f"{sensitive}-")
            ):
                event_dict[key] = MASK
                break

    return event_dict


def configure_logging(
    log_file: Optional[str] = "logs/personasync.log", log_level: str = "INFO"
) -> None:
    """
    Configure structlog with JSON output, to stdout and optionally a file.

    Args:
        log_file: Path to log file, or None for stdout only
        log_level: Logging level (default: "INFO")

    Log Format (JSON):
        {
            "timestamp": "2025-03-01T10:30:45Z",
            "level": "info",
            "correlation_id": "a1b2c3d4-...",
            "component": "user_session",
            "event": "survey_completed",
            "survey_id": "s1"
        }
    """
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        format="%(message)s",
        level=getattr(logging, log_level.upper()),
        handlers=handlers,
        force=True,
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            mask_sensitive,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(
    correlation_id: Optional[str] = None,
    component: Optional[str] = None,
) -> BindableLogger:
    """
    Get structured logger with bound context.

    Args:
        correlation_id: Correlation ID for tracing one session or request
            (generates UUID if not provided)
        component: Component name (e.g., "user_session", "tts_client")

    Returns:
        BoundLogger with correlation_id and component bound to context
    """
    if correlation_id is None:
        correlation_id = str(uuid.uuid4())

    logger = structlog.get_logger()

    if correlation_id:
        logger = logger.bind(correlation_id=correlation_id)
    if component:
        logger = logger.bind(component=component)

    return logger
