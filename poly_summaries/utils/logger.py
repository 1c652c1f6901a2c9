"""
Structured Logger Module

Configures structlog for JSON-formatted structured logging with correlation IDs.
All components use this logger so a single run can be traced end to end.

Example Usage:
    from poly_summaries.utils.logger import get_logger

    logger = get_logger(
        correlation_id="a1b2c3d4-e5f6-7890-abcd-ef1234567890",
        phase="summaries",
        component="summary_coordinator",
    )

    logger.info("Processing batch", start_index=0, end_index=400)
    logger.warning("Gemini rate limited", professor_name="Jane Doe", attempt=2)

Log Levels:
    - DEBUG: Prompts, payload previews, template rendering
    - INFO: Fetch results, batch range, saved files
    - WARNING: Corrupt state files, retries, fallback summaries
    - ERROR: Fetch failures, exhausted retries
    - CRITICAL: Missing credentials and other fatal startup errors
"""

import logging
import sys
import uuid
from pathlib import Path
from typing import Optional

import structlog
from structlog.types import BindableLogger, EventDict, WrappedLogger

DEFAULT_LOG_FILE = "logs/poly-summaries.log"
MASK = "***MASKED***"
SENSITIVE_FIELDS = frozenset(
    {"password", "api_key", "token", "secret", "credential", "auth", "authorization"}
)


def _is_sensitive(key: str) -> bool:
    """True for a sensitive field name or one with a sensitive word at either end.

    Hyphens count as underscores, so "x-goog-api-key" matches "api_key".
    """
    normalized = key.lower().replace("-", "_")
    return any(
        normalized == word
        or normalized.endswith(f"_{word}")
        or normalized.startswith(f"{word}_")
        for word in SENSITIVE_FIELDS
    )


def mask_credentials(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """structlog processor replacing sensitive values with MASK."""
    for key in event_dict:
        if _is_sensitive(key):
            event_dict[key] = MASK
    return event_dict


def configure_logging(
    log_file: str = DEFAULT_LOG_FILE, log_level: str = "INFO"
) -> None:
    """
    Configure structlog with JSON output to stdout and a log file.

    Args:
        log_file: Path to log file (default: "logs/poly-summaries.log")
        log_level: Logging level (default: "INFO")
    """
    log_path = Path(log_file)
    log_path.parent.mkdir(parents=True, exist_ok=True)

    logging.basicConfig(
        format="%(message)s",
        level=getattr(logging, log_level.upper()),
        handlers=[
            logging.FileHandler(log_file, encoding="utf-8"),
            logging.StreamHandler(sys.stdout),
        ],
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
            mask_credentials,
            structlog.processors.JSONRenderer(),
        ],
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
    Get structured logger with bound context.

    Args:
        correlation_id: Correlation ID for run tracing (generates UUID if not provided)
        phase: Pipeline phase (e.g., "fetch", "summaries")
        component: Component name (e.g., "csv_fetcher", "summary_client")

    Returns:
        BoundLogger with correlation_id, phase, and component bound to context
    """
    if correlation_id is None:
        correlation_id = str(uuid.uuid4())

    logger = structlog.get_logger()

    if correlation_id:
        logger = logger.bind(correlation_id=correlation_id)
    if phase:
        logger = logger.bind(phase=phase)
    if component:
        logger = logger.bind(component=component)

    return logger


# Initialize logging on module import with default settings
configure_logging()
