"""Structured logging for the face authentication service.

Events pass through a redaction step before rendering. Base keys,
derived keys, descriptors and image payloads must never reach a log
sink, even when a caller binds them by mistake.
"""
import logging
import sys
from typing import Any, List, MutableMapping, Optional

import structlog
from structlog.stdlib import ProcessorFormatter

from faceauth.core.config import settings

REDACTED = "[REDACTED]"

SENSITIVE_FIELDS = frozenset({
    "app_secret",
    "base_key",
    "ciphertext",
    "derived_key",
    "descriptor",
    "embedding",
    "image",
    "image_data",
    "key",
    "passphrase",
    "plaintext",
    "salt",
    "template",
})

# Loaded alongside the detector models and noisy at INFO
QUIET_LOGGERS = ("onnxruntime", "insightface", "PIL")


def redact_sensitive_fields(
    logger: Any, method_name: str, event_dict: MutableMapping[str, Any]
) -> MutableMapping[str, Any]:
    """Replace the values of sensitive event keys, including nested dicts."""
    for field, value in list(event_dict.items()):
        if field.lower() in SENSITIVE_FIELDS:
            event_dict[field] = REDACTED
        elif isinstance(value, dict):
            event_dict[field] = redact_sensitive_fields(logger, method_name, dict(value))
    return event_dict


def _renderer(environment: str) -> structlog.types.Processor:
    if environment == "development":
        return structlog.dev.ConsoleRenderer(colors=True)
    return structlog.processors.JSONRenderer()


def setup_logging(environment: Optional[str] = None, level: Optional[str] = None) -> None:
    """Configure structlog on top of the stdlib root logger.

    Args:
        environment: Overrides `settings.ENVIRONMENT`; "development" renders
            for the console, anything else renders JSON lines
        level: Overrides `settings.LOG_LEVEL`
    """
    environment = environment or settings.ENVIRONMENT
    level = (level or settings.LOG_LEVEL).upper()

    pre_chain: List[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        redact_sensitive_fields,
    ]
    if environment != "development":
        pre_chain.append(structlog.processors.format_exc_info)

    structlog.configure(
        processors=[*pre_chain, ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    # foreign_pre_chain gives records from onnxruntime and friends the same shape
    formatter = ProcessorFormatter(
        processor=_renderer(environment),
        foreign_pre_chain=pre_chain,
    )
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, level, logging.INFO))

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    get_logger(__name__).info("Logging configured", environment=environment, level=level)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Return a structlog logger bound to `name`, typically `__name__`."""
    return structlog.get_logger(name)
