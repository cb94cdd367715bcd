"""
Logging utility functions and helpers.
"""

import logging
from typing import Any, Dict, Optional


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance for a module.

    Args:
        name: Module name (usually __name__)

    Returns:
        Configured logger

    Usage:
        from utils.logger import get_logger
        logger = get_logger(__name__)
    """
    return logging.getLogger(name)


SENSITIVE_FIELDS = {
    'password', 'token', 'secret', 'api_key', 'access_token',
    'p256dh', 'auth', 'private_key', 'internal_key'
}


def sanitize_log_data(data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Remove sensitive information from log data.

    Args:
        data: Dictionary that may contain sensitive fields

    Returns:
        Sanitized dictionary safe for logging

    Magic link tokens keep their first 8 characters so a redemption can still
    be correlated with its issuance. Push subscription keys and secrets are
    fully redacted.
    """
    sanitized = data.copy()

    for key, value in sanitized.items():
        if any(sensitive in key.lower() for sensitive in SENSITIVE_FIELDS):
            if isinstance(value, str):
                if 'token' in key.lower() and len(value) > 8:
                    sanitized[key] = f"{value[:8]}..."
                else:
                    sanitized[key] = "***REDACTED***"

        elif isinstance(value, dict):
            sanitized[key] = sanitize_log_data(value)

    return sanitized


def log_order_event(
    logger: logging.Logger,
    message: str,
    order_id: int,
    status: Optional[str] = None,
    level: int = logging.INFO,
    extra: Optional[Dict[str, Any]] = None
):
    """
    Log an order lifecycle event in a structured format.

    Args:
        logger: Logger instance
        message: Human readable message
        order_id: Order the event belongs to
        status: Order status after the event (if any)
        level: Logging level
        extra: Additional context (sanitized before logging)

    Usage:
        log_order_event(logger, "Order status updated", order.id, status="ready")
    """
    log_data: Dict[str, Any] = {"order_id": order_id}

    if status:
        log_data["order_status"] = status

    if extra:
        log_data.update(sanitize_log_data(extra))

    logger.log(level, message, extra=log_data)
