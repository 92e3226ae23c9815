"""
Telemetry Layer — Structured Logging
====================================

Usage:
    from service_wrapper.telemetry import get_logger

    logger = get_logger(__name__)
    logger.info("queue_entry_fired", request_id="1__a3f9c2")
"""

from service_wrapper.telemetry.logger import (
    StructuredFormatter,
    StructuredLogger,
    get_logger,
    get_request_id,
    request_context,
    set_request_context,
    setup_logging,
)

__all__ = [
    "StructuredFormatter",
    "StructuredLogger",
    "get_logger",
    "get_request_id",
    "request_context",
    "set_request_context",
    "setup_logging",
]
