# =============================================================================
# HOOKRUNNER - MONITORING PACKAGE
# =============================================================================
"""
Monitoring Package

Logging infrastructure shared by the webhook server and the CLI.

Usage:
    from monitoring import setup_logging, log_context

    setup_logging(level="INFO", fmt="json")

    with log_context(delivery="72d3162e"):
        logger.info("Webhook received")
"""

from monitoring.logger import (
    setup_logging,
    LogContext,
    log_context,
    mask_sensitive_data,
    mask_dict,
)


__all__ = [
    "setup_logging",
    "LogContext",
    "log_context",
    "mask_sensitive_data",
    "mask_dict",
]
