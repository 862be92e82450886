"""Utility modules."""

from emailbot.utils.body_sanitizer import DEFAULT_PIPELINE, sanitize_email_body
from emailbot.utils.logger import clear_context, configure_logging, get_logger, log_context, log_step
from emailbot.utils.tracing import get_tracer, init_tracing, shutdown_tracing

__all__ = [
    "DEFAULT_PIPELINE",
    "clear_context",
    "configure_logging",
    "get_logger",
    "get_tracer",
    "init_tracing",
    "log_context",
    "log_step",
    "sanitize_email_body",
    "shutdown_tracing",
]
