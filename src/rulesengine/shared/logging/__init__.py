"""
Structured logging for the rules engine.

This module provides structured logging capabilities with:
- Sensitive data masking
- Evaluation context tracking
- Correlation ID propagation
"""

from .factory import configure_logging, get_logger
from .sanitizers import mask_sensitive_data, sanitize_for_log, sanitize_value
from .context import (
    evaluation_context,
    get_correlation_id,
    get_evaluation_id,
)

__all__ = [
    "configure_logging",
    "get_logger",
    "mask_sensitive_data",
    "sanitize_for_log",
    "sanitize_value",
    "evaluation_context",
    "get_correlation_id",
    "get_evaluation_id",
]
