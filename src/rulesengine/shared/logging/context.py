"""
Context management for structured logging.
"""

import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Optional

import structlog

# Context variables for evaluation tracking
_evaluation_id: ContextVar[Optional[str]] = ContextVar("evaluation_id", default=None)
_correlation_id: ContextVar[Optional[str]] = ContextVar("correlation_id", default=None)


@contextmanager
def evaluation_context(
    evaluation_id: Optional[str] = None,
    correlation_id: Optional[str] = None,
) -> Iterator[str]:
    """
    Bind an evaluation ID (and optional correlation ID) to every log emitted
    inside the block.

    Nested blocks reuse the outer evaluation ID unless one is given.

    Yields:
        The evaluation ID in effect
    """
    eval_id = evaluation_id or _evaluation_id.get() or generate_evaluation_id()
    corr_id = correlation_id or _correlation_id.get()

    eval_token = _evaluation_id.set(eval_id)
    corr_token = _correlation_id.set(corr_id)
    bound = {"evaluation_id": eval_id}
    if corr_id:
        bound["correlation_id"] = corr_id
    with structlog.contextvars.bound_contextvars(**bound):
        try:
            yield eval_id
        finally:
            _evaluation_id.reset(eval_token)
            _correlation_id.reset(corr_token)


def generate_evaluation_id() -> str:
    """Generate a unique evaluation ID."""
    return f"eval_{uuid.uuid4().hex[:12]}"


def get_evaluation_id() -> Optional[str]:
    """Get the current evaluation ID from context."""
    return _evaluation_id.get()


def get_correlation_id() -> Optional[str]:
    """Get the current correlation ID from context."""
    return _correlation_id.get()
