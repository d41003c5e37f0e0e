"""Test configuration and shared fixtures."""

from datetime import UTC, datetime, timedelta

import pytest

from rulesengine.domain.engine.registry import FunctionRegistry, PatternCache
from rulesengine.domain.engine.runtime import RuleEvaluator


@pytest.fixture
def registry() -> FunctionRegistry:
    """Isolated custom function registry."""
    return FunctionRegistry(name="test")


@pytest.fixture
def pattern_cache() -> PatternCache:
    """Fresh regex cache."""
    return PatternCache()


@pytest.fixture
def evaluator(registry, pattern_cache) -> RuleEvaluator:
    """Evaluator bound to the isolated registry."""
    return RuleEvaluator(registry=registry, pattern_cache=pattern_cache)


@pytest.fixture
def now() -> datetime:
    """Current timezone-aware instant."""
    return datetime.now(UTC)


@pytest.fixture
def user_record(now) -> dict:
    """Nested user record used across evaluator tests."""
    return {
        "user": {
            "name": "Maria Silva",
            "age": 34,
            "email": "maria@example.com",
            "active": True,
            "address": {"city": "Recife", "zip": "50000-000"},
            "created_at": now - timedelta(days=3),
        },
        "roles": ["admin", "editor"],
        "orders": [
            {"id": 1, "total": 120.5, "status": "paid"},
            {"id": 2, "total": 35.0, "status": "pending"},
        ],
        "score": 7.5,
    }
