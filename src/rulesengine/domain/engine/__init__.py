"""
Rules Engine.

Avaliação recursiva de árvores de predicados sobre registros aninhados.
"""

from .compiler import RULE_SCHEMA, RuleCompiler
from .ir_types import CompilationStats, Rule, RuleResult
from .operators import Operator, OperatorCategory, operators_in
from .options import LeafLogger, Options, default_options, structlog_leaf_logger
from .registry import (
    CustomFunc,
    FunctionRegistry,
    PatternCache,
    default_registry,
    get_func,
    register_func,
)
from .runtime import RuleEvaluator, evaluate, frame_records

__all__ = [
    # Core classes
    "RuleEvaluator",
    "RuleCompiler",
    "FunctionRegistry",
    "PatternCache",

    # Data structures
    "Rule",
    "RuleResult",
    "Options",
    "CompilationStats",
    "RULE_SCHEMA",

    # Enums
    "Operator",
    "OperatorCategory",

    # Functions
    "evaluate",
    "default_options",
    "register_func",
    "get_func",
    "default_registry",
    "frame_records",
    "operators_in",
    "structlog_leaf_logger",

    # Types
    "CustomFunc",
    "LeafLogger",
]
