"""
rulesengine - recursive predicate evaluation over nested records.

Build a ``Rule`` tree (in code or with ``RuleCompiler``), then call
``evaluate(rule, data)`` to get a ``RuleResult`` trace.
"""

from rulesengine.application.schemas import (
    RuleErrorModel,
    RuleModel,
    RuleResultModel,
    dump_result,
    dump_rule,
    dumps_result,
    load_result,
    load_rule,
)
from rulesengine.domain.engine import (
    CompilationStats,
    CustomFunc,
    FunctionRegistry,
    LeafLogger,
    Operator,
    OperatorCategory,
    Options,
    PatternCache,
    Rule,
    RuleCompiler,
    RuleEvaluator,
    RuleResult,
    default_options,
    evaluate,
    get_func,
    register_func,
    structlog_leaf_logger,
)
from rulesengine.domain.errors import (
    CompilationError,
    DomainError,
    EmptyValueError,
    NumericError,
    OperatorError,
    RuleError,
    TypeMismatchError,
)

__version__ = "1.0.0"

__all__ = [
    # Evaluation
    "evaluate",
    "RuleEvaluator",
    "Rule",
    "RuleResult",
    "Operator",
    "OperatorCategory",
    "Options",
    "default_options",
    "LeafLogger",
    "structlog_leaf_logger",

    # Custom functions
    "register_func",
    "get_func",
    "FunctionRegistry",
    "PatternCache",
    "CustomFunc",

    # Loading
    "RuleCompiler",
    "CompilationStats",

    # Serialization
    "RuleModel",
    "RuleResultModel",
    "RuleErrorModel",
    "dump_rule",
    "load_rule",
    "dump_result",
    "dumps_result",
    "load_result",

    # Errors
    "DomainError",
    "RuleError",
    "NumericError",
    "OperatorError",
    "TypeMismatchError",
    "EmptyValueError",
    "CompilationError",
]
