"""Pydantic models for rule and result serialization.

The models define the JSON shape used to exchange rule trees and evaluation
traces: rules use ``operator/field/value/children`` and results use
``rule/result/isEmpty/input/children/timeTaken/error/mismatch``.
"""

import dataclasses
import json
from collections.abc import Mapping
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import Any, List, Optional, Union

import numpy as np
import pandas as pd
from pydantic import BaseModel, ConfigDict, Field

from rulesengine.domain.engine.ir_types import Rule, RuleResult
from rulesengine.domain.errors import ERROR_CLASSES_BY_KIND, RuleError


def to_jsonable(value: Any) -> Any:
    """Convert evaluation inputs and operands to JSON-compatible values."""
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    if isinstance(value, Rule):
        return value.to_dict()
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    if isinstance(value, timedelta):
        return value.total_seconds()
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, np.generic):
        return to_jsonable(value.item())
    if isinstance(value, (np.ndarray, pd.Series, pd.Index)):
        return [to_jsonable(item) for item in value.tolist()]
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode(errors="replace")
    if isinstance(value, Mapping):
        return {str(key): to_jsonable(item) for key, item in value.items()}
    if isinstance(value, (list, tuple, set, frozenset, range)):
        return [to_jsonable(item) for item in value]
    if isinstance(value, BaseModel):
        return to_jsonable(value.model_dump())
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return to_jsonable(dataclasses.asdict(value))
    return str(value)


class RuleModel(BaseModel):
    """Serialized rule node."""

    model_config = ConfigDict(extra="forbid")

    operator: str = Field(..., description="Operator name", min_length=1)
    field: str = Field("", description="Dotted path of the compared field")
    value: Any = Field(None, description="Comparison operand")
    children: List["RuleModel"] = Field([], description="Child rules")

    @classmethod
    def from_rule(cls, rule: Rule) -> "RuleModel":
        return cls.model_validate(to_jsonable(rule.to_dict()))

    def to_rule(self) -> Rule:
        return Rule(
            operator=self.operator,
            field=self.field,
            value=self.value,
            children=tuple(child.to_rule() for child in self.children),
        )


class RuleErrorModel(BaseModel):
    """Serialized rule error."""

    kind: str = Field("rule", description="Error class identifier")
    message: str = Field(..., description="Error message")
    value: Any = Field("", description="Offending operand")

    @classmethod
    def from_error(cls, error: RuleError) -> "RuleErrorModel":
        return cls(kind=error.kind, message=error.message, value=to_jsonable(error.value))

    def to_error(self) -> RuleError:
        error_class = ERROR_CLASSES_BY_KIND.get(self.kind, RuleError)
        return error_class(self.value, message=self.message)


class RuleResultModel(BaseModel):
    """Serialized evaluation trace."""

    model_config = ConfigDict(populate_by_name=True)

    rule: RuleModel
    result: bool = False
    is_empty: bool = Field(False, alias="isEmpty")
    input: Any = None
    children: List["RuleResultModel"] = []
    time_taken_ms: Optional[float] = Field(None, alias="timeTaken", description="Elapsed milliseconds")
    error: Optional[RuleErrorModel] = None
    mismatch: Any = None

    @classmethod
    def from_result(cls, result: RuleResult) -> "RuleResultModel":
        return cls(
            rule=RuleModel.from_rule(result.rule),
            result=result.result,
            is_empty=result.is_empty,
            input=to_jsonable(result.input),
            children=[cls.from_result(child) for child in result.children],
            time_taken_ms=result.time_taken_ms,
            error=RuleErrorModel.from_error(result.error) if result.error is not None else None,
            mismatch=to_jsonable(result.mismatch),
        )

    def to_result(self) -> RuleResult:
        return RuleResult(
            rule=self.rule.to_rule(),
            result=self.result,
            is_empty=self.is_empty,
            input=self.input,
            children=[child.to_result() for child in self.children],
            time_taken_ms=self.time_taken_ms,
            error=self.error.to_error() if self.error is not None else None,
            mismatch=self.mismatch,
        )


def dump_rule(rule: Rule) -> dict:
    """Rule tree as a JSON-compatible dict; empty attributes are omitted."""
    return RuleModel.from_rule(rule).model_dump(mode="json", exclude_defaults=True)


def load_rule(data: Union[Mapping[str, Any], str, bytes]) -> Rule:
    """Rule tree from a dict or JSON text."""
    if isinstance(data, (str, bytes)):
        return RuleModel.model_validate_json(data).to_rule()
    return RuleModel.model_validate(data).to_rule()


def dump_result(result: RuleResult) -> dict:
    """Result tree as a JSON-compatible dict using the camelCase keys."""
    return RuleResultModel.from_result(result).model_dump(mode="json", by_alias=True)


def load_result(data: Union[Mapping[str, Any], str, bytes]) -> RuleResult:
    """Result tree from a dict or JSON text."""
    if isinstance(data, (str, bytes)):
        return RuleResultModel.model_validate_json(data).to_result()
    return RuleResultModel.model_validate(data).to_result()


def dumps_result(result: RuleResult, indent: Optional[int] = None) -> str:
    """Result tree as JSON text."""
    return json.dumps(dump_result(result), indent=indent)
