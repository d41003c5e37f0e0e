"""
Primitivas de coerção de tipos e comparação.

Cada primitiva recebe o valor resolvido (actual) e o operando da regra
(expected) e retorna um bool. Problemas de conversão são levantados como
subclasses de ``RuleError``; o avaliador os registra no nó de resultado.
"""

import dataclasses
import math
import numbers
from collections.abc import Mapping, Sequence, Set
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Optional

import numpy as np
import pandas as pd
from dateutil import parser as date_parser

from rulesengine.domain.engine.operators import Operator
from rulesengine.domain.engine.timeparse import (
    TimeParseError,
    is_relative_time,
    parse_flexible_duration,
    parse_relative_time,
)
from rulesengine.domain.errors import NumericError, TypeMismatchError


# ---------- Igualdade ----------

def values_equal(a: Any, b: Any) -> bool:
    """Igualdade estrutural; booleanos nunca são iguais a números."""
    if isinstance(a, (bool, np.bool_)) != isinstance(b, (bool, np.bool_)):
        return False
    try:
        return bool(a == b)
    except (TypeError, ValueError):
        # arrays numpy comparam elemento a elemento
        return False


# ---------- Números ----------

def is_numeric(value: Any) -> bool:
    """True para números reais que não sejam booleanos."""
    if isinstance(value, (bool, np.bool_)):
        return False
    return isinstance(value, (numbers.Real, Decimal, np.number))


def to_float(value: Any) -> float:
    """
    Converte número ou string numérica para float.

    Raises:
        NumericError: Valor não numérico ou fora do intervalo de float
    """
    if is_numeric(value):
        try:
            return float(value)
        except OverflowError:
            raise NumericError(value) from None
    if isinstance(value, (str, bytes)):
        try:
            return float(value.decode() if isinstance(value, bytes) else value)
        except ValueError:
            raise NumericError(value) from None
    raise NumericError(value)


def compare_numeric(actual: Any, expected: Any, operator: Operator) -> bool:
    a = to_float(actual)
    b = to_float(expected)
    if operator is Operator.GT:
        return a > b
    if operator is Operator.GTE:
        return a >= b
    if operator is Operator.LT:
        return a < b
    if operator is Operator.LTE:
        return a <= b
    return False


def is_between(actual: Any, range_value: Any) -> bool:
    """Verifica se o valor está no intervalo fechado ``[min, max]``."""
    bounds = to_list(range_value)
    if bounds is None or len(bounds) != 2:
        raise TypeMismatchError(range_value)
    value = to_float(actual)
    low = to_float(bounds[0])
    high = to_float(bounds[1])
    return low <= value <= high


# ---------- Coleções ----------

def to_list(value: Any) -> Optional[list]:
    """
    Converte uma coleção em lista.

    Strings, bytes e mapeamentos não contam como coleção. Retorna None quando
    ``value`` não pode ser tratado como sequência de elementos.
    """
    if isinstance(value, list):
        return value
    if isinstance(value, (str, bytes, bytearray, Mapping)):
        return None
    if isinstance(value, np.ndarray):
        return value.tolist() if value.ndim else None
    if isinstance(value, (pd.Series, pd.Index)):
        return value.tolist()
    if isinstance(value, (Sequence, Set, range)):
        return list(value)
    return None


def membership_key(value: Any) -> Any:
    """
    Chave hasheável que iguala valores de tipos concretos diferentes pelo
    valor subjacente (``1``, ``1.0`` e ``numpy.int64(1)`` têm a mesma chave).
    """
    if isinstance(value, (bool, np.bool_)):
        return ("bool", bool(value))
    if is_numeric(value):
        try:
            return ("num", float(value))
        except OverflowError:
            return ("num", value)
    if isinstance(value, bytes):
        return ("str", value.decode(errors="replace"))
    if isinstance(value, str):
        return ("str", value)
    if isinstance(value, Mapping):
        return ("map", frozenset((str(k), membership_key(v)) for k, v in value.items()))
    items = to_list(value)
    if items is not None:
        return ("seq", tuple(membership_key(item) for item in items))
    try:
        hash(value)
    except TypeError:
        return ("repr", repr(value))
    return ("obj", value)


def in_list(actual: Any, expected: Any) -> bool:
    """Pertinência exata de ``actual`` na sequência ``expected``."""
    items = to_list(expected)
    if items is None:
        raise TypeMismatchError(type(expected).__name__)
    return any(values_equal(actual, item) for item in items)


def any_in_list(actual: Any, expected: Any) -> bool:
    """True quando a sequência ``actual`` tem ao menos um elemento em ``expected``."""
    expected_items = to_list(expected)
    if expected_items is None:
        raise TypeMismatchError(type(expected).__name__)
    keys = {membership_key(item) for item in expected_items}

    actual_items = to_list(actual)
    if actual_items is None:
        raise TypeMismatchError(type(actual).__name__)
    return any(membership_key(item) in keys for item in actual_items)


# ---------- Strings ----------

def to_string(value: Any) -> str:
    """Forma textual usada pelos operadores de string."""
    if isinstance(value, str):
        return value
    if value is None:
        return ""
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode(errors="replace")
    if isinstance(value, (bool, np.bool_)):
        return "true" if value else "false"
    if isinstance(value, (float, np.floating)):
        text = repr(float(value))
        return text[:-2] if text.endswith(".0") else text
    return str(value)


# ---------- Tamanho ----------

def length_of(value: Any) -> int:
    if isinstance(value, str):
        return len(value)
    items = to_list(value)
    if items is None:
        raise TypeMismatchError(value)
    return len(items)


def to_int(value: Any) -> int:
    """
    Converte número finito ou string numérica para int, truncando em direção a zero.

    Raises:
        NumericError: Valor não numérico, NaN ou infinito
    """
    number = to_float(value)
    if not math.isfinite(number):
        raise NumericError(value)
    return int(number)


def compare_length(actual: Any, target: Any, operator: Operator) -> bool:
    length = length_of(actual)
    expected = to_int(target)
    if operator is Operator.LENGTH_EQ:
        return length == expected
    if operator is Operator.LENGTH_GT:
        return length > expected
    if operator is Operator.LENGTH_LT:
        return length < expected
    return False


# ---------- Booleanos / tipos ----------

def is_true(value: Any) -> bool:
    return value is True or (isinstance(value, np.bool_) and bool(value))


def is_false(value: Any) -> bool:
    return value is False or (isinstance(value, np.bool_) and not bool(value))


def is_bool(value: Any) -> bool:
    return isinstance(value, (bool, np.bool_))


def is_string(value: Any) -> bool:
    return isinstance(value, str)


def is_list(value: Any) -> bool:
    return to_list(value) is not None


def is_object(value: Any) -> bool:
    """Valores tipo mapa ou registro (dataclasses, modelos pydantic, named tuples)."""
    if isinstance(value, Mapping):
        return True
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return True
    if isinstance(value, tuple) and hasattr(value, "_fields"):
        return True
    return hasattr(value, "model_fields") and not isinstance(value, type)


def is_date(value: Any) -> bool:
    return isinstance(value, datetime)


# ---------- Datas ----------

def _now_like(actual: datetime) -> datetime:
    """Instante atual no fuso (ou sem fuso) de ``actual``."""
    return datetime.now(tz=actual.tzinfo)


def as_datetime(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    raise TypeMismatchError(value)


def resolve_expected_time(expected: Any, now: datetime) -> datetime:
    """
    Resolve o lado esperado de uma comparação temporal.

    Aceita datetime, date, expressão relativa (``thisYear+1y``) ou string
    ISO-8601.

    Raises:
        TypeMismatchError: Valor não pode ser convertido em instante
    """
    if isinstance(expected, datetime):
        return expected
    if isinstance(expected, date):
        return datetime(expected.year, expected.month, expected.day, tzinfo=now.tzinfo)
    if isinstance(expected, str):
        if is_relative_time(expected):
            try:
                return parse_relative_time(expected, now)
            except TimeParseError:
                raise TypeMismatchError(expected) from None
        try:
            return date_parser.isoparse(expected)
        except (ValueError, OverflowError):
            raise TypeMismatchError(expected) from None
    raise TypeMismatchError(expected)


def _check_comparable(a: datetime, b: datetime) -> None:
    if (a.tzinfo is None) != (b.tzinfo is None):
        raise TypeMismatchError(b, message="cannot compare naive and aware datetimes")


def compare_time(actual: Any, expected: Any, operator: Operator) -> bool:
    at = as_datetime(actual)
    bt = resolve_expected_time(expected, _now_like(at))
    _check_comparable(at, bt)
    if operator is Operator.BEFORE:
        return at < bt
    if operator is Operator.AFTER:
        return at > bt
    return False


def is_time_between(actual: Any, range_value: Any) -> bool:
    """Intervalo fechado ``[start, end]``; os limites resolvem como em BEFORE/AFTER."""
    value = as_datetime(actual)
    bounds = to_list(range_value)
    if bounds is None or len(bounds) != 2:
        raise TypeMismatchError(range_value)
    now = _now_like(value)
    start = resolve_expected_time(bounds[0], now)
    end = resolve_expected_time(bounds[1], now)
    _check_comparable(value, start)
    _check_comparable(value, end)
    return start <= value <= end


def is_within_time(actual: Any, duration: Any, operator: Operator) -> bool:
    """
    ``WITHIN_LAST``: actual depois de ``now - duration``.
    ``WITHIN_NEXT``: actual antes de ``now + duration``.
    """
    value = as_datetime(actual)
    if not isinstance(duration, str):
        raise TypeMismatchError(duration)
    try:
        delta = parse_flexible_duration(duration)
    except TimeParseError:
        raise TypeMismatchError(duration) from None

    now = _now_like(value)
    try:
        if operator is Operator.WITHIN_LAST:
            return value > now - delta
        if operator is Operator.WITHIN_NEXT:
            return value < now + delta
    except OverflowError:
        # limite da janela fora do intervalo de datetime
        raise TypeMismatchError(duration) from None
    return False


def compare_time_part(actual: Any, expected: Any, operator: Operator) -> bool:
    """
    ``YEAR_EQ``/``MONTH_EQ``: compara o ano ou o mês de ``actual``.

    ``expected`` é um número (ou string numérica), ou qualquer valor aceito
    por ``resolve_expected_time``.
    """
    value = as_datetime(actual)
    if is_numeric(expected) or (isinstance(expected, str) and _looks_numeric(expected)):
        part = to_int(expected)
    else:
        reference = resolve_expected_time(expected, _now_like(value))
        part = reference.year if operator is Operator.YEAR_EQ else reference.month

    if operator is Operator.YEAR_EQ:
        return value.year == part
    if operator is Operator.MONTH_EQ:
        return value.month == part
    return False


def _looks_numeric(text: str) -> bool:
    try:
        float(text)
    except ValueError:
        return False
    return True
