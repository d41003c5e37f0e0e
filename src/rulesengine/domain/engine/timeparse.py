"""
Expressões de tempo relativo e durações flexíveis.

Expressões relativas partem de uma base (``now``, ``today``/``thisDay``,
``thisMonth``, ``thisYear``) e podem deslocá-la, ex. ``thisYear+1y``,
``today - 3d`` ou ``thisMonth-1`` (número sem unidade usa a unidade da base).

Durações são somas de tokens ``<número><unidade>``: ``1h30m``, ``1.5y``, ``2w``.
"""

import re
from datetime import datetime, timedelta
from typing import Union

from dateutil.relativedelta import relativedelta

RELATIVE_TIME_PATTERN = re.compile(
    r"^\s*(now|today|thisday|thismonth|thisyear)\s*(?:([+-])\s*(\d+)\s*([a-zµ]+)?)?\s*$",
    re.IGNORECASE,
)

# "mo" e "ms" antes de "m" e "s"
DURATION_TOKEN_PATTERN = re.compile(
    r"\s*(\d+(?:\.\d+)?)\s*(mo|ms|ns|us|µs|s|m|h|d|w|y)",
    re.IGNORECASE,
)

# Segundos por unidade
DURATION_UNITS: dict[str, float] = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
    "d": 86400.0,
    "w": 7 * 86400.0,
    "mo": 30 * 86400.0,
    "y": 365 * 86400.0,
}

_CALENDAR_UNITS = {
    "years": ("y", "yr", "yrs", "year", "years"),
    "months": ("mo", "mon", "month", "months"),
    "weeks": ("w", "week", "weeks"),
    "days": ("d", "day", "days"),
    "hours": ("h", "hr", "hrs", "hour", "hours"),
    "minutes": ("m", "min", "mins", "minute", "minutes"),
    "seconds": ("s", "sec", "secs", "second", "seconds"),
    "milliseconds": ("ms", "millisecond", "milliseconds"),
    "microseconds": ("us", "µs", "microsecond", "microseconds"),
    "nanoseconds": ("ns", "nanosecond", "nanoseconds"),
}

_UNIT_ALIASES = {alias: unit for unit, aliases in _CALENDAR_UNITS.items() for alias in aliases}

_DEFAULT_UNIT_FOR_BASE = {
    "thisyear": "years",
    "thismonth": "months",
    "today": "days",
    "thisday": "days",
}


class TimeParseError(ValueError):
    """Expressão de tempo relativo ou duração inválida."""


def relative_base(base: str, now: datetime) -> datetime:
    """Trunca ``now`` para o início do período indicado por ``base``."""
    base = base.lower()
    if base == "now":
        return now
    midnight = now.replace(hour=0, minute=0, second=0, microsecond=0)
    if base in ("today", "thisday"):
        return midnight
    if base == "thismonth":
        return midnight.replace(day=1)
    if base == "thisyear":
        return midnight.replace(month=1, day=1)
    raise TimeParseError(f"unknown relative time base: {base}")


def parse_relative_time(expression: str, now: datetime) -> datetime:
    """
    Resolve uma expressão de tempo relativo a partir de ``now``.

    Args:
        expression: Expressão como ``now``, ``thisYear+1y`` ou ``today-2``
        now: Instante de referência; o fuso é mantido

    Returns:
        Instante resolvido

    Raises:
        TimeParseError: Expressão inválida ou fora do intervalo de datas
    """
    match = RELATIVE_TIME_PATTERN.match(expression)
    if match is None:
        raise TimeParseError(f"invalid relative time: {expression}")

    base, sign, amount, unit = match.groups()
    base = base.lower()
    base_time = relative_base(base, now)

    if amount is None:
        return base_time

    if unit:
        unit_name = _UNIT_ALIASES.get(unit.lower())
        if unit_name is None:
            raise TimeParseError(f"unknown relative time unit: {unit}")
    else:
        unit_name = _DEFAULT_UNIT_FOR_BASE.get(base)
        if unit_name is None:
            raise TimeParseError(f"missing unit for relative time: {expression}")

    value = int(amount)
    if sign == "-":
        value = -value

    try:
        if unit_name == "nanoseconds":
            return base_time + timedelta(microseconds=value / 1000)
        if unit_name == "milliseconds":
            return base_time + timedelta(milliseconds=value)
        return base_time + relativedelta(**{unit_name: value})
    except (OverflowError, ValueError):
        raise TimeParseError(f"relative time out of range: {expression}") from None


def parse_flexible_duration(expression: str) -> timedelta:
    """
    Interpreta uma duração formada pela soma de tokens ``<número><unidade>``.

    Mês conta como 30 dias e ano como 365 dias.

    Raises:
        TimeParseError: Expressão vazia, token inválido ou duração fora do intervalo
    """
    if not isinstance(expression, str) or not expression.strip():
        raise TimeParseError(f"invalid duration: {expression!r}")

    seconds = 0.0
    position = 0
    text = expression.rstrip()
    while position < len(text):
        match = DURATION_TOKEN_PATTERN.match(text, position)
        if match is None:
            raise TimeParseError(f"invalid duration: {expression}")
        amount, unit = match.groups()
        unit_seconds = DURATION_UNITS.get(unit.lower())
        if unit_seconds is None:
            raise TimeParseError(f"unknown duration unit: {unit}")
        seconds += unit_seconds * float(amount)
        position = match.end()
    try:
        return timedelta(seconds=seconds)
    except (OverflowError, ValueError):
        raise TimeParseError(f"duration out of range: {expression}") from None


def is_relative_time(value: Union[str, object]) -> bool:
    return isinstance(value, str) and RELATIVE_TIME_PATTERN.match(value) is not None
