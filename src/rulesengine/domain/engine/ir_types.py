"""
Tipos de dados do motor de regras.

Este módulo define a árvore de regras (entrada imutável) e a árvore de
resultados produzida a cada avaliação.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from dataclasses import field as dataclass_field
from typing import Any

from rulesengine.domain.engine.operators import (
    COMBINATOR_OPERATORS,
    QUANTIFIER_OPERATORS,
    Operator,
)
from rulesengine.domain.errors import RuleError


@dataclass(frozen=True)
class Rule:
    """
    Nó da árvore de regras.

    Um nó é um combinador (``children`` não vazio) ou uma folha de comparação.
    Operadores desconhecidos são preservados como string para que a avaliação
    reporte ``OperatorError`` em vez de falhar na construção.
    """

    operator: Operator | str
    field: str = ""
    value: Any = None
    children: tuple[Rule, ...] = ()

    def __post_init__(self) -> None:
        operator = Operator.parse(self.operator)
        if operator is not None:
            object.__setattr__(self, "operator", operator)
        elif not isinstance(self.operator, str):
            object.__setattr__(self, "operator", str(self.operator))

        # Filhos e regra aninhada de quantificadores aceitam mapas
        object.__setattr__(
            self, "children", tuple(Rule.coerce(child) for child in self.children or ())
        )
        if operator in QUANTIFIER_OPERATORS and isinstance(self.value, Mapping):
            object.__setattr__(self, "value", Rule.from_dict(self.value))

        if self.field is None:
            object.__setattr__(self, "field", "")

    @property
    def is_combinator(self) -> bool:
        """Verifica se o nó combina filhos."""
        return self.operator in COMBINATOR_OPERATORS

    @property
    def is_quantifier(self) -> bool:
        return self.operator in QUANTIFIER_OPERATORS

    @classmethod
    def coerce(cls, node: Rule | Mapping[str, Any]) -> Rule:
        if isinstance(node, Rule):
            return node
        if isinstance(node, Mapping):
            return cls.from_dict(node)
        raise TypeError(f"Cannot build a Rule from {type(node).__name__}")

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Rule:
        """Constrói a regra a partir de um mapa ``operator/field/value/children``."""
        return cls(
            operator=data.get("operator", ""),
            field=data.get("field") or "",
            value=data.get("value"),
            children=tuple(data.get("children") or ()),
        )

    def to_dict(self) -> dict[str, Any]:
        """Representação em mapa, omitindo atributos vazios."""
        data: dict[str, Any] = {"operator": _operator_name(self.operator)}
        if self.field:
            data["field"] = self.field
        if self.value is not None:
            data["value"] = self.value.to_dict() if isinstance(self.value, Rule) else self.value
        if self.children:
            data["children"] = [child.to_dict() for child in self.children]
        return data

    def shallow_copy(self) -> Rule:
        """Cópia sem filhos, usada para rastreabilidade no resultado."""
        return Rule(operator=self.operator, field=self.field, value=self.value)


@dataclass
class RuleResult:
    """Resultado da avaliação de um nó, espelhando a árvore de regras."""

    rule: Rule
    result: bool = False
    is_empty: bool = False
    input: Any = None
    children: list[RuleResult] = dataclass_field(default_factory=list)
    time_taken_ms: float | None = None
    error: RuleError | None = None
    mismatch: Any = None

    @property
    def has_error(self) -> bool:
        return self.error is not None

    def iter_errors(self):
        """Percorre (em pré-ordem) todos os nós que terminaram com erro."""
        if self.error is not None:
            yield self
        for child in self.children:
            yield from child.iter_errors()


@dataclass(frozen=True)
class CompilationStats:
    """Estatísticas de compilação."""

    total_nodes: int = 0
    max_depth: int = 0
    operators: dict[str, int] = dataclass_field(default_factory=dict)
    fields: tuple[str, ...] = ()
    compilation_time_ms: float = 0.0


def _operator_name(operator: Operator | str) -> str:
    return operator.value if isinstance(operator, Operator) else str(operator)
