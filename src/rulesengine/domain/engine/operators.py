"""
Taxonomia de operadores.

Todos os tipos de predicado conhecidos pelo motor, agrupados por categoria.
O avaliador despacha por esses valores; qualquer outro é reportado como
operador inválido.
"""

from enum import Enum


class OperatorCategory(Enum):
    """Famílias de operadores."""

    LOGICAL = "logical"
    EQUALITY = "equality"
    NUMERIC = "numeric"
    MEMBERSHIP = "membership"
    STRING = "string"
    LENGTH = "length"
    BOOLEAN = "boolean"
    TEMPORAL = "temporal"
    COLLECTION = "collection"
    EXISTENCE = "existence"
    TYPE_CHECK = "type_check"
    CUSTOM = "custom"


class Operator(str, Enum):
    """Tipos de predicado."""

    # Lógicos
    AND = "AND"
    OR = "OR"
    NOT = "NOT"
    IF_THEN = "IF_THEN"

    # Igualdade
    EQ = "EQ"
    NEQ = "NEQ"

    # Numéricos
    GT = "GT"
    GTE = "GTE"
    LT = "LT"
    LTE = "LTE"
    BETWEEN = "BETWEEN"

    # Pertinência
    IN = "IN"
    NOT_IN = "NOT_IN"
    ANY_IN = "ANY_IN"

    # String
    CONTAINS = "CONTAINS"
    NOT_CONTAINS = "NOT_CONTAINS"
    STARTS_WITH = "STARTS_WITH"
    ENDS_WITH = "ENDS_WITH"
    MATCHES = "MATCHES"

    # Tamanho
    LENGTH_EQ = "LENGTH_EQ"
    LENGTH_GT = "LENGTH_GT"
    LENGTH_LT = "LENGTH_LT"

    # Booleanos
    IS_TRUE = "IS_TRUE"
    IS_FALSE = "IS_FALSE"

    # Datas
    BEFORE = "BEFORE"
    AFTER = "AFTER"
    DATE_BETWEEN = "DATE_BETWEEN"
    WITHIN_LAST = "WITHIN_LAST"
    WITHIN_NEXT = "WITHIN_NEXT"
    YEAR_EQ = "YEAR_EQ"
    MONTH_EQ = "MONTH_EQ"

    # Coleções
    ANY = "ANY"
    ALL = "ALL"
    NONE = "NONE"

    # Existência / nulo
    EXISTS = "EXISTS"
    NOT_EXISTS = "NOT_EXISTS"
    IS_NULL = "IS_NULL"
    IS_NOT_NULL = "IS_NOT_NULL"

    # Tipos
    IS_NUMBER = "IS_NUMBER"
    IS_STRING = "IS_STRING"
    IS_BOOL = "IS_BOOL"
    IS_DATE = "IS_DATE"
    IS_LIST = "IS_LIST"
    IS_OBJECT = "IS_OBJECT"

    # Customizados
    CUSTOM_FUNC = "CUSTOM_FUNC"
    SCRIPT = "SCRIPT"  # reserved, never executed

    @property
    def category(self) -> OperatorCategory:
        return CATEGORY_BY_OPERATOR[self]

    @classmethod
    def parse(cls, value: object) -> "Operator | None":
        """Retorna o membro para ``value`` (sem diferenciar maiúsculas) ou None."""
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return None
        try:
            return cls(value.strip().upper())
        except ValueError:
            return None


CATEGORY_BY_OPERATOR: dict[Operator, OperatorCategory] = {
    Operator.AND: OperatorCategory.LOGICAL,
    Operator.OR: OperatorCategory.LOGICAL,
    Operator.NOT: OperatorCategory.LOGICAL,
    Operator.IF_THEN: OperatorCategory.LOGICAL,
    Operator.EQ: OperatorCategory.EQUALITY,
    Operator.NEQ: OperatorCategory.EQUALITY,
    Operator.GT: OperatorCategory.NUMERIC,
    Operator.GTE: OperatorCategory.NUMERIC,
    Operator.LT: OperatorCategory.NUMERIC,
    Operator.LTE: OperatorCategory.NUMERIC,
    Operator.BETWEEN: OperatorCategory.NUMERIC,
    Operator.IN: OperatorCategory.MEMBERSHIP,
    Operator.NOT_IN: OperatorCategory.MEMBERSHIP,
    Operator.ANY_IN: OperatorCategory.MEMBERSHIP,
    Operator.CONTAINS: OperatorCategory.STRING,
    Operator.NOT_CONTAINS: OperatorCategory.STRING,
    Operator.STARTS_WITH: OperatorCategory.STRING,
    Operator.ENDS_WITH: OperatorCategory.STRING,
    Operator.MATCHES: OperatorCategory.STRING,
    Operator.LENGTH_EQ: OperatorCategory.LENGTH,
    Operator.LENGTH_GT: OperatorCategory.LENGTH,
    Operator.LENGTH_LT: OperatorCategory.LENGTH,
    Operator.IS_TRUE: OperatorCategory.BOOLEAN,
    Operator.IS_FALSE: OperatorCategory.BOOLEAN,
    Operator.BEFORE: OperatorCategory.TEMPORAL,
    Operator.AFTER: OperatorCategory.TEMPORAL,
    Operator.DATE_BETWEEN: OperatorCategory.TEMPORAL,
    Operator.WITHIN_LAST: OperatorCategory.TEMPORAL,
    Operator.WITHIN_NEXT: OperatorCategory.TEMPORAL,
    Operator.YEAR_EQ: OperatorCategory.TEMPORAL,
    Operator.MONTH_EQ: OperatorCategory.TEMPORAL,
    Operator.ANY: OperatorCategory.COLLECTION,
    Operator.ALL: OperatorCategory.COLLECTION,
    Operator.NONE: OperatorCategory.COLLECTION,
    Operator.EXISTS: OperatorCategory.EXISTENCE,
    Operator.NOT_EXISTS: OperatorCategory.EXISTENCE,
    Operator.IS_NULL: OperatorCategory.EXISTENCE,
    Operator.IS_NOT_NULL: OperatorCategory.EXISTENCE,
    Operator.IS_NUMBER: OperatorCategory.TYPE_CHECK,
    Operator.IS_STRING: OperatorCategory.TYPE_CHECK,
    Operator.IS_BOOL: OperatorCategory.TYPE_CHECK,
    Operator.IS_DATE: OperatorCategory.TYPE_CHECK,
    Operator.IS_LIST: OperatorCategory.TYPE_CHECK,
    Operator.IS_OBJECT: OperatorCategory.TYPE_CHECK,
    Operator.CUSTOM_FUNC: OperatorCategory.CUSTOM,
    Operator.SCRIPT: OperatorCategory.CUSTOM,
}

COMBINATOR_OPERATORS = frozenset({Operator.AND, Operator.OR, Operator.NOT, Operator.IF_THEN})

QUANTIFIER_OPERATORS = frozenset({Operator.ANY, Operator.ALL, Operator.NONE})

# Operadores que aceitam campo ausente em vez de reportar valor vazio
NULL_TOLERANT_OPERATORS = frozenset({
    Operator.IS_NULL,
    Operator.NOT_EXISTS,
    Operator.IS_NOT_NULL,
    Operator.EXISTS,
})


def operators_in(category: OperatorCategory) -> frozenset[Operator]:
    """Todos os operadores da categoria ``category``."""
    return frozenset(op for op, cat in CATEGORY_BY_OPERATOR.items() if cat is category)
