"""
Motor de avaliação de regras.

Este módulo percorre recursivamente a árvore de regras, despacha cada folha
para as primitivas de coerção e monta a árvore de resultados. Nenhum erro de
avaliação é propagado: cada nó guarda o próprio erro em ``RuleResult.error``.
"""

import logging
import re
import time
from collections.abc import Iterable, Mapping
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

import pandas as pd

from rulesengine.domain.engine.coercion import (
    any_in_list,
    compare_length,
    compare_numeric,
    compare_time,
    compare_time_part,
    in_list,
    is_between,
    is_bool,
    is_date,
    is_false,
    is_list,
    is_numeric,
    is_object,
    is_string,
    is_time_between,
    is_true,
    is_within_time,
    to_list,
    to_string,
    values_equal,
)
from rulesengine.domain.engine.ir_types import Rule, RuleResult
from rulesengine.domain.engine.operators import (
    NULL_TOLERANT_OPERATORS,
    QUANTIFIER_OPERATORS,
    Operator,
)
from rulesengine.domain.engine.options import Options, default_options
from rulesengine.domain.engine.registry import (
    FunctionRegistry,
    PatternCache,
    default_registry,
)
from rulesengine.domain.engine.resolver import PATH_SEPARATOR, element_scope, resolve_field
from rulesengine.domain.errors import (
    EmptyValueError,
    OperatorError,
    RuleError,
    TypeMismatchError,
)
from rulesengine.shared.logging import evaluation_context

logger = logging.getLogger(__name__)

# handler(actual, expected) -> matched | (matched, mismatch, error)
LeafHandler = Callable[[Any, Any], Union[bool, Tuple[bool, Any, Optional[RuleError]]]]


class RuleEvaluator:
    """
    Avaliador recursivo de árvores de regras.

    Características:
    - Avaliação completa dos filhos (sem short-circuit) para rastreabilidade
    - Tabela de operadores montada uma vez por instância
    - Registro de funções customizadas injetável
    - Cache de regex por instância, seguro para uso concorrente

    A instância não guarda estado por chamada e pode ser compartilhada entre
    threads.
    """

    def __init__(self,
                 registry: Optional[FunctionRegistry] = None,
                 pattern_cache: Optional[PatternCache] = None):
        """
        Inicializa o avaliador.

        Args:
            registry: Registro de funções para ``CUSTOM_FUNC`` (padrão: global)
            pattern_cache: Cache de regex para ``MATCHES`` (padrão: novo cache)
        """
        self.registry = registry if registry is not None else default_registry
        self.pattern_cache = pattern_cache if pattern_cache is not None else PatternCache()

        # Operadores de folha
        self._operators: Dict[Operator, LeafHandler] = self._initialize_operators()

    def evaluate(self,
                 rule: Union[Rule, Mapping],
                 data: Mapping[str, Any],
                 options: Optional[Options] = None) -> RuleResult:
        """
        Avalia uma regra (e todos os seus filhos) sobre um registro.

        Args:
            rule: Regra raiz (ou mapa ``operator/field/value/children``)
            data: Registro aninhado a ser avaliado
            options: Opções de avaliação

        Returns:
            Árvore de resultados espelhando a árvore de regras
        """
        options = options or default_options()
        with evaluation_context():
            return self._evaluate(Rule.coerce(rule), data, options)

    def evaluate_many(self,
                      rule: Union[Rule, Mapping],
                      records: Iterable[Mapping[str, Any]],
                      options: Optional[Options] = None) -> List[RuleResult]:
        """Avalia a mesma regra sobre vários registros, em ordem."""
        options = options or default_options()
        rule = Rule.coerce(rule)
        with evaluation_context():
            return [self._evaluate(rule, record, options) for record in records]

    def evaluate_frame(self,
                       rule: Union[Rule, Mapping],
                       frame: pd.DataFrame,
                       options: Optional[Options] = None) -> pd.Series:
        """
        Avalia a regra para cada linha de um DataFrame.

        Colunas com nomes pontuados (``user.age``) viram registros aninhados e
        células nulas (NaN/NaT/None) são tratadas como ausentes.

        Returns:
            Série booleana com o mesmo índice do DataFrame
        """
        results = self.evaluate_many(rule, frame_records(frame), options)
        return pd.Series(
            [evaluation.result for evaluation in results],
            index=frame.index,
            dtype=bool,
            name="result",
        )

    def _evaluate(self, rule: Rule, data: Mapping[str, Any], options: Options) -> RuleResult:
        """Avalia um nó, medindo o tempo quando habilitado."""
        start_time = time.perf_counter() if options.timing else None
        result = RuleResult(rule=rule.shallow_copy())

        try:
            operator = rule.operator
            if operator is Operator.AND:
                self._evaluate_and(rule, data, options, result)
            elif operator is Operator.OR or operator is Operator.NOT:
                self._evaluate_or(rule, data, options, result)
            elif operator is Operator.IF_THEN:
                self._evaluate_if_then(rule, data, options, result)
            elif operator in QUANTIFIER_OPERATORS:
                self._evaluate_quantifier(rule, data, options, result)
            else:
                self._evaluate_leaf(rule, data, options, result)
        finally:
            if start_time is not None:
                result.time_taken_ms = (time.perf_counter() - start_time) * 1000

        if result.error is not None:
            logger.debug(f"Regra {rule.operator} em '{rule.field}' terminou com erro: {result.error}")

        return result

    def _evaluate_and(self, rule: Rule, data, options: Options, result: RuleResult) -> None:
        result.result = True
        for child in rule.children:
            child_result = self._evaluate(child, data, options)
            result.children.append(child_result)
            result.result = child_result.result and result.result

    def _evaluate_or(self, rule: Rule, data, options: Options, result: RuleResult) -> None:
        """OR; NOT é a negação do OR dos filhos (NOR)."""
        result.result = False
        for child in rule.children:
            child_result = self._evaluate(child, data, options)
            result.children.append(child_result)
            result.result = child_result.result or result.result

        if rule.operator is Operator.NOT:
            result.result = not result.result

    def _evaluate_if_then(self, rule: Rule, data, options: Options, result: RuleResult) -> None:
        if len(rule.children) != 2:
            result.result = False
            result.error = OperatorError("IF_THEN requires exactly two child rules")
            return

        if_result = self._evaluate(rule.children[0], data, options)
        then_result = self._evaluate(rule.children[1], data, options)
        result.children.extend([if_result, then_result])
        # Implicação material: A -> B equivale a !A or B
        result.result = not if_result.result or then_result.result

    def _evaluate_quantifier(self, rule: Rule, data, options: Options, result: RuleResult) -> None:
        """ANY/ALL/NONE: aplica a regra aninhada a cada elemento da coleção."""
        collection = resolve_field(rule.field, data)
        if collection is None:
            result.is_empty = True
            result.error = EmptyValueError()
            return

        items = to_list(collection)
        if items is None:
            result.error = TypeMismatchError(rule.field)
            return

        nested = rule.value
        if not isinstance(nested, Rule):
            result.error = TypeMismatchError(nested)
            return

        result.input = items
        pass_count = 0
        for element in items:
            element_result = self._evaluate(nested, element_scope(element), options)
            result.children.append(element_result)
            if element_result.result:
                pass_count += 1

        if rule.operator is Operator.ANY:
            result.result = pass_count > 0
        elif rule.operator is Operator.ALL:
            result.result = pass_count == len(items)
        else:
            result.result = pass_count == 0

    def _evaluate_leaf(self, rule: Rule, data, options: Options, result: RuleResult) -> None:
        """Resolve o campo e aplica o operador de comparação."""
        actual = resolve_field(rule.field, data)
        result.input = actual

        if options.logger is not None:
            options.logger(rule.field, rule.operator, actual, rule.value)

        handler = self._operators.get(rule.operator) if isinstance(rule.operator, Operator) else None
        try:
            if handler is None:
                raise OperatorError(getattr(rule.operator, "value", rule.operator))
            if actual is None and rule.operator not in NULL_TOLERANT_OPERATORS:
                raise EmptyValueError()

            outcome = handler(actual, rule.value)
        except RuleError as e:
            _record_error(result, e)
            return

        if isinstance(outcome, tuple):
            matched, result.mismatch, error = outcome
            if error is not None:
                _record_error(result, error)
                return
            result.result = bool(matched)
        else:
            result.result = bool(outcome)

    def _initialize_operators(self) -> Dict[Operator, LeafHandler]:
        """Inicializa operadores de folha disponíveis."""
        return {
            # Igualdade
            Operator.EQ: values_equal,
            Operator.NEQ: lambda a, e: not values_equal(a, e),

            # Numéricos
            Operator.GT: lambda a, e: compare_numeric(a, e, Operator.GT),
            Operator.GTE: lambda a, e: compare_numeric(a, e, Operator.GTE),
            Operator.LT: lambda a, e: compare_numeric(a, e, Operator.LT),
            Operator.LTE: lambda a, e: compare_numeric(a, e, Operator.LTE),
            Operator.BETWEEN: is_between,

            # Pertinência
            Operator.IN: in_list,
            Operator.NOT_IN: lambda a, e: not in_list(a, e),
            Operator.ANY_IN: any_in_list,

            # Strings
            Operator.CONTAINS: lambda a, e: to_string(e) in to_string(a),
            Operator.NOT_CONTAINS: lambda a, e: to_string(e) not in to_string(a),
            Operator.STARTS_WITH: lambda a, e: to_string(a).startswith(to_string(e)),
            Operator.ENDS_WITH: lambda a, e: to_string(a).endswith(to_string(e)),
            Operator.MATCHES: self._matches,

            # Tamanho
            Operator.LENGTH_EQ: lambda a, e: compare_length(a, e, Operator.LENGTH_EQ),
            Operator.LENGTH_GT: lambda a, e: compare_length(a, e, Operator.LENGTH_GT),
            Operator.LENGTH_LT: lambda a, e: compare_length(a, e, Operator.LENGTH_LT),

            # Booleanos
            Operator.IS_TRUE: lambda a, e: is_true(a),
            Operator.IS_FALSE: lambda a, e: is_false(a),

            # Datas
            Operator.BEFORE: lambda a, e: compare_time(a, e, Operator.BEFORE),
            Operator.AFTER: lambda a, e: compare_time(a, e, Operator.AFTER),
            Operator.DATE_BETWEEN: is_time_between,
            Operator.WITHIN_LAST: lambda a, e: is_within_time(a, e, Operator.WITHIN_LAST),
            Operator.WITHIN_NEXT: lambda a, e: is_within_time(a, e, Operator.WITHIN_NEXT),
            Operator.YEAR_EQ: lambda a, e: compare_time_part(a, e, Operator.YEAR_EQ),
            Operator.MONTH_EQ: lambda a, e: compare_time_part(a, e, Operator.MONTH_EQ),

            # Existência
            Operator.IS_NULL: lambda a, e: a is None,
            Operator.NOT_EXISTS: lambda a, e: a is None,
            Operator.IS_NOT_NULL: lambda a, e: a is not None,
            Operator.EXISTS: lambda a, e: a is not None,

            # Tipos
            Operator.IS_STRING: lambda a, e: is_string(a),
            Operator.IS_NUMBER: lambda a, e: is_numeric(a),
            Operator.IS_BOOL: lambda a, e: is_bool(a),
            Operator.IS_LIST: lambda a, e: is_list(a),
            Operator.IS_OBJECT: lambda a, e: is_object(a),
            Operator.IS_DATE: lambda a, e: is_date(a),

            # Customizados
            Operator.CUSTOM_FUNC: self._call_custom,
        }

    def _matches(self, actual: Any, expected: Any) -> bool:
        """Busca por regex, compilando cada padrão uma única vez."""
        pattern_text = to_string(expected)
        try:
            pattern = self.pattern_cache.get(pattern_text)
        except re.error as e:
            raise TypeMismatchError(pattern_text, message=f"invalid pattern ({e})") from e
        return pattern.search(to_string(actual)) is not None

    def _call_custom(self, actual: Any,
                     expected: Any) -> Union[bool, Tuple[bool, Any, Optional[RuleError]]]:
        """
        Executa a função registrada: ``expected`` é ``[nome, *args]``.

        A função pode retornar ``matched``, ``(matched, mismatch)`` ou
        ``(matched, mismatch, error)``. Um erro retornado que não seja
        ``RuleError`` é encapsulado como "custom function failed".
        """
        arguments = to_list(expected)
        if not arguments or not isinstance(arguments[0], str):
            raise TypeMismatchError(expected)

        name = arguments[0]
        fn = self.registry.get(name)
        if fn is None:
            raise TypeMismatchError(name, message="function not registered")

        try:
            outcome = fn(actual, *arguments[1:])
        except RuleError:
            raise
        except Exception as e:
            logger.warning(f"Função customizada '{name}' falhou: {e}")
            raise RuleError(name, message="custom function failed") from e

        if isinstance(outcome, tuple):
            matched = outcome[0] if outcome else False
            mismatch = outcome[1] if len(outcome) > 1 else None
            error = outcome[2] if len(outcome) > 2 else None
            if error is not None and not isinstance(error, RuleError):
                wrapped = RuleError(name, message="custom function failed")
                if isinstance(error, BaseException):
                    wrapped.__cause__ = error
                error = wrapped
            return bool(matched), mismatch, error
        return bool(outcome)


def _record_error(result: RuleResult, error: RuleError) -> None:
    """Marca o nó como falho, guardando o erro."""
    result.result = False
    result.error = error
    result.is_empty = isinstance(error, EmptyValueError)


def frame_records(frame: pd.DataFrame) -> List[Dict[str, Any]]:
    """Converte as linhas de um DataFrame em registros aninhados."""
    records = []
    for row in frame.to_dict(orient="records"):
        record: Dict[str, Any] = {}
        for column, value in row.items():
            if pd.api.types.is_scalar(value) and pd.isna(value):
                value = None
            target = record
            *parents, leaf = str(column).split(PATH_SEPARATOR)
            for key in parents:
                nested = target.get(key)
                if not isinstance(nested, dict):
                    nested = target[key] = {}
                target = nested
            target[leaf] = value
        records.append(record)
    return records


# Avaliador padrão ligado ao registro global
_default_evaluator = RuleEvaluator()


def evaluate(rule: Union[Rule, Mapping],
             data: Mapping[str, Any],
             options: Optional[Options] = None) -> RuleResult:
    """Avalia ``rule`` sobre ``data`` usando o avaliador padrão."""
    return _default_evaluator.evaluate(rule, data, options)
