"""
Compilador de documentos de regras.

Constrói árvores ``Rule`` a partir de documentos estruturados (mapas, JSON ou
YAML) com os atributos ``operator/field/value/children``, validando a forma
com JSON Schema e, no modo estrito, a semântica de cada operador.
"""

import json
import logging
import re
import time
from collections import Counter
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

import jsonschema
import yaml

from rulesengine.domain.engine.ir_types import CompilationStats, Rule
from rulesengine.domain.engine.operators import (
    COMBINATOR_OPERATORS,
    QUANTIFIER_OPERATORS,
    Operator,
)
from rulesengine.domain.errors import CompilationError

logger = logging.getLogger(__name__)


RULE_SCHEMA: Dict[str, Any] = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "definitions": {
        "rule": {
            "type": "object",
            "required": ["operator"],
            "properties": {
                "operator": {"type": "string", "minLength": 1},
                "field": {"type": "string"},
                "value": {},
                "children": {
                    "type": "array",
                    "items": {"$ref": "#/definitions/rule"},
                },
                "id": {"type": "string"},
                "description": {"type": "string"},
            },
            "additionalProperties": False,
        }
    },
    "$ref": "#/definitions/rule",
}


class RuleCompiler:
    """
    Compilador de documentos de regras para ``Rule``.

    Responsabilidades:
    - Validação de schema do documento
    - Validação semântica por operador (modo estrito)
    - Pré-compilação de regex de ``MATCHES``
    - Estatísticas de compilação
    """

    def __init__(self, strict: bool = True, schema: Optional[Dict[str, Any]] = None):
        """
        Inicializa o compilador.

        Args:
            strict: Rejeita operadores desconhecidos e operandos malformados;
                fora do modo estrito esses erros aparecem só na avaliação
            schema: JSON Schema alternativo para os nós
        """
        self.strict = strict
        self.schema = schema or RULE_SCHEMA
        self._validator = jsonschema.Draft7Validator(self.schema)

        # Cache de expressões compiladas
        self._regex_cache: Dict[str, re.Pattern] = {}

        self.stats = CompilationStats()

    def compile(self, document: Union[Mapping[str, Any], Rule]) -> Rule:
        """
        Compila um documento já carregado.

        Args:
            document: Mapa da regra raiz (ou uma ``Rule`` já construída)

        Returns:
            Regra compilada

        Raises:
            CompilationError: Documento inválido
        """
        start_time = time.perf_counter()

        if isinstance(document, Rule):
            document = document.to_dict()
        if not isinstance(document, Mapping):
            raise CompilationError(
                f"Rule document must be a mapping, got {type(document).__name__}", path="$"
            )

        self._validate_schema(document)

        counter: Counter = Counter()
        fields: Dict[str, None] = {}
        rule, depth = self._compile_node(document, "$", counter, fields)

        self.stats = CompilationStats(
            total_nodes=sum(counter.values()),
            max_depth=depth,
            operators=dict(counter),
            fields=tuple(fields),
            compilation_time_ms=(time.perf_counter() - start_time) * 1000,
        )
        logger.debug(
            f"Regra compilada: {self.stats.total_nodes} nós, profundidade {self.stats.max_depth}"
        )
        return rule

    def compile_json(self, content: Union[str, bytes]) -> Rule:
        """Compila um documento JSON."""
        try:
            document = json.loads(content)
        except json.JSONDecodeError as e:
            raise CompilationError(f"Invalid JSON: {e.msg} (line {e.lineno})") from e
        return self.compile(document)

    def compile_yaml(self, content: str) -> Rule:
        """Compila um documento YAML."""
        try:
            document = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise CompilationError(f"Invalid YAML: {e}") from e
        return self.compile(document)

    def compile_file(self, path: Union[str, Path]) -> Rule:
        """Compila um arquivo ``.json``, ``.yaml`` ou ``.yml``."""
        path = Path(path)
        suffix = path.suffix.lower()
        if suffix not in (".json", ".yaml", ".yml"):
            raise CompilationError(f"Unsupported rule file type: {path.suffix or path.name}")

        content = path.read_text(encoding="utf-8")
        if suffix == ".json":
            return self.compile_json(content)
        return self.compile_yaml(content)

    def _validate_schema(self, document: Mapping[str, Any]) -> None:
        """Valida o documento contra o schema."""
        error = jsonschema.exceptions.best_match(self._validator.iter_errors(document))
        if error is not None:
            raise CompilationError(
                f"Schema validation error: {error.message}",
                path=_json_path(error.absolute_path),
            )

    def _compile_node(self,
                      data: Mapping[str, Any],
                      path: str,
                      counter: Counter,
                      fields: Dict[str, None]) -> tuple:
        """Compila um nó e seus descendentes; retorna ``(regra, profundidade)``."""
        raw_operator = data["operator"]
        operator = Operator.parse(raw_operator)
        if operator is None and self.strict:
            raise CompilationError(f"Unknown operator '{raw_operator}'", path=path)

        field = data.get("field", "")
        value = data.get("value")
        children_data = data.get("children") or []

        counter[operator.value if operator else str(raw_operator)] += 1
        if field:
            fields.setdefault(field, None)

        if self.strict:
            self._check_node(operator, value, children_data, path)

        children = []
        depth = 1
        for index, child_data in enumerate(children_data):
            child, child_depth = self._compile_node(
                child_data, f"{path}.children[{index}]", counter, fields
            )
            children.append(child)
            depth = max(depth, child_depth + 1)

        if operator in QUANTIFIER_OPERATORS and isinstance(value, Mapping):
            self._validate_nested(value, f"{path}.value")
            value, nested_depth = self._compile_node(value, f"{path}.value", counter, fields)
            depth = max(depth, nested_depth + 1)
        elif operator is Operator.MATCHES and value is not None:
            self._compile_regex(str(value), path)

        rule = Rule(
            operator=operator or raw_operator,
            field=field,
            value=value,
            children=tuple(children),
        )
        return rule, depth

    def _check_node(self, operator: Operator, value: Any, children: list, path: str) -> None:
        """Validação semântica do nó (modo estrito)."""
        if children and operator not in COMBINATOR_OPERATORS:
            raise CompilationError(f"Operator {operator.value} does not take children", path=path)

        if operator is Operator.IF_THEN and len(children) != 2:
            raise CompilationError("IF_THEN requires exactly two child rules", path=path)

        if operator in QUANTIFIER_OPERATORS:
            if not isinstance(value, Mapping):
                raise CompilationError(
                    f"{operator.value} requires a nested rule as value", path=path
                )
        elif operator in (Operator.BETWEEN, Operator.DATE_BETWEEN):
            if not isinstance(value, (list, tuple)) or len(value) != 2:
                raise CompilationError(
                    f"{operator.value} requires a two-element range", path=path
                )
        elif operator is Operator.CUSTOM_FUNC:
            if not isinstance(value, (list, tuple)) or not value or not isinstance(value[0], str):
                raise CompilationError(
                    "CUSTOM_FUNC requires [function_name, *args] as value", path=path
                )
        elif operator is Operator.SCRIPT:
            raise CompilationError("SCRIPT rules are not supported", path=path)

    def _validate_nested(self, value: Mapping[str, Any], path: str) -> None:
        error = jsonschema.exceptions.best_match(self._validator.iter_errors(value))
        if error is not None:
            raise CompilationError(
                f"Schema validation error: {error.message}",
                path=path + _json_path(error.absolute_path)[1:],
            )

    def _compile_regex(self, pattern: str, path: str) -> re.Pattern:
        """Compila regex com cache."""
        if pattern in self._regex_cache:
            return self._regex_cache[pattern]

        try:
            compiled_regex = re.compile(pattern)
        except re.error as e:
            if self.strict:
                raise CompilationError(f"Invalid regex '{pattern}': {e}", path=path) from e
            logger.warning(f"Regex inválido '{pattern}' em {path}: {e}")
            return None
        self._regex_cache[pattern] = compiled_regex
        return compiled_regex


def _json_path(parts) -> str:
    path = "$"
    for part in parts:
        path += f"[{part}]" if isinstance(part, int) else f".{part}"
    return path
