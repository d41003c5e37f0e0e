"""Opções de avaliação."""

from dataclasses import dataclass, replace
from typing import Any, Callable, Optional, Union

from rulesengine.domain.engine.operators import Operator
from rulesengine.shared.logging import get_logger, sanitize_value

# (field, operator, actual, expected)
LeafLogger = Callable[[str, Union[Operator, str], Any, Any], None]


@dataclass(frozen=True)
class Options:
    """
    Configurações por chamada de avaliação.

    Attributes:
        timing: Registra o tempo gasto em cada nó do resultado
        logger: Chamado uma vez por comparação de folha com o valor resolvido
            e o operando esperado; não altera o resultado
    """

    timing: bool = False
    logger: Optional[LeafLogger] = None

    def with_timing(self, enabled: bool = True) -> "Options":
        return replace(self, timing=enabled)

    def with_logger(self, logger: Optional[LeafLogger]) -> "Options":
        return replace(self, logger=logger)


def default_options() -> Options:
    return Options()


def structlog_leaf_logger(logger=None, level: str = "debug") -> LeafLogger:
    """
    Cria um ``LeafLogger`` que emite um evento ``rule_leaf_evaluated`` por
    folha, mascarando valores de campos com nome sensível.

    Args:
        logger: Logger structlog (padrão ``engine.leaf``)
        level: Nome do método de log a chamar
    """
    bound = logger or get_logger("engine.leaf")
    emit = getattr(bound, level)

    def log_leaf(field: str, operator: Union[Operator, str], actual: Any, expected: Any) -> None:
        emit(
            "rule_leaf_evaluated",
            field=field,
            operator=operator.value if isinstance(operator, Operator) else str(operator),
            actual=sanitize_value(field, actual),
            expected=sanitize_value(field, expected),
        )

    return log_leaf
