"""Resolução de caminhos de campo em registros aninhados."""

from collections.abc import Mapping
from typing import Any

# Referência ao elemento corrente de ANY/ALL/NONE
CURRENT_ELEMENT = "$"

# Chave onde o elemento do quantificador fica no registro de escopo
ELEMENT_KEY = ""

PATH_SEPARATOR = "."


def element_scope(element: Any) -> dict[str, Any]:
    """Registro que expõe ``element`` à regra aninhada como ``$`` (ou caminho vazio)."""
    return {ELEMENT_KEY: element}


def split_path(path: str) -> list[str]:
    """Divide um caminho pontuado, trocando a referência ao elemento pela sua chave."""
    keys = (path or "").split(PATH_SEPARATOR)
    if keys[0] == CURRENT_ELEMENT:
        keys[0] = ELEMENT_KEY
    return keys


def resolve_field(path: str, record: Mapping[str, Any]) -> Any:
    """
    Resolve um caminho pontuado sobre um registro aninhado.

    Desce pelos mapeamentos um segmento por vez. Chave ausente ou
    intermediário que não é mapeamento resultam em None; nunca levanta exceção.

    Args:
        path: Caminho como ``user.address.city``
        record: Mapeamento aninhado em avaliação

    Returns:
        Valor da folha, ou None quando ausente
    """
    current: Any = record
    for key in split_path(path):
        if not isinstance(current, Mapping):
            return None
        current = current.get(key)
    return current
