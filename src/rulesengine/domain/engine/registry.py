"""
Tabelas compartilhadas usadas durante a avaliação.

``FunctionRegistry`` mapeia nomes para predicados de ``CUSTOM_FUNC``;
``PatternCache`` guarda as expressões regulares compiladas de ``MATCHES``.
Ambos ficam atrás de um lock leitor/escritor: leitores correm em paralelo e
um escritor espera os leitores saírem, segurando o lock só durante a inserção.
"""

import re
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any, Callable, Dict, Optional, Tuple, Union

from rulesengine.shared.logging import get_logger

# fn(actual, *args) -> matched | (matched, mismatch) | (matched, mismatch, error)
CustomFunc = Callable[..., Union[bool, Tuple[bool, Any], Tuple[bool, Any, Optional[Exception]]]]


class ReadWriteLock:
    """Vários leitores simultâneos ou um escritor, com preferência para escritores."""

    def __init__(self) -> None:
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._waiting_writers = 0

    @contextmanager
    def read(self) -> Iterator[None]:
        with self._cond:
            while self._writer or self._waiting_writers:
                self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if not self._readers:
                    self._cond.notify_all()

    @contextmanager
    def write(self) -> Iterator[None]:
        with self._cond:
            self._waiting_writers += 1
            try:
                while self._writer or self._readers:
                    self._cond.wait()
            finally:
                self._waiting_writers -= 1
            self._writer = True
        try:
            yield
        finally:
            with self._cond:
                self._writer = False
                self._cond.notify_all()


class FunctionRegistry:
    """
    Mapeamento nome → predicado customizado.

    O último registro vence. Consultas podem ocorrer em paralelo com
    registros feitos por outras threads.
    """

    def __init__(self, name: str = "default") -> None:
        self.name = name
        self._functions: Dict[str, CustomFunc] = {}
        self._lock = ReadWriteLock()
        self._logger = get_logger("engine.registry")

    def register(self, name: str, fn: CustomFunc) -> None:
        """
        Registra ``fn`` sob ``name``, substituindo a entrada anterior.

        Raises:
            TypeError: ``fn`` não é chamável
            ValueError: ``name`` vazio
        """
        if not callable(fn):
            raise TypeError(f"Custom function '{name}' must be callable")
        if not isinstance(name, str) or not name:
            raise ValueError("Custom function name must be a non-empty string")

        with self._lock.write():
            replaced = name in self._functions
            self._functions[name] = fn

        self._logger.info(
            "custom_function_registered",
            registry=self.name,
            function=name,
            replaced=replaced,
        )

    def get(self, name: str) -> Optional[CustomFunc]:
        """Retorna a função registrada sob ``name``, ou None."""
        with self._lock.read():
            return self._functions.get(name)

    def unregister(self, name: str) -> bool:
        with self._lock.write():
            return self._functions.pop(name, None) is not None

    def names(self) -> list[str]:
        with self._lock.read():
            return sorted(self._functions)

    def __contains__(self, name: object) -> bool:
        with self._lock.read():
            return name in self._functions

    def __len__(self) -> int:
        with self._lock.read():
            return len(self._functions)


class PatternCache:
    """
    Expressões regulares compiladas, indexadas pelo texto do padrão.

    Cada padrão é compilado uma vez por cache; dois primeiros usos
    concorrentes podem compilar duas vezes, mas só um resultado é mantido.
    """

    def __init__(self, compiler: Callable[[str], "re.Pattern[str]"] = re.compile) -> None:
        """
        Args:
            compiler: Função que compila o texto do padrão
        """
        self._compiler = compiler
        self._patterns: Dict[str, "re.Pattern[str]"] = {}
        self._lock = ReadWriteLock()

    def get(self, pattern: str) -> "re.Pattern[str]":
        """
        Retorna ``pattern`` compilado, compilando-o no primeiro uso.

        Raises:
            re.error: Padrão não é uma expressão regular válida
        """
        with self._lock.read():
            compiled = self._patterns.get(pattern)
        if compiled is not None:
            return compiled

        compiled = self._compiler(pattern)
        with self._lock.write():
            return self._patterns.setdefault(pattern, compiled)

    def clear(self) -> None:
        with self._lock.write():
            self._patterns.clear()

    def __len__(self) -> int:
        with self._lock.read():
            return len(self._patterns)


# Registro global do processo usado por register_func/get_func
default_registry = FunctionRegistry()


def register_func(name: str, fn: CustomFunc) -> None:
    """Registra uma função customizada no registro global."""
    default_registry.register(name, fn)


def get_func(name: str) -> Optional[CustomFunc]:
    """Busca uma função customizada no registro global."""
    return default_registry.get(name)
