"""Domain errors for the rules engine."""

from typing import Any, Optional


class DomainError(Exception):
    """Base exception for all domain errors."""

    def __init__(self, message: str) -> None:
        """
        Initialize domain error.

        Args:
            message: Error message
        """
        super().__init__(message)
        self.message = message


class RuleError(DomainError):
    """
    Error produced while evaluating a single rule node.

    Rule errors are carried in ``RuleResult.error`` instead of propagating to
    the caller; they pair a message with the operand that caused it.
    """

    default_message = "rule evaluation failed"

    def __init__(self, value: Any = "", message: Optional[str] = None) -> None:
        """
        Initialize rule error.

        Args:
            value: Offending operand
            message: Overrides the class default message
        """
        super().__init__(message or self.default_message)
        self.value = value

    def __str__(self) -> str:
        return f"{self.message}: [{self.value}]"

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.value!r}, message={self.message!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RuleError):
            return NotImplemented
        return (
            type(self) is type(other)
            and self.message == other.message
            and self.value == other.value
        )

    def __hash__(self) -> int:
        return hash((type(self).__name__, self.message, str(self.value)))

    @property
    def kind(self) -> str:
        """Stable identifier used when serializing the error."""
        return ERROR_KINDS_BY_CLASS.get(type(self), "rule")


class NumericError(RuleError):
    """Raised when a value cannot be interpreted as a number."""

    default_message = "invalid numerical value"


class OperatorError(RuleError):
    """Raised on structural misuse of a combinator or an unknown operator."""

    default_message = "invalid operator"


class TypeMismatchError(RuleError):
    """Raised when an operand does not have the shape an operator needs."""

    default_message = "invalid value type"


class EmptyValueError(RuleError):
    """Raised when a field resolved to nothing and the operator needs a value."""

    default_message = "empty value"

    def __init__(self, value: Any = "", message: Optional[str] = None) -> None:
        super().__init__(value, message)


class CompilationError(DomainError):
    """Error while loading a rule document."""

    def __init__(self, message: str, path: Optional[str] = None) -> None:
        """
        Initialize compilation error.

        Args:
            message: Error message
            path: Location of the offending node (e.g. ``$.children[1]``)
        """
        if path:
            message = f"{message} (at {path})"
        super().__init__(message)
        self.path = path


ERROR_CLASSES_BY_KIND: dict[str, type[RuleError]] = {
    "rule": RuleError,
    "numeric": NumericError,
    "operator": OperatorError,
    "type": TypeMismatchError,
    "empty": EmptyValueError,
}

ERROR_KINDS_BY_CLASS: dict[type[RuleError], str] = {
    cls: kind for kind, cls in ERROR_CLASSES_BY_KIND.items()
}
