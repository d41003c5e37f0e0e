"""Test domain errors."""

import pytest

from rulesengine.domain.errors import (
    ERROR_CLASSES_BY_KIND,
    CompilationError,
    DomainError,
    EmptyValueError,
    NumericError,
    OperatorError,
    RuleError,
    TypeMismatchError,
)


class TestRuleError:
    """Test RuleError formatting and equality."""

    @pytest.mark.parametrize(
        "error, text",
        [
            (NumericError("abc"), "invalid numerical value: [abc]"),
            (OperatorError("FOO"), "invalid operator: [FOO]"),
            (TypeMismatchError([1, 2]), "invalid value type: [[1, 2]]"),
            (EmptyValueError(), "empty value: []"),
            (TypeMismatchError("isEmail", message="function not registered"), "function not registered: [isEmail]"),
        ],
    )
    def test_str__formats_message_and_value(self, error, text):
        assert str(error) == text

    def test_equality__compares_class_message_and_value(self):
        assert NumericError("a") == NumericError("a")
        assert NumericError("a") != NumericError("b")
        assert NumericError("a") != TypeMismatchError("a")
        assert TypeMismatchError("a") != TypeMismatchError("a", message="other")

    def test_errors__are_domain_errors(self):
        assert isinstance(EmptyValueError(), DomainError)
        assert issubclass(CompilationError, DomainError)
        assert not issubclass(CompilationError, RuleError)

    def test_errors__are_hashable(self):
        assert len({NumericError("a"), NumericError("a"), OperatorError("a")}) == 2

    def test_kind__matches_registry(self):
        for kind, error_class in ERROR_CLASSES_BY_KIND.items():
            assert error_class("x").kind == kind


class TestCompilationError:
    """Test CompilationError."""

    def test_message__includes_path(self):
        error = CompilationError("Unknown operator 'FOO'", path="$.children[0]")

        assert str(error) == "Unknown operator 'FOO' (at $.children[0])"
        assert error.path == "$.children[0]"

    def test_message__without_path(self):
        error = CompilationError("Invalid JSON")

        assert str(error) == "Invalid JSON"
        assert error.path is None
