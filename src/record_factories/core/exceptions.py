"""Library-wide exception hierarchy for Record Factories.

All custom exceptions subclass ``RecordFactoryError``, enabling consistent
error handling and structured logging across the library.

Errors fall in two classes.  Definition errors are raised while a factory is
being declared and mean no factory was produced at all.  Runtime errors are
raised while a synthesized artifact is being called.

Hierarchy::

    RecordFactoryError
    ├── FactoryDefinitionError        (factory_name, field_name)
    │   ├── InvalidFactoryNameError
    │   ├── InvalidFieldNameError
    │   ├── DuplicateFieldError
    │   ├── UnknownFieldError
    │   ├── FieldTypeMismatchError    (expected, actual)
    │   ├── MutableDefaultError
    │   └── DuplicateFactoryError
    └── FactoryRuntimeError           (factory_name)
        ├── DefaultEvaluationError    (field_name)
        ├── BuilderConsumedError
        └── FactoryNotFoundError

Errors raised by a persistence adapter are never wrapped: they reach the
caller of ``create_<name>`` / ``Builder.create`` unchanged.
"""

from __future__ import annotations


class RecordFactoryError(Exception):
    """Base class for all Record Factories exceptions.

    Callers can catch the entire hierarchy with a single ``except`` clause
    when needed.
    """


# ---------------------------------------------------------------------------
# Definition errors
# ---------------------------------------------------------------------------


class FactoryDefinitionError(RecordFactoryError):
    """Raised when a factory declaration is structurally invalid.

    Args:
        message: Human-readable description of the problem.
        factory_name: Name of the factory being declared, if known.
        field_name: Name of the offending field, if the problem is
            field-specific.
    """

    def __init__(
        self,
        message: str,
        factory_name: str | None = None,
        field_name: str | None = None,
    ) -> None:
        super().__init__(message)
        self.factory_name = factory_name
        self.field_name = field_name


class InvalidFactoryNameError(FactoryDefinitionError):
    """Raised when a factory name cannot be used to name generated artifacts."""


class InvalidFieldNameError(FactoryDefinitionError):
    """Raised when a field name is not a usable setter name.

    Covers non-identifiers, keywords, private names and names reserved by
    the builder (``build``, ``create`` ...).
    """


class DuplicateFieldError(FactoryDefinitionError):
    """Raised when the same field name is declared twice in one factory."""


class UnknownFieldError(FactoryDefinitionError):
    """Raised when a field name is not part of a factory or its staging type."""


class FieldTypeMismatchError(FactoryDefinitionError):
    """Raised when a field's declared type differs from the model's type.

    Args:
        message: Human-readable description of the mismatch.
        expected: The type declared on the staging (or target) type.
        actual: The type declared on the field.
        factory_name: Name of the factory being declared.
        field_name: Name of the offending field.
    """

    def __init__(
        self,
        message: str,
        expected: object = None,
        actual: object = None,
        factory_name: str | None = None,
        field_name: str | None = None,
    ) -> None:
        super().__init__(message, factory_name=factory_name, field_name=field_name)
        self.expected = expected
        self.actual = actual


class MutableDefaultError(FactoryDefinitionError):
    """Raised when a literal default is a mutable value.

    A mutable literal would be shared by every record the factory produces;
    declare it with ``default_factory`` instead.
    """


class DuplicateFactoryError(FactoryDefinitionError):
    """Raised when a registry already holds a factory with the same name."""


# ---------------------------------------------------------------------------
# Runtime errors
# ---------------------------------------------------------------------------


class FactoryRuntimeError(RecordFactoryError):
    """Base class for errors raised while calling synthesized artifacts.

    Args:
        message: Human-readable description of the failure.
        factory_name: Name of the factory whose artifact failed.
    """

    def __init__(self, message: str, factory_name: str | None = None) -> None:
        super().__init__(message)
        self.factory_name = factory_name


class DefaultEvaluationError(FactoryRuntimeError):
    """Raised when a field's default expression fails to evaluate.

    The original exception is chained as ``__cause__``.  No persistence is
    attempted for the invocation that hit the failure.

    Args:
        message: Human-readable description of the failure.
        factory_name: Name of the factory being materialized.
        field_name: Name of the field whose default failed.
    """

    def __init__(
        self,
        message: str,
        factory_name: str | None = None,
        field_name: str | None = None,
    ) -> None:
        super().__init__(message, factory_name=factory_name)
        self.field_name = field_name


class BuilderConsumedError(FactoryRuntimeError):
    """Raised when a builder is used after ``build()`` or ``create()``."""


class FactoryNotFoundError(FactoryRuntimeError):
    """Raised when a registry lookup names a factory that was never registered."""
