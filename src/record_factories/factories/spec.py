"""Factory specification model: the closed, validated description of a factory.

A :class:`FactorySpec` is built once, when a factory is declared, and is
never mutated afterwards.  All structural checks happen in its constructor,
so an invalid declaration fails at import time of the module that declares
it and no partially-usable factory ever exists.

Usage::

    from record_factories.factories.spec import FactorySpec, field

    spec = FactorySpec(
        factory_name="user",
        target_type=UserRecord,
        staging_type=User,
        fields=[
            field("name", str, default="Test User"),
            field("uuid", uuid.UUID, default_factory=uuid.uuid4),
        ],
    )
"""

from __future__ import annotations

import dataclasses
import enum
import keyword
from collections.abc import Callable, Iterator
from datetime import date, time, timedelta
from decimal import Decimal
from typing import Any
from uuid import UUID

from record_factories.core.exceptions import (
    DefaultEvaluationError,
    DuplicateFieldError,
    FactoryDefinitionError,
    FieldTypeMismatchError,
    InvalidFactoryNameError,
    InvalidFieldNameError,
    MutableDefaultError,
    UnknownFieldError,
)
from record_factories.factories.typing_support import (
    declared_field_types,
    describe_type,
    types_match,
)

#: Public builder members a field name would shadow.
RESERVED_FIELD_NAMES: frozenset[str] = frozenset(
    {"apply", "build", "create", "overrides", "spec", "state"}
)

_IMMUTABLE_SCALARS: tuple[type, ...] = (
    type(None),
    bool,
    int,
    float,
    complex,
    str,
    bytes,
    Decimal,
    UUID,
    date,
    time,
    timedelta,
    enum.Enum,
)


def _is_immutable_literal(value: object) -> bool:
    if isinstance(value, _IMMUTABLE_SCALARS):
        return True
    if isinstance(value, (tuple, frozenset)):
        return all(_is_immutable_literal(item) for item in value)
    return False


def _check_identifier(name: object) -> bool:
    return (
        isinstance(name, str)
        and name.isidentifier()
        and not keyword.iskeyword(name)
        and not name.startswith("_")
    )


# ---------------------------------------------------------------------------
# FieldSpec
# ---------------------------------------------------------------------------


@dataclasses.dataclass(frozen=True)
class FieldSpec:
    """One declared field of a factory.

    Attributes:
        name: Field name; also the name of the generated builder setter.
        type: Declared value type, checked against the staging type.
        default_expr: Zero-argument callable producing the default value.
            It is called again for every record, never cached.
    """

    name: str
    type: Any
    default_expr: Callable[[], Any] = dataclasses.field(repr=False)

    def __post_init__(self) -> None:
        if not callable(self.default_expr):
            raise FactoryDefinitionError(
                f"Default expression of field '{self.name}' must be a "
                f"zero-argument callable, got {type(self.default_expr).__name__}",
                field_name=self.name,
            )

    def evaluate(self, factory_name: str | None = None) -> Any:
        """Evaluate the default expression and return a fresh value.

        Raises:
            DefaultEvaluationError: If the expression raises.  The original
                exception is chained as ``__cause__``.
        """
        try:
            return self.default_expr()
        except Exception as exc:
            raise DefaultEvaluationError(
                f"Default for field '{self.name}' failed: {exc}",
                factory_name=factory_name,
                field_name=self.name,
            ) from exc


def field(
    name: str,
    type: Any,  # noqa: A002
    *,
    default: Any = dataclasses.MISSING,
    default_factory: Callable[[], Any] | Any = dataclasses.MISSING,
) -> FieldSpec:
    """Declare a factory field, in the manner of :func:`dataclasses.field`.

    Exactly one of ``default`` and ``default_factory`` must be given.
    ``default`` is for immutable literals such as ``"Test User"`` or ``0``;
    anything that must differ per record (identifiers, timestamps, lists)
    goes in ``default_factory``.

    Args:
        name: Field name.
        type: Declared field type.
        default: Immutable literal default.
        default_factory: Zero-argument callable evaluated for every record.

    Returns:
        The :class:`FieldSpec`.

    Raises:
        FactoryDefinitionError: If both or neither default is given.
        MutableDefaultError: If ``default`` is a mutable value.
    """
    has_default = default is not dataclasses.MISSING
    has_factory = default_factory is not dataclasses.MISSING
    if has_default == has_factory:
        raise FactoryDefinitionError(
            f"Field '{name}' needs exactly one of 'default' or 'default_factory'",
            field_name=name,
        )
    if has_factory:
        return FieldSpec(name=name, type=type, default_expr=default_factory)

    if not _is_immutable_literal(default):
        raise MutableDefaultError(
            f"Mutable default {default.__class__.__name__} for field '{name}' "
            "is not allowed: use default_factory",
            field_name=name,
        )
    return FieldSpec(name=name, type=type, default_expr=lambda: default)


# ---------------------------------------------------------------------------
# FactorySpec
# ---------------------------------------------------------------------------


@dataclasses.dataclass(frozen=True)
class FactorySpec:
    """One factory definition: what to stage, what to return, which fields.

    Attributes:
        factory_name: Identifier used to name the generated artifacts.
        target_type: Record type returned after persistence.
        staging_type: Mutable type the field values are assembled into.
        fields: Declared fields, in declaration order.

    Raises:
        FactoryDefinitionError: Any structural problem with the declaration
            (see :mod:`record_factories.core.exceptions` for the subclasses).
    """

    factory_name: str
    target_type: type
    staging_type: type
    fields: tuple[FieldSpec, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "fields", tuple(self.fields))
        self._validate_names()
        self._validate_types()

    # ------------------------------------------------------------------
    # Read-only view
    # ------------------------------------------------------------------

    @property
    def field_names(self) -> tuple[str, ...]:
        return tuple(f.name for f in self.fields)

    def get_field(self, name: str) -> FieldSpec:
        """Return the field called ``name``.

        Raises:
            UnknownFieldError: If the factory declares no such field.
        """
        for spec_field in self.fields:
            if spec_field.name == name:
                return spec_field
        raise UnknownFieldError(
            f"Factory '{self.factory_name}' has no field '{name}'",
            factory_name=self.factory_name,
            field_name=name,
        )

    def __contains__(self, name: object) -> bool:
        return any(f.name == name for f in self.fields)

    def __iter__(self) -> Iterator[FieldSpec]:
        return iter(self.fields)

    def __len__(self) -> int:
        return len(self.fields)

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def _validate_names(self) -> None:
        if not _check_identifier(self.factory_name):
            raise InvalidFactoryNameError(
                f"Factory name {self.factory_name!r} must be a public Python identifier",
                factory_name=str(self.factory_name),
            )

        seen: set[str] = set()
        for spec_field in self.fields:
            if not isinstance(spec_field, FieldSpec):
                raise FactoryDefinitionError(
                    f"Factory '{self.factory_name}' fields must be FieldSpec "
                    f"instances, got {type(spec_field).__name__}",
                    factory_name=self.factory_name,
                )
            name = spec_field.name
            if not _check_identifier(name):
                raise InvalidFieldNameError(
                    f"Field name {name!r} in factory '{self.factory_name}' "
                    "must be a public Python identifier",
                    factory_name=self.factory_name,
                    field_name=str(name),
                )
            if name in RESERVED_FIELD_NAMES:
                raise InvalidFieldNameError(
                    f"Field name '{name}' in factory '{self.factory_name}' "
                    "clashes with a builder method",
                    factory_name=self.factory_name,
                    field_name=name,
                )
            if name in seen:
                raise DuplicateFieldError(
                    f"Field '{name}' is declared more than once in factory "
                    f"'{self.factory_name}'",
                    factory_name=self.factory_name,
                    field_name=name,
                )
            seen.add(name)

    def _model_types(self, cls: type) -> dict[str, object]:
        try:
            return declared_field_types(cls)
        except TypeError as exc:
            raise FactoryDefinitionError(
                str(exc), factory_name=self.factory_name
            ) from exc

    def _validate_types(self) -> None:
        staging_types = self._model_types(self.staging_type)
        target_types = (
            staging_types
            if self.target_type is self.staging_type
            else self._model_types(self.target_type)
        )

        for spec_field in self.fields:
            if spec_field.name not in staging_types:
                raise UnknownFieldError(
                    f"Field '{spec_field.name}' of factory '{self.factory_name}' "
                    f"does not exist on {self.staging_type.__qualname__}",
                    factory_name=self.factory_name,
                    field_name=spec_field.name,
                )
            for owner, owner_types in (
                (self.staging_type, staging_types),
                (self.target_type, target_types),
            ):
                if spec_field.name not in owner_types:
                    continue
                expected = owner_types[spec_field.name]
                if not types_match(spec_field.type, expected):
                    raise FieldTypeMismatchError(
                        f"Field '{spec_field.name}' of factory '{self.factory_name}' "
                        f"is declared as {describe_type(spec_field.type)} but "
                        f"{owner.__qualname__}.{spec_field.name} is "
                        f"{describe_type(expected)}",
                        expected=expected,
                        actual=spec_field.type,
                        factory_name=self.factory_name,
                        field_name=spec_field.name,
                    )
