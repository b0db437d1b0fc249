"""Declared-type lookup and type-shape matching for factory declarations.

A factory field's declared type must match the type of the attribute with
the same name on the staging type (and on the target type when it has one).
This module reads those attribute types from the three class shapes that
factories stage into:

- SQLAlchemy declarative models: column attributes report the ``X`` of
  their ``Mapped[X]`` annotation.  Unannotated columns report
  ``column.type.python_type``, wrapped in ``Optional`` when the column is
  nullable, or ``Any`` where the SQL type has no Python type of its own.
  Relationship attributes report the related class, or
  ``list[Related]`` for collections.
- pydantic models: ``model_fields[name].annotation``.
- dataclasses and other annotated classes: ``typing.get_type_hints``.

Matching is structural.  ``Optional[X]``, ``Union[X, None]`` and
``X | None`` compare equal, and an attribute typed ``Any`` accepts any
declared type.
"""

from __future__ import annotations

import inspect
import sys
import types
import typing
from typing import Annotated, Any, Optional, Union

import sqlalchemy as sa
from pydantic import BaseModel
from sqlalchemy.orm import Mapped, Mapper


def _is_pydantic_model(cls: type) -> bool:
    return isinstance(cls, type) and issubclass(cls, BaseModel)


def _column_annotations(cls: type, keys: set[str]) -> dict[str, object]:
    """Unwrap the ``Mapped[X]`` annotations of the given column attributes.

    Annotations are read class by class along the MRO and evaluated in the
    defining module, so mixins contribute their columns too.  Annotations
    that do not resolve are left out; the caller falls back to the column's
    SQL type for those.
    """
    found: dict[str, object] = {}
    for klass in reversed(cls.__mro__):
        if klass.__module__.startswith("sqlalchemy") or klass is object:
            continue
        module_ns = vars(sys.modules[klass.__module__])
        for name, annotation in inspect.get_annotations(klass).items():
            if name not in keys:
                continue
            if isinstance(annotation, str):
                try:
                    annotation = eval(annotation, module_ns)  # noqa: S307
                except NameError:
                    continue
            if typing.get_origin(annotation) is Mapped:
                found[name] = typing.get_args(annotation)[0]
    return found


def _column_python_type(column: sa.Column) -> object:
    try:
        python_type: object = column.type.python_type
    except NotImplementedError:
        return Any
    # Types with no narrower Python type report ``object``.
    if python_type is object:
        return Any
    return Optional[python_type] if column.nullable else python_type


def _mapped_field_types(mapper: Mapper) -> dict[str, object]:
    keys = {attr.key for attr in mapper.column_attrs}
    annotated = _column_annotations(mapper.class_, keys)
    field_types: dict[str, object] = {}
    for attr in mapper.column_attrs:
        if attr.key in annotated:
            field_types[attr.key] = annotated[attr.key]
        else:
            field_types[attr.key] = _column_python_type(attr.columns[0])
    for rel in mapper.relationships:
        related = rel.mapper.class_
        field_types[rel.key] = list[related] if rel.uselist else Optional[related]
    return field_types


def declared_field_types(cls: type) -> dict[str, object]:
    """Return ``{attribute name: declared type}`` for a staging or target class.

    Args:
        cls: A SQLAlchemy mapped class, a pydantic model, a dataclass or any
            class with annotations.

    Returns:
        Mapping of attribute names to their declared types.  Classes with no
        recognisable field declarations yield an empty dict.

    Raises:
        TypeError: If the class's annotations cannot be resolved (for example
            a forward reference to a name that does not exist).
    """
    if _is_pydantic_model(cls):
        return {name: info.annotation for name, info in cls.model_fields.items()}

    mapper = sa.inspect(cls, raiseerr=False)
    if isinstance(mapper, Mapper):
        return _mapped_field_types(mapper)

    try:
        return dict(typing.get_type_hints(cls))
    except NameError as exc:
        raise TypeError(
            f"Cannot resolve the annotations of {cls.__qualname__}: {exc}"
        ) from exc


def _normalize(tp: object) -> object:
    """Reduce a type to a hashable, spelling-independent form."""
    if tp is None:
        return type(None)
    origin = typing.get_origin(tp)
    if origin is Annotated:
        return _normalize(typing.get_args(tp)[0])
    if origin is Union or origin is types.UnionType:
        return frozenset(_normalize(arg) for arg in typing.get_args(tp))
    if origin is not None:
        return (origin, tuple(_normalize(arg) for arg in typing.get_args(tp)))
    return tp


def types_match(declared: object, actual: object) -> bool:
    """Return True when a field's declared type matches a model attribute's type.

    Args:
        declared: Type given in the factory declaration.
        actual: Type read from the staging or target class.
    """
    if actual is Any:
        return True
    return _normalize(declared) == _normalize(actual)


def describe_type(tp: object) -> str:
    """Readable name for a type, used in definition-error messages."""
    if tp is None or tp is type(None):
        return "None"
    if isinstance(tp, type) and typing.get_origin(tp) is None:
        return tp.__qualname__
    return repr(tp).replace("typing.", "")
