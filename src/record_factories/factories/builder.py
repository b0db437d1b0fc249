"""Runtime semantics shared by every synthesized builder.

The synthesizer subclasses :class:`FactoryBuilder` once per factory and adds
one setter per declared field; everything else lives here.

Lifecycle of a builder instance::

    FRESH ──setter──▶ CUSTOMIZED ──setter──▶ CUSTOMIZED
      │                   │
      └──build/create─────┴──────────▶ CONSUMED

A builder is single-use.  It is marked ``CONSUMED`` on entry to
``build()`` / ``create()``, before any default is evaluated, so a failing
default or a failing save still consumes it.  Any further call raises
:class:`~record_factories.core.exceptions.BuilderConsumedError`.

Overrides hold only what the caller set.  Defaults for the remaining fields
are evaluated at materialization, in declaration order, freshly each time.
"""

from __future__ import annotations

import enum
from collections.abc import Mapping
from types import MappingProxyType
from typing import Any, ClassVar

import structlog

from record_factories.core.exceptions import (
    BuilderConsumedError,
    DefaultEvaluationError,
)
from record_factories.core.logging_config import factory_name_var
from record_factories.factories.adapters import PersistenceAdapter
from record_factories.factories.spec import FactorySpec

logger = structlog.get_logger(__name__)


class BuilderState(str, enum.Enum):
    """Lifecycle state of a builder instance."""

    FRESH = "fresh"
    CUSTOMIZED = "customized"
    CONSUMED = "consumed"


class FactoryBuilder:
    """Base class of the per-factory builder types.

    Subclasses are produced by
    :func:`record_factories.factories.synthesizer.synthesize`, which sets
    :attr:`spec` and the adapter and adds the field setters.
    """

    spec: ClassVar[FactorySpec]
    _adapter: ClassVar[PersistenceAdapter]

    __slots__ = ("_overrides", "_state")

    def __init__(self) -> None:
        self._overrides: dict[str, Any] = {}
        self._state = BuilderState.FRESH

    def __repr__(self) -> str:
        return (
            f"<{type(self).__name__} factory={self.spec.factory_name!r} "
            f"state={self._state.value} overrides={sorted(self._overrides)}>"
        )

    @property
    def overrides(self) -> Mapping[str, Any]:
        """Read-only view of the explicitly set fields."""
        return MappingProxyType(self._overrides)

    @property
    def state(self) -> BuilderState:
        return self._state

    # ------------------------------------------------------------------
    # Setters
    # ------------------------------------------------------------------

    def _ensure_usable(self, operation: str) -> None:
        if self._state is BuilderState.CONSUMED:
            raise BuilderConsumedError(
                f"{type(self).__name__} was already consumed by build() or "
                f"create(); cannot call {operation}()",
                factory_name=self.spec.factory_name,
            )

    def _set(self, name: str, value: Any) -> FactoryBuilder:
        self._ensure_usable(name)
        self._overrides[name] = value
        self._state = BuilderState.CUSTOMIZED
        return self

    def apply(
        self, overrides: Mapping[str, Any] | None = None, /, **values: Any
    ) -> FactoryBuilder:
        """Set several fields at once and return the builder.

        Accepts a mapping, keyword arguments, or both (keywords win).  All
        names are checked before anything is recorded, so an unknown name
        leaves the builder untouched.

        Raises:
            UnknownFieldError: If a name is not a field of this factory.
            BuilderConsumedError: If the builder was already consumed.
        """
        self._ensure_usable("apply")
        merged = {**(overrides or {}), **values}
        for name in merged:
            self.spec.get_field(name)
        for name, value in merged.items():
            self._set(name, value)
        return self

    # ------------------------------------------------------------------
    # Terminal operations
    # ------------------------------------------------------------------

    def _consume(self, operation: str) -> None:
        self._ensure_usable(operation)
        self._state = BuilderState.CONSUMED

    def _materialize(self) -> Any:
        values: dict[str, Any] = {}
        for spec_field in self.spec.fields:
            if spec_field.name in self._overrides:
                values[spec_field.name] = self._overrides[spec_field.name]
                continue
            try:
                values[spec_field.name] = spec_field.evaluate(self.spec.factory_name)
            except DefaultEvaluationError as exc:
                logger.warning(
                    "factory.default_failed",
                    field=spec_field.name,
                    error=repr(exc.__cause__),
                )
                raise
        return self.spec.staging_type(**values)

    def build(self) -> Any:
        """Consume the builder and return a new, unsaved staging instance.

        Performs no I/O.

        Raises:
            DefaultEvaluationError: If a default expression fails.
            BuilderConsumedError: If the builder was already consumed.
        """
        self._consume("build")
        token = factory_name_var.set(self.spec.factory_name)
        try:
            return self._materialize()
        finally:
            factory_name_var.reset(token)

    async def create(self, handle: Any) -> Any:
        """Consume the builder, build the staging instance and persist it.

        Args:
            handle: Persistence handle passed through to the adapter (an
                ``AsyncSession`` or ``AppContext`` for the default adapter).

        Returns:
            The persisted target record returned by the adapter.

        Raises:
            DefaultEvaluationError: If a default expression fails; the
                adapter is not called.
            BuilderConsumedError: If the builder was already consumed.
            Exception: Whatever the adapter raises, unchanged.
        """
        self._consume("create")
        token = factory_name_var.set(self.spec.factory_name)
        try:
            staging = self._materialize()
            try:
                record = await self._adapter.save(staging, handle)
            except Exception as exc:
                logger.warning("factory.create_failed", error_type=type(exc).__name__)
                raise
            logger.debug("factory.created", overrides=dict(self._overrides))
            return record
        finally:
            factory_name_var.reset(token)
