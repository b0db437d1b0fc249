"""Artifact synthesis: turn a FactorySpec into callable factory artifacts.

Synthesis runs once per factory, when the factory is declared.  It derives:

- ``create_<name>(handle)``: coroutine creating one record with defaults only;
- ``create_<name>_batch(handle, size)``: coroutine creating ``size`` records;
- ``<name>_builder()``: returns a fresh builder;
- ``<Name>Builder``: the builder type, with one fluent setter per field.

``create_<name>`` is literally ``<name>_builder().create(handle)``, so the
factory entrypoint and an un-customized builder draw from the same default
expressions.  After synthesis nothing re-reads the declaration: each
artifact closes over the ``FactorySpec`` and the adapter.

Usage::

    from record_factories.factories.synthesizer import define_factory
    from record_factories.factories.spec import field

    user = define_factory(
        "user",
        UserRecord,
        staging_type=User,
        fields=[
            field("name", str, default="Test User"),
            field("email", str, default_factory=fresh_email()),
            field("uuid", uuid.UUID, default_factory=fresh_uuid),
        ],
    )
    globals().update(user.namespace())

    record = await create_user(session)
    record = await user_builder().name("Jane Doe").create(session)
"""

from __future__ import annotations

import dataclasses
from collections.abc import Awaitable, Callable, Iterable
from typing import Any

import structlog

from record_factories.factories.adapters import PersistenceAdapter, SQLAlchemyAdapter
from record_factories.factories.builder import FactoryBuilder
from record_factories.factories.spec import FactorySpec, FieldSpec
from record_factories.factories.typing_support import describe_type

logger = structlog.get_logger(__name__)


def builder_class_name(factory_name: str) -> str:
    """CamelCase builder class name: ``"blog_post"`` -> ``"BlogPostBuilder"``."""
    return "".join(part[:1].upper() + part[1:] for part in factory_name.split("_")) + "Builder"


@dataclasses.dataclass(frozen=True)
class FactoryArtifacts:
    """The callables synthesized for one factory.

    Attributes:
        spec: The specification the artifacts were derived from.
        adapter: Persistence adapter used by ``create`` operations.
        create: ``create_<name>(handle)`` coroutine function.
        create_batch: ``create_<name>_batch(handle, size)`` coroutine function.
        builder: ``<name>_builder()`` builder constructor.
        builder_type: The ``<Name>Builder`` class.
    """

    spec: FactorySpec
    adapter: PersistenceAdapter
    create: Callable[[Any], Awaitable[Any]]
    create_batch: Callable[[Any, int], Awaitable[list[Any]]]
    builder: Callable[[], FactoryBuilder]
    builder_type: type[FactoryBuilder]

    @property
    def name(self) -> str:
        return self.spec.factory_name

    def namespace(self) -> dict[str, Any]:
        """Return ``{generated name: artifact}``, e.g. for ``globals().update()``.

        ``create_<name>_builder`` is included as an alias of ``<name>_builder``
        so that the builder can be found next to the entrypoint it customizes.
        """
        return {
            self.create.__name__: self.create,
            self.create_batch.__name__: self.create_batch,
            self.builder.__name__: self.builder,
            f"{self.create.__name__}_builder": self.builder,
            self.builder_type.__name__: self.builder_type,
        }


def _make_setter(spec_field: FieldSpec, class_name: str) -> Callable[..., FactoryBuilder]:
    name = spec_field.name

    def setter(self: FactoryBuilder, value: Any) -> FactoryBuilder:
        return self._set(name, value)

    setter.__name__ = name
    setter.__qualname__ = f"{class_name}.{name}"
    setter.__doc__ = (
        f"Override ``{name}`` ({describe_type(spec_field.type)}) and return the builder."
    )
    setter.__annotations__ = {"value": spec_field.type, "return": class_name}
    return setter


def synthesize(spec: FactorySpec, adapter: PersistenceAdapter) -> FactoryArtifacts:
    """Derive the factory artifacts for ``spec``.

    Args:
        spec: A validated factory specification.
        adapter: Persistence adapter used by ``create`` operations.

    Returns:
        The :class:`FactoryArtifacts` for the factory.
    """
    name = spec.factory_name
    class_name = builder_class_name(name)

    namespace: dict[str, Any] = {
        "__slots__": (),
        "__doc__": (
            f"Builder for the '{name}' factory: staging "
            f"{spec.staging_type.__qualname__}, target {spec.target_type.__qualname__}."
        ),
        "__module__": spec.staging_type.__module__,
        "spec": spec,
        "_adapter": adapter,
    }
    for spec_field in spec.fields:
        namespace[spec_field.name] = _make_setter(spec_field, class_name)
    builder_type: type[FactoryBuilder] = type(class_name, (FactoryBuilder,), namespace)

    def builder() -> FactoryBuilder:
        return builder_type()

    async def create(handle: Any) -> Any:
        return await builder_type().create(handle)

    async def create_batch(handle: Any, size: int) -> list[Any]:
        if size < 0:
            raise ValueError(f"Batch size must be >= 0, got {size}")
        # One at a time: a session does not support concurrent operations.
        return [await builder_type().create(handle) for _ in range(size)]

    builder.__name__ = builder.__qualname__ = f"{name}_builder"
    builder.__doc__ = f"Return a fresh :class:`{class_name}` with no overrides."
    create.__name__ = create.__qualname__ = f"create_{name}"
    create.__doc__ = f"Create and persist one '{name}' record using only default values."
    create_batch.__name__ = create_batch.__qualname__ = f"create_{name}_batch"
    create_batch.__doc__ = f"Create and persist ``size`` '{name}' records, one at a time."

    logger.debug("factory.synthesized", factory=name, fields=list(spec.field_names))
    return FactoryArtifacts(
        spec=spec,
        adapter=adapter,
        create=create,
        create_batch=create_batch,
        builder=builder,
        builder_type=builder_type,
    )


def define_factory(
    factory_name: str,
    target_type: type,
    *,
    staging_type: type,
    fields: Iterable[FieldSpec],
    adapter: PersistenceAdapter | None = None,
) -> FactoryArtifacts:
    """Declare a factory and synthesize its artifacts.

    Args:
        factory_name: Identifier the artifact names derive from.
        target_type: Record type returned by ``create`` operations.
        staging_type: Type the field values are assembled into by ``build``.
        fields: Field declarations, usually from
            :func:`record_factories.factories.spec.field`.
        adapter: Persistence adapter; defaults to
            ``SQLAlchemyAdapter(target_type)``.

    Returns:
        The synthesized :class:`FactoryArtifacts`.

    Raises:
        FactoryDefinitionError: If the declaration is invalid.  Nothing is
            synthesized in that case.
    """
    spec = FactorySpec(
        factory_name=factory_name,
        target_type=target_type,
        staging_type=staging_type,
        fields=tuple(fields),
    )
    if adapter is None:
        adapter = SQLAlchemyAdapter(target_type)
    return synthesize(spec, adapter)
