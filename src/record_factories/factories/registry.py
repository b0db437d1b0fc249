"""A registry of synthesized factories, addressable by generated names.

Test suites typically declare all factories in one module::

    factories = FactoryRegistry()
    factories.define("user", UserRecord, staging_type=User, fields=[...])

    # elsewhere
    user = await factories.create_user(session)
    jane = await factories.user_builder().name("Jane Doe").create(session)

Names are indexed when a factory is registered; attribute lookup is a dict
lookup and never re-parses a specification.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from typing import Any

import structlog

from record_factories.core.exceptions import DuplicateFactoryError, FactoryNotFoundError
from record_factories.factories.adapters import PersistenceAdapter
from record_factories.factories.spec import FieldSpec
from record_factories.factories.synthesizer import FactoryArtifacts, define_factory

logger = structlog.get_logger(__name__)


class FactoryRegistry:
    """Holds :class:`FactoryArtifacts` keyed by factory name."""

    def __init__(self) -> None:
        self._factories: dict[str, FactoryArtifacts] = {}
        self._artifacts: dict[str, Any] = {}

    def register(self, artifacts: FactoryArtifacts) -> FactoryArtifacts:
        """Add already-synthesized artifacts and return them.

        Raises:
            DuplicateFactoryError: If a factory with the same name, or one
                whose generated names collide, is already registered.
        """
        name = artifacts.name
        generated = artifacts.namespace()
        clashes = sorted(set(generated) & set(self._artifacts))
        if name in self._factories or clashes:
            raise DuplicateFactoryError(
                f"Factory '{name}' is already registered"
                + (f" (conflicting names: {', '.join(clashes)})" if clashes else ""),
                factory_name=name,
            )
        self._factories[name] = artifacts
        self._artifacts.update(generated)
        logger.debug("factory.registered", factory=name, artifacts=sorted(generated))
        return artifacts

    def define(
        self,
        factory_name: str,
        target_type: type,
        *,
        staging_type: type,
        fields: Iterable[FieldSpec],
        adapter: PersistenceAdapter | None = None,
    ) -> FactoryArtifacts:
        """Declare, synthesize and register a factory in one step.

        Takes the same arguments as
        :func:`record_factories.factories.synthesizer.define_factory`.
        """
        return self.register(
            define_factory(
                factory_name,
                target_type,
                staging_type=staging_type,
                fields=fields,
                adapter=adapter,
            )
        )

    def get(self, factory_name: str) -> FactoryArtifacts:
        """Return the artifacts registered under ``factory_name``.

        Raises:
            FactoryNotFoundError: If no such factory is registered.
        """
        try:
            return self._factories[factory_name]
        except KeyError:
            raise FactoryNotFoundError(
                f"No factory named '{factory_name}' is registered",
                factory_name=factory_name,
            ) from None

    def names(self) -> list[str]:
        return list(self._factories)

    def __contains__(self, factory_name: object) -> bool:
        return factory_name in self._factories

    def __iter__(self) -> Iterator[FactoryArtifacts]:
        return iter(self._factories.values())

    def __len__(self) -> int:
        return len(self._factories)

    def __getattr__(self, attr: str) -> Any:
        # Only called when normal lookup fails, i.e. for generated names.
        artifacts = self.__dict__.get("_artifacts", {})
        try:
            return artifacts[attr]
        except KeyError:
            raise AttributeError(
                f"{type(self).__name__!s} has no factory artifact named '{attr}'"
            ) from None
