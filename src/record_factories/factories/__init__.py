"""Declarative test-data factories.

Re-exports the declaration surface so that callers can write::

    from record_factories.factories import define_factory, field, fresh_uuid

without needing to know which sub-module each symbol lives in.
"""

from __future__ import annotations

from record_factories.factories.adapters import (
    AppContext,
    PersistenceAdapter,
    SQLAlchemyAdapter,
)
from record_factories.factories.builder import BuilderState, FactoryBuilder
from record_factories.factories.defaults import fake, fresh_email, fresh_uuid, utc_now
from record_factories.factories.registry import FactoryRegistry
from record_factories.factories.spec import FactorySpec, FieldSpec, field
from record_factories.factories.synthesizer import (
    FactoryArtifacts,
    define_factory,
    synthesize,
)

__all__ = [
    # declaration
    "FactorySpec",
    "FieldSpec",
    "field",
    "define_factory",
    "synthesize",
    "FactoryArtifacts",
    "FactoryRegistry",
    # runtime
    "BuilderState",
    "FactoryBuilder",
    # persistence
    "AppContext",
    "PersistenceAdapter",
    "SQLAlchemyAdapter",
    # default expressions
    "fake",
    "fresh_email",
    "fresh_uuid",
    "utc_now",
]
