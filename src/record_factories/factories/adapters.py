"""Persistence adapters: the one seam between factories and a data store.

A factory never talks to the database itself.  ``Builder.create`` hands the
staging instance to an adapter's ``save`` coroutine and returns whatever it
returns; whatever the adapter raises reaches the caller unchanged.

:class:`SQLAlchemyAdapter` is the default adapter.  It accepts either an
:class:`~sqlalchemy.ext.asyncio.AsyncSession` or an :class:`AppContext`
carrying one as the persistence handle::

    ctx = AppContext(db=session)
    user = await create_user(ctx)
    user = await create_user(session)  # equivalent
"""

from __future__ import annotations

import dataclasses
import logging
from typing import Any, Protocol, runtime_checkable

from pydantic import BaseModel
from sqlalchemy import inspect as sa_inspect
from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)


@runtime_checkable
class PersistenceAdapter(Protocol):
    """Contract every persistence adapter satisfies.

    ``save`` performs whatever I/O is needed (insert, assign generated
    identifiers, ...) and returns the fully populated target record.  It
    may suspend; cancellation follows the adapter's own semantics.
    """

    async def save(self, staging: Any, handle: Any) -> Any: ...


@dataclasses.dataclass
class AppContext:
    """Application context passed to factories as the persistence handle.

    Attributes:
        db: Open session the records are written through.
    """

    db: AsyncSession


def _resolve_session(handle: Any) -> AsyncSession:
    """Return the session behind a persistence handle."""
    if isinstance(handle, AppContext):
        return handle.db
    return handle


def _column_values(staging: Any) -> dict[str, Any]:
    """Read every mapped column attribute of a staging instance."""
    mapper = sa_inspect(type(staging))
    return {attr.key: getattr(staging, attr.key) for attr in mapper.column_attrs}


class SQLAlchemyAdapter:
    """Persist staging ORM instances through an async SQLAlchemy session.

    The staging instance is added to the session, flushed (or committed) so
    that server-side defaults and generated keys are assigned, refreshed, and
    converted to ``target_type``:

    - the staging instance itself when ``target_type`` is its own class;
    - ``target_type.model_validate(staging, from_attributes=True)`` for
      pydantic targets;
    - ``target_type(**column_values)`` otherwise (dataclasses, attrs ...).

    Args:
        target_type: Record type returned by :meth:`save`.
        commit: Commit after each save instead of only flushing.  ``None``
            defers to ``Settings.commit_on_save``.
    """

    def __init__(self, target_type: type, *, commit: bool | None = None) -> None:
        self.target_type = target_type
        if commit is None:
            from record_factories.config.settings import get_settings  # noqa: PLC0415

            commit = get_settings().commit_on_save
        self.commit = commit

    def __repr__(self) -> str:
        return (
            f"SQLAlchemyAdapter(target_type={self.target_type.__qualname__}, "
            f"commit={self.commit})"
        )

    async def save(self, staging: Any, handle: Any) -> Any:
        """Insert ``staging`` and return it converted to the target type."""
        session = _resolve_session(handle)
        session.add(staging)
        if self.commit:
            await session.commit()
        else:
            await session.flush()
        await session.refresh(staging)
        logger.debug(
            "factory.saved",
            extra={"staging_type": type(staging).__qualname__, "commit": self.commit},
        )
        return self._to_target(staging)

    def _to_target(self, staging: Any) -> Any:
        if isinstance(staging, self.target_type):
            return staging
        if issubclass(self.target_type, BaseModel):
            return self.target_type.model_validate(staging, from_attributes=True)
        return self.target_type(**_column_values(staging))
