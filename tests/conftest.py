"""Shared pytest fixtures for Record Factories tests.

Fixture summary
---------------
mock_session     MagicMock AsyncSession whose refresh() assigns id/created_at.
app_context      AppContext wrapping mock_session.
article_store    Fresh list used as the in-memory article handle.

Unit tests mock the session and run without any infrastructure.
Integration tests in ``tests/integration`` need a live PostgreSQL instance;
set RECORD_FACTORIES_DATABASE_URL to run them.
"""

from __future__ import annotations

import itertools
import os
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest

# ---------------------------------------------------------------------------
# Test environment bootstrap
# ---------------------------------------------------------------------------
# Set before any factory module is imported, since factories read settings
# at declaration time.

_TEST_ENV_DEFAULTS: dict[str, str] = {
    "RECORD_FACTORIES_LOG_LEVEL": "INFO",
    "RECORD_FACTORIES_COMMIT_ON_SAVE": "false",
    "RECORD_FACTORIES_EMAIL_DOMAIN": "example.com",
}

for _key, _default in _TEST_ENV_DEFAULTS.items():
    os.environ.setdefault(_key, _default)

from record_factories.config.settings import get_settings  # noqa: E402
from record_factories.core.logging_config import configure_logging  # noqa: E402
from record_factories.factories import AppContext  # noqa: E402

get_settings.cache_clear()
configure_logging()

CREATED_AT = datetime(2024, 6, 15, 10, 0, 0, tzinfo=timezone.utc)


# ---------------------------------------------------------------------------
# Mock session
# ---------------------------------------------------------------------------


def make_mock_session() -> MagicMock:
    """Build a mock AsyncSession that imitates an INSERT ... RETURNING.

    ``refresh()`` assigns an autoincrement ``id`` and the server-side
    ``created_at`` default to the instance, the way a real flush + refresh
    would for ``tests.models.User``.
    """
    session = MagicMock()
    ids = itertools.count(1)

    async def _fake_refresh(instance: object) -> None:
        if getattr(instance, "id", None) is None:
            instance.id = next(ids)
        if hasattr(instance, "created_at") and instance.created_at is None:
            instance.created_at = CREATED_AT

    session.add = MagicMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.refresh = AsyncMock(side_effect=_fake_refresh)
    return session


@pytest.fixture
def mock_session() -> MagicMock:
    """A fresh mocked AsyncSession per test."""
    return make_mock_session()


@pytest.fixture
def app_context(mock_session: MagicMock) -> AppContext:
    """AppContext wrapping :func:`mock_session`."""
    return AppContext(db=mock_session)


@pytest.fixture
def article_store() -> list:
    """Handle for the in-memory article factory."""
    return []
