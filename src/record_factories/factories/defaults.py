"""Ready-made default expressions for factory fields.

Every helper returns a zero-argument callable suitable for
``field(..., default_factory=...)``.  Each call of that callable produces a
new value; none of them keeps counters between calls, so concurrent factory
invocations never coordinate.

Usage::

    from record_factories.factories.defaults import fake, fresh_email, fresh_uuid, utc_now

    fields = [
        field("uuid", uuid.UUID, default_factory=fresh_uuid),
        field("email", str, default_factory=fresh_email()),
        field("display_name", str, default_factory=fake("name")),
        field("created_at", datetime, default_factory=utc_now()),
    ]
"""

from __future__ import annotations

import uuid
from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any

from faker import Faker


#: ``uuid.uuid4`` is already a thunk; re-exported under a descriptive name.
fresh_uuid: Callable[[], uuid.UUID] = uuid.uuid4


def fresh_email(domain: str | None = None) -> Callable[[], str]:
    """Return a thunk producing a unique e-mail address per call.

    Addresses look like ``test-3f2a...@example.com``.  The domain defaults to
    ``Settings.email_domain``, read when the thunk is created.
    """
    if domain is None:
        from record_factories.config.settings import get_settings  # noqa: PLC0415

        domain = get_settings().email_domain

    def _email() -> str:
        return f"test-{uuid.uuid4().hex}@{domain}"

    return _email


def utc_now() -> Callable[[], datetime]:
    """Return a thunk producing the current time as an aware UTC datetime."""

    def _now() -> datetime:
        return datetime.now(tz=timezone.utc)

    return _now


def fake(provider: str, *args: Any, locale: str | None = None, **kwargs: Any) -> Callable[[], Any]:
    """Return a thunk calling the Faker provider ``provider`` on each call.

    Example: ``fake("random_int", min=0, max=500)``.

    Each thunk owns its own ``Faker`` instance, so no random state is shared
    between fields or factories.

    Args:
        provider: Faker provider method name (``"name"``, ``"sentence"`` ...).
        *args: Positional arguments for the provider.
        locale: Faker locale; defaults to ``Settings.faker_locale``.
        **kwargs: Keyword arguments for the provider.

    Raises:
        AttributeError: If Faker has no such provider.  Raised here, at
            declaration time, rather than on first use.
    """
    if locale is None:
        from record_factories.config.settings import get_settings  # noqa: PLC0415

        locale = get_settings().faker_locale

    method = getattr(Faker(locale), provider)

    def _fake() -> Any:
        return method(*args, **kwargs)

    _fake.__qualname__ = f"fake.{provider}"
    return _fake
