"""structlog configuration for factory logging.

Call ``configure_logging()`` once, typically from a test suite's
``conftest.py``.  Factory modules log through ``structlog.get_logger`` or
``logging.getLogger``; both end up in the same renderer.

``factory_name_var`` is set by builder terminal operations.  Every record
logged while a record is being built or persisted carries it as
``factory``.
"""

from __future__ import annotations

import logging
import sys
from contextvars import ContextVar

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

factory_name_var: ContextVar[str | None] = ContextVar("factory_name", default=None)
"""Name of the factory whose terminal operation is running.

Each asyncio task has its own context, so concurrent ``create_<name>`` calls
never see each other's value.
"""

# Factories for user records routinely carry password hashes and tokens as
# field overrides.
_SECRET_SUBSTRINGS: frozenset[str] = frozenset({
    "password",
    "secret",
    "token",
    "api_key",
    "credential",
    "authorization",
    "salt",
})

_REDACTED = "[REDACTED]"


def _is_secret(key: object) -> bool:
    lowered = str(key).lower()
    return any(secret in lowered for secret in _SECRET_SUBSTRINGS)


def _redact_secrets(
    logger: WrappedLogger,  # noqa: ARG001
    method_name: str,  # noqa: ARG001
    event_dict: EventDict,
) -> EventDict:
    """Mask secret-bearing keys, including keys of nested dicts such as ``overrides``.

    Nested dicts are copied before masking so that a builder's override
    mapping is never modified by logging it.
    """
    for key, value in list(event_dict.items()):
        if _is_secret(key):
            event_dict[key] = _REDACTED
        elif isinstance(value, dict):
            event_dict[key] = {
                k: _REDACTED if _is_secret(k) else v for k, v in value.items()
            }
    return event_dict


def _inject_factory_name(
    logger: WrappedLogger,  # noqa: ARG001
    method_name: str,  # noqa: ARG001
    event_dict: EventDict,
) -> EventDict:
    """Add ``factory`` from :data:`factory_name_var` unless already bound."""
    name = factory_name_var.get()
    if name is not None:
        event_dict.setdefault("factory", name)
    return event_dict


def _shared_processors() -> list[Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        _inject_factory_name,
        _redact_secrets,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]


def configure_logging(log_level: str | None = None) -> None:
    """Route structlog and stdlib logging through one stdout handler.

    Records are rendered as newline-delimited JSON with ``timestamp``,
    ``level``, ``logger``, ``event`` and, inside a terminal builder
    operation, ``factory``.  At ``DEBUG`` the console renderer is used
    instead.  Repeated calls replace the root handler rather than adding
    another.

    Args:
        log_level: Level name, case-insensitive.  Defaults to
            ``Settings.log_level``.
    """
    if log_level is None:
        from record_factories.config.settings import get_settings  # noqa: PLC0415

        log_level = get_settings().log_level

    level_name = log_level.upper()
    renderer: Processor = (
        structlog.dev.ConsoleRenderer(colors=True)
        if level_name == "DEBUG"
        else structlog.processors.JSONRenderer()
    )
    shared = _shared_processors()

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                renderer,
            ],
        )
    )

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, level_name, logging.INFO))

    structlog.configure(
        processors=[*shared, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
