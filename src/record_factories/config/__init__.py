"""Configuration package for Record Factories.

Re-exports the settings symbols so that callers can write::

    from record_factories.config import get_settings
"""

from __future__ import annotations

from record_factories.config.settings import Settings, get_settings

__all__ = [
    "Settings",
    "get_settings",
]
