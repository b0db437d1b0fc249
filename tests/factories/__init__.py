"""Factories declared for the test suite.

Available factories
-------------------
create_user / user_builder         ``User`` staged, ``UserRecord`` returned
create_article / article_builder   ``Article`` dataclass, in-memory store
"""

from __future__ import annotations

from tests.factories.articles import (
    InMemoryArticleStore,
    article,
    article_builder,
    create_article,
)
from tests.factories.users import create_user, create_user_builder, factories, user, user_builder

__all__ = [
    "InMemoryArticleStore",
    "article",
    "article_builder",
    "create_article",
    "create_user",
    "create_user_builder",
    "factories",
    "user",
    "user_builder",
]
