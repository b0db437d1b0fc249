"""Unit tests for artifact synthesis and the generated call surface.

Tests cover:
- generated names: create_<name>, create_<name>_batch, <name>_builder, <Name>Builder
- one setter per declared field, nothing else
- default/override equivalence between create_<name> and an empty builder
- freshness of unique defaults across sequential and concurrent calls
- the create_user / Jane Doe scenario end to end against a mocked session
- create_<name>_batch sizes and validation
"""

from __future__ import annotations

import asyncio
import uuid
from unittest.mock import MagicMock

import pytest

from record_factories.factories import (
    AppContext,
    FactoryBuilder,
    SQLAlchemyAdapter,
    define_factory,
    field,
    synthesize,
)
from record_factories.factories.spec import FactorySpec
from record_factories.factories.synthesizer import builder_class_name
from tests.factories.users import create_user, create_user_builder, user, user_builder
from tests.models import Article, ArticleRecord, UserRecord


class TestGeneratedNames:
    def test_artifact_names(self) -> None:
        assert user.create.__name__ == "create_user"
        assert user.create_batch.__name__ == "create_user_batch"
        assert user.builder.__name__ == "user_builder"
        assert user.builder_type.__name__ == "UserBuilder"
        assert user.name == "user"

    @pytest.mark.parametrize(
        ("factory_name", "expected"),
        [("user", "UserBuilder"), ("blog_post", "BlogPostBuilder"), ("apiKey", "ApiKeyBuilder")],
    )
    def test_builder_class_name(self, factory_name: str, expected: str) -> None:
        assert builder_class_name(factory_name) == expected

    def test_namespace_exports_every_artifact(self) -> None:
        namespace = user.namespace()

        assert namespace == {
            "create_user": user.create,
            "create_user_batch": user.create_batch,
            "user_builder": user.builder,
            "create_user_builder": user.builder,
            "UserBuilder": user.builder_type,
        }

    def test_one_setter_per_field(self) -> None:
        builder_type = user.builder_type
        generated = {
            name for name, value in vars(builder_type).items()
            if callable(value) and not name.startswith("_")
        }

        assert issubclass(builder_type, FactoryBuilder)
        assert generated == {"name", "email", "uuid", "description"}

    def test_default_adapter_is_sqlalchemy(self) -> None:
        assert isinstance(user.adapter, SQLAlchemyAdapter)
        assert user.adapter.target_type is UserRecord

    def test_synthesize_from_spec(self) -> None:
        spec = FactorySpec(
            factory_name="note",
            target_type=ArticleRecord,
            staging_type=Article,
            fields=(field("title", str, default="n"),),
        )
        adapter = MagicMock()

        artifacts = synthesize(spec, adapter)

        assert artifacts.spec is spec
        assert artifacts.adapter is adapter
        assert artifacts.builder().spec is spec

    def test_each_builder_is_new(self) -> None:
        assert user_builder() is not user_builder()


class TestDefaultOverrideEquivalence:
    async def test_factory_and_empty_builder_agree(self, mock_session: MagicMock) -> None:
        via_factory = await create_user(mock_session)
        via_builder = await user_builder().create(mock_session)

        deterministic = {"name", "description"}
        assert via_factory.model_dump(include=deterministic) == via_builder.model_dump(
            include=deterministic
        )
        assert via_factory.uuid != via_builder.uuid

    async def test_factory_returns_target_record(self, mock_session: MagicMock) -> None:
        record = await create_user(mock_session)

        assert isinstance(record, UserRecord)
        assert record.name == "Test User"
        assert record.id == 1
        mock_session.add.assert_called_once()
        mock_session.flush.assert_awaited_once()
        mock_session.commit.assert_not_called()


class TestFreshness:
    async def test_sequential_creates_get_distinct_uuids(self, mock_session: MagicMock) -> None:
        first = await create_user(mock_session)
        second = await create_user(mock_session)

        assert first.uuid != second.uuid
        assert first.email != second.email

    async def test_concurrent_creates_own_their_staging(self) -> None:
        from tests.conftest import make_mock_session

        sessions = [make_mock_session() for _ in range(10)]

        records = await asyncio.gather(*(create_user(s) for s in sessions))

        assert len({r.uuid for r in records}) == 10
        staged = [s.add.call_args.args[0] for s in sessions]
        assert len({id(obj) for obj in staged}) == 10


class TestScenario:
    async def test_create_user_defaults(self, app_context: AppContext) -> None:
        record = await create_user(app_context)

        assert record.name == "Test User"
        assert isinstance(record.uuid, uuid.UUID)

    async def test_builder_with_overrides(self, app_context: AppContext) -> None:
        earlier = await create_user(app_context)

        record = await (
            create_user_builder()
            .name("Jane Doe")
            .email("jane.doe@example.com")
            .create(app_context)
        )

        assert record.name == "Jane Doe"
        assert record.email == "jane.doe@example.com"
        assert record.description == "Test Description"
        assert record.uuid != earlier.uuid
        assert app_context.db.add.call_count == 2


class TestCreateBatch:
    async def test_batch_creates_size_records(self, mock_session: MagicMock) -> None:
        records = await user.create_batch(mock_session, 3)

        assert [r.id for r in records] == [1, 2, 3]
        assert len({r.uuid for r in records}) == 3

    async def test_empty_batch(self, mock_session: MagicMock) -> None:
        assert await user.create_batch(mock_session, 0) == []
        mock_session.add.assert_not_called()

    async def test_negative_batch_rejected(self, mock_session: MagicMock) -> None:
        with pytest.raises(ValueError):
            await user.create_batch(mock_session, -1)


def test_define_factory_propagates_definition_errors() -> None:
    from record_factories.core.exceptions import FieldTypeMismatchError

    with pytest.raises(FieldTypeMismatchError):
        define_factory(
            "user",
            UserRecord,
            staging_type=UserRecord,
            fields=[field("name", int, default=0)],
        )
