"""Unit tests for the ready-made default expressions."""

from __future__ import annotations

import uuid
from datetime import timezone
from unittest.mock import MagicMock, patch

import pytest

from record_factories.factories.defaults import fake, fresh_email, fresh_uuid, utc_now


def test_fresh_uuid_differs_per_call() -> None:
    assert isinstance(fresh_uuid(), uuid.UUID)
    assert fresh_uuid() != fresh_uuid()


class TestFreshEmail:
    def test_unique_per_call(self) -> None:
        thunk = fresh_email()

        first, second = thunk(), thunk()

        assert first != second
        assert first.startswith("test-")
        assert first.endswith("@example.com")

    def test_custom_domain(self) -> None:
        assert fresh_email("uni.dk")().endswith("@uni.dk")


def test_utc_now_is_aware() -> None:
    now = utc_now()()

    assert now.tzinfo is timezone.utc


class TestFake:
    def test_provider_called_per_evaluation(self) -> None:
        thunk = fake("random_int", min=0, max=10)

        values = {thunk() for _ in range(20)}

        assert values <= set(range(11))

    def test_locale(self) -> None:
        assert isinstance(fake("name", locale="da_DK")(), str)

    def test_unknown_provider_fails_at_declaration(self) -> None:
        with pytest.raises(AttributeError):
            fake("no_such_provider_anywhere")

    def test_each_thunk_owns_its_generator(self) -> None:
        generators = [MagicMock(), MagicMock()]
        generators[0].name.return_value = "Ada"
        generators[1].name.return_value = "Grace"

        with patch("record_factories.factories.defaults.Faker", side_effect=generators):
            first = fake("name", locale="en_US")
            second = fake("name", locale="en_US")

        assert (first(), second()) == ("Ada", "Grace")
        generators[0].name.assert_called_once_with()
        generators[1].name.assert_called_once_with()
