"""Tests for the user service orchestration."""

from unittest.mock import Mock

import pytest

from app.adapters.storage.base import AbstractUserStore
from app.adapters.storage.in_memory import InMemoryUserStore
from app.core.errors import NotFoundAppError, ValidationAppError
from app.services.user_service import UserService


@pytest.fixture
def service(fake_clock) -> UserService:
    return UserService(InMemoryUserStore(clock=fake_clock))


def test_create_validates_before_touching_store() -> None:
    store = Mock(spec=AbstractUserStore)
    service = UserService(store)

    with pytest.raises(ValidationAppError):
        service.create_user({"email": "not-an-email"})

    store.create.assert_not_called()


def test_update_validates_before_touching_store() -> None:
    store = Mock(spec=AbstractUserStore)
    service = UserService(store)

    with pytest.raises(ValidationAppError):
        service.update_user(1, {"password": "short"})

    store.update.assert_not_called()


def test_create_and_get(service: UserService) -> None:
    created = service.create_user({"username": "ada", "email": "ada@example.com"})

    assert service.get_user(created.id) == created
    assert service.list_users() == [created]


def test_update_merges_fields(service: UserService, fake_clock) -> None:
    created = service.create_user({"name": "a", "email": "x@example.com"})
    fake_clock.advance(1)

    updated = service.update_user(created.id, {"email": "y@example.com"})

    assert dict(updated.fields) == {"name": "a", "email": "y@example.com"}
    assert updated.updated_at > created.created_at


def test_missing_user_surfaces_not_found(service: UserService) -> None:
    with pytest.raises(NotFoundAppError):
        service.get_user(42)
    with pytest.raises(NotFoundAppError):
        service.update_user(42, {"name": "x"})
    with pytest.raises(NotFoundAppError):
        service.delete_user(42)


def test_find_user_returns_none_for_missing(service: UserService) -> None:
    created = service.create_user({"name": "a"})

    assert service.find_user(created.id) == created
    assert service.find_user(created.id + 1) is None


def test_delete_removes_user(service: UserService) -> None:
    created = service.create_user({"name": "a"})

    service.delete_user(created.id)

    assert service.list_users() == []
    assert service.find_user(created.id) is None
