"""Tests for the demo session service."""

import pytest

from lesson_booking.errors import InvalidCredentials
from lesson_booking.services.persistence import USER_KEY, SnapshotStore
from lesson_booking.services.sessions import SessionService
from tests.conftest import InMemoryStateStore


def test_login_persists_user_and_restore_reads_it() -> None:
    store = InMemoryStateStore()
    service = SessionService(SnapshotStore(store))

    user = service.login(" Parent@Example.com ", "123")

    assert user.name == "Parent User"
    assert USER_KEY in store.values

    restored = SessionService(SnapshotStore(store)).restore()
    assert restored == user


@pytest.mark.parametrize(
    ("email", "password", "message"),
    [
        ("", "123", "Please provide email and password."),
        ("parent@example.com", "", "Please provide email and password."),
        ("parent@example.com", "999", "Credentials not recognised."),
    ],
)
def test_login_rejects_bad_credentials(email: str, password: str, message: str) -> None:
    service = SessionService(SnapshotStore(InMemoryStateStore()))

    with pytest.raises(InvalidCredentials, match=message):
        service.login(email, password)

    assert service.current_user is None


def test_logout_clears_persisted_user() -> None:
    store = InMemoryStateStore()
    service = SessionService(SnapshotStore(store))
    service.login("student@example.com", "234")

    service.logout()

    assert service.current_user is None
    assert USER_KEY not in store.values


def test_restore_with_corrupt_user_degrades() -> None:
    store = InMemoryStateStore(values={USER_KEY: "garbage"})

    assert SessionService(SnapshotStore(store)).restore() is None
