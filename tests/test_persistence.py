"""Tests for snapshot persistence and state stores."""

from dataclasses import dataclass, field

from lesson_booking.adapters.file_state_store import FileStateStore
from lesson_booking.adapters.supabase_state_store import SupabaseStateStore
from lesson_booking.domain.orders import PurchaseLine, PurchaseRecord
from lesson_booking.domain.sessions import StoredUser
from lesson_booking.services.persistence import (
    LAST_PURCHASE_KEY,
    USER_KEY,
    SnapshotStore,
)
from tests.conftest import InMemoryStateStore


def test_purchase_round_trip_uses_storage_keys() -> None:
    store = InMemoryStateStore()
    snapshots = SnapshotStore(store)
    record = PurchaseRecord(
        lines=(PurchaseLine(subject="Science", price=30, quantity=2),),
        total=60,
        order_id="order-1",
    )

    snapshots.save_purchase(record)

    assert '"orderId":"order-1"' in store.values[LAST_PURCHASE_KEY]
    assert '"qty":2' in store.values[LAST_PURCHASE_KEY]
    assert snapshots.load_purchase() == record


def test_corrupt_snapshots_degrade_to_defaults() -> None:
    store = InMemoryStateStore(
        values={USER_KEY: "{not json", LAST_PURCHASE_KEY: '{"items": "nope"}'}
    )
    snapshots = SnapshotStore(store)

    assert snapshots.load_user() is None
    assert snapshots.load_purchase() == PurchaseRecord()


def test_missing_snapshots_degrade_to_defaults() -> None:
    snapshots = SnapshotStore(InMemoryStateStore())

    assert snapshots.load_user() is None
    assert snapshots.load_purchase() == PurchaseRecord()


def test_file_state_store_round_trip(tmp_path) -> None:
    store = FileStateStore(tmp_path / "state")
    snapshots = SnapshotStore(store)
    user = StoredUser(id=1, name="Parent User", email="parent@example.com")

    snapshots.save_user(user)
    assert snapshots.load_user() == user

    snapshots.clear_user()
    assert snapshots.load_user() is None
    store.delete(USER_KEY)


def test_file_state_store_missing_directory(tmp_path) -> None:
    store = FileStateStore(tmp_path / "absent")

    assert store.get(USER_KEY) is None


@dataclass
class FakeResponse:
    data: list[dict[str, object]] | None


@dataclass
class FakeTable:
    rows: dict[str, dict[str, object]] = field(default_factory=dict)
    calls: list[tuple[str, object]] = field(default_factory=list)

    def select(self, *_args) -> "FakeTable":
        self._action = "select"
        return self

    def upsert(
        self, payload: dict[str, object], on_conflict: str = ""
    ) -> "FakeTable":
        self.calls.append(("upsert", on_conflict))
        self.rows[str(payload["key"])] = payload
        self._action = "upsert"
        return self

    def delete(self) -> "FakeTable":
        self._action = "delete"
        return self

    def eq(self, column: str, value) -> "FakeTable":  # type: ignore[no-untyped-def]
        self._filter = value
        return self

    def limit(self, _count: int) -> "FakeTable":
        return self

    def execute(self) -> FakeResponse:
        if self._action == "select":
            row = self.rows.get(self._filter)
            return FakeResponse(data=[row] if row else [])
        if self._action == "delete":
            self.rows.pop(self._filter, None)
        return FakeResponse(data=[])


@dataclass
class FakeSupabase:
    table_obj: FakeTable = field(default_factory=FakeTable)
    names: list[str] = field(default_factory=list)

    def table(self, name: str) -> FakeTable:
        self.names.append(name)
        return self.table_obj


def test_supabase_state_store_round_trip() -> None:
    client = FakeSupabase()
    store = SupabaseStateStore(client)  # type: ignore[arg-type]

    assert store.get(USER_KEY) is None
    store.set(USER_KEY, '{"id": 1}')
    assert store.get(USER_KEY) == '{"id": 1}'
    store.delete(USER_KEY)
    assert store.get(USER_KEY) is None

    assert set(client.names) == {"storefront_state"}
    assert client.table_obj.calls == [("upsert", "key")]
