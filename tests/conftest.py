"""Shared test fixtures."""

import asyncio
import copy
from dataclasses import dataclass, field

import httpx
import pytest

from lesson_booking.adapters.lesson_service_client import LessonServiceClient
from lesson_booking.adapters.order_service_client import OrderServiceClient
from lesson_booking.config import Settings
from lesson_booking.containers import AppContainer
from lesson_booking.services.cart import Cart
from lesson_booking.services.catalog import LessonCatalog
from lesson_booking.services.checkout import CheckoutCoordinator
from lesson_booking.services.persistence import SnapshotStore, StateStore
from lesson_booking.services.sessions import SessionService

BASE_URL = "http://lessons.test"


def sample_lessons() -> list[dict[str, object]]:
    return [
        {
            "_id": "sci-101",
            "subject": "Science",
            "location": "Hendon",
            "price": 30,
            "spaces": 5,
            "instructor": "Mr. Okafor",
            "schedule": "Wed 15:30",
            "description": "Experiments",
            "image": "science.jpg",
        },
        {
            "_id": "math-101",
            "subject": "Math",
            "location": "Colindale",
            "price": 100,
            "spaces": 1,
            "instructor": "Dr. Patel",
            "schedule": "Mon 16:00",
            "description": "Algebra",
            "image": "math.jpg",
        },
        {
            "_id": "art-101",
            "subject": "Art",
            "location": "Hendon",
            "price": 60,
            "spaces": 0,
            "instructor": "Mr. Rossi",
            "schedule": "Fri 16:30",
            "description": "Painting",
            "image": "art.jpg",
        },
    ]


@dataclass
class FakeLessonService(LessonServiceClient):
    """Lesson service fake acting as the authoritative store."""

    records: list[dict[str, object]] = field(default_factory=sample_lessons)
    list_error: Exception | None = None
    failing_writes: set[str] = field(default_factory=set)
    writes: list[tuple[str, int]] = field(default_factory=list)
    list_calls: int = 0

    async def list_lessons(self) -> list[dict[str, object]]:
        self.list_calls += 1
        if self.list_error is not None:
            raise self.list_error
        return copy.deepcopy(self.records)

    async def update_spaces(self, lesson_id: str, spaces: int) -> dict[str, object]:
        if lesson_id in self.failing_writes:
            raise httpx.ConnectError(f"write to {lesson_id} failed")
        self.writes.append((lesson_id, spaces))
        for record in self.records:
            if record["_id"] == lesson_id:
                record["spaces"] = spaces
        return {"matchedCount": 1}

    async def close(self) -> None:
        return None

    @property
    def request_count(self) -> int:
        return self.list_calls + len(self.writes)


@dataclass
class FakeOrderService(OrderServiceClient):
    """Order service fake recording submitted orders."""

    error: Exception | None = None
    orders: list[tuple[dict[str, object], str]] = field(default_factory=list)
    attempted_keys: list[str] = field(default_factory=list)

    async def create_order(
        self, payload: dict[str, object], idempotency_key: str
    ) -> dict[str, object]:
        self.attempted_keys.append(idempotency_key)
        if self.error is not None:
            raise self.error
        self.orders.append((payload, idempotency_key))
        return {"insertedId": f"order-{len(self.orders)}"}

    async def close(self) -> None:
        return None


@dataclass
class InMemoryStateStore(StateStore):
    """Dict-backed key-value store."""

    values: dict[str, str] = field(default_factory=dict)

    def get(self, key: str) -> str | None:
        return self.values.get(key)

    def set(self, key: str, value: str) -> None:
        self.values[key] = value

    def delete(self, key: str) -> None:
        self.values.pop(key, None)


@dataclass
class Storefront:
    """Wired catalog, cart and checkout over fakes."""

    lesson_service: FakeLessonService
    order_service: FakeOrderService
    state_store: InMemoryStateStore
    catalog: LessonCatalog
    cart: Cart
    checkout: CheckoutCoordinator
    snapshots: SnapshotStore


def build_storefront(
    lesson_service: FakeLessonService | None = None,
    order_service: FakeOrderService | None = None,
    *,
    load: bool = True,
) -> Storefront:
    lesson_service = lesson_service or FakeLessonService()
    order_service = order_service or FakeOrderService()
    state_store = InMemoryStateStore()
    snapshots = SnapshotStore(state_store)
    catalog = LessonCatalog(client=lesson_service, image_base_url=BASE_URL)
    if load:
        asyncio.run(catalog.load())
    cart = Cart(catalog)
    checkout = CheckoutCoordinator(
        cart=cart,
        catalog=catalog,
        lesson_client=lesson_service,
        order_client=order_service,
        snapshots=snapshots,
    )
    return Storefront(
        lesson_service=lesson_service,
        order_service=order_service,
        state_store=state_store,
        catalog=catalog,
        cart=cart,
        checkout=checkout,
        snapshots=snapshots,
    )


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(api_base_url=BASE_URL, state_dir=str(tmp_path / "state"))


@pytest.fixture
def storefront() -> Storefront:
    return build_storefront()


@pytest.fixture
def container(settings: Settings) -> AppContainer:
    front = build_storefront(load=False)

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        lesson_client=front.lesson_service,
        order_client=front.order_service,
        catalog=front.catalog,
        cart=front.cart,
        checkout=front.checkout,
        session_service=SessionService(front.snapshots),
        close_resources=close_resources,
    )
