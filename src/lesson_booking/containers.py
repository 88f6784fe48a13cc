"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from pathlib import Path

from supabase import create_client

from lesson_booking.adapters.file_state_store import FileStateStore
from lesson_booking.adapters.lesson_service_client import (
    HttpxLessonServiceClient,
    LessonServiceClient,
)
from lesson_booking.adapters.offline_services import (
    InMemoryLessonService,
    InMemoryOrderService,
)
from lesson_booking.adapters.order_service_client import (
    HttpxOrderServiceClient,
    OrderServiceClient,
)
from lesson_booking.adapters.supabase_state_store import SupabaseStateStore
from lesson_booking.config import Settings, normalize_base_url
from lesson_booking.services.cart import Cart
from lesson_booking.services.catalog import LessonCatalog
from lesson_booking.services.checkout import CheckoutCoordinator
from lesson_booking.services.persistence import SnapshotStore, StateStore
from lesson_booking.services.sessions import SessionService


@dataclass
class AppContainer:
    """Holds the storefront state and its collaborators."""

    settings: Settings
    lesson_client: LessonServiceClient
    order_client: OrderServiceClient
    catalog: LessonCatalog
    cart: Cart
    checkout: CheckoutCoordinator
    session_service: SessionService
    close_resources: Callable[[], Awaitable[None]]


def build_state_store(settings: Settings) -> StateStore:
    """Pick Supabase when configured, else a local directory."""
    if settings.uses_supabase:
        client = create_client(settings.supabase_url, settings.supabase_service_key)
        return SupabaseStateStore(client, table=settings.supabase_state_table)
    return FileStateStore(Path(settings.state_dir))


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    base_url = normalize_base_url(resolved_settings.api_base_url)
    if resolved_settings.offline_mode:
        lesson_client: LessonServiceClient = InMemoryLessonService()
        order_client: OrderServiceClient = InMemoryOrderService()
    else:
        lesson_client = HttpxLessonServiceClient.create(
            base_url, resolved_settings.request_timeout_seconds
        )
        order_client = HttpxOrderServiceClient.create(
            base_url, resolved_settings.request_timeout_seconds
        )
    snapshots = SnapshotStore(build_state_store(resolved_settings))
    catalog = LessonCatalog(
        client=lesson_client,
        image_base_url=base_url,
        default_image=resolved_settings.default_image,
    )
    cart = Cart(catalog)
    checkout = CheckoutCoordinator(
        cart=cart,
        catalog=catalog,
        lesson_client=lesson_client,
        order_client=order_client,
        snapshots=snapshots,
    )
    session_service = SessionService(snapshots)

    async def close_resources() -> None:
        await lesson_client.close()
        await order_client.close()

    return AppContainer(
        settings=resolved_settings,
        lesson_client=lesson_client,
        order_client=order_client,
        catalog=catalog,
        cart=cart,
        checkout=checkout,
        session_service=session_service,
        close_resources=close_resources,
    )
