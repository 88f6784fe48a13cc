"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import asdict

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from lesson_booking.api.schemas import (
    AddReservationRequest,
    CheckoutRequest,
    LoginRequest,
)
from lesson_booking.app_logging import configure_logging
from lesson_booking.containers import AppContainer
from lesson_booking.domain.orders import PurchaseRecord
from lesson_booking.errors import (
    BookingError,
    CatalogUnavailable,
    CheckoutInProgress,
    CheckoutPending,
    CheckoutValidationError,
    IndexOutOfRange,
    InvalidCredentials,
    LessonNotFound,
    NoCapacity,
    OrderSubmissionFailed,
    PartialCheckoutFailure,
    ReconciliationFailed,
)
from lesson_booking.services.cart import Cart

_STATUS_BY_ERROR: dict[type[BookingError], int] = {
    CatalogUnavailable: 503,
    LessonNotFound: 404,
    NoCapacity: 409,
    IndexOutOfRange: 404,
    InvalidCredentials: 401,
    CheckoutValidationError: 422,
    CheckoutInProgress: 409,
    CheckoutPending: 409,
    OrderSubmissionFailed: 502,
    PartialCheckoutFailure: 502,
    ReconciliationFailed: 502,
}


def create_app(container: AppContainer) -> FastAPI:  # noqa: PLR0915
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        state_container: AppContainer = app.state.container
        state_container.session_service.restore()
        try:
            await state_container.catalog.load()
        except CatalogUnavailable:
            logger.warning("Starting with an empty catalog")
        yield
        await state_container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    @app.exception_handler(BookingError)
    async def booking_error_handler(
        request: Request, exc: BookingError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=_status_for(exc),
            content={"error": exc.code, "detail": str(exc), **exc.details()},
        )

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.get("/lessons")
    async def list_lessons(request: Request) -> dict[str, object]:
        state_container: AppContainer = request.app.state.container
        return {
            "lessons": [asdict(lesson) for lesson in state_container.catalog.lessons]
        }

    @app.post("/lessons/refresh")
    async def refresh_lessons(request: Request) -> dict[str, object]:
        """Reload lessons, keeping holds not yet written upstream applied."""
        state_container: AppContainer = request.app.state.container
        lessons = await state_container.catalog.refresh(
            holds=state_container.checkout.outstanding_holds()
        )
        return {"lessons": [asdict(lesson) for lesson in lessons]}

    @app.get("/lessons/locations")
    async def list_locations(request: Request) -> dict[str, object]:
        state_container: AppContainer = request.app.state.container
        return {"locations": state_container.catalog.locations()}

    @app.get("/lessons/{lesson_id}")
    async def lesson_detail(lesson_id: str, request: Request) -> dict[str, object]:
        """Return a lesson and make it the viewed lesson."""
        state_container: AppContainer = request.app.state.container
        return asdict(state_container.catalog.view(lesson_id))

    @app.get("/cart")
    async def get_cart(request: Request) -> dict[str, object]:
        state_container: AppContainer = request.app.state.container
        return _cart_payload(state_container.cart)

    @app.post("/cart/items", status_code=201)
    async def add_to_cart(
        body: AddReservationRequest, request: Request
    ) -> dict[str, object]:
        state_container: AppContainer = request.app.state.container
        state_container.cart.add_reservation(body.lesson_id)
        return _cart_payload(state_container.cart)

    @app.delete("/cart/items/{index}")
    async def remove_from_cart(index: int, request: Request) -> dict[str, object]:
        state_container: AppContainer = request.app.state.container
        state_container.cart.remove_reservation(index)
        return _cart_payload(state_container.cart)

    @app.delete("/cart")
    async def clear_cart(request: Request) -> dict[str, object]:
        state_container: AppContainer = request.app.state.container
        state_container.cart.clear()
        return _cart_payload(state_container.cart)

    @app.post("/checkout")
    async def checkout(body: CheckoutRequest, request: Request) -> dict[str, object]:
        """Run the checkout saga for the current cart."""
        state_container: AppContainer = request.app.state.container
        result = await state_container.checkout.checkout(body.name, body.phone)
        return {
            "order_id": result.order_id,
            "lines": [asdict(line) for line in result.lines],
            "total_price": result.total_price,
            "resumed": result.resumed,
        }

    @app.delete("/checkout/pending")
    async def abandon_checkout(request: Request) -> dict[str, object]:
        """Stop resuming an unfinished order; it stays recorded upstream."""
        state_container: AppContainer = request.app.state.container
        order_id = state_container.checkout.abandon()
        return {"abandoned_order_id": order_id, **_cart_payload(state_container.cart)}

    @app.get("/purchases/last")
    async def last_purchase(request: Request) -> dict[str, object]:
        state_container: AppContainer = request.app.state.container
        return _purchase_payload(state_container.session_service.last_purchase())

    @app.get("/session")
    async def current_session(request: Request) -> dict[str, object]:
        state_container: AppContainer = request.app.state.container
        user = state_container.session_service.current_user
        return {"user": user.model_dump() if user else None}

    @app.post("/session/login")
    async def login(body: LoginRequest, request: Request) -> dict[str, object]:
        state_container: AppContainer = request.app.state.container
        user = state_container.session_service.login(body.email, body.password)
        return {"user": user.model_dump()}

    @app.post("/session/logout")
    async def logout(request: Request) -> dict[str, object]:
        state_container: AppContainer = request.app.state.container
        state_container.session_service.logout()
        return {"user": None}

    return app


def _status_for(exc: BookingError) -> int:
    for error_type in type(exc).__mro__:
        status_code = _STATUS_BY_ERROR.get(error_type)
        if status_code is not None:
            return status_code
    return 400


def _cart_payload(cart: Cart) -> dict[str, object]:
    return {
        "items": [
            {"index": index, **asdict(reservation)}
            for index, reservation in enumerate(cart.reservations)
        ],
        "lines": [asdict(line) for line in cart.aggregate()],
        "total": cart.total,
    }


def _purchase_payload(record: PurchaseRecord) -> dict[str, object]:
    return {
        "items": [asdict(line) for line in record.lines],
        "total": record.total,
        "order_id": record.order_id,
    }
