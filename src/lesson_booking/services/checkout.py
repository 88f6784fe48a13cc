"""Checkout saga: validate, submit order, propagate capacity, reconcile."""

import asyncio
import logging
import re
from dataclasses import dataclass, field
from uuid import uuid4

import httpx

from lesson_booking.adapters.lesson_service_client import LessonServiceClient
from lesson_booking.adapters.order_service_client import OrderServiceClient
from lesson_booking.domain.cart import AggregatedLine
from lesson_booking.domain.orders import (
    CheckoutResult,
    CheckoutStage,
    Order,
    PurchaseRecord,
)
from lesson_booking.errors import (
    CatalogUnavailable,
    CheckoutInProgress,
    CheckoutPending,
    EmptyCart,
    InvalidBuyerName,
    InvalidPhone,
    OrderSubmissionFailed,
    PartialCheckoutFailure,
    ReconciliationFailed,
    StaleCart,
)
from lesson_booking.services.cart import Cart
from lesson_booking.services.catalog import LessonCatalog
from lesson_booking.services.persistence import SnapshotStore

_NAME_PATTERN = re.compile(r"[A-Za-z\s]{2,}")
_PHONE_PATTERN = re.compile(r"[0-9]{7,}")
_ORDER_ID_KEYS = ("insertedId", "orderId", "id", "_id")

_logger = logging.getLogger(__name__)


@dataclass
class PendingCheckout:
    """An order accepted upstream whose saga has not completed."""

    idempotency_key: str
    order_id: str
    fingerprint: tuple[object, ...]
    confirmed_lesson_ids: set[str] = field(default_factory=set)


@dataclass
class CheckoutCoordinator:
    """Runs the checkout saga against the cart and catalog."""

    cart: Cart
    catalog: LessonCatalog
    lesson_client: LessonServiceClient
    order_client: OrderServiceClient
    snapshots: SnapshotStore
    _pending: PendingCheckout | None = field(default=None, init=False)
    _unsent: tuple[tuple[object, ...], str] | None = field(default=None, init=False)
    _in_flight: bool = field(default=False, init=False)

    @property
    def pending(self) -> PendingCheckout | None:
        """Return the unfinished checkout a retry would resume, if any."""
        return self._pending

    def outstanding_holds(self) -> dict[str, int]:
        """Return cart holds whose capacity has not been written upstream.

        Lessons confirmed by a pending checkout already carry the sale in the
        authoritative spaces, so a refresh must not subtract them again.
        """
        holds = self.cart.holds()
        if self._pending is None:
            return holds
        confirmed = self._pending.confirmed_lesson_ids
        return {
            lesson_id: count
            for lesson_id, count in holds.items()
            if lesson_id not in confirmed
        }

    def abandon(self) -> str | None:
        """Stop resuming the pending checkout; return its order id.

        The order stays recorded upstream. Reservations of lessons whose
        capacity was already written are dropped from the cart as sold; the
        rest stay so they can be checked out again.
        """
        if self._in_flight:
            raise CheckoutInProgress("A checkout is already running")
        pending = self._pending
        if pending is None:
            return None
        dropped = self.cart.discard_lessons(pending.confirmed_lesson_ids)
        self._pending = None
        _logger.warning(
            "Abandoned checkout for order %s; %s sold reservation(s) dropped",
            pending.order_id,
            dropped,
        )
        return pending.order_id

    async def checkout(self, buyer_name: str, buyer_phone: str) -> CheckoutResult:
        """Run the saga; raises a CheckoutError naming the failed stage."""
        if self._in_flight:
            raise CheckoutInProgress("A checkout is already running")
        self._in_flight = True
        try:
            return await self._run(buyer_name, buyer_phone)
        finally:
            self._in_flight = False

    async def _run(self, buyer_name: str, buyer_phone: str) -> CheckoutResult:
        name, phone = self._validate(buyer_name, buyer_phone)
        lines = self.cart.aggregate()
        total_price = sum(line.subtotal for line in lines)
        fingerprint = _fingerprint(name, phone, lines)

        pending = self._pending
        if pending is not None and pending.fingerprint != fingerprint:
            _logger.warning(
                "Cart changed since order %s; refusing a second order",
                pending.order_id,
            )
            raise CheckoutPending(
                pending.order_id, sorted(pending.confirmed_lesson_ids)
            )

        resumed = pending is not None
        if pending is None:
            order = Order(
                buyer_name=name,
                buyer_phone=phone,
                lines=lines,
                total_price=total_price,
                idempotency_key=self._idempotency_key(fingerprint),
            )
            order_id = await self._submit(order)
            self._unsent = None
            pending = self._pending = PendingCheckout(
                idempotency_key=order.idempotency_key,
                order_id=order_id,
                fingerprint=fingerprint,
            )
        else:
            _logger.info("Resuming checkout for order %s", pending.order_id)

        await self._propagate(pending, lines)

        _logger.info("Checkout %s: %s", pending.order_id, CheckoutStage.RECONCILE.value)
        try:
            await self.catalog.refresh()
        except CatalogUnavailable as exc:
            _logger.warning("Reconciliation failed for order %s", pending.order_id)
            raise ReconciliationFailed(pending.order_id) from exc

        purchase = PurchaseRecord.from_lines(lines, total_price, pending.order_id)
        try:
            self.snapshots.save_purchase(purchase)
        except Exception:
            _logger.exception(
                "Failed to persist purchase record for order %s", pending.order_id
            )
        self.cart.discard()
        self._pending = None
        _logger.info("Checkout %s: %s", pending.order_id, CheckoutStage.COMPLETE.value)
        return CheckoutResult(
            order_id=pending.order_id,
            lines=lines,
            total_price=total_price,
            purchase=purchase,
            resumed=resumed,
        )

    def _validate(self, buyer_name: str, buyer_phone: str) -> tuple[str, str]:
        if self.cart.is_empty:
            raise EmptyCart("Cart is empty")
        name = (buyer_name or "").strip()
        if not _NAME_PATTERN.fullmatch(name):
            raise InvalidBuyerName(
                "Please enter a valid name (letters only, min 2 characters)."
            )
        phone = (buyer_phone or "").strip()
        if not _PHONE_PATTERN.fullmatch(phone):
            raise InvalidPhone(
                "Please enter a valid phone number (numbers only, min 7 digits)."
            )
        missing = [
            lesson_id
            for lesson_id in self.cart.holds()
            if self.catalog.get(lesson_id) is None
        ]
        if missing:
            raise StaleCart(missing)
        return name, phone

    def _idempotency_key(self, fingerprint: tuple[object, ...]) -> str:
        """Reuse the key of an unanswered submission for the same cart."""
        if self._unsent is not None and self._unsent[0] == fingerprint:
            return self._unsent[1]
        key = uuid4().hex
        self._unsent = (fingerprint, key)
        return key

    async def _submit(self, order: Order) -> str:
        _logger.info("Checkout: %s", CheckoutStage.SUBMIT_ORDER.value)
        try:
            body = await self.order_client.create_order(
                order.to_payload(), order.idempotency_key
            )
        except (httpx.HTTPError, ValueError) as exc:
            _logger.warning("Order submission failed: %s", exc)
            raise OrderSubmissionFailed(f"Order was not recorded: {exc}") from exc
        return _order_id(body, order.idempotency_key)

    async def _propagate(
        self, pending: PendingCheckout, lines: tuple[AggregatedLine, ...]
    ) -> None:
        """Write local spaces for every unconfirmed line, concurrently."""
        _logger.info(
            "Checkout %s: %s", pending.order_id, CheckoutStage.PROPAGATE_CAPACITY.value
        )
        to_write = [
            line for line in lines if line.lesson_id not in pending.confirmed_lesson_ids
        ]
        outcomes = await asyncio.gather(
            *(self._write_spaces(line.lesson_id) for line in to_write),
            return_exceptions=True,
        )
        failed: list[str] = []
        for line, outcome in zip(to_write, outcomes, strict=True):
            if isinstance(outcome, BaseException):
                _logger.warning(
                    "Capacity write failed for lesson %s: %s", line.lesson_id, outcome
                )
                failed.append(line.lesson_id)
            else:
                pending.confirmed_lesson_ids.add(line.lesson_id)
        if failed:
            confirmed = [
                line.lesson_id
                for line in lines
                if line.lesson_id in pending.confirmed_lesson_ids
            ]
            raise PartialCheckoutFailure(pending.order_id, confirmed, failed)

    async def _write_spaces(self, lesson_id: str) -> None:
        lesson = self.catalog.require(lesson_id)
        await self.lesson_client.update_spaces(lesson_id, lesson.spaces)


def _fingerprint(
    name: str, phone: str, lines: tuple[AggregatedLine, ...]
) -> tuple[object, ...]:
    return (
        name,
        phone,
        tuple((line.lesson_id, line.quantity, line.unit_price) for line in lines),
    )


def _order_id(body: dict[str, object], fallback: str) -> str:
    for key in _ORDER_ID_KEYS:
        value = body.get(key)
        if value:
            return str(value)
    _logger.warning("Order response has no id; using idempotency key %s", fallback)
    return fallback
