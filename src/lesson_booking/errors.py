"""Typed failures raised by the booking engine."""

from collections.abc import Sequence

from lesson_booking.domain.orders import CheckoutStage


class BookingError(Exception):
    """Base class for storefront failures reported to the caller."""

    code = "booking_error"

    def details(self) -> dict[str, object]:
        """Return extra structured fields for API responses."""
        return {}


class CatalogUnavailable(BookingError):
    """The remote lesson service could not be read."""

    code = "catalog_unavailable"


class LessonNotFound(BookingError):
    """A lesson id is not present in the catalog."""

    code = "lesson_not_found"

    def __init__(self, lesson_id: str) -> None:
        super().__init__(f"Lesson {lesson_id} is not in the catalog")
        self.lesson_id = lesson_id

    def details(self) -> dict[str, object]:
        return {"lesson_id": self.lesson_id}


class NoCapacity(BookingError):
    """The lesson has no remaining spaces."""

    code = "no_capacity"

    def __init__(self, lesson_id: str) -> None:
        super().__init__(f"Lesson {lesson_id} has no spaces left")
        self.lesson_id = lesson_id

    def details(self) -> dict[str, object]:
        return {"lesson_id": self.lesson_id}


class IndexOutOfRange(BookingError, IndexError):
    """A cart index does not point at a reservation."""

    code = "index_out_of_range"

    def __init__(self, index: int, size: int) -> None:
        super().__init__(f"Cart index {index} out of range for {size} item(s)")
        self.index = index
        self.size = size

    def details(self) -> dict[str, object]:
        return {"index": self.index, "size": self.size}


class InvalidCredentials(BookingError):
    """Demo login rejected the supplied email/password."""

    code = "invalid_credentials"


class CheckoutError(BookingError):
    """Failure of a checkout stage."""

    code = "checkout_failed"
    stage = CheckoutStage.VALIDATE

    def details(self) -> dict[str, object]:
        return {"stage": self.stage.value}


class CheckoutValidationError(CheckoutError):
    """Buyer input or cart state rejected before any network call."""

    code = "checkout_invalid"


class InvalidBuyerName(CheckoutValidationError):
    code = "invalid_buyer_name"


class InvalidPhone(CheckoutValidationError):
    code = "invalid_phone"


class EmptyCart(CheckoutValidationError):
    code = "empty_cart"


class StaleCart(CheckoutValidationError):
    """The cart references lessons that disappeared from the catalog."""

    code = "stale_cart"

    def __init__(self, lesson_ids: Sequence[str]) -> None:
        super().__init__(
            "Cart references lessons no longer in the catalog: "
            + ", ".join(lesson_ids)
        )
        self.lesson_ids = list(lesson_ids)

    def details(self) -> dict[str, object]:
        return {**super().details(), "lesson_ids": self.lesson_ids}


class CheckoutInProgress(CheckoutError):
    """Another checkout has not resolved yet."""

    code = "checkout_in_progress"


class CheckoutPending(CheckoutError):
    """An earlier order is unfinished and the cart no longer matches it."""

    code = "checkout_pending"

    def __init__(self, order_id: str, confirmed_lesson_ids: Sequence[str]) -> None:
        super().__init__(
            f"Order {order_id} is still being completed; restore the cart or "
            "abandon that order first"
        )
        self.order_id = order_id
        self.confirmed_lesson_ids = list(confirmed_lesson_ids)

    def details(self) -> dict[str, object]:
        return {
            **super().details(),
            "order_id": self.order_id,
            "confirmed_lesson_ids": self.confirmed_lesson_ids,
        }


class OrderSubmissionFailed(CheckoutError):
    """The order was not recorded upstream; safe to retry."""

    code = "order_submission_failed"
    stage = CheckoutStage.SUBMIT_ORDER


class PartialCheckoutFailure(CheckoutError):
    """The order exists upstream but some capacity writes failed."""

    code = "partial_checkout_failure"
    stage = CheckoutStage.PROPAGATE_CAPACITY

    def __init__(
        self,
        order_id: str,
        confirmed_lesson_ids: Sequence[str],
        failed_lesson_ids: Sequence[str],
    ) -> None:
        super().__init__(
            f"Order {order_id} recorded but capacity not saved for: "
            + ", ".join(failed_lesson_ids)
        )
        self.order_id = order_id
        self.confirmed_lesson_ids = list(confirmed_lesson_ids)
        self.failed_lesson_ids = list(failed_lesson_ids)

    def details(self) -> dict[str, object]:
        return {
            **super().details(),
            "order_id": self.order_id,
            "confirmed_lesson_ids": self.confirmed_lesson_ids,
            "failed_lesson_ids": self.failed_lesson_ids,
        }


class ReconciliationFailed(CheckoutError):
    """Order and capacity are saved upstream but the catalog refresh failed."""

    code = "reconciliation_failed"
    stage = CheckoutStage.RECONCILE

    def __init__(self, order_id: str) -> None:
        super().__init__(f"Order {order_id} saved; catalog refresh failed")
        self.order_id = order_id

    def details(self) -> dict[str, object]:
        return {**super().details(), "order_id": self.order_id}
