"""Domain models for orders and checkout outcomes."""

from dataclasses import dataclass
from enum import Enum

from lesson_booking.domain.cart import AggregatedLine


class CheckoutStage(str, Enum):
    """Stages of the checkout saga, in execution order."""

    VALIDATE = "validate"
    SUBMIT_ORDER = "submit_order"
    PROPAGATE_CAPACITY = "propagate_capacity"
    RECONCILE = "reconcile"
    COMPLETE = "complete"


@dataclass(frozen=True)
class Order:
    """Order payload submitted to the remote order service."""

    buyer_name: str
    buyer_phone: str
    lines: tuple[AggregatedLine, ...]
    total_price: float
    idempotency_key: str

    def to_payload(self) -> dict[str, object]:
        """Return the JSON body expected by the order service."""
        return {
            "name": self.buyer_name,
            "phone": self.buyer_phone,
            "items": [
                {
                    "lessonId": line.lesson_id,
                    "quantity": line.quantity,
                    "price": line.unit_price,
                }
                for line in self.lines
            ],
            "totalPrice": self.total_price,
        }


@dataclass(frozen=True)
class PurchaseLine:
    """A line of a completed purchase as shown on the confirmation page."""

    subject: str
    price: float
    quantity: int


@dataclass(frozen=True)
class PurchaseRecord:
    """The last completed order."""

    lines: tuple[PurchaseLine, ...] = ()
    total: float = 0
    order_id: str | None = None

    @classmethod
    def from_lines(
        cls, lines: tuple[AggregatedLine, ...], total: float, order_id: str | None
    ) -> "PurchaseRecord":
        return cls(
            lines=tuple(
                PurchaseLine(
                    subject=line.subject,
                    price=line.unit_price,
                    quantity=line.quantity,
                )
                for line in lines
            ),
            total=total,
            order_id=order_id,
        )


@dataclass(frozen=True)
class CheckoutResult:
    """Outcome of a completed checkout saga."""

    order_id: str
    lines: tuple[AggregatedLine, ...]
    total_price: float
    purchase: PurchaseRecord
    resumed: bool = False
