"""Domain models for cart reservations."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Reservation:
    """Snapshot of a lesson taken when a slot was added to the cart."""

    lesson_id: str
    subject: str
    price: float
    location: str
    instructor: str


@dataclass(frozen=True)
class AggregatedLine:
    """Reservations of one lesson collapsed into an order line."""

    lesson_id: str
    quantity: int
    unit_price: float
    subject: str

    @property
    def subtotal(self) -> float:
        return self.unit_price * self.quantity
