"""Cart of lesson reservations with optimistic capacity holds."""

import logging
from collections import Counter
from collections.abc import Collection
from dataclasses import dataclass, field

from lesson_booking.domain.cart import AggregatedLine, Reservation
from lesson_booking.errors import IndexOutOfRange, NoCapacity
from lesson_booking.services.catalog import LessonCatalog

_logger = logging.getLogger(__name__)


@dataclass
class Cart:
    """Ordered reservations; the only writer of catalog spaces."""

    catalog: LessonCatalog
    _reservations: list[Reservation] = field(default_factory=list, init=False)

    @property
    def reservations(self) -> tuple[Reservation, ...]:
        return tuple(self._reservations)

    @property
    def is_empty(self) -> bool:
        return not self._reservations

    @property
    def total(self) -> float:
        return sum(reservation.price for reservation in self._reservations)

    def __len__(self) -> int:
        return len(self._reservations)

    def add_reservation(self, lesson_id: str) -> Reservation:
        """Reserve one space of a lesson.

        Raises LessonNotFound for unknown ids and NoCapacity when the lesson
        is sold out; neither adds a reservation.
        """
        lesson = self.catalog.require(lesson_id)
        if lesson.spaces == 0:
            raise NoCapacity(lesson_id)
        reservation = Reservation(
            lesson_id=lesson.id,
            subject=lesson.subject,
            price=lesson.price,
            location=lesson.location,
            instructor=lesson.instructor,
        )
        self._reservations.append(reservation)
        self.catalog.hold_space(lesson.id)
        return reservation

    def remove_reservation(self, index: int) -> Reservation:
        """Remove the reservation at ``index`` and give its space back."""
        if not 0 <= index < len(self._reservations):
            raise IndexOutOfRange(index, len(self._reservations))
        reservation = self._reservations[index]
        if self.catalog.release_space(reservation.lesson_id) is None:
            _logger.info(
                "Lesson %s left the catalog; space not restored",
                reservation.lesson_id,
            )
        del self._reservations[index]
        return reservation

    def clear(self) -> None:
        """Empty the cart, restoring every held space."""
        for reservation in self._reservations:
            self.catalog.release_space(reservation.lesson_id)
        self._reservations.clear()

    def discard(self) -> None:
        """Empty the cart keeping held spaces consumed (after a checkout)."""
        self._reservations.clear()

    def discard_lessons(self, lesson_ids: Collection[str]) -> int:
        """Drop reservations of already-sold lessons without restoring spaces."""
        kept = [
            reservation
            for reservation in self._reservations
            if reservation.lesson_id not in lesson_ids
        ]
        dropped = len(self._reservations) - len(kept)
        self._reservations = kept
        return dropped

    def holds(self) -> dict[str, int]:
        """Return the number of reserved spaces per lesson id."""
        counts = Counter(reservation.lesson_id for reservation in self._reservations)
        return dict(counts)

    def aggregate(self) -> tuple[AggregatedLine, ...]:
        """Collapse reservations into lines, in first-seen lesson order."""
        firsts: dict[str, Reservation] = {}
        quantities: Counter[str] = Counter()
        for reservation in self._reservations:
            firsts.setdefault(reservation.lesson_id, reservation)
            quantities[reservation.lesson_id] += 1
        return tuple(
            AggregatedLine(
                lesson_id=lesson_id,
                quantity=quantities[lesson_id],
                unit_price=first.price,
                subject=first.subject,
            )
            for lesson_id, first in firsts.items()
        )
