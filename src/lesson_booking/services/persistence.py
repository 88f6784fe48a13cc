"""Typed access to persisted storefront snapshots."""

import logging
from dataclasses import dataclass
from typing import Protocol

from pydantic import ValidationError

from lesson_booking.domain.orders import PurchaseLine, PurchaseRecord
from lesson_booking.domain.sessions import (
    StoredPurchase,
    StoredPurchaseLine,
    StoredUser,
)

USER_KEY = "bookstore_user"
LAST_PURCHASE_KEY = "bookstore_lastPurchase"

_logger = logging.getLogger(__name__)


class StateStore(Protocol):
    """Durable string key-value storage."""

    def get(self, key: str) -> str | None:
        """Return the stored value, if present."""

    def set(self, key: str, value: str) -> None:
        """Store a value under a key."""

    def delete(self, key: str) -> None:
        """Remove a key if present."""


@dataclass
class SnapshotStore:
    """Reads and writes the user and last-purchase snapshots."""

    store: StateStore

    def load_user(self) -> StoredUser | None:
        """Return the persisted user, or None when absent or unreadable."""
        raw = self.store.get(USER_KEY)
        if raw is None:
            return None
        try:
            return StoredUser.model_validate_json(raw)
        except ValidationError:
            _logger.warning("Discarding unreadable %s snapshot", USER_KEY)
            return None

    def save_user(self, user: StoredUser) -> None:
        self.store.set(USER_KEY, user.model_dump_json())

    def clear_user(self) -> None:
        self.store.delete(USER_KEY)

    def load_purchase(self) -> PurchaseRecord:
        """Return the last purchase, or an empty record when absent or unreadable."""
        raw = self.store.get(LAST_PURCHASE_KEY)
        if raw is None:
            return PurchaseRecord()
        try:
            stored = StoredPurchase.model_validate_json(raw)
        except ValidationError:
            _logger.warning("Discarding unreadable %s snapshot", LAST_PURCHASE_KEY)
            return PurchaseRecord()
        return PurchaseRecord(
            lines=tuple(
                PurchaseLine(subject=item.subject, price=item.price, quantity=item.qty)
                for item in stored.items
            ),
            total=stored.total,
            order_id=stored.order_id,
        )

    def save_purchase(self, record: PurchaseRecord) -> None:
        stored = StoredPurchase(
            items=[
                StoredPurchaseLine(
                    subject=line.subject, price=line.price, qty=line.quantity
                )
                for line in record.lines
            ],
            total=record.total,
            order_id=record.order_id,
        )
        self.store.set(LAST_PURCHASE_KEY, stored.model_dump_json(by_alias=True))
