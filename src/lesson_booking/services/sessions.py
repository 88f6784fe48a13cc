"""Demo shopper sessions persisted between visits."""

import logging
from dataclasses import dataclass, field

from lesson_booking.domain.orders import PurchaseRecord
from lesson_booking.domain.sessions import DemoUser, StoredUser
from lesson_booking.errors import InvalidCredentials
from lesson_booking.services.persistence import SnapshotStore

DEMO_USERS: tuple[DemoUser, ...] = (
    DemoUser(id=1, name="Parent User", email="parent@example.com", password="123"),
    DemoUser(id=2, name="Student User", email="student@example.com", password="234"),
)

_logger = logging.getLogger(__name__)


@dataclass
class SessionService:
    """Fixed-credential login; not a security boundary."""

    snapshots: SnapshotStore
    users: tuple[DemoUser, ...] = DEMO_USERS
    _current: StoredUser | None = field(default=None, init=False)

    @property
    def current_user(self) -> StoredUser | None:
        return self._current

    def restore(self) -> StoredUser | None:
        """Load the persisted user on startup."""
        self._current = self.snapshots.load_user()
        return self._current

    def login(self, email: str, password: str) -> StoredUser:
        """Match a preset user by case-insensitive email and password."""
        cleaned_email = (email or "").strip().lower()
        if not cleaned_email or not password:
            raise InvalidCredentials("Please provide email and password.")
        for user in self.users:
            if user.email == cleaned_email and user.password == password:
                self._current = StoredUser(id=user.id, name=user.name, email=user.email)
                self.snapshots.save_user(self._current)
                _logger.info("User %s logged in", user.id)
                return self._current
        raise InvalidCredentials("Credentials not recognised.")

    def logout(self) -> None:
        self._current = None
        self.snapshots.clear_user()

    def last_purchase(self) -> PurchaseRecord:
        return self.snapshots.load_purchase()
