"""In-process lesson and order services for offline mode."""

import copy
from dataclasses import dataclass, field
from uuid import uuid4

from lesson_booking.adapters.lesson_service_client import LessonServiceClient
from lesson_booking.adapters.order_service_client import OrderServiceClient

DEMO_LESSONS: list[dict[str, object]] = [
    {"_id": "math-101", "subject": "Math", "location": "Hendon", "price": 100,
     "spaces": 5, "instructor": "Dr. Patel", "schedule": "Mon 16:00",
     "description": "Algebra and geometry fundamentals.", "image": "math.jpg"},
    {"_id": "eng-101", "subject": "English", "location": "Colindale", "price": 80,
     "spaces": 5, "instructor": "Ms. Brown", "schedule": "Tue 17:00",
     "description": "Reading and creative writing.", "image": "english.jpg"},
    {"_id": "sci-101", "subject": "Science", "location": "Brent Cross",
     "price": 30, "spaces": 5, "instructor": "Mr. Okafor",
     "schedule": "Wed 15:30", "description": "Hands-on experiments.",
     "image": "science.jpg"},
    {"_id": "music-101", "subject": "Music", "location": "Golders Green",
     "price": 90, "spaces": 5, "instructor": "Mrs. Lee", "schedule": "Thu 18:00",
     "description": "Piano for beginners.", "image": "music.jpg"},
    {"_id": "art-101", "subject": "Art", "location": "Hendon", "price": 60,
     "spaces": 5, "instructor": "Mr. Rossi", "schedule": "Fri 16:30",
     "description": "Drawing and painting.", "image": "art.jpg"},
    {"_id": "code-101", "subject": "Coding", "location": "Mill Hill",
     "price": 120, "spaces": 5, "instructor": "Ms. Novak",
     "schedule": "Sat 10:00", "description": "Python for young learners.",
     "image": ""},
]


@dataclass
class InMemoryLessonService(LessonServiceClient):
    """Lesson service keeping records in process memory."""

    lessons: list[dict[str, object]] = field(
        default_factory=lambda: copy.deepcopy(DEMO_LESSONS)
    )

    async def list_lessons(self) -> list[dict[str, object]]:
        return copy.deepcopy(self.lessons)

    async def update_spaces(self, lesson_id: str, spaces: int) -> dict[str, object]:
        for lesson in self.lessons:
            if str(lesson.get("_id")) == lesson_id:
                lesson["spaces"] = spaces
                return {"matchedCount": 1, "modifiedCount": 1}
        raise KeyError(f"Unknown lesson {lesson_id}")

    async def close(self) -> None:
        return None


@dataclass
class InMemoryOrderService(OrderServiceClient):
    """Order service that records orders locally, one per idempotency key."""

    orders: dict[str, dict[str, object]] = field(default_factory=dict)
    order_ids: dict[str, str] = field(default_factory=dict)

    async def create_order(
        self, payload: dict[str, object], idempotency_key: str
    ) -> dict[str, object]:
        order_id = self.order_ids.get(idempotency_key)
        if order_id is None:
            order_id = uuid4().hex
            self.order_ids[idempotency_key] = order_id
            self.orders[order_id] = copy.deepcopy(payload)
        return {"insertedId": order_id}

    async def close(self) -> None:
        return None
