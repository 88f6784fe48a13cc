"""Lesson catalog backed by the remote lesson service."""

import logging
import math
from collections.abc import Mapping
from dataclasses import dataclass, field, replace

import httpx

from lesson_booking.adapters.lesson_service_client import LessonServiceClient
from lesson_booking.domain.lessons import Lesson
from lesson_booking.errors import CatalogUnavailable, LessonNotFound

_logger = logging.getLogger(__name__)


@dataclass
class LessonCatalog:
    """Locally held copy of the remote lessons and their capacity."""

    client: LessonServiceClient
    image_base_url: str
    default_image: str = "default.jpg"
    _lessons: list[Lesson] = field(default_factory=list, init=False)
    _viewed_id: str | None = field(default=None, init=False)

    @property
    def lessons(self) -> tuple[Lesson, ...]:
        return tuple(self._lessons)

    @property
    def viewed_lesson(self) -> Lesson | None:
        """Return the lesson currently shown in the detail view."""
        if self._viewed_id is None:
            return None
        return self.get(self._viewed_id)

    def get(self, lesson_id: str) -> Lesson | None:
        for lesson in self._lessons:
            if lesson.id == lesson_id:
                return lesson
        return None

    def require(self, lesson_id: str) -> Lesson:
        """Return a lesson or raise LessonNotFound."""
        lesson = self.get(lesson_id)
        if lesson is None:
            raise LessonNotFound(lesson_id)
        return lesson

    def view(self, lesson_id: str) -> Lesson:
        """Point the detail view at a lesson."""
        lesson = self.require(lesson_id)
        self._viewed_id = lesson.id
        return lesson

    def locations(self) -> list[str]:
        return sorted({lesson.location for lesson in self._lessons})

    async def load(self, holds: Mapping[str, int] | None = None) -> tuple[Lesson, ...]:
        """Replace the catalog with the remote lessons.

        ``holds`` maps lesson ids to reservations still held in the cart; they
        are subtracted from the authoritative spaces so the local copy keeps
        reflecting the cart. The previous catalog is kept if the read fails.
        """
        try:
            records = await self.client.list_lessons()
        except (httpx.HTTPError, ValueError) as exc:
            _logger.warning("Lesson catalog load failed: %s", exc)
            raise CatalogUnavailable(f"Could not load lessons: {exc}") from exc

        lessons: list[Lesson] = []
        for record in records:
            lesson = self._normalize(record)
            if lesson is None:
                continue
            held = (holds or {}).get(lesson.id, 0)
            if held:
                if held > lesson.spaces:
                    _logger.warning(
                        "Cart holds %s of lesson %s but only %s spaces remain",
                        held,
                        lesson.id,
                        lesson.spaces,
                    )
                lesson = replace(lesson, spaces=max(0, lesson.spaces - held))
            lessons.append(lesson)

        self._lessons = lessons
        if self._viewed_id is None or self.get(self._viewed_id) is None:
            self._viewed_id = lessons[0].id if lessons else None
        _logger.info("Loaded %s lessons", len(lessons))
        return self.lessons

    async def refresh(
        self, holds: Mapping[str, int] | None = None
    ) -> tuple[Lesson, ...]:
        """Pull authoritative capacity; same contract as load()."""
        return await self.load(holds)

    def hold_space(self, lesson_id: str) -> Lesson:
        """Take one space of a lesson for a cart reservation."""
        lesson = self.require(lesson_id)
        return self._set_spaces(lesson, max(0, lesson.spaces - 1))

    def release_space(self, lesson_id: str) -> Lesson | None:
        """Give back one space; a lesson gone from the catalog is skipped."""
        lesson = self.get(lesson_id)
        if lesson is None:
            return None
        return self._set_spaces(lesson, lesson.spaces + 1)

    def _set_spaces(self, lesson: Lesson, spaces: int) -> Lesson:
        updated = replace(lesson, spaces=spaces)
        self._lessons = [
            updated if item.id == lesson.id else item for item in self._lessons
        ]
        return updated

    def _normalize(self, record: object) -> Lesson | None:
        if not isinstance(record, dict):
            _logger.warning("Skipping non-object lesson record: %r", record)
            return None
        raw_id = record.get("_id") or record.get("id")
        if raw_id is None or str(raw_id).strip() == "":
            _logger.warning("Skipping lesson record without id")
            return None
        image = record.get("image")
        image_name = (
            image.strip()
            if isinstance(image, str) and image.strip()
            else self.default_image
        )
        return Lesson(
            id=str(raw_id),
            subject=_text(record.get("subject"), "No subject"),
            location=_text(record.get("location"), "Unknown"),
            price=_non_negative(record.get("price")),
            spaces=int(_non_negative(record.get("spaces"))),
            instructor=_text(record.get("instructor"), "TBD"),
            schedule=_text(record.get("schedule"), ""),
            description=_text(record.get("description"), ""),
            image=f"{self.image_base_url}/image/{image_name}",
        )


def _text(value: object, default: str) -> str:
    if not value:
        return default
    return str(value)


def _non_negative(value: object) -> float:
    """Coerce a numeric field, mapping missing, invalid or negative to 0."""
    if isinstance(value, bool) or value is None:
        return 0.0
    try:
        number = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(number) or number < 0:
        return 0.0
    return number
