"""Domain models for the lesson catalog."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Lesson:
    """A bookable lesson with its remaining capacity."""

    id: str
    subject: str
    location: str
    price: float
    spaces: int
    instructor: str
    schedule: str
    description: str
    image: str
