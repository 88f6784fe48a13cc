"""Remote lesson service client."""

from dataclasses import dataclass
from typing import Protocol

import httpx


class LessonServiceClient(Protocol):
    """Interface for the remote lesson service."""

    async def list_lessons(self) -> list[dict[str, object]]:
        """Return raw lesson records."""

    async def update_spaces(self, lesson_id: str, spaces: int) -> dict[str, object]:
        """Persist a lesson's remaining spaces."""

    async def close(self) -> None:
        """Release network resources."""


@dataclass
class HttpxLessonServiceClient(LessonServiceClient):
    """HTTPX-backed lesson service client."""

    base_url: str
    http_client: httpx.AsyncClient
    timeout: float = 10.0

    @classmethod
    def create(cls, base_url: str, timeout: float) -> "HttpxLessonServiceClient":
        """Create a lesson client with a managed httpx session."""
        return cls(base_url=base_url, http_client=httpx.AsyncClient(), timeout=timeout)

    async def list_lessons(self) -> list[dict[str, object]]:
        """Fetch all lessons."""
        response = await self.http_client.get(
            f"{self.base_url}/api/lessons", timeout=self.timeout
        )
        response.raise_for_status()
        payload = response.json()
        if not isinstance(payload, list):
            raise ValueError("Lesson service returned a non-list payload")
        return payload

    async def update_spaces(self, lesson_id: str, spaces: int) -> dict[str, object]:
        """Write the spaces value for one lesson."""
        response = await self.http_client.put(
            f"{self.base_url}/api/lessons/{lesson_id}",
            json={"spaces": spaces},
            timeout=self.timeout,
        )
        response.raise_for_status()
        return response.json() if response.content else {}

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
