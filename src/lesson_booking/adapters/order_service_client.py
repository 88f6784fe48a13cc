"""Remote order service client."""

from dataclasses import dataclass
from typing import Protocol

import httpx


class OrderServiceClient(Protocol):
    """Interface for the remote order service."""

    async def create_order(
        self, payload: dict[str, object], idempotency_key: str
    ) -> dict[str, object]:
        """Create an order and return the raw response body."""

    async def close(self) -> None:
        """Release network resources."""


@dataclass
class HttpxOrderServiceClient(OrderServiceClient):
    """HTTPX-backed order service client."""

    base_url: str
    http_client: httpx.AsyncClient
    timeout: float = 10.0

    @classmethod
    def create(cls, base_url: str, timeout: float) -> "HttpxOrderServiceClient":
        """Create an order client with a managed httpx session."""
        return cls(base_url=base_url, http_client=httpx.AsyncClient(), timeout=timeout)

    async def create_order(
        self, payload: dict[str, object], idempotency_key: str
    ) -> dict[str, object]:
        """POST an order; the key lets the server drop duplicate submissions."""
        response = await self.http_client.post(
            f"{self.base_url}/api/orders",
            json=payload,
            headers={"Idempotency-Key": idempotency_key},
            timeout=self.timeout,
        )
        response.raise_for_status()
        body = response.json()
        if not isinstance(body, dict):
            raise ValueError("Order service returned a non-object payload")
        return body

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
