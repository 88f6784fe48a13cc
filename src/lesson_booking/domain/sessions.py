"""Models for shopper sessions and persisted storefront state."""

from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict, Field


@dataclass(frozen=True)
class DemoUser:
    """Preset account accepted by the demo login."""

    id: int
    name: str
    email: str
    password: str


class StoredUser(BaseModel):
    """Logged-in user snapshot."""

    id: int
    name: str
    email: str


class StoredPurchaseLine(BaseModel):
    """Purchase line as persisted between visits."""

    subject: str
    price: float = Field(ge=0)
    qty: int = Field(ge=0)


class StoredPurchase(BaseModel):
    """Last purchase snapshot."""

    model_config = ConfigDict(populate_by_name=True)

    items: list[StoredPurchaseLine] = Field(default_factory=list)
    total: float = Field(default=0, ge=0)
    order_id: str | None = Field(default=None, alias="orderId")
