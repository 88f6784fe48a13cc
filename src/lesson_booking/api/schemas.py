"""Request models for the storefront API."""

from pydantic import BaseModel


class AddReservationRequest(BaseModel):
    lesson_id: str


class CheckoutRequest(BaseModel):
    """Buyer details entered at checkout."""

    name: str
    phone: str


class LoginRequest(BaseModel):
    email: str = ""
    password: str = ""
