"""ASGI entrypoint for the storefront API."""

from lesson_booking.api.app import create_app
from lesson_booking.containers import build_container

app = create_app(build_container())
