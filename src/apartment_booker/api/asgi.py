"""ASGI entrypoint for the apartment booker."""

from apartment_booker.api.app import create_app
from apartment_booker.containers import build_container

app = create_app(build_container())
