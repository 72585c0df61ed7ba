"""ASGI entrypoint for the calorize API."""

from calorize.api.app import create_app
from calorize.containers import build_container

app = create_app(build_container())
