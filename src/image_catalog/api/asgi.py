"""ASGI entrypoint for the image catalog API."""

from image_catalog.api.app import create_app
from image_catalog.containers import build_container

app = create_app(build_container())
