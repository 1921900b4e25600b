"""ASGI entrypoint for the NutriSync scoring API."""

from nutrisync.api.app import create_app
from nutrisync.containers import build_container

app = create_app(build_container())
