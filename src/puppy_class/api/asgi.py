"""ASGI entrypoint for the puppy class API."""

from puppy_class.api.app import create_app
from puppy_class.containers import build_container

app = create_app(build_container())
