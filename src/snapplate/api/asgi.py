"""ASGI entrypoint: ``uvicorn snapplate.api.asgi:app``.

Settings come from the environment and ``.env`` files; logs and preferences
are stored under ``DATA_DIR``.
"""

from snapplate.api.app import create_app
from snapplate.config import Settings
from snapplate.containers import build_container

settings = Settings()
app = create_app(build_container(settings))
