"""
Server package exposing the FastAPI app and the WebSocket notifier.
"""

from .app import app, create_app  # noqa: F401
from .notifier import QueueNotifier  # noqa: F401
