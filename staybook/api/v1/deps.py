"""Shared dependencies for collaborators owned by the application (notifier, image store)."""

from fastapi import Request

from staybook.core.config import get_settings
from staybook.services.image_store import CloudinaryImageStore
from staybook.services.notifications import NotificationDispatcher


def get_notifier(request: Request) -> NotificationDispatcher | None:
    """Dispatcher started in the app lifespan; None outside a running app."""
    return getattr(request.app.state, "notifier", None)


def get_image_store() -> CloudinaryImageStore:
    return CloudinaryImageStore(get_settings())
