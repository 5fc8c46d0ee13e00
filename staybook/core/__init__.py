"""Core app configuration and database."""

from staybook.core.config import get_settings, settings
from staybook.core.database import get_db

__all__ = ["get_settings", "settings", "get_db"]
