"""SQLAlchemy ORM models."""

from staybook.models.base import Base
from staybook.models.booking import Booking
from staybook.models.listing import Listing
from staybook.models.role import Role
from staybook.models.user import User, user_favorites, user_roles

__all__ = ["Base", "Booking", "Listing", "Role", "User", "user_favorites", "user_roles"]
