"""ORM model for permission roles (seeded reference data)."""

from sqlalchemy import Column, Integer, String

from staybook.models.base import Base

GUEST = "GUEST"
HOST = "HOST"
ADMIN = "ADMIN"

DEFAULT_ROLES = (GUEST, HOST, ADMIN)


class Role(Base):
    """Named permission group. Looked up by name, never mutated by the API."""

    __tablename__ = "roles"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(32), nullable=False, unique=True, index=True)
