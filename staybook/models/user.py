"""ORM model for application users (auth, roles and favorites)."""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Table, func
from sqlalchemy.orm import relationship

from staybook.models.base import Base

user_roles = Table(
    "user_roles",
    Base.metadata,
    Column("user_id", Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column("role_id", Integer, ForeignKey("roles.id", ondelete="CASCADE"), primary_key=True),
)

user_favorites = Table(
    "user_favorites",
    Base.metadata,
    Column("user_id", Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column(
        "listing_id", Integer, ForeignKey("listings.id", ondelete="CASCADE"), primary_key=True
    ),
)


class User(Base):
    """
    User account for JWT authentication and role-based access control.

    username is unique at the database level; the registration flow relies on that
    constraint rather than on its own existence check.
    """

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False, default="")
    fullname = Column(String(255), nullable=False, default="")
    phone = Column(String(32), nullable=False, default="")
    thumbnail_url = Column(String(2048), nullable=True)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    roles = relationship("Role", secondary=user_roles, lazy="selectin")
    favorites = relationship(
        "Listing", secondary=user_favorites, lazy="selectin", order_by="Listing.id"
    )
    bookings = relationship("Booking", back_populates="user", order_by="Booking.id")

    @property
    def role_names(self) -> list[str]:
        return sorted(r.name for r in self.roles)
