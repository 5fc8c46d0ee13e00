"""ORM model for accommodation listings (read-only in this service)."""

from sqlalchemy import Column, DateTime, Float, Integer, String, func

from staybook.models.base import Base


class Listing(Base):
    """An accommodation offering that users can book or mark as favorite."""

    __tablename__ = "listings"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(255), nullable=False)
    address = Column(String(1024), nullable=False, default="")
    price_per_night = Column(Float, nullable=False)
    max_guests = Column(Integer, nullable=False, default=1)
    thumbnail_url = Column(String(2048), nullable=True)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
