"""ORM model for reservations of a listing by a user."""

from sqlalchemy import (
    CheckConstraint,
    Column,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    func,
)
from sqlalchemy.orm import relationship

from staybook.models.base import Base

STATUS_PENDING = "PENDING"
STATUS_CANCELLED = "CANCELLED"


class Booking(Base):
    """
    One reservation: requester, listing and a half-open [check_in, check_out) date range.

    total_price is fixed at creation (nights x listing price at that time).
    """

    __tablename__ = "bookings"
    __table_args__ = (CheckConstraint("check_out > check_in", name="date_range"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    listing_id = Column(
        Integer, ForeignKey("listings.id", ondelete="CASCADE"), nullable=False, index=True
    )
    check_in = Column(Date, nullable=False)
    check_out = Column(Date, nullable=False)
    guests = Column(Integer, nullable=False, default=1)
    total_price = Column(Float, nullable=False)
    status = Column(String(32), nullable=False, default=STATUS_PENDING)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    user = relationship("User", back_populates="bookings")
    listing = relationship("Listing", lazy="joined")
