"""Booking workflow: create a reservation for the caller and list the caller's reservations."""

import logging

from sqlalchemy.orm import Session

from staybook.core.errors import (
    BookingConflictError,
    BookingInvalidError,
    ListingNotFoundError,
    UserNotFoundError,
)
from staybook.models import Booking, Listing, User
from staybook.models.booking import STATUS_CANCELLED, STATUS_PENDING
from staybook.schemas.booking import BookingRequest, BookingResponse

logger = logging.getLogger(__name__)


def to_booking_response(booking: Booking) -> BookingResponse:
    return BookingResponse(
        id=booking.id,
        listing_id=booking.listing_id,
        listing_title=booking.listing.title if booking.listing else "",
        check_in=booking.check_in,
        check_out=booking.check_out,
        nights=(booking.check_out - booking.check_in).days,
        guests=booking.guests,
        total_price=booking.total_price,
        status=booking.status,
        created_at=booking.created_at,
    )


def has_overlapping_booking(db: Session, request: BookingRequest) -> bool:
    """
    True if a non-cancelled booking on the listing intersects [check_in, check_out).

    Ranges are half-open: a stay may start on the day another one checks out.
    """
    conflict = (
        db.query(Booking.id)
        .filter(
            Booking.listing_id == request.listing_id,
            Booking.status != STATUS_CANCELLED,
            Booking.check_in < request.check_out,
            Booking.check_out > request.check_in,
        )
        .first()
    )
    return conflict is not None


def create_booking(db: Session, request: BookingRequest, username: str) -> BookingResponse:
    """
    Book a listing for the given (already authenticated) username.

    Raises UserNotFoundError, ListingNotFoundError, BookingInvalidError when the
    party exceeds the listing capacity, or BookingConflictError when the dates
    overlap an existing booking.
    """
    user = db.query(User).filter(User.username == username).first()
    if user is None:
        raise UserNotFoundError()
    # Row lock serializes concurrent bookings of the same listing (no-op on SQLite)
    listing = (
        db.query(Listing).filter(Listing.id == request.listing_id).with_for_update().first()
    )
    if listing is None:
        raise ListingNotFoundError()
    if request.guests > (listing.max_guests or 1):
        raise BookingInvalidError(
            f"Listing accepts at most {listing.max_guests} guests."
        )
    if has_overlapping_booking(db, request):
        raise BookingConflictError()

    nights = (request.check_out - request.check_in).days
    booking = Booking(
        user_id=user.id,
        listing_id=listing.id,
        check_in=request.check_in,
        check_out=request.check_out,
        guests=request.guests,
        total_price=round(nights * listing.price_per_night, 2),
        status=STATUS_PENDING,
    )
    db.add(booking)
    db.commit()
    db.refresh(booking)
    logger.info(
        "Booking created",
        extra={
            "booking_id": booking.id,
            "user_id": user.id,
            "listing_id": listing.id,
            "nights": nights,
        },
    )
    return to_booking_response(booking)


def list_my_bookings(db: Session, username: str) -> list[BookingResponse]:
    """Bookings requested by username in insertion order; [] when there are none."""
    bookings = (
        db.query(Booking)
        .join(User, Booking.user_id == User.id)
        .filter(User.username == username)
        .order_by(Booking.id)
        .all()
    )
    return [to_booking_response(b) for b in bookings]
