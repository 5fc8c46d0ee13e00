"""Tests for staybook.services.bookings: creation, availability and per-user listing."""

import unittest
from datetime import date

from pydantic import ValidationError

from db_support import add_listing, add_user, make_session_factory, seed_roles
from staybook.core.errors import (
    BookingConflictError,
    BookingInvalidError,
    ListingNotFoundError,
    UserNotFoundError,
)
from staybook.models import Booking
from staybook.models.booking import STATUS_CANCELLED
from staybook.schemas.booking import BookingRequest
from staybook.schemas.user import UserRequest
from staybook.services import bookings as booking_service
from staybook.services import users as user_service


def _request(
    listing_id: int = 42,
    check_in: date = date(2026, 7, 1),
    check_out: date = date(2026, 7, 4),
    guests: int = 2,
) -> BookingRequest:
    return BookingRequest(
        listing_id=listing_id, check_in=check_in, check_out=check_out, guests=guests
    )


class BookingServiceTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.engine, factory = make_session_factory()
        self.db = factory()
        seed_roles(self.db)
        self.listing = add_listing(self.db, listing_id=42, price_per_night=120.5, max_guests=4)

    def tearDown(self) -> None:
        self.db.close()
        self.engine.dispose()


class TestListMyBookings(BookingServiceTestCase):
    def test_user_without_bookings_gets_empty_list(self) -> None:
        add_user(self.db, "alice")
        self.assertEqual(booking_service.list_my_bookings(self.db, "alice"), [])

    def test_unknown_user_gets_empty_list(self) -> None:
        self.assertEqual(booking_service.list_my_bookings(self.db, "ghost"), [])

    def test_only_callers_bookings_in_insertion_order(self) -> None:
        add_user(self.db, "alice")
        add_user(self.db, "bob")
        other = add_listing(self.db, title="Cabin")
        booking_service.create_booking(self.db, _request(), "alice")
        booking_service.create_booking(self.db, _request(listing_id=other.id), "bob")
        booking_service.create_booking(
            self.db,
            _request(check_in=date(2026, 8, 1), check_out=date(2026, 8, 2)),
            "alice",
        )
        mine = booking_service.list_my_bookings(self.db, "alice")
        self.assertEqual([b.check_in for b in mine], [date(2026, 7, 1), date(2026, 8, 1)])
        self.assertTrue(all(b.listing_id == 42 for b in mine))


class TestCreateBooking(BookingServiceTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.user = add_user(self.db, "alice")

    def test_creates_pending_booking_with_computed_price(self) -> None:
        resp = booking_service.create_booking(self.db, _request(), "alice")
        self.assertEqual(resp.listing_id, 42)
        self.assertEqual(resp.listing_title, "Seaside loft")
        self.assertEqual(resp.nights, 3)
        self.assertEqual(resp.guests, 2)
        self.assertAlmostEqual(resp.total_price, 361.5)
        self.assertEqual(resp.status, "PENDING")
        stored = self.db.query(Booking).one()
        self.assertEqual(stored.user_id, self.user.id)

    def test_unknown_listing(self) -> None:
        with self.assertRaises(ListingNotFoundError):
            booking_service.create_booking(self.db, _request(listing_id=999), "alice")
        self.assertEqual(self.db.query(Booking).count(), 0)

    def test_unknown_user(self) -> None:
        with self.assertRaises(UserNotFoundError):
            booking_service.create_booking(self.db, _request(), "ghost")

    def test_too_many_guests(self) -> None:
        with self.assertRaises(BookingInvalidError):
            booking_service.create_booking(self.db, _request(guests=5), "alice")

    def test_overlapping_dates_conflict(self) -> None:
        booking_service.create_booking(self.db, _request(), "alice")
        add_user(self.db, "bob")
        with self.assertRaises(BookingConflictError):
            booking_service.create_booking(
                self.db,
                _request(check_in=date(2026, 7, 3), check_out=date(2026, 7, 6)),
                "bob",
            )
        self.assertEqual(self.db.query(Booking).count(), 1)

    def test_back_to_back_stays_are_allowed(self) -> None:
        booking_service.create_booking(self.db, _request(), "alice")
        resp = booking_service.create_booking(
            self.db,
            _request(check_in=date(2026, 7, 4), check_out=date(2026, 7, 5)),
            "alice",
        )
        self.assertEqual(resp.nights, 1)

    def test_cancelled_booking_does_not_block(self) -> None:
        booking_service.create_booking(self.db, _request(), "alice")
        self.db.query(Booking).update({Booking.status: STATUS_CANCELLED})
        self.db.commit()
        resp = booking_service.create_booking(self.db, _request(), "alice")
        self.assertEqual(resp.status, "PENDING")


class TestBookingRequestValidation(unittest.TestCase):
    def test_check_out_must_follow_check_in(self) -> None:
        with self.assertRaises(ValidationError):
            _request(check_in=date(2026, 7, 4), check_out=date(2026, 7, 4))

    def test_at_least_one_guest(self) -> None:
        with self.assertRaises(ValidationError):
            _request(guests=0)


class TestRegisterThenBook(BookingServiceTestCase):
    """Register alice, book listing 42, and find exactly that booking in her list."""

    def test_end_to_end(self) -> None:
        before = user_service.count_users(self.db)
        user_service.register_user(
            self.db,
            UserRequest(username="alice", password="secret-pass-1", email="alice@example.com"),
        )
        self.assertEqual(user_service.count_users(self.db), before + 1)

        booking_service.create_booking(self.db, _request(listing_id=42), "alice")

        mine = booking_service.list_my_bookings(self.db, "alice")
        self.assertEqual(len(mine), 1)
        self.assertEqual(mine[0].listing_id, 42)


if __name__ == "__main__":
    unittest.main()
