"""
Tests for the booking services
Conflict detection, aggregate building and lifecycle (services/booking_service.py)
"""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

import pytest
from datetime import date, datetime
from decimal import Decimal

from models import Booking, BookingExtra, BookingRoom, BookingStatus, Extra, Payment
from services.booking_service import BookingBuilder, BookingService, ReservationValidator
from services.payment_service import PaymentService
from utils.errors import (
    AlreadyCheckedIn, BookingConflict, InvalidDateRange, InvalidPrice, MissingField,
    NotCheckInDate, NotFoundError, StateError, ValidationError,
)


def d(day, month=1, year=2024):
    return date(year, month, day)


@pytest.fixture
def service(db_session):
    return BookingService(db_session, today=lambda: d(1))


class TestCreateBooking:

    def test_creates_pending_booking_with_computed_total(self, service, rooms, guests, make_payload):
        payload = make_payload(
            guests[0].id,
            (rooms[0].id, d(1), d(5), 6000, 500),
            (rooms[1].id, d(1), d(3), 3000),
            extras=[{"label": "Airport pickup", "price": 800, "quantity": 2}],
        )
        booking = service.create_booking(payload)

        assert booking.status == BookingStatus.PENDING
        assert booking.total_price == Decimal("10100.00")
        assert len(booking.booking_rooms) == 2
        assert booking.booking_extras[0].label == "Airport pickup"
        assert booking.booking_extras[0].quantity == 2

    def test_client_total_is_ignored(self, service, rooms, guests, make_payload):
        payload = make_payload(guests[0].id, (rooms[0].id, d(1), d(2), 1500), total_price=1)
        assert service.create_booking(payload).total_price == Decimal("1500.00")

    def test_requires_at_least_one_room(self, service, guests, make_payload):
        with pytest.raises(MissingField):
            service.create_booking(make_payload(guests[0].id))

    def test_missing_segment_fields(self, service, rooms, guests, make_payload):
        payload = make_payload(guests[0].id, (rooms[0].id, d(1), d(3), 1000))
        payload.booking_rooms[0].price = None
        with pytest.raises(MissingField) as exc:
            service.create_booking(payload)
        assert exc.value.details["fields"] == ["price"]

    def test_checkout_must_follow_checkin(self, service, rooms, guests, make_payload):
        with pytest.raises(InvalidDateRange):
            service.create_booking(make_payload(guests[0].id, (rooms[0].id, d(5), d(5), 1000)))

    def test_non_positive_net_price(self, service, rooms, guests, make_payload):
        with pytest.raises(InvalidPrice):
            service.create_booking(make_payload(guests[0].id, (rooms[0].id, d(1), d(3), 1000, 1000)))

    def test_unknown_guest_and_room(self, service, rooms, guests, make_payload):
        with pytest.raises(NotFoundError):
            service.create_booking(make_payload(999, (rooms[0].id, d(1), d(3), 1000)))
        with pytest.raises(NotFoundError):
            service.create_booking(make_payload(guests[0].id, (999, d(1), d(3), 1000)))

    def test_catalog_extra_copies_label_and_price(self, db_session, service, rooms, guests, make_payload):
        tour = Extra(name="Island hopping", price=Decimal("1200.00"))
        db_session.add(tour)
        db_session.commit()

        booking = service.create_booking(make_payload(
            guests[0].id, (rooms[0].id, d(1), d(2), 1500),
            extras=[{"extraId": tour.id, "quantity": 2}],
        ))
        extra = booking.booking_extras[0]
        assert (extra.label, extra.price, extra.extra_id) == ("Island hopping", Decimal("1200.00"), tour.id)
        assert booking.total_price == Decimal("3900.00")

    def test_soft_deleted_catalog_extra_is_not_found(self, db_session, service, rooms, guests, make_payload):
        tour = Extra(name="Old tour", price=Decimal("100"), deleted_at=datetime(2023, 12, 1))
        db_session.add(tour)
        db_session.commit()
        with pytest.raises(NotFoundError):
            service.create_booking(make_payload(
                guests[0].id, (rooms[0].id, d(1), d(2), 1500), extras=[{"extraId": tour.id}],
            ))


class TestConflicts:

    def test_no_double_booking(self, service, rooms, guests, make_payload):
        room = rooms[0]
        service.create_booking(make_payload(guests[0].id, (room.id, d(1), d(5), 4000)))

        with pytest.raises(BookingConflict):
            service.create_booking(make_payload(guests[1].id, (room.id, d(3), d(6), 3000)))

        # same-day turnover
        booking = service.create_booking(make_payload(guests[1].id, (room.id, d(5), d(8), 3000)))
        assert booking.id is not None

    def test_conflict_names_room_guest_and_dates(self, service, rooms, guests, make_payload):
        existing = service.create_booking(make_payload(guests[0].id, (rooms[0].id, d(1), d(5), 4000)))

        with pytest.raises(BookingConflict) as exc:
            service.create_booking(make_payload(guests[1].id, (rooms[0].id, d(4), d(6), 2000)))

        message = exc.value.message
        assert "101" in message and "Alice Santos" in message
        assert "2024-01-01" in message and "2024-01-05" in message
        assert exc.value.details == [{
            "room_number": "101",
            "guest_name": "Alice Santos",
            "check_in": "2024-01-01",
            "check_out": "2024-01-05",
            "booking_id": existing.id,
            "same_guest": False,
        }]

    def test_same_guest_conflict_reads_as_duplicate(self, service, rooms, guests, make_payload):
        service.create_booking(make_payload(guests[0].id, (rooms[0].id, d(1), d(5), 4000)))
        with pytest.raises(BookingConflict) as exc:
            service.create_booking(make_payload(guests[0].id, (rooms[0].id, d(2), d(3), 1000)))
        assert "duplicate" in exc.value.message.lower()
        assert exc.value.details[0]["same_guest"] is True

    def test_rooms_are_validated_independently(self, service, rooms, guests, make_payload):
        service.create_booking(make_payload(guests[0].id, (rooms[0].id, d(1), d(5), 4000)))
        booking = service.create_booking(make_payload(
            guests[1].id, (rooms[1].id, d(1), d(5), 4000), (rooms[2].id, d(2), d(4), 2000),
        ))
        assert len(booking.booking_rooms) == 2

    def test_same_room_twice_in_one_request(self, service, rooms, guests, make_payload):
        with pytest.raises(BookingConflict):
            service.create_booking(make_payload(
                guests[0].id, (rooms[0].id, d(1), d(4), 3000), (rooms[0].id, d(3), d(6), 3000),
            ))

    def test_cancelled_booking_frees_the_room(self, service, rooms, guests, make_payload):
        first = service.create_booking(make_payload(guests[0].id, (rooms[0].id, d(1), d(5), 4000)))
        service.cancel(first.id)
        booking = service.create_booking(make_payload(guests[1].id, (rooms[0].id, d(2), d(4), 2000)))
        assert booking.id != first.id

    def test_validator_excludes_given_booking(self, db_session, service, rooms, guests, make_payload):
        booking = service.create_booking(make_payload(guests[0].id, (rooms[0].id, d(1), d(5), 4000)))
        validator = ReservationValidator(db_session)

        assert validator.validate(rooms[0].id, d(1), d(5), guests[1].id).has_conflicts
        report = validator.validate(rooms[0].id, d(1), d(5), guests[1].id, exclude_booking_id=booking.id)
        assert not report.has_conflicts

    def test_validator_rejects_empty_range(self, db_session, rooms, guests):
        with pytest.raises(InvalidDateRange):
            ReservationValidator(db_session).validate(rooms[0].id, d(5), d(1), guests[0].id)


class TestUpdateBooking:

    def test_keeping_same_dates_is_not_a_self_conflict(self, service, rooms, guests, make_payload):
        booking = service.create_booking(make_payload(guests[0].id, (rooms[0].id, d(1), d(5), 4000)))
        updated = service.update_booking(
            booking.id, make_payload(guests[0].id, (rooms[0].id, d(1), d(5), 3500), note="Late arrival"),
        )
        assert updated.total_price == Decimal("3500.00")
        assert updated.note == "Late arrival"

    def test_empty_room_list_keeps_booking_and_payments(self, db_session, service, rooms, guests, make_payload):
        booking = service.create_booking(make_payload(guests[0].id, (rooms[0].id, d(1), d(5), 4000)))
        PaymentService(db_session).record_payment(booking.id, "partial", Decimal("500"))

        updated = service.update_booking(booking.id, make_payload(guests[0].id))

        assert updated.booking_rooms == []
        assert updated.total_price == Decimal("0.00")
        assert db_session.query(BookingRoom).filter_by(booking_id=booking.id).count() == 0
        assert db_session.query(Booking).filter_by(id=booking.id).count() == 1
        assert db_session.query(Payment).filter_by(booking_id=booking.id).count() == 1

    def test_replaces_rooms_and_extras(self, db_session, service, rooms, guests, make_payload):
        booking = service.create_booking(make_payload(
            guests[0].id, (rooms[0].id, d(1), d(5), 4000),
            extras=[{"label": "Breakfast", "price": 300}],
        ))
        service.update_booking(booking.id, make_payload(guests[0].id, (rooms[1].id, d(2), d(4), 2000)))

        segments = db_session.query(BookingRoom).filter_by(booking_id=booking.id).all()
        assert [(s.room_id, s.check_in_date) for s in segments] == [(rooms[1].id, d(2))]
        assert db_session.query(BookingExtra).filter_by(booking_id=booking.id).count() == 0

    def test_failed_update_leaves_prior_state(self, db_session, service, rooms, guests, make_payload):
        mine = service.create_booking(make_payload(guests[0].id, (rooms[0].id, d(1), d(5), 4000)))
        service.create_booking(make_payload(guests[1].id, (rooms[1].id, d(1), d(5), 4000)))

        with pytest.raises(BookingConflict):
            service.update_booking(mine.id, make_payload(
                guests[0].id, (rooms[0].id, d(1), d(5), 4000), (rooms[1].id, d(3), d(6), 3000),
            ))

        reloaded = service.get_booking(mine.id)
        assert [s.room_id for s in reloaded.booking_rooms] == [rooms[0].id]
        assert reloaded.total_price == Decimal("4000.00")

    def test_unknown_booking(self, service, guests, make_payload):
        with pytest.raises(NotFoundError):
            service.update_booking(999, make_payload(guests[0].id))


class TestDeleteBooking:

    def test_hard_delete_cascades(self, db_session, service, rooms, guests, make_payload):
        booking = service.create_booking(make_payload(
            guests[0].id, (rooms[0].id, d(1), d(5), 4000), extras=[{"label": "Kayak", "price": 500}],
        ))
        PaymentService(db_session).record_payment(booking.id, "partial", Decimal("1000"))

        service.delete_booking(booking.id)

        assert db_session.query(Booking).count() == 0
        assert db_session.query(BookingRoom).count() == 0
        assert db_session.query(BookingExtra).count() == 0
        assert db_session.query(Payment).count() == 0

    def test_unknown_booking(self, service):
        with pytest.raises(NotFoundError):
            service.delete_booking(42)


class TestLifecycle:

    def _booking(self, service, rooms, guests, make_payload, *segments):
        return service.create_booking(make_payload(guests[0].id, *segments))

    def test_check_in_gate(self, db_session, rooms, guests, make_payload):
        creator = BookingService(db_session)
        booking = creator.create_booking(make_payload(guests[0].id, (rooms[0].id, d(2), d(5), 3000)))

        with pytest.raises(NotCheckInDate) as exc:
            BookingService(db_session, today=lambda: d(1)).check_in(booking.id, "https://img/proof.jpg")
        assert exc.value.details["checkInDate"] == "2024-01-02"

        checked_in = BookingService(db_session, today=lambda: d(2)).check_in(booking.id, "https://img/proof.jpg")
        assert checked_in.status == BookingStatus.CHECKED_IN
        assert checked_in.proof_image_url == "https://img/proof.jpg"

    def test_any_room_start_date_allows_check_in(self, db_session, rooms, guests, make_payload):
        booking = BookingService(db_session).create_booking(make_payload(
            guests[0].id, (rooms[0].id, d(2), d(5), 3000), (rooms[1].id, d(4), d(6), 2000),
        ))
        checked_in = BookingService(db_session, today=lambda: d(4)).check_in(booking.id, "proof.png")
        assert checked_in.status == BookingStatus.CHECKED_IN

    def test_double_check_in(self, service, rooms, guests, make_payload):
        booking = self._booking(service, rooms, guests, make_payload, (rooms[0].id, d(1), d(3), 2000))
        service.check_in(booking.id, "proof.png")
        with pytest.raises(AlreadyCheckedIn):
            service.check_in(booking.id, "proof.png")

    def test_proof_is_required(self, service, rooms, guests, make_payload):
        booking = self._booking(service, rooms, guests, make_payload, (rooms[0].id, d(1), d(3), 2000))
        with pytest.raises(ValidationError):
            service.check_in(booking.id, "   ")

    def test_check_out_and_terminal_state(self, service, rooms, guests, make_payload):
        booking = self._booking(service, rooms, guests, make_payload, (rooms[0].id, d(1), d(3), 2000))
        with pytest.raises(StateError):
            service.check_out(booking.id)

        service.check_in(booking.id, "proof.png")
        assert service.check_out(booking.id).status == BookingStatus.CHECKED_OUT

        with pytest.raises(StateError):
            service.check_in(booking.id, "proof.png")
        with pytest.raises(StateError):
            service.cancel(booking.id)

    def test_cancel_only_from_pending(self, service, rooms, guests, make_payload):
        booking = self._booking(service, rooms, guests, make_payload, (rooms[0].id, d(1), d(3), 2000))
        assert service.cancel(booking.id).status == BookingStatus.CANCELLED
        with pytest.raises(StateError):
            service.cancel(booking.id)
        with pytest.raises(StateError):
            service.check_in(booking.id, "proof.png")


class TestListBookings:

    def test_filters_by_room_and_dates(self, service, rooms, guests, make_payload):
        early = service.create_booking(make_payload(guests[0].id, (rooms[0].id, d(1), d(5), 4000)))
        late = service.create_booking(make_payload(guests[1].id, (rooms[1].id, d(10), d(12), 2000)))

        assert [b.id for b in service.list_bookings()] == [early.id, late.id]
        assert [b.id for b in service.list_bookings(room_id=rooms[1].id)] == [late.id]
        assert [b.id for b in service.list_bookings(start=d(6), end=d(9))] == []
        # inclusive day range: a stay checking out on the start day is listed
        assert [b.id for b in service.list_bookings(start=d(5), end=d(9))] == [early.id]
        assert [b.id for b in service.list_bookings(room_id=rooms[0].id, start=d(10))] == []

    def test_start_after_end(self, service):
        with pytest.raises(InvalidDateRange):
            service.list_bookings(start=d(9), end=d(1))


class TestBookingBuilder:

    def test_extra_requires_label_and_price(self, db_session):
        with pytest.raises(MissingField):
            BookingBuilder(db_session).resolve_extras([{"label": "Spa"}])

    def test_extra_quantity(self, db_session):
        with pytest.raises(ValidationError):
            BookingBuilder(db_session).resolve_extras([{"label": "Spa", "price": 100, "quantity": 0}])

    def test_segments_are_quantized(self, db_session, rooms):
        checked = BookingBuilder(db_session).check_segments([{
            "room_id": rooms[0].id, "check_in_date": d(1), "check_out_date": d(2),
            "price": "1499.999", "discount": None,
        }])
        assert checked[0]["price"] == Decimal("1500.00")
        assert checked[0]["discount"] == Decimal("0.00")
