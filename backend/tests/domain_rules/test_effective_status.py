"""
房间展示状态推导测试
"""
from types import SimpleNamespace
from datetime import date

import pytest

from hms.domain.lifecycle import (
    derive_effective_status, build_status_board, ensure_can_check_out, ensure_transition,
    room_status_for_booking, BookingStateError
)
from hms.models.ontology import RoomStatus, BookingStatus


def make_room(status, id=1):
    return SimpleNamespace(id=id, number=str(100 + id), status=status, type_name="Deluxe", room_type_id=1)


def make_booking(id, status, check_in=date(2024, 1, 10), check_out=date(2024, 1, 12), room_id=1):
    return SimpleNamespace(
        id=id, name=f"guest-{id}", room_id=room_id, booking_status=status,
        payment_status="unpaid", check_in=check_in, check_out=check_out
    )


class TestDeriveEffectiveStatus:
    """展示状态推导"""

    def test_no_date_returns_stored_status(self):
        room = make_room(RoomStatus.RESERVED)
        assert derive_effective_status(room, [], None) == RoomStatus.RESERVED

    def test_no_match_returns_stored_status(self):
        room = make_room(RoomStatus.AVAILABLE)
        bookings = [make_booking(1, BookingStatus.CHECKED_IN)]
        assert derive_effective_status(room, bookings, date(2024, 2, 1)) == RoomStatus.AVAILABLE

    @pytest.mark.parametrize("on_date", [None, date(2024, 1, 10), date(2024, 3, 1)])
    def test_cleaning_always_wins(self, on_date):
        room = make_room(RoomStatus.CLEANING)
        bookings = [make_booking(1, BookingStatus.CHECKED_IN)]
        assert derive_effective_status(room, bookings, on_date) == RoomStatus.CLEANING

    def test_checked_in_overrides_reservation(self):
        room = make_room(RoomStatus.AVAILABLE)
        bookings = [
            make_booking(1, BookingStatus.RESERVATION),
            make_booking(2, BookingStatus.CHECKED_IN, date(2024, 1, 11), date(2024, 1, 13)),
        ]
        assert derive_effective_status(room, bookings, date(2024, 1, 11)) == RoomStatus.OCCUPIED

    def test_reservation_only_is_reserved(self):
        room = make_room(RoomStatus.AVAILABLE)
        bookings = [make_booking(1, BookingStatus.RESERVATION)]
        assert derive_effective_status(room, bookings, date(2024, 1, 10)) == RoomStatus.RESERVED

    def test_check_out_day_is_included(self):
        room = make_room(RoomStatus.AVAILABLE)
        bookings = [make_booking(1, BookingStatus.CHECKED_IN)]
        assert derive_effective_status(room, bookings, date(2024, 1, 12)) == RoomStatus.OCCUPIED
        assert derive_effective_status(room, bookings, date(2024, 1, 13)) == RoomStatus.AVAILABLE

    def test_checked_out_booking_shows_reserved(self):
        room = make_room(RoomStatus.AVAILABLE)
        bookings = [make_booking(1, BookingStatus.CHECKED_OUT)]
        assert derive_effective_status(room, bookings, date(2024, 1, 11)) == RoomStatus.RESERVED

    def test_checked_out_with_checked_in_is_occupied(self):
        room = make_room(RoomStatus.AVAILABLE)
        bookings = [
            make_booking(1, BookingStatus.CHECKED_OUT),
            make_booking(2, BookingStatus.CHECKED_IN, date(2024, 1, 11), date(2024, 1, 13)),
        ]
        assert derive_effective_status(room, bookings, date(2024, 1, 11)) == RoomStatus.OCCUPIED

    def test_other_rooms_bookings_are_ignored(self):
        room = make_room(RoomStatus.AVAILABLE)
        bookings = [make_booking(1, BookingStatus.CHECKED_IN, room_id=2)]
        assert derive_effective_status(room, bookings, date(2024, 1, 11)) == RoomStatus.AVAILABLE

    def test_idempotent_and_pure(self):
        room = make_room(RoomStatus.AVAILABLE)
        bookings = [make_booking(1, BookingStatus.RESERVATION)]
        first = derive_effective_status(room, bookings, date(2024, 1, 11))
        second = derive_effective_status(room, bookings, date(2024, 1, 11))
        assert first == second == RoomStatus.RESERVED
        assert room.status == RoomStatus.AVAILABLE
        assert bookings[0].booking_status == BookingStatus.RESERVATION


def test_status_board_labels_divergence():
    rooms = [make_room(RoomStatus.AVAILABLE, 1), make_room(RoomStatus.OCCUPIED, 2)]
    bookings = [
        make_booking(2, BookingStatus.CHECKED_IN, date(2024, 1, 11), date(2024, 1, 13)),
        make_booking(1, BookingStatus.RESERVATION),
    ]
    board = build_status_board(rooms, bookings, date(2024, 1, 11))

    first, second = board
    assert first.stored_status == RoomStatus.AVAILABLE
    assert first.display_status == RoomStatus.OCCUPIED
    assert first.diverged
    assert [b.id for b in first.bookings] == [1, 2]
    assert second.display_status == RoomStatus.OCCUPIED
    assert not second.diverged
    assert second.bookings == ()


class TestTransitions:
    """状态迁移"""

    def test_room_status_for_new_booking(self):
        assert room_status_for_booking(BookingStatus.CHECKED_IN) == RoomStatus.OCCUPIED
        assert room_status_for_booking(BookingStatus.RESERVATION) == RoomStatus.RESERVED
        with pytest.raises(ValueError):
            room_status_for_booking(BookingStatus.CHECKED_OUT)

    def test_only_checked_in_can_check_out(self):
        ensure_can_check_out(make_booking(1, BookingStatus.CHECKED_IN))
        for status in (BookingStatus.RESERVATION, BookingStatus.CHECKED_OUT):
            with pytest.raises(BookingStateError):
                ensure_can_check_out(make_booking(1, status))

    def test_reservation_cannot_skip_to_checked_out(self):
        ensure_transition(BookingStatus.RESERVATION, BookingStatus.CHECKED_IN)
        with pytest.raises(BookingStateError):
            ensure_transition(BookingStatus.RESERVATION, BookingStatus.CHECKED_OUT)
        with pytest.raises(BookingStateError):
            ensure_transition(BookingStatus.CHECKED_OUT, BookingStatus.CHECKED_IN)
