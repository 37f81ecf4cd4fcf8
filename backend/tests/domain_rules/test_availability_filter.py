"""
可售房间筛选测试
"""
from types import SimpleNamespace
from datetime import date
from decimal import Decimal

from hms.domain.lifecycle import available_rooms, room_type_options, stays_overlap
from hms.models.ontology import RoomStatus, BookingStatus


def make_room(id, number, status, room_type_id, type_name, price):
    return SimpleNamespace(
        id=id, number=number, status=status, room_type_id=room_type_id,
        type_name=type_name, price=Decimal(price)
    )


def make_booking(id, room_id, check_in, check_out, status=BookingStatus.RESERVATION):
    return SimpleNamespace(
        id=id, room_id=room_id, check_in=check_in, check_out=check_out, booking_status=status
    )


ROOMS = [
    make_room(1, "101", RoomStatus.AVAILABLE, 1, "Deluxe", "500000"),
    make_room(2, "102", RoomStatus.RESERVED, 1, "Deluxe", "450000"),
    make_room(3, "103", RoomStatus.AVAILABLE, 1, "Deluxe", "480000"),
    make_room(4, "201", RoomStatus.AVAILABLE, 2, "Suite", "900000"),
    make_room(5, "202", RoomStatus.CLEANING, 2, "Suite", "100000"),
]


class TestAvailableRooms:
    """按存储状态与房型筛选"""

    def test_only_available_rooms_of_type(self):
        result = available_rooms(ROOMS, room_type_id=1)
        assert [r.number for r in result] == ["101", "103"]

    def test_without_type_filter(self):
        result = available_rooms(ROOMS)
        assert [r.number for r in result] == ["101", "103", "201"]

    def test_keeps_input_order(self):
        result = available_rooms(list(reversed(ROOMS)))
        assert [r.number for r in result] == ["201", "103", "101"]

    def test_unknown_type_is_empty(self):
        assert available_rooms(ROOMS, room_type_id=99) == ()

    def test_option_fields(self):
        option = available_rooms(ROOMS, room_type_id=2)[0]
        assert option.id == 4
        assert option.type_name == "Suite"
        assert option.price == Decimal("900000")
        assert option.conflicting_booking_ids == ()

    def test_overlapping_bookings_are_reported(self):
        """存储状态为 available 但日期冲突的房间仍返回，附带冲突记录"""
        bookings = [
            make_booking(10, 1, date(2024, 1, 11), date(2024, 1, 13)),
            make_booking(11, 1, date(2024, 1, 12), date(2024, 1, 14)),
            make_booking(12, 3, date(2024, 1, 1), date(2024, 1, 3), BookingStatus.CHECKED_IN),
            make_booking(13, 1, date(2024, 1, 10), date(2024, 1, 12), BookingStatus.CHECKED_OUT),
        ]
        result = available_rooms(ROOMS, 1, bookings, date(2024, 1, 10), date(2024, 1, 12))
        by_number = {r.number: r for r in result}
        assert by_number["101"].conflicting_booking_ids == (10,)
        assert by_number["103"].conflicting_booking_ids == ()

    def test_input_not_mutated(self):
        before = [(r.id, r.status) for r in ROOMS]
        available_rooms(ROOMS, 1)
        assert [(r.id, r.status) for r in ROOMS] == before


def test_stays_overlap_back_to_back():
    """离店日当天可再入住"""
    assert not stays_overlap(date(2024, 1, 10), date(2024, 1, 12), date(2024, 1, 12), date(2024, 1, 14))
    assert stays_overlap(date(2024, 1, 10), date(2024, 1, 12), date(2024, 1, 11), date(2024, 1, 12))


def test_room_type_options_use_cheapest_available_room():
    options = room_type_options(ROOMS)
    assert [(o.name, o.price) for o in options] == [
        ("Deluxe", Decimal("480000")),
        ("Suite", Decimal("900000")),
    ]
