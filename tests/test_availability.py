from datetime import date

import pytest

from lodging.models.base.enums import BookingStatus

CHECK_IN = date(2025, 6, 1)
CHECK_OUT = date(2025, 6, 3)


def test_all_units_free_in_natural_order(make_room_type, availability):
    room_type = make_room_type(units=("D1", "D2", "D3"))

    result = availability.available_units(room_type, CHECK_IN, CHECK_OUT)

    assert result.units == ["D1", "D2", "D3"]
    assert result.count == 3
    assert not result.fully_blocked


def test_whole_type_block_empties_the_pool(make_room_type, block, availability):
    room_type = make_room_type()
    block(room_type, date(2025, 6, 2))

    result = availability.available_units(room_type, CHECK_IN, CHECK_OUT)

    assert result.units == []
    assert result.fully_blocked
    assert result.blocked_units == ["D1", "D2"]


def test_unit_block_removes_only_that_unit(make_room_type, block, availability):
    room_type = make_room_type()
    block(room_type, CHECK_IN, unit="D1")

    result = availability.available_units(room_type, CHECK_IN, CHECK_OUT)

    assert result.units == ["D2"]
    assert result.blocked_units == ["D1"]


def test_block_on_departure_date_is_not_a_night_of_the_stay(make_room_type, block, availability):
    room_type = make_room_type()
    block(room_type, CHECK_OUT)

    assert availability.available_units(room_type, CHECK_IN, CHECK_OUT).units == ["D1", "D2"]


def test_overlapping_booking_holds_its_unit(make_room_type, make_booking, availability):
    room_type = make_room_type()
    make_booking(room_type, "D1", date(2025, 5, 30), date(2025, 6, 2))

    result = availability.available_units(room_type, CHECK_IN, CHECK_OUT)

    assert result.units == ["D2"]
    assert result.booked_units == ["D1"]


@pytest.mark.parametrize("status", [BookingStatus.CANCELLED, BookingStatus.NO_SHOW, BookingStatus.REJECTED])
def test_releasing_statuses_do_not_hold_units(make_room_type, make_booking, availability, status):
    room_type = make_room_type()
    make_booking(room_type, "D1", CHECK_IN, CHECK_OUT, status=status)

    assert availability.available_units(room_type, CHECK_IN, CHECK_OUT).units == ["D1", "D2"]


@pytest.mark.parametrize("status", [BookingStatus.PENDING, BookingStatus.CHECKED_IN, BookingStatus.CHECKED_OUT])
def test_holding_statuses_keep_units(make_room_type, make_booking, availability, status):
    room_type = make_room_type()
    make_booking(room_type, "D2", CHECK_IN, CHECK_OUT, status=status)

    assert availability.available_units(room_type, CHECK_IN, CHECK_OUT).units == ["D1"]


def test_legacy_single_unit_field_is_honoured(make_room_type, make_booking, availability):
    room_type = make_room_type()
    make_booking(room_type, "D2", CHECK_IN, CHECK_OUT, with_detail=False)

    assert availability.available_units(room_type, CHECK_IN, CHECK_OUT).units == ["D1"]


def test_booking_touching_the_range_does_not_overlap(make_room_type, make_booking, availability):
    room_type = make_room_type()
    make_booking(room_type, "D1", date(2025, 5, 29), CHECK_IN)
    make_booking(room_type, "D2", CHECK_OUT, date(2025, 6, 5))

    assert availability.available_units(room_type, CHECK_IN, CHECK_OUT).units == ["D1", "D2"]


def test_excluded_booking_is_ignored(make_room_type, make_booking, availability):
    room_type = make_room_type()
    booking = make_booking(room_type, "D1", CHECK_IN, CHECK_OUT)

    result = availability.available_units(room_type, CHECK_IN, CHECK_OUT, exclude_booking_id=booking.id)

    assert result.units == ["D1", "D2"]


def test_bookings_of_other_room_types_are_ignored(make_room_type, make_booking, availability):
    deluxe = make_room_type()
    suite = make_room_type(name="Suite", units=("D1",))
    make_booking(suite, "D1", CHECK_IN, CHECK_OUT)

    assert availability.available_units(deluxe, CHECK_IN, CHECK_OUT).units == ["D1", "D2"]


def test_repeated_calls_return_the_same_result(make_room_type, make_booking, block, availability):
    room_type = make_room_type(units=("D1", "D2", "D3"))
    make_booking(room_type, "D1", CHECK_IN, CHECK_OUT)
    block(room_type, CHECK_IN, unit="D3")

    first = availability.available_units(room_type, CHECK_IN, CHECK_OUT)
    second = availability.available_units(room_type, CHECK_IN, CHECK_OUT)

    assert first.units == second.units == ["D2"]
