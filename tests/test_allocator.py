from datetime import date, time

import pytest

from lodging.core.exceptions import ErrorCode, InsufficientInventoryError, UnitUnavailableError
from lodging.services.inventory.allocator import AllocationRequest

CHECK_IN = date(2025, 6, 1)
CHECK_OUT = date(2025, 6, 3)


def request_for(room_type, **kwargs):
    kwargs.setdefault("check_in", CHECK_IN)
    kwargs.setdefault("check_out", CHECK_OUT)
    return AllocationRequest(room_type=room_type, **kwargs)


def test_picks_first_free_units_in_natural_order(make_room_type, allocator):
    room_type = make_room_type()

    assert allocator.allocate(request_for(room_type, quantity=2)) == ["D1", "D2"]


def test_insufficient_inventory_reports_free_units(make_room_type, make_booking, allocator):
    room_type = make_room_type()
    make_booking(room_type, "D1", CHECK_IN, CHECK_OUT)

    with pytest.raises(InsufficientInventoryError) as exc_info:
        allocator.allocate(request_for(room_type, quantity=2))

    error = exc_info.value
    assert error.error_code == ErrorCode.INSUFFICIENT_INVENTORY
    assert error.available == 1
    assert error.alternatives == ["D2"]
    assert error.details["requested"] == 2


def test_requested_unit_is_honoured_first(make_room_type, allocator):
    room_type = make_room_type(units=("D1", "D2", "D3"))

    assert allocator.allocate(request_for(room_type, quantity=2, requested_unit="D3")) == ["D3", "D1"]


def test_unknown_requested_unit_is_rejected(make_room_type, allocator):
    room_type = make_room_type()

    with pytest.raises(UnitUnavailableError) as exc_info:
        allocator.allocate(request_for(room_type, requested_unit="X9"))

    assert "does not exist" in exc_info.value.reason
    assert exc_info.value.alternatives == ["D1", "D2"]


def test_booked_requested_unit_is_rejected_with_alternatives(make_room_type, make_booking, allocator):
    room_type = make_room_type()
    make_booking(room_type, "D1", CHECK_IN, CHECK_OUT)

    with pytest.raises(UnitUnavailableError) as exc_info:
        allocator.allocate(request_for(room_type, requested_unit="D1"))

    assert exc_info.value.reason == "unit is already booked for these dates"
    assert exc_info.value.alternatives == ["D2"]
    assert exc_info.value.details["available"] == 1


def test_blocked_requested_unit_is_rejected(make_room_type, block, allocator):
    room_type = make_room_type()
    block(room_type, CHECK_IN, unit="D2")

    with pytest.raises(UnitUnavailableError) as exc_info:
        allocator.allocate(request_for(room_type, requested_unit="D2"))

    assert exc_info.value.reason == "unit is blocked for these dates"


def test_requested_unit_with_same_day_conflict_is_rejected(make_room_type, make_booking, allocator):
    room_type = make_room_type()
    existing = make_booking(room_type, "D1", date(2025, 5, 30), CHECK_IN, check_out_time=time(14, 0))

    with pytest.raises(UnitUnavailableError) as exc_info:
        allocator.allocate(request_for(room_type, requested_unit="D1", check_in_time=time(10, 0)))

    assert exc_info.value.details["conflicting_booking_id"] == existing.id
    assert exc_info.value.alternatives == ["D2"]


def test_same_day_conflict_unit_is_skipped_by_automatic_allocation(make_room_type, make_booking, allocator):
    room_type = make_room_type()
    make_booking(room_type, "D1", date(2025, 5, 30), CHECK_IN, check_out_time=time(14, 0))

    units = allocator.allocate(request_for(room_type, check_in_time=time(10, 0)))

    assert units == ["D2"]


def test_same_day_turnover_keeps_natural_order(make_room_type, make_booking, allocator):
    room_type = make_room_type()
    make_booking(room_type, "D1", date(2025, 5, 30), CHECK_IN, check_out_time=time(12, 0))

    units = allocator.allocate(request_for(room_type, check_in_time=time(14, 0)))

    assert units == ["D1"]


def test_preferred_units_come_before_natural_order(make_room_type, allocator):
    room_type = make_room_type(units=("D1", "D2", "D3"))

    units = allocator.allocate(request_for(room_type, quantity=2, preferred_units=["D3"]))

    assert units == ["D3", "D1"]


def test_allocation_does_not_write(make_room_type, allocator, db):
    room_type = make_room_type()

    allocator.allocate(request_for(room_type))
    allocator.allocate(request_for(room_type))

    assert not db.new
