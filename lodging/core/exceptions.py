"""
Custom Exceptions for the Lodging Reservation Engine

This module defines custom exception classes used throughout the application
for better error handling and debugging. Every booking rejection carries a
human-readable message plus the details a caller needs to offer a retry
(available count, alternative units).
"""

from datetime import date
from typing import Any, Dict, List, Optional, Sequence
from enum import Enum


class ErrorCode(str, Enum):
    """Standard error codes for the application"""
    # General errors
    INTERNAL_ERROR = "INTERNAL_ERROR"
    INVALID_REQUEST = "INVALID_REQUEST"
    RESOURCE_NOT_FOUND = "RESOURCE_NOT_FOUND"
    OPERATION_FAILED = "OPERATION_FAILED"

    # Validation errors
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_DATE_RANGE = "INVALID_DATE_RANGE"

    # Database errors
    DATABASE_ERROR = "DATABASE_ERROR"
    DUPLICATE_ENTRY = "DUPLICATE_ENTRY"

    # Inventory and booking errors
    ROOM_TYPE_NOT_FOUND = "ROOM_TYPE_NOT_FOUND"
    AMBIGUOUS_ROOM_TYPE = "AMBIGUOUS_ROOM_TYPE"
    BOOKING_NOT_FOUND = "BOOKING_NOT_FOUND"
    INSUFFICIENT_INVENTORY = "INSUFFICIENT_INVENTORY"
    UNIT_UNAVAILABLE = "UNIT_UNAVAILABLE"
    CAPACITY_EXCEEDED = "CAPACITY_EXCEEDED"
    CONCURRENT_ALLOCATION_CONFLICT = "CONCURRENT_ALLOCATION_CONFLICT"
    INVALID_STATUS_TRANSITION = "INVALID_STATUS_TRANSITION"

    # Payment errors
    PAYMENT_FAILED = "PAYMENT_FAILED"
    PAYMENT_AMOUNT_MISMATCH = "PAYMENT_AMOUNT_MISMATCH"
    PAYMENT_NOT_FOUND = "PAYMENT_NOT_FOUND"
    PAYMENT_REQUIRES_REFUND = "PAYMENT_REQUIRES_REFUND"

    # External service errors
    EXTERNAL_SERVICE_ERROR = "EXTERNAL_SERVICE_ERROR"
    PAYMENT_GATEWAY_ERROR = "PAYMENT_GATEWAY_ERROR"
    NOTIFICATION_ERROR = "NOTIFICATION_ERROR"


class BaseAppException(Exception):
    """
    Base exception class for all application exceptions.

    Provides consistent error handling across the application with
    structured error information.
    """

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        details: Optional[Dict[str, Any]] = None,
        status_code: int = 500
    ):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        self.status_code = status_code
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary format"""
        return {
            "error": {
                "message": self.message,
                "code": self.error_code.value,
                "details": self.details,
                "type": self.__class__.__name__
            }
        }

    def __str__(self) -> str:
        return f"{self.error_code.value}: {self.message}"

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(message='{self.message}', error_code='{self.error_code.value}')"


# ========================================
# General Application Exceptions
# ========================================

class ValidationError(BaseAppException):
    """Exception raised when data validation fails"""

    def __init__(
        self,
        message: str = "Validation failed",
        field_errors: Optional[Dict[str, List[str]]] = None,
        error_code: ErrorCode = ErrorCode.VALIDATION_ERROR,
        status_code: int = 422
    ):
        details = {"field_errors": field_errors} if field_errors else {}
        super().__init__(message, error_code, details, status_code)


class ResourceNotFoundError(BaseAppException):
    """Exception raised when a requested resource is not found"""

    def __init__(
        self,
        resource_type: str = "Resource",
        resource_id: Optional[str] = None,
        message: Optional[str] = None,
        error_code: ErrorCode = ErrorCode.RESOURCE_NOT_FOUND,
    ):
        if not message:
            message = f"{resource_type} not found"
            if resource_id:
                message += f" (ID: {resource_id})"

        details = {
            "resource_type": resource_type,
            "resource_id": resource_id
        }
        super().__init__(message, error_code, details, 404)


class RoomTypeNotFoundError(ResourceNotFoundError):
    """Exception raised when a room type reference resolves to nothing"""

    def __init__(self, reference: Optional[str] = None, message: Optional[str] = None):
        super().__init__(
            "Room type",
            reference,
            message=message or f"Room type '{reference}' not found",
            error_code=ErrorCode.ROOM_TYPE_NOT_FOUND,
        )


class AmbiguousRoomTypeError(RoomTypeNotFoundError):
    """Exception raised when a room type reference matches several room types"""

    def __init__(self, reference: str, candidates: Sequence[str]):
        super().__init__(
            reference,
            message=(
                f"Room type '{reference}' is ambiguous; "
                f"matches: {', '.join(candidates)}"
            ),
        )
        self.error_code = ErrorCode.AMBIGUOUS_ROOM_TYPE
        self.status_code = 409
        self.details["candidates"] = list(candidates)


class BookingNotFoundError(ResourceNotFoundError):
    """Exception raised when a booking does not exist"""

    def __init__(self, booking_id: Optional[str] = None):
        super().__init__("Booking", booking_id, error_code=ErrorCode.BOOKING_NOT_FOUND)


class RepositoryError(BaseAppException):
    """Exception raised when a persistence operation fails"""

    def __init__(self, message: str = "Database operation failed", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, ErrorCode.DATABASE_ERROR, details, 500)


class EntityAlreadyExistsError(BaseAppException):
    """Exception raised on a duplicate insert"""

    def __init__(self, message: str = "Entity already exists", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, ErrorCode.DUPLICATE_ENTRY, details, 409)


# ========================================
# Booking Exceptions
# ========================================

class BookingError(BaseAppException):
    """Base class for booking-related exceptions"""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode,
        booking_id: Optional[str] = None,
        room_type_id: Optional[str] = None,
        status_code: int = 400
    ):
        details = {
            "booking_id": booking_id,
            "room_type_id": room_type_id
        }
        super().__init__(message, error_code, details, status_code)


class InvalidDateRangeError(BookingError):
    """Exception raised when check-out is not after check-in"""

    def __init__(
        self,
        message: str = "Check-out date must be after check-in date",
        check_in: Optional[date] = None,
        check_out: Optional[date] = None
    ):
        super().__init__(message, ErrorCode.INVALID_DATE_RANGE, status_code=422)
        self.details.update({
            "check_in": check_in.isoformat() if check_in else None,
            "check_out": check_out.isoformat() if check_out else None,
        })


class GuestCountExceedsCapacityError(BookingError):
    """Exception raised when the guest count exceeds what the units can hold"""

    def __init__(self, num_guests: int, capacity: int, room_type_id: Optional[str] = None):
        super().__init__(
            f"{num_guests} guests exceed the capacity of the selected rooms ({capacity})",
            ErrorCode.CAPACITY_EXCEEDED,
            room_type_id=room_type_id,
            status_code=422,
        )
        self.details.update({"num_guests": num_guests, "capacity": capacity})


class InsufficientInventoryError(BookingError):
    """Exception raised when fewer units are free than were requested"""

    def __init__(
        self,
        requested: int,
        available: int,
        room_type_id: Optional[str] = None,
        room_type_name: Optional[str] = None,
        alternatives: Optional[Sequence[str]] = None,
    ):
        label = room_type_name or "this room type"
        super().__init__(
            f"Only {available} unit(s) of {label} available, {requested} requested",
            ErrorCode.INSUFFICIENT_INVENTORY,
            room_type_id=room_type_id,
            status_code=409,
        )
        self.requested = requested
        self.available = available
        self.alternatives = list(alternatives or [])
        self.details.update({
            "requested": requested,
            "available": available,
            "alternatives": self.alternatives,
        })


class UnitUnavailableError(BookingError):
    """Exception raised when a specific unit cannot be assigned"""

    def __init__(
        self,
        unit_number: str,
        reason: str,
        alternatives: Optional[Sequence[str]] = None,
        room_type_id: Optional[str] = None,
        conflicting_booking_id: Optional[str] = None,
    ):
        super().__init__(
            f"Unit {unit_number} is unavailable: {reason}",
            ErrorCode.UNIT_UNAVAILABLE,
            room_type_id=room_type_id,
            status_code=409,
        )
        self.unit_number = unit_number
        self.reason = reason
        self.alternatives = list(alternatives or [])
        self.details.update({
            "unit_number": unit_number,
            "reason": reason,
            "alternatives": self.alternatives,
            "available": len(self.alternatives),
            "conflicting_booking_id": conflicting_booking_id,
        })


class ConcurrentAllocationConflictError(BookingError):
    """Exception raised when another request claimed the same units first"""

    def __init__(self, attempts: int, room_type_id: Optional[str] = None):
        super().__init__(
            f"Units were claimed by a concurrent booking; gave up after {attempts} attempt(s)",
            ErrorCode.CONCURRENT_ALLOCATION_CONFLICT,
            room_type_id=room_type_id,
            status_code=409,
        )
        self.details["attempts"] = attempts


class InvalidStatusTransitionError(BookingError):
    """Exception raised when a booking cannot move to the requested status"""

    def __init__(self, booking_id: str, current: str, target: str):
        super().__init__(
            f"Cannot move booking from '{current}' to '{target}'",
            ErrorCode.INVALID_STATUS_TRANSITION,
            booking_id=booking_id,
            status_code=409,
        )
        self.details.update({"current_status": current, "target_status": target})


# ========================================
# Payment Exceptions
# ========================================

class PaymentError(BaseAppException):
    """Base class for payment-related exceptions"""

    def __init__(
        self,
        message: str = "Payment processing failed",
        error_code: ErrorCode = ErrorCode.PAYMENT_FAILED,
        details: Optional[Dict[str, Any]] = None,
        status_code: int = 400
    ):
        super().__init__(message, error_code, details, status_code)


class PaymentNotFoundError(ResourceNotFoundError):
    """Exception raised when a merchant order id is unknown"""

    def __init__(self, merchant_order_id: str):
        super().__init__(
            "Payment transaction",
            merchant_order_id,
            error_code=ErrorCode.PAYMENT_NOT_FOUND,
        )


class PaymentAmountMismatchError(PaymentError):
    """Exception raised when a callback reports a different amount"""

    def __init__(self, merchant_order_id: str, expected: Any, received: Any):
        super().__init__(
            f"Amount mismatch for order {merchant_order_id}: expected {expected}, received {received}",
            ErrorCode.PAYMENT_AMOUNT_MISMATCH,
            {
                "merchant_order_id": merchant_order_id,
                "expected": str(expected),
                "received": str(received),
            },
            400,
        )


class PaymentRequiresRefundError(PaymentError):
    """Exception raised when money arrived for a booking that can no longer be honoured"""

    def __init__(self, booking_id: str, booking_code: str, merchant_order_id: str, amount: Any, reason: str):
        super().__init__(
            f"Payment {merchant_order_id} for booking {booking_code} must be refunded: {reason}",
            ErrorCode.PAYMENT_REQUIRES_REFUND,
            {
                "booking_id": booking_id,
                "booking_code": booking_code,
                "merchant_order_id": merchant_order_id,
                "amount": str(amount),
                "reason": reason,
            },
            409,
        )


# ========================================
# External Service Exceptions
# ========================================

class ExternalServiceError(BaseAppException):
    """Exception raised when an external collaborator call fails"""

    def __init__(
        self,
        service_name: str,
        message: Optional[str] = None,
        error_code: ErrorCode = ErrorCode.EXTERNAL_SERVICE_ERROR,
        status_code: int = 502
    ):
        super().__init__(
            message or f"External service '{service_name}' failed",
            error_code,
            {"service": service_name},
            status_code,
        )
