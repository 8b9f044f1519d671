"""
API v1 Router - Main Entry Point
Aggregates all v1 endpoints of the lodging reservation engine.
"""
from fastapi import APIRouter

from lodging.api.v1 import bookings, maintenance, payments, room_types

router = APIRouter(
    responses={
        400: {"description": "Bad Request"},
        404: {"description": "Not Found"},
        409: {"description": "Conflict"},
        422: {"description": "Validation Error"},
        500: {"description": "Internal Server Error"},
    }
)

router.include_router(room_types.router)
router.include_router(bookings.router)
router.include_router(payments.router)
router.include_router(maintenance.router)

__all__ = ["router"]
