"""Lodging reservation engine: room inventory, allocation, pricing and bookings."""

__version__ = "1.0.0"
