"""Business services: pricing, inventory and the booking transaction."""
