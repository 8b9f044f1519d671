"""Core utilities: exceptions, logging and the injected clock."""
