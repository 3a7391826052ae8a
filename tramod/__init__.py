"""Online trajectory modification under position, velocity and acceleration constraints."""

__version__ = "0.1.0"
__all__ = ["demo", "modifier"]