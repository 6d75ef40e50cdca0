"""Photo-guided indoor navigation kiosk backend."""

__version__ = "0.1.0"
