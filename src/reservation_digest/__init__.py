"""reservation-digest: weekly e-mail of upcoming venue reservations."""

__version__ = "0.1.0"
