"""Car-wash point of sale and management API."""

__version__ = "0.1.0"
