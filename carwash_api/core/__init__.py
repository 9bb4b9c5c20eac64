"""
Core application utilities.

This package provides:
- Application-level settings (separate from DB settings)
- Logging configuration with request context
- Password hashing, JWT handling and secret encryption
- FastAPI dependency helpers (current user, role guards)
"""
