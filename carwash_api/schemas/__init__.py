"""
Public Pydantic schemas used by FastAPI routes, services, and tests.

Schemas are grouped by domain module (customers, sales, etc.) and also
include common reusable models such as standard responses and the error envelope.
"""

from .common import MessageResponse  # noqa: F401
