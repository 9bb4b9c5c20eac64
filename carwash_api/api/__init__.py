"""HTTP and WebSocket surface of the service (FastAPI app in carwash_api.api.main)."""
